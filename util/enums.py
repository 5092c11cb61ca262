from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class DateRange(str, Enum):
    ALL_TIME = ""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @property
    def days(self) -> int:
        # 0 means "all time" on the backend
        return _DATE_RANGE_DAYS[self]


_DATE_RANGE_DAYS = {
    DateRange.ALL_TIME: 0,
    DateRange.DAY: 1,
    DateRange.WEEK: 7,
    DateRange.MONTH: 30,
}


class CycleTrigger(str, Enum):
    INITIAL = "initial"
    PERIODIC = "periodic"
    LOAD_MORE = "load_more"
    REFRESH = "refresh"
    FILTER = "filter"

    @property
    def is_manual(self) -> bool:
        return self in (CycleTrigger.LOAD_MORE, CycleTrigger.REFRESH, CycleTrigger.FILTER)


class PollPhase(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    SUCCESS = "success"
    FAILURE = "failure"


class ErrorInfo(NamedTuple):
    message: str
    http_status: int


class ErrorMessage(Enum):
    BACKEND_UNAVAILABLE = ErrorInfo(
        "Failed to fetch jobs from backend", status.HTTP_502_BAD_GATEWAY
    )
    NO_MORE_JOBS = ErrorInfo("No more jobs to load", status.HTTP_409_CONFLICT)
    SESSION_STOPPED = ErrorInfo(
        "Dashboard session is not running", status.HTTP_503_SERVICE_UNAVAILABLE
    )
