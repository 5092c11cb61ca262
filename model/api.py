import time
from typing import Any
from pydantic import BaseModel, Field, field_validator
from model.job import Job
from model.statistics import StatisticsSnapshot
from util.enums import DateRange, PollPhase
from util.types import NotificationLevel


class FilterContext(BaseModel):
    dateRange: DateRange = DateRange.ALL_TIME
    jobName: str | None = None
    userName: str | None = None
    status: str | None = None
    fileName: str | None = None

    @field_validator("jobName", "userName", "status", "fileName")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @property
    def days(self) -> int:
        return self.dateRange.days

    @property
    def is_all_time(self) -> bool:
        return self.days == 0

    @property
    def has_explicit_filters(self) -> bool:
        return bool(self.jobName or self.userName or self.status or self.fileName)

    @property
    def sends_query_filters(self) -> bool:
        # backend filtering is all-or-nothing on these three
        return bool(self.jobName and self.userName and self.status)


class Notification(BaseModel):
    level: NotificationLevel
    message: str
    ts: int = Field(default_factory=lambda: int(time.time()))


class DashboardState(BaseModel):
    jobs: list[Job]
    actions: list[Any]
    statistics: StatisticsSnapshot
    hasMoreJobs: bool
    refreshing: bool
    phase: PollPhase
    lastOutcome: PollPhase | None = None
    page: int
    filters: FilterContext
    lastUpdated: int | None = None
