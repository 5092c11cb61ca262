from typing import Any, Dict, List, Literal, TypedDict, Union


# Flow: Backend rows come either as JSON objects or as positional arrays.
RawRow = Union[Dict[str, Any], List[Any]]
RawRows = List[RawRow]

NotificationLevel = Literal["success", "error"]


class JobQueryParams(TypedDict, total=False):
    page: int
    size: int
    days: int
    username: str
    jobName: str
    fileName: str
    status: str
