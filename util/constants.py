from typing import Final, Tuple


class InternalURIs:
    API = "/api"
    V1 = API + "/v1"
    DASHBOARD = V1 + "/dashboard"
    REFRESH = DASHBOARD + "/refresh"
    LOAD_MORE = DASHBOARD + "/load-more"
    FILTERS = DASHBOARD + "/filters"
    NOTIFICATIONS = DASHBOARD + "/notifications"


class ExternalURIs:
    JOBS = "/jobs"
    ACTIONS = "/actions"
    JOB_STATS = "/jobs/stats"


# Positional layout of array-shaped job rows.
JOB_ROW_COLUMNS: Final[Tuple[str, ...]] = (
    "id",
    "jobName",
    "status",
    "username",
    "startDate",
    "createdAt",
    "fileName",
)

# Epoch values above this are milliseconds.
EPOCH_MS_THRESHOLD: Final[float] = 1e11
