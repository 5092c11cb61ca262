from enum import Enum
from typing import Any, NamedTuple
from pydantic import BaseModel, ConfigDict, Field, model_validator
from util.constants import JOB_ROW_COLUMNS
from util.functions import pick


class CanonicalStatus(str, Enum):
    SUCCESS = "SUCCESS"
    PARTIAL_SUCCESS = "PARTIAL_SUCCESS"
    IN_PROGRESS = "IN_PROGRESS"
    IN_QUEUE = "IN_QUEUE"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"


class NormalizedStatus(NamedTuple):
    status: CanonicalStatus
    # Display label; for UNKNOWN this is the original text, upper-cased ("" when empty)
    label: str


# Fields computed from `status`; never accepted from a payload.
DERIVED_FIELDS = frozenset({"canonicalStatus", "statusLabel"})


class Job(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    status: str | None = None
    canonicalStatus: CanonicalStatus = CanonicalStatus.UNKNOWN
    statusLabel: str = ""
    # any shape the backend serializes; unreadable dates sort last
    startDate: Any = None
    createdAt: Any = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_row(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            data = {k: v for k, v in zip(JOB_ROW_COLUMNS, data)}
        if not isinstance(data, dict):
            return data
        data = {k: v for k, v in data.items() if k not in DERIVED_FIELDS}
        job_id = pick(data, ("id", "jobId", "executionId"))
        if job_id is not None and str(job_id).strip():
            data["id"] = str(job_id).strip()
        else:
            # no usable identity: let validation reject the row
            data.pop("id", None)
        if data.get("status") is None:
            raw = pick(data, ("state", "statusName"))
            if raw is not None:
                data["status"] = raw
        if data.get("status") is not None and not isinstance(data["status"], str):
            data["status"] = str(data["status"])
        return data

    @model_validator(mode="after")
    def _derive_status(self) -> "Job":
        # local import: core.status_normalizer depends on this module
        from core.status_normalizer import normalize

        normalized = normalize(self.status)
        self.canonicalStatus = normalized.status
        self.statusLabel = normalized.label
        return self

    def payload_fields(self) -> dict[str, Any]:
        """Fields this record actually carried, for field-set overwrites on merge."""
        data = self.model_dump()
        return {
            k: v
            for k, v in data.items()
            if k not in DERIVED_FIELDS
            and (k not in type(self).model_fields or k in self.model_fields_set)
        }


class JobCollection(BaseModel):
    jobs: list[Job] = Field(default_factory=list)
    # index of the last page folded in
    page: int = 0
    pageSize: int = 0
    hasMore: bool = False

    def __len__(self) -> int:
        return len(self.jobs)
