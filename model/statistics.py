from typing import Any, Literal
from pydantic import BaseModel, Field, model_validator
from model.job import CanonicalStatus

Provenance = Literal["server", "derived", "cached", "empty"]

BUCKETS: tuple[str, ...] = (
    "completed",
    "partialSuccess",
    "running",
    "queue",
    "failed",
    "cancelled",
)

BUCKET_FOR_STATUS: dict[CanonicalStatus, str] = {
    CanonicalStatus.SUCCESS: "completed",
    CanonicalStatus.PARTIAL_SUCCESS: "partialSuccess",
    CanonicalStatus.IN_PROGRESS: "running",
    CanonicalStatus.IN_QUEUE: "queue",
    CanonicalStatus.FAILED: "failed",
    CanonicalStatus.CANCELLED: "cancelled",
}


class StatisticsSnapshot(BaseModel):
    completed: int = Field(default=0, ge=0)
    partialSuccess: int = Field(default=0, ge=0)
    running: int = Field(default=0, ge=0)
    queue: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    cancelled: int = Field(default=0, ge=0)
    total: int = 0
    # labels that matched no bucket; reported, never part of `total`
    unclassified: int = Field(default=0, ge=0)
    provenance: Provenance = "empty"

    @model_validator(mode="before")
    @classmethod
    def _drop_untrusted_total(cls, data: Any) -> Any:
        if isinstance(data, dict) and "total" in data:
            data = {k: v for k, v in data.items() if k != "total"}
        return data

    @model_validator(mode="after")
    def _recompute_total(self) -> "StatisticsSnapshot":
        self.total = sum(getattr(self, b) for b in BUCKETS)
        return self

    def with_provenance(self, provenance: Provenance) -> "StatisticsSnapshot":
        return StatisticsSnapshot(
            **{b: getattr(self, b) for b in BUCKETS},
            unclassified=self.unclassified,
            provenance=provenance,
        )
