import logging
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar
from pydantic import ValidationError
from config.settings import settings
from core.backend_client import BackendClient
from model.api import FilterContext
from model.job import Job
from util.constants import ExternalURIs
from util.errors import BackendError
from util.types import JobQueryParams, RawRows

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class FetchResult(Generic[T]):
    ok: bool
    data: T
    error: Optional[str] = None


@dataclass
class JobPage:
    jobs: List[Job] = field(default_factory=list)
    # rows received, including ones dropped as malformed
    received: int = 0


class JobRepository:
    """
    Backend endpoints behind the dashboard. Every fetch degrades to an empty
    result on transport/HTTP/payload failure so one endpoint can't sink a cycle.
    """

    def __init__(self, client: BackendClient) -> None:
        self._client = client

    # ---------------- Jobs ----------------

    @staticmethod
    def job_params(page: int, size: int, ctx: FilterContext, days: int) -> JobQueryParams:
        params: JobQueryParams = {"page": page, "size": size, "days": days}
        if ctx.sends_query_filters:
            params["username"] = ctx.userName or ""
            params["jobName"] = ctx.jobName or ""
            params["status"] = ctx.status or ""
            if ctx.fileName:
                params["fileName"] = ctx.fileName
        return params

    async def fetch_jobs(
        self, *, page: int, size: int, ctx: FilterContext, days: int
    ) -> FetchResult[JobPage]:
        params = self.job_params(page, size, ctx, days)
        try:
            rows = await self._client.get_rows(ExternalURIs.JOBS, params)
        except BackendError as e:
            logger.warning("jobs.fetch.error page=%d err=%s", page, e)
            return FetchResult(ok=False, data=JobPage(), error=str(e))

        jobs = self._parse_jobs(rows)
        logger.debug("jobs.fetch.ok page=%d rows=%d jobs=%d", page, len(rows), len(jobs))
        return FetchResult(ok=True, data=JobPage(jobs=jobs, received=len(rows)))

    @staticmethod
    def _parse_jobs(rows: RawRows) -> List[Job]:
        out: List[Job] = []
        dropped = 0
        for row in rows:
            try:
                out.append(Job.model_validate(row))
            except ValidationError:
                dropped += 1
        if dropped:
            logger.warning("jobs.parse.dropped count=%d", dropped)
        return out

    # ---------------- Actions ----------------

    async def fetch_actions(self, *, page: int, size: int, days: int) -> FetchResult[list]:
        params = {"page": page, "size": size, "days": days}
        try:
            rows = await self._client.get_rows(ExternalURIs.ACTIONS, params)
        except BackendError as e:
            logger.warning("actions.fetch.error page=%d err=%s", page, e)
            return FetchResult(ok=False, data=[], error=str(e))
        return FetchResult(ok=True, data=rows)

    async def fetch_actions_fallback(self) -> list:
        """Wider historical window; best-effort, never raises."""
        params = {
            "days": settings.ACTIONS_FALLBACK_DAYS,
            "page": 0,
            "size": settings.ACTIONS_FALLBACK_SIZE,
        }
        try:
            rows = await self._client.get_rows(ExternalURIs.ACTIONS, params)
        except BackendError as e:
            logger.info("actions.fallback.error err=%s", e)
            return []
        logger.info("actions.fallback.ok rows=%d", len(rows))
        return rows

    # ---------------- Stats ----------------

    async def fetch_stats(self, *, days: int) -> FetchResult[Optional[RawRows]]:
        """Aggregate rows, or None when the backend gave us nothing usable."""
        try:
            rows = await self._client.get_rows(ExternalURIs.JOB_STATS, {"days": days})
        except BackendError as e:
            logger.warning("stats.fetch.error days=%d err=%s", days, e)
            return FetchResult(ok=False, data=None, error=str(e))
        return FetchResult(ok=True, data=rows)
