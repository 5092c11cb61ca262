import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, List, Optional
from config.settings import settings
from core import job_merger
from core.statistics_reconciler import StatisticsReconciler, snapshot_from_rows
from model.api import DashboardState, FilterContext, Notification
from model.job import JobCollection
from model.statistics import StatisticsSnapshot
from repository.job_repository import JobRepository
from util.enums import CycleTrigger, DateRange, PollPhase
from util.timing import timed
from util.types import NotificationLevel

logger = logging.getLogger(__name__)


@dataclass
class CycleOutcome:
    trigger: CycleTrigger
    ok: bool
    # False when the result was not folded into state (failure or stopped session)
    applied: bool
    jobs_received: int = 0
    error: Optional[str] = None


class PollScheduler:
    """
    Single owner of the dashboard session: job collection, actions, statistics
    and the page cursor. All mutation happens inside `_fetch_cycle` under
    `self._lock`, so periodic and manual cycles never interleave their merges.

    `stop()` bumps `self._epoch`; a cycle whose epoch changed while it was
    awaiting the backend drops its responses instead of touching state.
    """

    def __init__(
        self,
        repository: JobRepository,
        *,
        reconciler: Optional[StatisticsReconciler] = None,
        filters: Optional[FilterContext] = None,
        page_size: int = settings.PAGE_SIZE,
        interval_ms: int = settings.POLL_INTERVAL_MS,
        notification_buffer: int = settings.NOTIFICATION_BUFFER,
    ) -> None:
        self._repo = repository
        self._reconciler = reconciler or StatisticsReconciler()
        self._filters = filters or FilterContext(dateRange=settings.DEFAULT_DATE_RANGE)
        self._page_size = page_size
        self._interval = interval_ms / 1000.0

        self._collection = JobCollection(pageSize=page_size)
        self._actions: List[Any] = []
        self._statistics = StatisticsSnapshot()
        self._phase = PollPhase.IDLE
        self._last_outcome: Optional[PollPhase] = None
        self._refreshing = False
        self._last_updated: Optional[int] = None
        self._notifications: Deque[Notification] = deque(maxlen=notification_buffer)

        self._lock = asyncio.Lock()
        self._alive = False
        self._closed = False
        self._epoch = 0
        self._task: Optional[asyncio.Task] = None

    # ---------------- Lifecycle ----------------

    @property
    def alive(self) -> bool:
        return self._alive

    async def start(self) -> None:
        if self._alive:
            return
        self._alive = True
        self._closed = False
        self._task = asyncio.create_task(self._run(), name="dashboard-poll")
        logger.info(
            "poll.start interval_ms=%d page_size=%d",
            int(self._interval * 1000),
            self._page_size,
        )

    async def stop(self) -> None:
        self._alive = False
        self._closed = True
        self._epoch += 1
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("poll.stop")

    async def _run(self) -> None:
        try:
            async with self._lock:
                await self._fetch_cycle(CycleTrigger.INITIAL)
        except Exception:
            logger.exception("poll.cycle.crash trigger=initial")
        while self._alive:
            await asyncio.sleep(self._interval)
            await self.tick()

    # ---------------- Triggers ----------------

    async def tick(self) -> Optional[CycleOutcome]:
        """Periodic trigger; skipped while another cycle is in flight."""
        if self._lock.locked():
            logger.debug("poll.tick.skip reason=in_flight")
            return None
        try:
            async with self._lock:
                return await self._fetch_cycle(CycleTrigger.PERIODIC)
        except Exception:
            # the loop always schedules its next tick
            logger.exception("poll.cycle.crash trigger=periodic")
            return None

    async def initial_load(self) -> CycleOutcome:
        async with self._lock:
            return await self._fetch_cycle(CycleTrigger.INITIAL)

    async def load_more(self) -> CycleOutcome:
        async with self._lock:
            return await self._fetch_cycle(CycleTrigger.LOAD_MORE)

    async def refresh(self) -> CycleOutcome:
        async with self._lock:
            return await self._fetch_cycle(CycleTrigger.REFRESH)

    async def apply_filters(self, filters: FilterContext) -> CycleOutcome:
        async with self._lock:
            self._filters = filters
            return await self._fetch_cycle(CycleTrigger.FILTER)

    # ---------------- Cycle ----------------

    def _plan(self, trigger: CycleTrigger) -> tuple[int, bool, int]:
        """(page_index, merge_on_first_page, days) for a trigger."""
        if trigger is CycleTrigger.INITIAL:
            return 0, False, 0
        if trigger is CycleTrigger.LOAD_MORE:
            return self._collection.page + 1, False, self._filters.days
        if trigger is CycleTrigger.FILTER:
            return 0, False, self._filters.days
        return 0, True, self._filters.days

    async def _fetch_cycle(self, trigger: CycleTrigger) -> CycleOutcome:
        page_index, merge_first, days = self._plan(trigger)
        filters = self._filters
        if days == 0 and not filters.is_all_time:
            # initial load reads the all-time window whatever the filter says
            filters = filters.model_copy(update={"dateRange": DateRange.ALL_TIME})
        epoch = self._epoch

        self._phase = PollPhase.FETCHING
        self._refreshing = True
        try:
            with timed(logger, "poll.cycle", trigger=trigger.value, page=page_index):
                jobs_res, actions_res, stats_res = await asyncio.gather(
                    self._repo.fetch_jobs(
                        page=page_index, size=self._page_size, ctx=filters, days=days
                    ),
                    self._repo.fetch_actions(
                        page=page_index, size=self._page_size, days=days
                    ),
                    self._repo.fetch_stats(days=days),
                )
                actions = actions_res.data
                if not actions and filters.is_all_time and page_index == 0:
                    actions = await self._repo.fetch_actions_fallback()
        except (asyncio.CancelledError, Exception):
            # cancelled by stop() or crashed: no later step will settle the phase
            self._phase = PollPhase.IDLE
            raise
        finally:
            self._refreshing = False

        if epoch != self._epoch or self._closed:
            logger.info("poll.cycle.discard trigger=%s reason=stopped", trigger.value)
            self._phase = PollPhase.IDLE
            return CycleOutcome(trigger, ok=jobs_res.ok, applied=False)

        if not jobs_res.ok:
            self._finish(PollPhase.FAILURE)
            if trigger.is_manual:
                self._notify("error", f"Failed to fetch jobs: {jobs_res.error}")
            return CycleOutcome(trigger, ok=False, applied=False, error=jobs_res.error)

        page = jobs_res.data
        self._collection = job_merger.merge(
            self._collection, page.jobs, page_index, merge_first, self._page_size
        )
        if page_index > 0:
            self._actions = [*self._actions, *actions]
        else:
            self._actions = list(actions)

        server = (
            snapshot_from_rows(stats_res.data) if stats_res.data is not None else None
        )
        self._statistics = self._reconciler.reconcile(
            server, self._collection.jobs, filters
        )
        self._last_updated = int(time.time())
        self._finish(PollPhase.SUCCESS)

        logger.info(
            "poll.cycle.ok trigger=%s page=%d received=%d held=%d has_more=%s "
            "stats=%s total=%d",
            trigger.value,
            page_index,
            page.received,
            len(self._collection),
            self._collection.hasMore,
            self._statistics.provenance,
            self._statistics.total,
        )
        if trigger.is_manual:
            self._notify("success", self._success_message(trigger, len(page.jobs)))
        return CycleOutcome(
            trigger, ok=True, applied=True, jobs_received=len(page.jobs)
        )

    def _finish(self, outcome: PollPhase) -> None:
        logger.debug("poll.phase %s -> %s", self._phase.value, outcome.value)
        self._last_outcome = outcome
        self._phase = PollPhase.IDLE

    # ---------------- Notifications ----------------

    def _notify(self, level: NotificationLevel, message: str) -> None:
        self._notifications.append(Notification(level=level, message=message))

    @staticmethod
    def _success_message(trigger: CycleTrigger, received: int) -> str:
        if trigger is CycleTrigger.LOAD_MORE:
            return f"Loaded {received} more jobs"
        if trigger is CycleTrigger.FILTER:
            return f"Filters applied: {received} jobs"
        return "Jobs refreshed"

    def drain_notifications(self) -> List[Notification]:
        out = list(self._notifications)
        self._notifications.clear()
        return out

    # ---------------- Published state ----------------

    @property
    def statistics(self) -> StatisticsSnapshot:
        return self._statistics

    @property
    def has_more(self) -> bool:
        return self._collection.hasMore

    def state(self) -> DashboardState:
        return DashboardState(
            jobs=list(self._collection.jobs),
            actions=list(self._actions),
            statistics=self._statistics,
            hasMoreJobs=self._collection.hasMore,
            refreshing=self._refreshing,
            phase=self._phase,
            lastOutcome=self._last_outcome,
            page=self._collection.page,
            filters=self._filters,
            lastUpdated=self._last_updated,
        )
