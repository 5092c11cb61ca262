import logging
from collections import Counter
from typing import Any, Iterable, Optional, Sequence
from core.status_normalizer import normalize
from model.api import FilterContext
from model.job import CanonicalStatus, Job
from model.statistics import BUCKET_FOR_STATUS, Provenance, StatisticsSnapshot
from repository.statistics_cache import StatisticsCache
from util.functions import as_count, contains_ci, pick

logger = logging.getLogger(__name__)


def _row_label_and_count(row: Any) -> tuple[Any, int]:
    """
    Aggregate rows come in three shapes:
      - array  [<group>, <status>, <count>]
      - object {status|statusName, count|total}
      - scalar (one occurrence of that label)
    """
    if isinstance(row, (list, tuple)):
        label = row[1] if len(row) > 1 else ""
        count = as_count(row[2]) if len(row) > 2 else 0
        return label, count
    if isinstance(row, dict):
        label = pick(row, ("status", "statusName", "1"), "")
        count = as_count(pick(row, ("count", "total", "2")))
        return label, count
    if row is None:
        return "", 0
    return row, 1


def _snapshot(counts: Counter, provenance: Provenance) -> StatisticsSnapshot:
    unclassified = counts.pop(CanonicalStatus.UNKNOWN, 0)
    buckets = {BUCKET_FOR_STATUS[s]: n for s, n in counts.items()}
    return StatisticsSnapshot(**buckets, unclassified=unclassified, provenance=provenance)


def snapshot_from_rows(rows: Any) -> StatisticsSnapshot:
    """Sum backend aggregate rows into the six buckets."""
    if not isinstance(rows, list):
        return StatisticsSnapshot(provenance="server")
    counts: Counter = Counter()
    for row in rows:
        label, count = _row_label_and_count(row)
        status = normalize(label).status
        if status is CanonicalStatus.UNKNOWN and count:
            logger.debug("stats.rows.unclassified label=%r count=%d", label, count)
        counts[status] += count
    return _snapshot(counts, "server")


def snapshot_from_jobs(jobs: Iterable[Job]) -> StatisticsSnapshot:
    counts: Counter = Counter(j.canonicalStatus for j in jobs)
    return _snapshot(counts, "derived")


def filter_jobs(jobs: Iterable[Job], ctx: FilterContext) -> list[Job]:
    """Client-side view of the explicit filters (job name, user, status, file)."""
    wanted = normalize(ctx.status) if ctx.status else None
    out: list[Job] = []
    for job in jobs:
        extra = job.model_extra or {}
        if not contains_ci(pick(extra, ("jobName", "name")), ctx.jobName):
            continue
        if not contains_ci(pick(extra, ("username", "userName", "user")), ctx.userName):
            continue
        if not contains_ci(extra.get("fileName"), ctx.fileName):
            continue
        if wanted is not None and (job.canonicalStatus, job.statusLabel) != tuple(wanted):
            continue
        out.append(job)
    return out


def choose_snapshot(
    *,
    server: Optional[StatisticsSnapshot],
    derived: StatisticsSnapshot,
    cached: Optional[StatisticsSnapshot],
    ctx: FilterContext,
    held_count: int,
) -> StatisticsSnapshot:
    """
    Decide which snapshot to publish.

    - explicit filters: `derived` (caller computes it from the filtered jobs only)
    - all time: `server` unless it is missing or covers fewer jobs than we hold,
      in which case `derived`, even when `derived` is itself short of `held_count`
    - bounded window: `cached` for the window, then `server`, then `derived`
    """
    if ctx.has_explicit_filters:
        return derived
    if ctx.is_all_time:
        if server is None or server.total < held_count:
            return derived
        return server
    if cached is not None:
        return cached
    if server is not None:
        return server
    return derived


class StatisticsReconciler:
    def __init__(self, cache: Optional[StatisticsCache] = None) -> None:
        self._cache = cache if cache is not None else StatisticsCache()

    def reconcile(
        self,
        server: Optional[StatisticsSnapshot],
        jobs: Sequence[Job],
        ctx: FilterContext,
    ) -> StatisticsSnapshot:
        if server is not None and not ctx.is_all_time:
            self._cache.put(ctx.days, server)

        scope = filter_jobs(jobs, ctx) if ctx.has_explicit_filters else jobs
        chosen = choose_snapshot(
            server=server,
            derived=snapshot_from_jobs(scope),
            cached=self._cache.get(ctx.days),
            ctx=ctx,
            held_count=len(jobs),
        )
        if chosen.provenance == "derived" and server is not None and ctx.is_all_time:
            logger.info(
                "stats.reconcile.fallback server_total=%d held=%d derived_total=%d",
                server.total,
                len(jobs),
                chosen.total,
            )
        # rebuild: total is always the bucket sum of what we publish
        return chosen.with_provenance(chosen.provenance)
