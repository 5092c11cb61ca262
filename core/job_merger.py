from typing import Dict, List, Sequence
import logging
from model.job import Job, JobCollection
from util.functions import parse_timestamp

logger = logging.getLogger(__name__)


def recency_key(job: Job) -> float:
    """Sort key for newest-first ordering; undated jobs sink to the end."""
    ts = parse_timestamp(job.startDate)
    if ts is None:
        ts = parse_timestamp(job.createdAt)
    return ts if ts is not None else float("-inf")


def overlay(existing: Job, incoming: Job) -> Job:
    # shallow, per field set: whatever the incoming record carries wins
    return Job.model_validate({**existing.payload_fields(), **incoming.payload_fields()})


def _fold(previous: Sequence[Job], incoming: Sequence[Job]) -> tuple[List[Job], set[str]]:
    by_id: Dict[str, Job] = {j.id: j for j in previous}
    known = set(by_id)
    for job in incoming:
        current = by_id.get(job.id)
        by_id[job.id] = overlay(current, job) if current is not None else job
    return list(by_id.values()), known


def merge(
    previous: JobCollection,
    incoming: Sequence[Job],
    page_index: int,
    merge_on_first_page: bool,
    page_size: int,
) -> JobCollection:
    """
    Fold one fetched page into the held collection.

    - page 0, no merge: replace (first load, filter change)
    - page 0, merge: upsert by id, newest first, bounded growth
    - page > 0: append as-is (load more)

    Append does not dedup. If the backend repeats an id across pages, the next
    page-0 merge folds the repeats into one entry (the later one wins), so
    the collection can shrink by the number of repeats. No distinct id is lost.
    """
    has_more = len(incoming) == page_size

    if page_index <= 0 and not merge_on_first_page:
        return JobCollection(
            jobs=list(incoming), page=0, pageSize=page_size, hasMore=has_more
        )

    if page_index > 0:
        return JobCollection(
            jobs=[*previous.jobs, *incoming],
            page=page_index,
            pageSize=page_size,
            hasMore=has_more,
        )

    merged, known = _fold(previous.jobs, incoming)
    merged.sort(key=recency_key, reverse=True)

    limit = max(len(previous.jobs), (previous.page + 1) * page_size)
    kept: List[Job] = []
    discarded = 0
    for job in merged:
        # held jobs always survive; only new arrivals past the limit are cut
        if job.id in known or len(kept) < limit:
            kept.append(job)
        else:
            discarded += 1
    if discarded:
        logger.debug("merge.truncate limit=%d discarded=%d", limit, discarded)

    return JobCollection(
        jobs=kept,
        page=previous.page,
        pageSize=page_size,
        # once later pages are loaded the pagination cursor owns hasMore
        hasMore=previous.hasMore if previous.page > 0 else has_more,
    )
