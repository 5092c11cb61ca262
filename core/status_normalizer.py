from typing import Any, Callable, Final, List, Tuple
from model.job import CanonicalStatus, NormalizedStatus

Predicate = Callable[[str], bool]


def _any_of(*needles: str) -> Predicate:
    return lambda s: any(n in s for n in needles)


def _all_of(*needles: str) -> Predicate:
    return lambda s: all(n in s for n in needles)


# First match wins. Order matters: "partial success" contains "success",
# and failure labels may mention success ("failed after partial success").
RULES: Final[List[Tuple[Predicate, CanonicalStatus]]] = [
    (_all_of("partial", "success"), CanonicalStatus.PARTIAL_SUCCESS),
    (_any_of("fail"), CanonicalStatus.FAILED),
    (_any_of("success", "completed", "succeeded"), CanonicalStatus.SUCCESS),
    (
        _any_of("in_progress", "in progress", "running", "inprogress"),
        CanonicalStatus.IN_PROGRESS,
    ),
    (_any_of("queue", "queued", "in queue"), CanonicalStatus.IN_QUEUE),
    (_any_of("cancel", "cancelled", "canceled"), CanonicalStatus.CANCELLED),
]

EMPTY: Final[NormalizedStatus] = NormalizedStatus(CanonicalStatus.UNKNOWN, "")


def normalize(raw: Any) -> NormalizedStatus:
    """
    Map any backend status label onto a canonical status.
    Total: never raises; unmatched labels come back as UNKNOWN carrying the
    trimmed, upper-cased original for display.
    """
    if raw is None:
        return EMPTY
    try:
        text = str(raw).strip()
    except Exception:
        return EMPTY
    if not text:
        return EMPTY
    s = text.lower()
    for matches, status in RULES:
        if matches(s):
            return NormalizedStatus(status, status.value)
    return NormalizedStatus(CanonicalStatus.UNKNOWN, text.upper())
