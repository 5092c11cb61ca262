from typing import Dict, Optional
from model.statistics import StatisticsSnapshot


class StatisticsCache:
    """
    Flow:
    - Last server-reported snapshot per lookback window (days > 0).
    - In-memory only; lives as long as the dashboard session.
    - All-time (days == 0) is never cached; it is reconciled every cycle.
    """

    def __init__(self) -> None:
        self._by_window: Dict[int, StatisticsSnapshot] = {}

    def put(self, days: int, snapshot: StatisticsSnapshot) -> None:
        if days <= 0:
            return
        self._by_window[days] = snapshot.with_provenance("cached")

    def get(self, days: int) -> Optional[StatisticsSnapshot]:
        return self._by_window.get(days)
