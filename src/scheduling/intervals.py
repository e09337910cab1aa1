from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Tuple

from study_planner.models import ExplicitDates, FixedCommitment, PlannedSession, Recurring

DAY_START = 0.0
DAY_END = 24.0

# float hours; 1e-9h is far below any schedulable unit
EPSILON = 1e-9

Interval = Tuple[float, float]


def commitment_applies_to(commitment: FixedCommitment, day: date) -> bool:
    rule = commitment.rule
    if isinstance(rule, ExplicitDates):
        return day in rule.dates
    if isinstance(rule, Recurring):
        if day.weekday() not in rule.days_of_week:
            return False
        if rule.start_date is not None and day < rule.start_date:
            return False
        if rule.end_date is not None and day > rule.end_date:
            return False
        return day not in rule.excluded_dates
    return False


def merge_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """Clip to the day, drop empty spans, sort and coalesce overlapping or touching spans."""
    clipped = []
    for start, end in intervals:
        start, end = max(start, DAY_START), min(end, DAY_END)
        if end - start > EPSILON:
            clipped.append((start, end))
    clipped.sort()

    merged: List[Interval] = []
    for start, end in clipped:
        if merged and start <= merged[-1][1] + EPSILON:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


class IntervalConflictModel:
    """Occupied time of one day as sorted, non-overlapping half-open hour intervals."""

    def __init__(self, intervals: Iterable[Interval] = ()):
        self._intervals = merge_intervals(intervals)

    @classmethod
    def for_date(
        cls,
        day: date,
        occupied: Iterable[PlannedSession] = (),
        fixed_commitments: Iterable[FixedCommitment] = (),
    ) -> "IntervalConflictModel":
        spans = [(c.start_hour, c.end_hour) for c in fixed_commitments if commitment_applies_to(c, day)]
        spans.extend((s.start_hour, s.end_hour) for s in occupied)
        return cls(spans)

    @property
    def intervals(self) -> List[Interval]:
        return list(self._intervals)

    def first_conflict(self, start: float, end: float, buffer: float = 0.0) -> Optional[Interval]:
        """First occupied interval intersecting [start - buffer, end + buffer), if any."""
        lo, hi = start - buffer, end + buffer
        for occ_start, occ_end in self._intervals:
            if occ_start >= hi - EPSILON:
                break
            if occ_end > lo + EPSILON:
                return (occ_start, occ_end)
        return None

    def is_free(self, start: float, end: float, buffer: float = 0.0) -> bool:
        """True when [start - buffer, end + buffer) is unoccupied and inside the day."""
        if start - buffer < DAY_START - EPSILON or end + buffer > DAY_END + EPSILON:
            return False
        return self.first_conflict(start, end, buffer) is None

    def occupied_hours(self, window_start: float = DAY_START, window_end: float = DAY_END) -> float:
        total = 0.0
        for occ_start, occ_end in self._intervals:
            overlap = min(occ_end, window_end) - max(occ_start, window_start)
            if overlap > 0:
                total += overlap
        return total

    def free_intervals(self, window_start: float, window_end: float) -> List[Interval]:
        gaps: List[Interval] = []
        cursor = window_start
        for occ_start, occ_end in self._intervals:
            if occ_end <= cursor:
                continue
            if occ_start >= window_end:
                break
            if occ_start - cursor > EPSILON:
                gaps.append((cursor, occ_start))
            cursor = max(cursor, occ_end)
        if window_end - cursor > EPSILON:
            gaps.append((cursor, window_end))
        return gaps

    def __len__(self) -> int:
        return len(self._intervals)
