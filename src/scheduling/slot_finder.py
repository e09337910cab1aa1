from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from scheduling.intervals import DAY_END, DAY_START, EPSILON, IntervalConflictModel
from study_planner.models import FixedCommitment, PlannedSession, Slot, UserSettings

logger = logging.getLogger(__name__)


def find_slot_in_model(
    duration_hours: float,
    model: IntervalConflictModel,
    window_start: float,
    window_end: float,
    buffer_hours: float = 0.0,
) -> Optional[Slot]:
    """Earliest free [start, start + duration) inside the window.

    Candidates jump straight past whatever blocks them (blocking end + buffer),
    so boundaries that are not on a quarter-hour grid are never stepped over.
    """
    # the buffer margins must stay inside the day too
    window_start = max(window_start, DAY_START + buffer_hours)
    window_end = min(window_end, DAY_END - buffer_hours)
    if duration_hours <= 0 or window_end - window_start < duration_hours - EPSILON:
        return None

    candidate = window_start
    while candidate + duration_hours <= window_end + EPSILON:
        end = candidate + duration_hours
        blocking = model.first_conflict(candidate, end, buffer_hours)
        if blocking is None:
            return Slot(start=candidate, end=end)
        next_candidate = blocking[1] + buffer_hours
        logger.debug("Candidate %.4f blocked by %s, jumping to %.4f", candidate, blocking, next_candidate)
        candidate = max(next_candidate, candidate + EPSILON)
    return None


def find_next_available_slot(
    duration_hours: float,
    occupied: Iterable[PlannedSession],
    fixed_commitments: Iterable[FixedCommitment],
    window_start: float,
    window_end: float,
    buffer_hours: Optional[float],
    day: date,
    settings: Optional[UserSettings] = None,
) -> Optional[Slot]:
    """Earliest slot on `day` that fits `duration_hours` between commitments and planned sessions.

    Returns None when nothing fits; callers treat that as a normal outcome.
    When buffer_hours is None the buffer comes from `settings`.
    """
    if buffer_hours is None:
        buffer_hours = settings.buffer_hours if settings is not None else 0.0

    model = IntervalConflictModel.for_date(day, occupied, fixed_commitments)
    slot = find_slot_in_model(duration_hours, model, window_start, window_end, buffer_hours)
    if slot is None:
        logger.debug("No %.2fh slot on %s within %s-%s", duration_hours, day, window_start, window_end)
    return slot
