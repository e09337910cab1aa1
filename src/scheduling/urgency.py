from __future__ import annotations

from datetime import date, datetime
from typing import Union

from study_planner.errors import InvalidDateOrdering
from study_planner.models import UrgencyTier

URGENT_BEFORE_DAYS = 7
MODERATE_BEFORE_DAYS = 14

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    # time-of-day is irrelevant at calendar-day granularity
    return value.date() if isinstance(value, datetime) else value


def days_until_deadline(deadline: DateLike, start: DateLike) -> int:
    days = (_as_date(deadline) - _as_date(start)).days
    if days < 0:
        raise InvalidDateOrdering(f"deadline {_as_date(deadline)} is before start date {_as_date(start)}")
    return days


def classify(days: int) -> UrgencyTier:
    if days < 0:
        raise InvalidDateOrdering(f"days until deadline must not be negative, got {days}")
    if days < URGENT_BEFORE_DAYS:
        return "urgent"
    if days < MODERATE_BEFORE_DAYS:
        return "moderate"
    return "relaxed"
