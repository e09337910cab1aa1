from datetime import date

import pytest

from study_planner.models import (
    ExplicitDates,
    FixedCommitment,
    PlannedSession,
    StudyPlan,
    UserSettings,
)

# 2026-03-02 is a Monday
MONDAY = date(2026, 3, 2)


@pytest.fixture
def settings():
    return UserSettings(
        daily_available_hours=6,
        buffer_time_minutes=0,
        study_window_start_hour=8,
        study_window_end_hour=22,
    )


@pytest.fixture
def commitment_on():
    def _make(day: date, start: float, end: float, title: str = "Class"):
        return FixedCommitment(
            title=title,
            start_hour=start,
            end_hour=end,
            rule=ExplicitDates(dates=[day]),
        )
    return _make


@pytest.fixture
def plan_on():
    def _make(day: date, *spans):
        return StudyPlan(
            date=day,
            planned_tasks=[
                PlannedSession(task_title=f"S{i}", start_hour=s, end_hour=e)
                for i, (s, e) in enumerate(spans, start=1)
            ],
        )
    return _make
