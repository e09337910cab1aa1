from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Optional

from scheduling.urgency import classify, days_until_deadline
from study_planner.models import (
    Cadence,
    DeadlineType,
    SchedulingPreference,
    SessionDistribution,
    Task,
    UrgencyTier,
)

ADVISORY_DESCRIPTION = "Sessions will be distributed based on available time slots"

CADENCE_BY_TIER: Dict[UrgencyTier, Cadence] = {
    "urgent": "daily",
    "moderate": "every_other_day",
    "relaxed": "two_to_three_per_week",
}

DESCRIPTION_BY_TIER: Dict[UrgencyTier, str] = {
    "urgent": "Urgent deadline - daily sessions recommended",
    "moderate": "Moderate timeline - every other day sessions",
    "relaxed": "2-3 sessions per week recommended",
}

# days between sessions for each cadence
CADENCE_STEP_DAYS: Dict[Cadence, int] = {
    "daily": 1,
    "every_other_day": 2,
    "two_to_three_per_week": 3,
}


@dataclass(frozen=True)
class DistributionPolicy:
    """Maps deadline urgency to a session estimate and cadence.

    The estimate assumes fixed-size sessions; it is advisory and does not cap
    the size of sessions that get materialized later.
    """

    assumed_session_length: float = 2.0
    cadence_by_tier: Dict[UrgencyTier, Cadence] = field(default_factory=lambda: dict(CADENCE_BY_TIER))

    def _advisory(self, preference: SchedulingPreference) -> SessionDistribution:
        return SessionDistribution(
            tier="relaxed",
            cadence=self.cadence_by_tier["relaxed"],
            description=ADVISORY_DESCRIPTION,
            estimated_sessions=0,
            preference=preference,
        )

    def plan(
        self,
        total_hours: float,
        deadline: Optional[date],
        start_date: date,
        is_one_sitting: bool,
        preference: SchedulingPreference = "consistent",
        deadline_type: DeadlineType = "hard",
    ) -> SessionDistribution:
        # one-sitting tasks go straight to the slot finder as a single block
        if deadline is None or deadline_type == "none" or is_one_sitting:
            return self._advisory(preference)
        if total_hours <= 0:
            return self._advisory(preference)

        days = days_until_deadline(deadline, start_date)
        tier = classify(days)
        return SessionDistribution(
            tier=tier,
            cadence=self.cadence_by_tier[tier],
            description=DESCRIPTION_BY_TIER[tier],
            estimated_sessions=math.ceil(total_hours / self.assumed_session_length),
            days_until_deadline=days,
            preference=preference,
        )

    def plan_for_task(self, task: Task) -> SessionDistribution:
        return self.plan(
            task.effective_hours,
            task.deadline,
            task.start_date,
            task.is_one_sitting,
            preference=task.scheduling_preference,
            deadline_type=task.deadline_type,
        )


DEFAULT_POLICY = DistributionPolicy()


def plan(
    total_hours: float,
    deadline: Optional[date],
    start_date: date,
    is_one_sitting: bool,
    preference: SchedulingPreference = "consistent",
    deadline_type: DeadlineType = "hard",
) -> SessionDistribution:
    return DEFAULT_POLICY.plan(total_hours, deadline, start_date, is_one_sitting, preference, deadline_type)


def plan_for_task(task: Task) -> SessionDistribution:
    return DEFAULT_POLICY.plan_for_task(task)
