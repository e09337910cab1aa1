from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from scheduling.scheduler import Scheduler
from study_planner.models import FixedCommitment, StudyPlan, Task, UserSettings, ValidationReport

logger = logging.getLogger(__name__)

LOW_PRIORITY_URGENT_DAYS = 3


class TaskValidator:
    """Checks a task before it is handed to the scheduler.

    Errors block the task; warnings are advisory. For one-sitting tasks the
    slot search on the deadline date is authoritative, the daily-hours
    comparison is only an early heads-up.
    """

    def __init__(
        self,
        settings: UserSettings,
        fixed_commitments: Iterable[FixedCommitment] = (),
        study_plans: Iterable[StudyPlan] = (),
    ):
        self.settings = settings
        self.scheduler = Scheduler(settings, fixed_commitments, study_plans)

    def validate(self, task: Task, today: Optional[date] = None) -> ValidationReport:
        today = today or date.today()
        report = ValidationReport()
        hours = task.effective_hours

        if hours <= 0:
            report.errors.append("Time estimation is required")
        if task.deadline is not None and task.deadline < today:
            report.errors.append("Deadline cannot be in the past")
        if task.start_date < today:
            report.errors.append("Start date cannot be in the past")
        if task.deadline is not None and task.deadline < task.start_date:
            report.errors.append("Deadline cannot be before the start date")

        if task.is_one_sitting and hours > 0:
            if hours > self.settings.daily_available_hours:
                report.warnings.append(
                    f"This one-sitting task requires {hours}h but you only have "
                    f"{self.settings.daily_available_hours}h available per day"
                )
            if self.scheduler.find_slot(hours, task.deadline) is None:
                report.errors.append("No available time slot for one-sitting task on deadline date")

        if (
            task.deadline is not None
            and task.importance == "low"
            and (task.deadline - today).days <= LOW_PRIORITY_URGENT_DAYS
        ):
            report.warnings.append(
                "This task is low priority but has an urgent deadline. It may not be "
                "scheduled if you have more important urgent tasks."
            )

        if report.errors:
            logger.info("Task '%s' failed validation: %s", task.title, "; ".join(report.errors))
        return report
