from __future__ import annotations

import logging
import math
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from scheduling.calendar_window import resolve_window
from scheduling.distribution import CADENCE_STEP_DAYS, DEFAULT_POLICY, DistributionPolicy
from scheduling.intervals import EPSILON, IntervalConflictModel
from scheduling.slot_finder import find_next_available_slot, find_slot_in_model
from scheduling.urgency import days_until_deadline
from study_planner.errors import UnschedulableTaskError
from study_planner.models import (
    FixedCommitment,
    PlannedSession,
    ScheduledSession,
    ScheduleResult,
    Slot,
    StudyPlan,
    Task,
    UserSettings,
)

logger = logging.getLogger(__name__)

# smallest schedulable unit, in hours
SCHEDULING_UNIT = 0.25
DEFAULT_HORIZON_DAYS = 14


def _round_down(hours: float) -> float:
    return math.floor(hours / SCHEDULING_UNIT + EPSILON) * SCHEDULING_UNIT


def _round_up(hours: float) -> float:
    return math.ceil(hours / SCHEDULING_UNIT - EPSILON) * SCHEDULING_UNIT


class Scheduler:
    """Places task sessions on concrete dates.

    Works on its own copy of the study plans: every placement is appended to
    that copy so later tasks see earlier ones, and the caller's records are
    never touched.
    """

    def __init__(
        self,
        settings: UserSettings,
        fixed_commitments: Iterable[FixedCommitment] = (),
        study_plans: Iterable[StudyPlan] = (),
        horizon_days: int = DEFAULT_HORIZON_DAYS,
        policy: DistributionPolicy = DEFAULT_POLICY,
    ):
        self.settings = settings
        self.fixed_commitments = list(fixed_commitments)
        self.horizon_days = horizon_days
        self.policy = policy
        self._plans: Dict[date, StudyPlan] = {}
        for plan in study_plans:
            existing = self._plans.get(plan.date)
            if existing is None:
                self._plans[plan.date] = plan
            else:
                # duplicate records for a date are merged, the conflict model coalesces overlaps
                self._plans[plan.date] = existing.model_copy(
                    update={"planned_tasks": [*existing.planned_tasks, *plan.planned_tasks]}
                )

    @property
    def study_plans(self) -> List[StudyPlan]:
        return [self._plans[d] for d in sorted(self._plans)]

    def plan_for(self, day: date) -> StudyPlan:
        return self._plans.get(day) or StudyPlan(date=day)

    def find_slot(self, duration_hours: float, day: date) -> Optional[Slot]:
        window = resolve_window(day, self.settings)
        return find_next_available_slot(
            duration_hours,
            self.plan_for(day).planned_tasks,
            self.fixed_commitments,
            window.start_hour,
            window.end_hour,
            self.settings.buffer_hours,
            day,
            self.settings,
        )

    def find_first_available_date(
        self,
        duration_hours: float,
        start: date,
        end: Optional[date] = None,
    ) -> Optional[Tuple[date, Slot]]:
        """First work day in [start, end] with room for `duration_hours`."""
        if end is None:
            end = start + timedelta(days=self.horizon_days - 1)
        # rejects an end before the start
        days_until_deadline(end, start)

        day = start
        while day <= end:
            if day.weekday() in self.settings.work_days:
                slot = self.find_slot(duration_hours, day)
                if slot is not None:
                    return day, slot
            day += timedelta(days=1)
        return None

    def _commit(self, day: date, session: PlannedSession) -> None:
        self._plans[day] = self.plan_for(day).with_session(session)

    def place_one_sitting(self, task: Task) -> ScheduleResult:
        """Single block on the deadline date; no room there is a hard failure."""
        days_until_deadline(task.deadline, task.start_date)
        hours = task.effective_hours
        slot = self.find_slot(hours, task.deadline)
        if slot is None:
            logger.warning("One-sitting task '%s' does not fit on %s", task.title, task.deadline)
            raise UnschedulableTaskError(task.title, task.deadline, hours)

        self._commit(
            task.deadline,
            PlannedSession(task_title=task.title, start_hour=slot.start, end_hour=slot.end, session_number=1),
        )
        logger.info("Placed one-sitting task '%s' on %s %s-%s", task.title, task.deadline, slot.start_label, slot.end_label)
        return ScheduleResult(
            sessions=[
                ScheduledSession(
                    date=task.deadline,
                    task_title=task.title,
                    start_hour=slot.start,
                    end_hour=slot.end,
                    session_number=1,
                )
            ],
            study_plans=self.study_plans,
            unscheduled_hours=0.0,
            distribution=self.policy.plan_for_task(task),
        )

    def _candidate_days(self, task: Task, cadence_step: int) -> Tuple[List[date], List[date]]:
        """(cadence days, every work day) between the start date and the deadline or horizon."""
        if task.deadline is not None:
            last = task.deadline
        else:
            last = task.start_date + timedelta(days=self.horizon_days - 1)

        work_days = []
        day = task.start_date
        while day <= last:
            if day.weekday() in self.settings.work_days:
                work_days.append(day)
            day += timedelta(days=1)
        return work_days[::cadence_step], work_days

    def _place_session(self, task: Task, day: date, size: float) -> Optional[ScheduledSession]:
        plan = self.plan_for(day)
        window = resolve_window(day, self.settings)
        model = IntervalConflictModel.for_date(day, plan.planned_tasks, self.fixed_commitments)

        longest = max((end - start for start, end in model.free_intervals(window.start_hour, window.end_hour)), default=0.0)
        if longest < size - EPSILON:
            size = _round_down(longest)
        slot = find_slot_in_model(size, model, window.start_hour, window.end_hour, self.settings.buffer_hours)
        # fragmented days can still take a shorter chunk
        while slot is None and size > SCHEDULING_UNIT + EPSILON:
            size = _round_down(size - SCHEDULING_UNIT)
            slot = find_slot_in_model(size, model, window.start_hour, window.end_hour, self.settings.buffer_hours)
        if slot is None:
            return None

        self._commit(
            day,
            PlannedSession(task_title=task.title, start_hour=slot.start, end_hour=slot.end),
        )
        # numbered once every session of the task is known
        return ScheduledSession(
            date=day,
            task_title=task.title,
            start_hour=slot.start,
            end_hour=slot.end,
            session_number=0,
        )

    def _session_size(self, task: Task, day: date, remaining: float, days_left: int) -> float:
        planned = IntervalConflictModel.for_date(day, self.plan_for(day).planned_tasks)
        capacity = self.settings.daily_available_hours - planned.occupied_hours()
        if task.scheduling_preference == "consistent":
            target = _round_up(remaining / max(days_left, 1))
        else:
            target = task.max_session_length
        size = min(target, remaining, task.max_session_length, capacity)
        if size < remaining - EPSILON:
            size = _round_down(size)
        return size

    def schedule_task(self, task: Task) -> ScheduleResult:
        if task.is_one_sitting:
            return self.place_one_sitting(task)

        distribution = self.policy.plan_for_task(task)
        remaining = task.effective_hours
        if remaining <= 0:
            return ScheduleResult(study_plans=self.study_plans, distribution=distribution)
        if task.deadline is not None:
            days_until_deadline(task.deadline, task.start_date)

        step = 1 if task.scheduling_preference == "intensive" else CADENCE_STEP_DAYS[distribution.cadence]
        cadence_days, work_days = self._candidate_days(task, step)

        sessions: List[ScheduledSession] = []
        # cadence days first, then the remaining work days for what is left over
        for first_pass in (True, False):
            if first_pass:
                pass_days = cadence_days
            else:
                used = {s.date for s in sessions}
                pass_days = [d for d in work_days if d not in used]
            for idx, day in enumerate(pass_days):
                if remaining <= EPSILON:
                    break
                size = self._session_size(task, day, remaining, len(pass_days) - idx)
                if size <= EPSILON:
                    continue
                placed = self._place_session(task, day, size)
                if placed is not None:
                    sessions.append(placed)
                    remaining -= placed.duration

        sessions.sort(key=lambda s: (s.date, s.start_hour))
        for number, s in enumerate(sessions, start=1):
            s.session_number = number

        remaining = max(0.0, remaining)
        if remaining > EPSILON:
            logger.warning("Task '%s': %.2fh could not be scheduled", task.title, remaining)
        logger.info("Scheduled %d session(s) for '%s' (%s cadence)", len(sessions), task.title, distribution.cadence)
        return ScheduleResult(
            sessions=sessions,
            study_plans=self.study_plans,
            unscheduled_hours=remaining if remaining > EPSILON else 0.0,
            distribution=distribution,
        )

    def schedule(self, tasks: List[Task]) -> List[ScheduleResult]:
        """Schedule tasks in priority order.

        One-sitting tasks go first (they can only live on one date), then by
        deadline and importance. Tasks without a deadline go last.
        """

        def order(t: Task):
            return (
                not t.is_one_sitting,
                t.deadline is None,
                t.deadline or date.max,
                t.importance != "high",
            )

        return [self.schedule_task(t) for t in sorted(tasks, key=order)]
