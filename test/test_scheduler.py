from datetime import date, timedelta

import pytest

from scheduling.scheduler import Scheduler
from study_planner.errors import InvalidDateOrdering, UnschedulableTaskError
from study_planner.models import FixedCommitment, Recurring, Task, UserSettings

MONDAY = date(2026, 3, 2)


def _task(**kw):
    kw.setdefault("title", "Task")
    kw.setdefault("start_date", MONDAY)
    return Task(**kw)


def test_one_sitting_goes_on_deadline_date(settings, commitment_on):
    deadline = MONDAY + timedelta(days=3)
    scheduler = Scheduler(settings, [commitment_on(deadline, 8, 12)])
    result = scheduler.schedule_task(_task(estimated_hours=3, deadline=deadline, is_one_sitting=True))

    assert len(result.sessions) == 1
    s = result.sessions[0]
    assert (s.date, s.start_hour, s.end_hour) == (deadline, 12, 15)
    assert result.distribution.estimated_sessions == 0
    assert [p.date for p in result.study_plans] == [deadline]


def test_one_sitting_without_room_is_a_hard_failure(settings, commitment_on):
    scheduler = Scheduler(settings, [commitment_on(MONDAY, 8, 22)])
    with pytest.raises(UnschedulableTaskError):
        scheduler.schedule_task(_task(estimated_hours=1, deadline=MONDAY, is_one_sitting=True))


def test_input_plans_are_not_mutated(settings, plan_on):
    existing = plan_on(MONDAY, (8, 10))
    scheduler = Scheduler(settings, study_plans=[existing])
    result = scheduler.schedule_task(_task(estimated_hours=2, deadline=MONDAY, is_one_sitting=True))

    assert result.sessions[0].start_hour == 10
    assert len(existing.planned_tasks) == 1
    assert len(scheduler.plan_for(MONDAY).planned_tasks) == 2


def test_duplicate_plans_for_a_date_are_merged(settings, plan_on):
    scheduler = Scheduler(settings, study_plans=[plan_on(MONDAY, (8, 9)), plan_on(MONDAY, (8.5, 10))])
    assert scheduler.find_slot(1, MONDAY).start == 10


def test_find_first_available_date_skips_full_and_off_days(commitment_on):
    settings = UserSettings(work_days={0, 1, 2, 3, 4})
    commitments = [commitment_on(MONDAY, 8, 22), commitment_on(MONDAY + timedelta(days=1), 8, 21)]
    scheduler = Scheduler(settings, commitments)

    day, slot = scheduler.find_first_available_date(2, MONDAY)
    assert day == MONDAY + timedelta(days=2)
    assert (slot.start, slot.end) == (8, 10)

    saturday = MONDAY + timedelta(days=5)
    assert scheduler.find_first_available_date(1, saturday, saturday + timedelta(days=1)) is None


def test_urgent_task_gets_daily_sessions(settings):
    scheduler = Scheduler(settings)
    result = scheduler.schedule_task(_task(estimated_hours=10, deadline=MONDAY + timedelta(days=5)))

    assert result.distribution.tier == "urgent"
    assert result.unscheduled_hours == 0
    assert result.scheduled_hours == pytest.approx(10)
    assert len({s.date for s in result.sessions}) == len(result.sessions) == 6
    assert all(s.duration <= 2 for s in result.sessions)
    assert [s.session_number for s in result.sessions] == list(range(1, 7))
    assert all(MONDAY <= s.date <= MONDAY + timedelta(days=5) for s in result.sessions)


def test_sessions_avoid_recurring_commitments(settings):
    lectures = FixedCommitment(title="Lectures", start_hour=8, end_hour=12, rule=Recurring(days_of_week=set(range(7))))
    scheduler = Scheduler(settings, [lectures])
    result = scheduler.schedule_task(_task(estimated_hours=10, deadline=MONDAY + timedelta(days=5)))

    assert result.sessions
    assert all(s.start_hour >= 12 for s in result.sessions)


def test_moderate_task_uses_every_other_day(settings):
    scheduler = Scheduler(settings)
    result = scheduler.schedule_task(_task(estimated_hours=4, deadline=MONDAY + timedelta(days=10)))

    assert result.distribution.cadence == "every_other_day"
    assert result.scheduled_hours == pytest.approx(4)
    assert all((s.date - MONDAY).days % 2 == 0 for s in result.sessions)


def test_intensive_preference_front_loads_max_sessions(settings):
    scheduler = Scheduler(settings)
    result = scheduler.schedule_task(
        _task(estimated_hours=4, deadline=MONDAY + timedelta(days=20), scheduling_preference="intensive")
    )
    assert [(s.date, s.duration) for s in result.sessions] == [
        (MONDAY, 2),
        (MONDAY + timedelta(days=1), 2),
    ]


def test_daily_capacity_limits_sessions():
    scheduler = Scheduler(UserSettings(daily_available_hours=1))
    result = scheduler.schedule_task(_task(estimated_hours=4, deadline=MONDAY + timedelta(days=1)))

    assert result.scheduled_hours == pytest.approx(2)
    assert result.unscheduled_hours == pytest.approx(2)


def test_work_days_are_respected():
    scheduler = Scheduler(UserSettings(work_days={0, 1, 2, 3, 4}))
    result = scheduler.schedule_task(_task(estimated_hours=10, deadline=MONDAY + timedelta(days=6)))

    assert result.scheduled_hours == pytest.approx(10)
    assert all(s.date.weekday() < 5 for s in result.sessions)


def test_fragmented_day_takes_a_shorter_chunk(settings, commitment_on):
    scheduler = Scheduler(settings, [commitment_on(MONDAY, 8, 9), commitment_on(MONDAY, 10, 22)])
    result = scheduler.schedule_task(_task(estimated_hours=2, deadline=MONDAY))

    assert [(s.start_hour, s.end_hour) for s in result.sessions] == [(9, 10)]
    assert result.unscheduled_hours == pytest.approx(1)


def test_task_without_deadline_spreads_over_horizon(settings):
    scheduler = Scheduler(settings, horizon_days=14)
    result = scheduler.schedule_task(_task(estimated_hours=3))

    assert result.distribution.estimated_sessions == 0
    assert result.scheduled_hours == pytest.approx(3)
    assert all((s.date - MONDAY).days % 3 == 0 for s in result.sessions)
    assert max(s.date for s in result.sessions) < MONDAY + timedelta(days=14)


def test_zero_hour_task_schedules_nothing(settings):
    result = Scheduler(settings).schedule_task(_task(deadline=MONDAY + timedelta(days=3)))
    assert result.sessions == []
    assert result.unscheduled_hours == 0


def test_deadline_before_start_is_rejected(settings):
    with pytest.raises(InvalidDateOrdering):
        Scheduler(settings).schedule_task(_task(estimated_hours=2, deadline=MONDAY - timedelta(days=1)))


def test_schedule_places_one_sitting_first_and_keeps_buffer():
    scheduler = Scheduler(UserSettings(buffer_time_minutes=30))
    exam_prep = _task(title="Exam prep", estimated_hours=2, deadline=MONDAY + timedelta(days=2))
    essay = _task(title="Essay", estimated_hours=2, deadline=MONDAY, is_one_sitting=True)
    quiz = _task(title="Quiz", estimated_hours=1, deadline=MONDAY, is_one_sitting=True)

    results = scheduler.schedule([exam_prep, essay, quiz])

    assert [r.sessions[0].task_title for r in results] == ["Essay", "Quiz", "Exam prep"]
    essay_s, quiz_s = results[0].sessions[0], results[1].sessions[0]
    assert (essay_s.start_hour, essay_s.end_hour) == (8, 10)
    assert quiz_s.start_hour == 10.5

    monday = [s for s in results[2].sessions if s.date == MONDAY]
    for s in monday:
        assert s.start_hour >= quiz_s.end_hour + 0.5


def test_leftover_hours_do_not_stack_on_days_already_used(settings):
    scheduler = Scheduler(settings)
    result = scheduler.schedule_task(_task(estimated_hours=20, deadline=MONDAY + timedelta(days=14)))

    assert result.distribution.tier == "relaxed"
    assert result.scheduled_hours == pytest.approx(20)
    dates = [s.date for s in result.sessions]
    assert len(dates) == len(set(dates))
    assert all(s.duration <= 2 for s in result.sessions)
    for plan in result.study_plans:
        spans = sorted((p.start_hour, p.end_hour) for p in plan.planned_tasks)
        assert len(spans) == 1


def test_overlapping_plans_count_once_against_capacity(plan_on):
    scheduler = Scheduler(UserSettings(daily_available_hours=5), study_plans=[plan_on(MONDAY, (8, 10), (9, 11))])
    result = scheduler.schedule_task(_task(estimated_hours=2, deadline=MONDAY))

    assert [(s.start_hour, s.end_hour) for s in result.sessions] == [(11, 13)]
    assert result.unscheduled_hours == 0
