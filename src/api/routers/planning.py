import logging
import time
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.dependencies import get_default_settings, get_horizon_days
from api.metrics import (
    REQUESTS_TOTAL,
    REQUEST_LATENCY_SECONDS,
    SESSIONS_PLANNED_TOTAL,
    SLOT_SEARCHES_TOTAL,
    URGENCY_TIER_TOTAL,
)
from scheduling.calendar_window import resolve_window
from scheduling.distribution import plan_for_task
from scheduling.scheduler import Scheduler
from study_planner.models import (
    FixedCommitment,
    ScheduleResult,
    SessionDistribution,
    Slot,
    StudyPlan,
    StudyWindow,
    Task,
    UserSettings,
    ValidationReport,
)
from validation.task_validator import TaskValidator

router = APIRouter()
logger = logging.getLogger(__name__)


class PlanningContextIn(BaseModel):
    settings: Optional[UserSettings] = None
    fixed_commitments: List[FixedCommitment] = Field(default_factory=list)
    study_plans: List[StudyPlan] = Field(default_factory=list)


class DistributionIn(BaseModel):
    task: Task


class NextSlotIn(PlanningContextIn):
    duration_hours: float = Field(..., gt=0)
    date: date


class FirstAvailableIn(PlanningContextIn):
    duration_hours: float = Field(..., gt=0)
    start_date: date
    end_date: Optional[date] = None


class ValidateTaskIn(PlanningContextIn):
    task: Task
    today: Optional[date] = None


class ScheduleTaskIn(PlanningContextIn):
    task: Task


class NextSlotOut(BaseModel):
    date: date
    window: StudyWindow
    slot: Optional[Slot] = None


class FirstAvailableOut(BaseModel):
    date: Optional[date]
    slot: Optional[Slot]


def _observe(endpoint: str, status: str, start: float) -> None:
    REQUESTS_TOTAL.labels(endpoint=endpoint, status=status).inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - start)


def _scheduler(payload: PlanningContextIn, default_settings: UserSettings, horizon_days: int) -> Scheduler:
    return Scheduler(
        payload.settings or default_settings,
        payload.fixed_commitments,
        payload.study_plans,
        horizon_days=horizon_days,
    )


@router.post("/distribution")
async def session_distribution(payload: DistributionIn) -> SessionDistribution:
    """Advisory urgency tier and session estimate for a task."""
    start = time.time()
    distribution = plan_for_task(payload.task)
    URGENCY_TIER_TOTAL.labels(tier=distribution.tier).inc()
    _observe("/distribution", "ok", start)
    return distribution


@router.post("/slots/next")
async def next_slot(
    payload: NextSlotIn,
    default_settings: UserSettings = Depends(get_default_settings),
) -> NextSlotOut:
    """Earliest slot on a single date, or slot=null when the day is full."""
    start = time.time()
    settings = payload.settings or default_settings
    window = resolve_window(payload.date, settings)
    scheduler = Scheduler(settings, payload.fixed_commitments, payload.study_plans)
    slot = scheduler.find_slot(payload.duration_hours, payload.date)

    SLOT_SEARCHES_TOTAL.labels(result="found" if slot else "none").inc()
    _observe("/slots/next", "ok", start)
    return NextSlotOut(date=payload.date, window=window, slot=slot)


@router.post("/slots/first-available")
async def first_available_slot(
    payload: FirstAvailableIn,
    default_settings: UserSettings = Depends(get_default_settings),
    horizon_days: int = Depends(get_horizon_days),
) -> FirstAvailableOut:
    start = time.time()
    scheduler = _scheduler(payload, default_settings, horizon_days)
    found = scheduler.find_first_available_date(payload.duration_hours, payload.start_date, payload.end_date)

    SLOT_SEARCHES_TOTAL.labels(result="found" if found else "none").inc()
    _observe("/slots/first-available", "ok", start)
    if found is None:
        return FirstAvailableOut(date=None, slot=None)
    day, slot = found
    return FirstAvailableOut(date=day, slot=slot)


@router.post("/tasks/validate")
async def validate_task(
    payload: ValidateTaskIn,
    default_settings: UserSettings = Depends(get_default_settings),
) -> ValidationReport:
    start = time.time()
    validator = TaskValidator(
        payload.settings or default_settings,
        payload.fixed_commitments,
        payload.study_plans,
    )
    report = validator.validate(payload.task, today=payload.today)
    _observe("/tasks/validate", "valid" if report.is_valid else "invalid", start)
    return report


@router.post("/tasks/schedule")
async def schedule_task(
    payload: ScheduleTaskIn,
    default_settings: UserSettings = Depends(get_default_settings),
    horizon_days: int = Depends(get_horizon_days),
) -> ScheduleResult:
    start = time.time()
    logger.info(f"Scheduling task: {payload.task.title[:50]}")

    scheduler = _scheduler(payload, default_settings, horizon_days)
    result = scheduler.schedule_task(payload.task)

    SESSIONS_PLANNED_TOTAL.inc(len(result.sessions))
    URGENCY_TIER_TOTAL.labels(tier=result.distribution.tier).inc()
    _observe("/tasks/schedule", "ok", start)
    return result
