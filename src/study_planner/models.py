from __future__ import annotations

from datetime import date
from typing import Annotated, Dict, List, Literal, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


DeadlineType = Literal["hard", "soft", "none"]
Importance = Literal["high", "low"]
SchedulingPreference = Literal["consistent", "opportunistic", "intensive"]
UrgencyTier = Literal["urgent", "moderate", "relaxed"]
Cadence = Literal["daily", "every_other_day", "two_to_three_per_week"]


def hours_to_hhmm(hours: float) -> str:
    """Render fractional hours as HH:MM (8.5 -> '08:30')."""
    total_min = int(round(hours * 60))
    return f"{total_min // 60:02d}:{total_min % 60:02d}"


class Task(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    description: str = ""
    category: str = "general"

    deadline: Optional[date] = None
    deadline_type: DeadlineType = "hard"

    estimated_hours: float = Field(0.0, ge=0)
    # overrides estimated_hours when the user supplied a total directly
    total_time_needed: Optional[float] = Field(None, gt=0)

    importance: Importance = "low"
    scheduling_preference: SchedulingPreference = "consistent"
    is_one_sitting: bool = False
    start_date: date = Field(default_factory=date.today)
    max_session_length: float = Field(2.0, gt=0)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("title must not be blank")
        return v2

    @field_validator("description", mode="before")
    @classmethod
    def description_not_null(cls, v):
        return "" if v is None else v

    @model_validator(mode="before")
    @classmethod
    def normalize_deadline_type(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("deadline") in (None, ""):
            data["deadline"] = None
            data["deadline_type"] = "none"
        elif data.get("deadline_type", "hard") == "none":
            data["deadline_type"] = "hard"
        return data

    @model_validator(mode="after")
    def one_sitting_needs_deadline(self) -> "Task":
        if self.is_one_sitting and self.deadline is None:
            raise ValueError("one-sitting tasks require a deadline")
        return self

    @property
    def effective_hours(self) -> float:
        if self.total_time_needed is not None and self.total_time_needed > 0:
            return self.total_time_needed
        return self.estimated_hours


class ExplicitDates(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["explicit"] = "explicit"
    dates: List[date] = Field(default_factory=list)


class Recurring(BaseModel):
    """Weekly recurrence. Weekdays follow date.weekday(): Monday is 0."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["recurring"] = "recurring"
    days_of_week: Set[int] = Field(default_factory=set)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    excluded_dates: List[date] = Field(default_factory=list)

    @field_validator("days_of_week")
    @classmethod
    def weekdays_in_range(cls, v: Set[int]) -> Set[int]:
        bad = [d for d in v if d < 0 or d > 6]
        if bad:
            raise ValueError(f"days_of_week must be within 0..6, got {sorted(bad)}")
        return v


DateRule = Annotated[Union[ExplicitDates, Recurring], Field(discriminator="kind")]


class FixedCommitment(BaseModel):
    # start/end are not cross-checked here; the conflict model drops empty spans
    model_config = ConfigDict(frozen=True)

    title: str = ""
    start_hour: float
    end_hour: float
    rule: DateRule


class PlannedSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    task_title: str
    start_hour: float
    end_hour: float
    session_number: Optional[int] = None

    @property
    def duration(self) -> float:
        return self.end_hour - self.start_hour


class StudyPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: date
    planned_tasks: List[PlannedSession] = Field(default_factory=list)

    def with_session(self, session: PlannedSession) -> "StudyPlan":
        return self.model_copy(update={"planned_tasks": [*self.planned_tasks, session]})


class StudyWindow(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_hour: float
    end_hour: float


class UserSettings(BaseModel):
    """
    Per-user availability. Window ordering is checked by the window resolver,
    not here, so a malformed payload still reaches it and fails loudly there.
    """

    model_config = ConfigDict(frozen=True)

    daily_available_hours: float = Field(6.0, gt=0, le=24)
    buffer_time_minutes: int = Field(0, ge=0)

    study_window_start_hour: float = 8.0
    study_window_end_hour: float = 22.0
    # keyed by date.weekday()
    day_windows: Dict[int, StudyWindow] = Field(default_factory=dict)

    work_days: Set[int] = Field(default_factory=lambda: {0, 1, 2, 3, 4, 5, 6})

    @property
    def buffer_hours(self) -> float:
        return self.buffer_time_minutes / 60.0


class Slot(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start

    @property
    def start_label(self) -> str:
        return hours_to_hhmm(self.start)

    @property
    def end_label(self) -> str:
        return hours_to_hhmm(self.end)


class SessionDistribution(BaseModel):
    tier: UrgencyTier = "relaxed"
    cadence: Cadence = "two_to_three_per_week"
    description: str = ""
    estimated_sessions: int = Field(0, ge=0)
    days_until_deadline: Optional[int] = None
    preference: SchedulingPreference = "consistent"


class ScheduledSession(BaseModel):
    date: date
    task_title: str
    start_hour: float
    end_hour: float
    session_number: int

    @property
    def duration(self) -> float:
        return self.end_hour - self.start_hour


class ScheduleResult(BaseModel):
    sessions: List[ScheduledSession] = Field(default_factory=list)
    study_plans: List[StudyPlan] = Field(default_factory=list)
    unscheduled_hours: float = 0.0
    distribution: SessionDistribution = Field(default_factory=SessionDistribution)

    @property
    def scheduled_hours(self) -> float:
        return sum(s.duration for s in self.sessions)


class ValidationReport(BaseModel):
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors
