import os

from study_planner.models import UserSettings

# Configuration
DAILY_AVAILABLE_HOURS = float(os.getenv("PLANNER_DAILY_AVAILABLE_HOURS", "6"))
BUFFER_MINUTES = int(os.getenv("PLANNER_BUFFER_MINUTES", "0"))
WINDOW_START_HOUR = float(os.getenv("PLANNER_WINDOW_START_HOUR", "8"))
WINDOW_END_HOUR = float(os.getenv("PLANNER_WINDOW_END_HOUR", "22"))
HORIZON_DAYS = int(os.getenv("PLANNER_HORIZON_DAYS", "14"))

default_settings = UserSettings(
    daily_available_hours=DAILY_AVAILABLE_HOURS,
    buffer_time_minutes=BUFFER_MINUTES,
    study_window_start_hour=WINDOW_START_HOUR,
    study_window_end_hour=WINDOW_END_HOUR,
)


def get_default_settings() -> UserSettings:
    return default_settings


def get_horizon_days() -> int:
    return HORIZON_DAYS
