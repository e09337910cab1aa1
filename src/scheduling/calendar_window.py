from __future__ import annotations

import logging
from datetime import date

from study_planner.errors import ConfigurationError
from study_planner.models import StudyWindow, UserSettings

logger = logging.getLogger(__name__)


def resolve_window(day: date, settings: UserSettings) -> StudyWindow:
    """Effective study window for `day`.

    A weekday override in settings.day_windows wins over the default window.
    Malformed bounds raise ConfigurationError; they are never swapped.
    """
    override = settings.day_windows.get(day.weekday())
    if override is not None:
        start, end = override.start_hour, override.end_hour
        source = f"override for weekday {day.weekday()}"
    else:
        start, end = settings.study_window_start_hour, settings.study_window_end_hour
        source = "default window"

    if start < 0 or end > 24:
        raise ConfigurationError(f"{source} {start}-{end} lies outside 0-24h")
    if start >= end:
        raise ConfigurationError(f"{source} start {start} must be before end {end}")

    logger.debug("Window for %s: %s-%s (%s)", day, start, end, source)
    return StudyWindow(start_hour=start, end_hour=end)
