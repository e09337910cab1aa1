from __future__ import annotations


class ConfigurationError(ValueError):
    """User settings describe an unusable study window (start >= end, or outside 0-24h)."""


class InvalidDateOrdering(ValueError):
    """A deadline falls before the start date it is measured from."""


class UnschedulableTaskError(RuntimeError):
    """A task that must be placed as a single block has no room on its deadline date."""

    def __init__(self, task_title: str, on_date, duration_hours: float):
        self.task_title = task_title
        self.on_date = on_date
        self.duration_hours = duration_hours
        super().__init__(
            f"No available time slot for one-sitting task '{task_title}' "
            f"({duration_hours}h) on {on_date}"
        )
