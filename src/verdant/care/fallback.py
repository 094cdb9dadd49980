"""Generic starter schedule for plants with no usable care data."""

from datetime import datetime, timedelta

from .models import ScheduledTask

# (title, description, days from now)
FALLBACK_TASKS: tuple[tuple[str, str, int], ...] = (
    ("Water your new plant", "Give your new plant a good drink of water.", 1),
    ("Check the soil", "See if the soil is dry. If it is, time for more water!", 3),
    ("Turn me around!", "Rotate the plant so all its leaves get some sun.", 7),
)


def generate_fallback_tasks(now: datetime) -> list[ScheduledTask]:
    """Build the three fixed starter tasks anchored to now."""
    return [
        ScheduledTask(title=title, description=description, due_date=now + timedelta(days=days))
        for title, description, days in FALLBACK_TASKS
    ]
