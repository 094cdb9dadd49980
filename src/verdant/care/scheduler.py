"""Due-date scheduling for essential care tasks."""

from datetime import datetime, timedelta

from .models import EssentialTask, ScheduledTask

DEFAULT_FREQUENCY_DAYS = 7

# The first task lands yesterday so a new owner has something due right away.
INITIAL_OFFSET_DAYS = -1


def schedule_tasks(
    tasks: list[EssentialTask],
    now: datetime,
    initial_offset_days: int = INITIAL_OFFSET_DAYS,
    default_frequency_days: int = DEFAULT_FREQUENCY_DAYS,
) -> list[ScheduledTask]:
    """
    Assign a due date to each task, in order.

    Each task is due at now + running offset (whole days, same time of
    day as now). The offset then advances by that task's frequency_days,
    or by default_frequency_days when the frequency is missing or not
    positive. Tasks are never reordered or deduplicated.
    """
    scheduled: list[ScheduledTask] = []
    offset = initial_offset_days

    for task in tasks:
        scheduled.append(
            ScheduledTask(
                title=task.title,
                description=task.description,
                due_date=now + timedelta(days=offset),
            )
        )
        offset += _step_days(task.frequency_days, default_frequency_days)

    return scheduled


def _step_days(frequency_days: int | None, default: int) -> int:
    if frequency_days is not None and frequency_days > 0:
        return frequency_days
    return default
