"""
Care calendar reads and completion toggles.

Backs the "Today's Care" overview and the per-plant page.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from verdant.db.adapter import DatabaseAdapter
from verdant.db.client import (
    get_care_tasks_for_listing,
    get_care_tasks_for_user,
    get_listing_detail,
    update_care_task,
)

logger = logging.getLogger(__name__)

UNKNOWN_SPECIES = "Unknown Plant"


@dataclass
class PlantCareSummary:
    """A plant with the care tasks that need attention today."""

    listing_id: str
    species: str
    image_url: str | None = None
    tasks: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class PlantCareDetail:
    """Everything the per-plant care page shows."""

    listing: dict[str, Any]
    tasks: list[dict[str, Any]]
    care_tips: list[str]

    @property
    def primary_task(self) -> dict[str, Any] | None:
        """First incomplete task in due order."""
        return next((t for t in self.tasks if not t.get("completed")), None)


def set_task_completion(
    db: DatabaseAdapter,
    task_id: str,
    completed: bool,
    now: datetime,
    user_id: str | None = None,
) -> dict | None:
    """
    Mark a task done or not done.

    completed_at is stamped with now when completing and cleared when
    un-completing. Returns the updated row, or None when no task matched.
    """
    updates = {
        "completed": completed,
        "completed_at": now.isoformat() if completed else None,
    }
    return update_care_task(db, task_id, updates, user_id=user_id)


def _due_day(task: dict[str, Any]) -> date | None:
    """Calendar date of a task's due_date, or None if unparseable."""
    value = task.get("due_date")
    if isinstance(value, datetime):
        return value.date()
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except ValueError:
        logger.warning(f"Unparseable due_date on care task {task.get('id')}: {value}")
        return None


def group_todays_care(tasks: list[dict[str, Any]], today: date) -> list[PlantCareSummary]:
    """
    Group incomplete tasks due today or earlier by plant.

    Tasks are expected in due order; plants appear in the order their
    first qualifying task does.
    """
    plants: dict[str, PlantCareSummary] = {}

    for task in tasks:
        if task.get("completed"):
            continue
        due = _due_day(task)
        if due is None or due > today:
            continue

        listing_id = task["listing_id"]
        if listing_id not in plants:
            listing = task.get("listing") or {}
            images = listing.get("images") or []
            plants[listing_id] = PlantCareSummary(
                listing_id=listing_id,
                species=listing.get("species") or UNKNOWN_SPECIES,
                image_url=images[0] if images else None,
            )
        plants[listing_id].tasks.append(task)

    return list(plants.values())


def todays_care(db: DatabaseAdapter, user_id: str, today: date) -> list[PlantCareSummary]:
    """Load a user's tasks and group the ones needing attention today."""
    return group_todays_care(get_care_tasks_for_user(db, user_id), today)


def plant_detail(db: DatabaseAdapter, user_id: str, listing_id: str) -> PlantCareDetail | None:
    """Load a plant's listing, tips and the user's tasks for it. None if the listing is missing."""
    listing = get_listing_detail(db, listing_id)
    if listing is None:
        return None

    tasks = get_care_tasks_for_listing(db, user_id, listing_id)
    return PlantCareDetail(
        listing=listing,
        tasks=tasks,
        care_tips=listing.get("care_tips") or [],
    )
