"""Care calendar API endpoints."""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from verdant.care.calendar import plant_detail, set_task_completion, todays_care
from verdant.db.adapter import DatabaseAdapter
from verdant.web.auth import AuthenticatedUser, get_current_user, get_user_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/care", tags=["care"])


# =============================================================================
# Request/Response Models
# =============================================================================


class PlantCareSummaryResponse(BaseModel):
    """A plant with tasks due today or overdue."""

    listing_id: str
    species: str
    image_url: str | None = None
    tasks: list[dict[str, Any]] = []


class TodaysCareResponse(BaseModel):
    plants: list[PlantCareSummaryResponse]


class PlantDetailResponse(BaseModel):
    listing: dict[str, Any]
    tasks: list[dict[str, Any]]
    care_tips: list[str]
    primary_task: dict[str, Any] | None = None


class TaskCompletionRequest(BaseModel):
    completed: bool


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/today", response_model=TodaysCareResponse)
def get_todays_care(
    user: AuthenticatedUser = Depends(get_current_user),
    db: DatabaseAdapter = Depends(get_user_db),
) -> TodaysCareResponse:
    """Plants with incomplete tasks due today or earlier."""
    plants = todays_care(db, user.id, datetime.now(UTC).date())
    return TodaysCareResponse(
        plants=[
            PlantCareSummaryResponse(
                listing_id=p.listing_id,
                species=p.species,
                image_url=p.image_url,
                tasks=p.tasks,
            )
            for p in plants
        ]
    )


@router.get("/plants/{listing_id}", response_model=PlantDetailResponse)
def get_plant_care(
    listing_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    db: DatabaseAdapter = Depends(get_user_db),
) -> PlantDetailResponse:
    """A plant's care tips and the caller's tasks for it."""
    detail = plant_detail(db, user.id, listing_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Plant not found")

    return PlantDetailResponse(
        listing=detail.listing,
        tasks=detail.tasks,
        care_tips=detail.care_tips,
        primary_task=detail.primary_task,
    )


@router.patch("/tasks/{task_id}")
def update_task_completion(
    task_id: str,
    req: TaskCompletionRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    db: DatabaseAdapter = Depends(get_user_db),
) -> dict[str, Any]:
    """Toggle a task's completion."""
    try:
        task = set_task_completion(db, task_id, req.completed, datetime.now(UTC), user_id=user.id)
    except Exception as e:
        logger.error(f"Error updating completion of care task {task_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update task")

    if task is None:
        raise HTTPException(status_code=404, detail="Care task not found")
    return task
