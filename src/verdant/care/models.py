"""Data models for care-plan parsing and scheduling."""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

MAX_FREQUENCY_DAYS = 365


class CareContentShape(str, Enum):
    """Shape of the stored care payload, detected by the parser."""

    STRUCTURED = "structured"
    LEGACY = "legacy"
    EMPTY = "empty"


# =============================================================================
# Stored payload (AI-authored JSON on listing.care_details)
# =============================================================================


class ActionableTask(BaseModel):
    """One AI-suggested care action. Lenient: missing fields get defaults."""

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    description: str = ""
    frequency_days: int | None = None
    is_optional: bool = False

    @field_validator("title", "description", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)

    @field_validator("frequency_days", mode="before")
    @classmethod
    def _coerce_frequency(cls, v: Any) -> int | None:
        if isinstance(v, str):
            v = v.strip()
            if not v.isdecimal() or len(v) > 6:
                return None
            v = int(v)
        # bool is an int subclass; True is not a frequency
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return None
        if isinstance(v, float) and not math.isfinite(v):
            return None
        # Longer intervals would push later due dates past datetime.max
        if v > MAX_FREQUENCY_DAYS:
            return None
        return int(v)

    @field_validator("is_optional", mode="before")
    @classmethod
    def _coerce_flag(cls, v: Any) -> bool:
        return bool(v)


class ListingCareSpec(BaseModel):
    """
    Structured care payload.

    Valid only when it is an object carrying actionable_tasks and/or
    care_tips as lists. Anything else is a shape mismatch.
    """

    model_config = ConfigDict(extra="ignore")

    actionable_tasks: list[ActionableTask] = []
    care_tips: list[str] = []

    @model_validator(mode="before")
    @classmethod
    def _require_shape(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise ValueError("care payload must be an object")
        if "actionable_tasks" not in data and "care_tips" not in data:
            raise ValueError("care payload has neither actionable_tasks nor care_tips")
        for key in ("actionable_tasks", "care_tips"):
            if data.get(key) is not None and not isinstance(data[key], list):
                raise ValueError(f"{key} must be a list")
        return data

    @field_validator("actionable_tasks", mode="before")
    @classmethod
    def _drop_non_objects(cls, v: Any) -> list:
        if v is None:
            return []
        return [item for item in v if isinstance(item, dict)]

    @field_validator("care_tips", mode="before")
    @classmethod
    def _drop_non_strings(cls, v: Any) -> list:
        if v is None:
            return []
        return [tip for tip in v if isinstance(tip, str)]


# =============================================================================
# Parser output
# =============================================================================


@dataclass
class EssentialTask:
    """A non-optional task that will be scheduled as a reminder."""

    title: str
    description: str
    frequency_days: int | None = None


@dataclass
class NormalizedCarePlan:
    """Parsed care content ready for scheduling."""

    essential_tasks: list[EssentialTask] = field(default_factory=list)
    all_tips: list[str] = field(default_factory=list)


@dataclass
class ParseOutcome:
    """Result of a parse attempt, tagged with the detected payload shape."""

    shape: CareContentShape
    plan: NormalizedCarePlan


# =============================================================================
# Scheduler output
# =============================================================================


@dataclass
class ScheduledTask:
    """A task with a concrete due date, not yet bound to a user or listing."""

    title: str
    description: str
    due_date: datetime

    def to_row(
        self,
        user_id: str,
        listing_id: str,
        source_event_id: str | None = None,
    ) -> dict[str, Any]:
        """Build a care_task insert row."""
        return {
            "user_id": user_id,
            "listing_id": listing_id,
            "title": self.title,
            "task_description": self.description,
            "due_date": self.due_date.isoformat(),
            "completed": False,
            "is_optional": False,
            "source_event_id": source_event_id,
        }


# =============================================================================
# Coordinator report
# =============================================================================


class LineItemStatus(str, Enum):
    """Outcome of care generation for one purchased line item."""

    CREATED = "created"
    SKIPPED = "skipped"
    DUPLICATE = "duplicate"
    FAILED = "failed"


class TaskSource(str, Enum):
    """Where a line item's tasks came from."""

    SCHEDULED = "scheduled"
    FALLBACK = "fallback"


@dataclass
class LineItemResult:
    """Care generation outcome for one line item."""

    listing_id: str | None
    status: LineItemStatus
    task_count: int = 0
    tip_count: int = 0
    source: TaskSource | None = None
    error: str | None = None


@dataclass
class CareGenerationReport:
    """Per-event summary of care generation."""

    event_id: str | None
    results: list[LineItemResult] = field(default_factory=list)

    @property
    def created_count(self) -> int:
        return sum(1 for r in self.results if r.status == LineItemStatus.CREATED)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if r.status == LineItemStatus.FAILED)
