"""Care-plan parsing, scheduling and the post-purchase care calendar."""

from .coordinator import (
    CareGenerationError,
    build_care_schedule,
    generate_care_for_line_item,
    generate_care_for_purchase,
)
from .fallback import generate_fallback_tasks
from .models import (
    CareContentShape,
    CareGenerationReport,
    EssentialTask,
    LineItemResult,
    LineItemStatus,
    NormalizedCarePlan,
    ParseOutcome,
    ScheduledTask,
    TaskSource,
)
from .parser import parse_care_details, parse_care_plan
from .scheduler import schedule_tasks

__all__ = [
    "CareContentShape",
    "CareGenerationError",
    "CareGenerationReport",
    "EssentialTask",
    "LineItemResult",
    "LineItemStatus",
    "NormalizedCarePlan",
    "ParseOutcome",
    "ScheduledTask",
    "TaskSource",
    "build_care_schedule",
    "generate_care_for_line_item",
    "generate_care_for_purchase",
    "generate_fallback_tasks",
    "parse_care_details",
    "parse_care_plan",
    "schedule_tasks",
]
