"""
Care-content parsing.

A listing's care_details column holds one of three generations of data:

    structured  JSON object with actionable_tasks and care_tips
    legacy      newline-delimited free text, one instruction per line
    empty       null, "" or whitespace

parse_care_details() detects the shape and normalizes it into a
NormalizedCarePlan. It never raises: anything that is not a valid
structured payload is read as legacy text.
"""

import json
import logging

from pydantic import ValidationError

from .models import (
    CareContentShape,
    EssentialTask,
    ListingCareSpec,
    NormalizedCarePlan,
    ParseOutcome,
)

logger = logging.getLogger(__name__)

LEGACY_FREQUENCY_DAYS = 7
LEGACY_TITLE_LENGTH = 40
LEGACY_TITLE_SUFFIX = "..."


def parse_care_details(raw: str | None) -> ParseOutcome:
    """
    Parse a stored care payload into a tagged ParseOutcome.

    Pipeline:
    1. Empty/None -> empty plan
    2. Structured JSON -> partition essential vs optional tasks
    3. Anything else -> legacy line-per-task text
    """
    if raw is None or not str(raw).strip():
        return ParseOutcome(shape=CareContentShape.EMPTY, plan=NormalizedCarePlan())

    raw = str(raw)

    spec = _load_structured(raw)
    if spec is not None:
        try:
            return ParseOutcome(shape=CareContentShape.STRUCTURED, plan=normalize_structured(spec))
        except Exception as e:
            logger.warning(f"Structured care payload could not be normalized, reading as text: {e}")

    return ParseOutcome(shape=CareContentShape.LEGACY, plan=parse_legacy_text(raw))


def parse_care_plan(raw: str | None) -> NormalizedCarePlan:
    """Parse a stored care payload, discarding the detected shape."""
    return parse_care_details(raw).plan


def _load_structured(raw: str) -> ListingCareSpec | None:
    """Decode and validate a structured payload. Returns None on any mismatch."""
    try:
        data = json.loads(raw)
    except (ValueError, TypeError, RecursionError):
        return None

    try:
        return ListingCareSpec.model_validate(data)
    except ValidationError:
        return None
    except Exception as e:
        logger.warning(f"Unexpected error validating care payload, reading as text: {e}")
        return None


def normalize_structured(spec: ListingCareSpec) -> NormalizedCarePlan:
    """
    Split a structured payload into essential tasks and tips.

    Optional tasks are folded into the tips as "<title>: <description>",
    after the original tips, keeping their relative order.
    """
    essential_tasks: list[EssentialTask] = []
    all_tips = list(spec.care_tips)

    for task in spec.actionable_tasks:
        if task.is_optional:
            all_tips.append(f"{task.title}: {task.description}")
        else:
            essential_tasks.append(
                EssentialTask(
                    title=task.title,
                    description=task.description,
                    frequency_days=task.frequency_days,
                )
            )

    return NormalizedCarePlan(essential_tasks=essential_tasks, all_tips=all_tips)


def parse_legacy_text(raw: str) -> NormalizedCarePlan:
    """
    Read free text as one weekly task per non-blank line.

    Title is the line's first 40 characters plus an ellipsis; the full
    line becomes the description.
    """
    essential_tasks = [
        EssentialTask(
            title=line[:LEGACY_TITLE_LENGTH] + LEGACY_TITLE_SUFFIX,
            description=line,
            frequency_days=LEGACY_FREQUENCY_DAYS,
        )
        for line in raw.split("\n")
        if line.strip()
    ]
    return NormalizedCarePlan(essential_tasks=essential_tasks, all_tips=[])
