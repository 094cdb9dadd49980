"""
Post-purchase care generation.

For every purchased listing: parse its care payload, write the merged
tips back to the listing, and insert a dated care schedule for the buyer.

Each line item is its own unit of work. A failure is logged and recorded
in the report; it never stops the remaining items and never propagates
to the payment webhook.
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from verdant.db.adapter import DatabaseAdapter
from verdant.db.client import (
    get_listing_care,
    has_care_tasks_for_event,
    insert_care_tasks,
    update_listing_tips,
)

from .fallback import generate_fallback_tasks
from .models import (
    CareGenerationReport,
    LineItemResult,
    LineItemStatus,
    NormalizedCarePlan,
    ScheduledTask,
    TaskSource,
)
from .parser import parse_care_plan
from .scheduler import DEFAULT_FREQUENCY_DAYS, INITIAL_OFFSET_DAYS, schedule_tasks

logger = logging.getLogger(__name__)


class CareGenerationError(Exception):
    """Care generation for a single line item could not complete."""


def build_care_schedule(
    plan: NormalizedCarePlan,
    now: datetime,
    initial_offset_days: int = INITIAL_OFFSET_DAYS,
    default_frequency_days: int = DEFAULT_FREQUENCY_DAYS,
) -> tuple[list[ScheduledTask], TaskSource]:
    """Schedule the plan's essential tasks, or the fallback set when there are none."""
    if plan.essential_tasks:
        tasks = schedule_tasks(
            plan.essential_tasks,
            now,
            initial_offset_days=initial_offset_days,
            default_frequency_days=default_frequency_days,
        )
        return tasks, TaskSource.SCHEDULED

    return generate_fallback_tasks(now), TaskSource.FALLBACK


def generate_care_for_line_item(
    db: DatabaseAdapter,
    user_id: str,
    listing_id: str | None,
    now: datetime,
    event_id: str | None = None,
    initial_offset_days: int = INITIAL_OFFSET_DAYS,
    default_frequency_days: int = DEFAULT_FREQUENCY_DAYS,
) -> LineItemResult:
    """
    Generate and persist the care schedule for one purchased listing.

    Steps:
    1. Skip when the line item has no listing reference
    2. Skip when this event already produced tasks for the listing
    3. Fetch the listing and parse its care payload
    4. Replace the listing's tips when the plan has any
    5. Schedule (or fall back) and insert all rows in one batch

    Never raises; the outcome is reported in the returned LineItemResult.
    """
    if not listing_id:
        logger.warning(f"No listing reference for purchased line item (user {user_id}); skipping")
        return LineItemResult(listing_id=None, status=LineItemStatus.SKIPPED)

    try:
        if event_id and has_care_tasks_for_event(db, event_id, listing_id):
            logger.info(f"Care tasks for listing {listing_id} already created by event {event_id}; skipping")
            return LineItemResult(listing_id=listing_id, status=LineItemStatus.DUPLICATE)

        listing = get_listing_care(db, listing_id)
        if listing is None:
            raise CareGenerationError(f"Listing {listing_id} not found")

        plan = parse_care_plan(listing.get("care_details"))

        if plan.all_tips:
            # A failed tips write still lets the tasks through
            try:
                update_listing_tips(db, listing_id, plan.all_tips)
                logger.info(f"Stored {len(plan.all_tips)} care tips for listing {listing_id}")
            except Exception as e:
                logger.error(f"Failed to update care tips for listing {listing_id}: {e}")

        tasks, source = build_care_schedule(
            plan,
            now,
            initial_offset_days=initial_offset_days,
            default_frequency_days=default_frequency_days,
        )
        if source == TaskSource.FALLBACK:
            logger.warning(f"No actionable tasks found for listing {listing_id}; using generic tasks")

        rows = [task.to_row(user_id, listing_id, source_event_id=event_id) for task in tasks]
        insert_care_tasks(db, rows)
        logger.info(f"Inserted {len(rows)} care tasks for listing {listing_id}")

        return LineItemResult(
            listing_id=listing_id,
            status=LineItemStatus.CREATED,
            task_count=len(rows),
            tip_count=len(plan.all_tips),
            source=source,
        )

    except Exception as e:
        logger.error(f"Care generation failed for listing {listing_id}: {e}")
        return LineItemResult(listing_id=listing_id, status=LineItemStatus.FAILED, error=str(e))


def generate_care_for_purchase(
    db: DatabaseAdapter,
    user_id: str,
    listing_ids: Iterable[str | None],
    now: datetime,
    event_id: str | None = None,
    initial_offset_days: int = INITIAL_OFFSET_DAYS,
    default_frequency_days: int = DEFAULT_FREQUENCY_DAYS,
) -> CareGenerationReport:
    """Run care generation for every line item of a purchase, sequentially."""
    report = CareGenerationReport(event_id=event_id)

    for listing_id in listing_ids:
        result = generate_care_for_line_item(
            db,
            user_id,
            listing_id,
            now,
            event_id=event_id,
            initial_offset_days=initial_offset_days,
            default_frequency_days=default_frequency_days,
        )
        report.results.append(result)

    logger.info(
        f"Care generation for event {event_id}: {report.created_count} created, "
        f"{report.failed_count} failed, {len(report.results)} line items"
    )
    return report
