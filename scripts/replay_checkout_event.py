#!/usr/bin/env python3
"""
Re-run care generation for a Stripe checkout event.

Line items that failed during the original webhook are not retried
automatically. Replaying the event fills them in; items that already
have tasks for this event id are reported as duplicates and left alone.

Usage:
    python scripts/replay_checkout_event.py evt_1Pxyz...
    python scripts/replay_checkout_event.py evt_1Pxyz... --dry-run
"""

import argparse
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import stripe  # noqa: E402

from verdant.billing.gateway import StripeGateway  # noqa: E402
from verdant.billing.webhook import WebhookProcessor  # noqa: E402
from verdant.config import get_settings  # noqa: E402
from verdant.db.client import get_service_client  # noqa: E402


def main() -> int:
    parser = argparse.ArgumentParser(description="Replay care generation for a Stripe checkout event")
    parser.add_argument("event_id", help="Stripe event id (evt_...)")
    parser.add_argument("--dry-run", action="store_true", help="Resolve line items only; write nothing")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = get_settings()

    gateway = StripeGateway(
        api_key=settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret,
        line_items_limit=settings.line_items_limit,
    )
    processor = WebhookProcessor(
        get_service_client(),
        gateway,
        initial_offset_days=settings.care_initial_offset_days,
        default_frequency_days=settings.care_default_frequency_days,
    )

    event = stripe.Event.retrieve(args.event_id, api_key=settings.stripe_secret_key).to_dict()
    if event["type"] != "checkout.session.completed":
        print(f"[ERROR] {args.event_id} is a {event['type']} event, not checkout.session.completed")
        return 1

    session = event["data"]["object"]

    if args.dry_run:
        purchase = processor.resolve_purchase(session, event["id"])
        print(f"User: {purchase.user_id}  Session: {purchase.session_id}")
        for item in purchase.line_items:
            print(f"  {item.line_item_id}: product={item.product_id} listing={item.listing_id}")
        return 0

    report = processor.handle_checkout_completed(session, event["id"], datetime.now(UTC))
    if report is None:
        print("[ERROR] Checkout session has no user_id in its metadata")
        return 1

    for result in report.results:
        line = f"  {result.listing_id}: {result.status.value}"
        if result.task_count:
            line += f" ({result.task_count} tasks, {result.source.value})"
        if result.error:
            line += f" - {result.error}"
        print(line)

    print(f"\nDone: {report.created_count} created, {report.failed_count} failed")
    return 0 if report.failed_count == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
