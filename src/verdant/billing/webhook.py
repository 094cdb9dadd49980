"""
Stripe webhook event handling.

Verified events are dispatched by type. checkout.session.completed is the
one that matters: it records subscription customers and then generates a
care calendar for every purchased plant.

Care generation failures never escape handle_event(). Errors talking to
Stripe itself do, so the route can answer 500 and let Stripe redeliver;
care tasks are keyed on the event id, so redelivery does not duplicate
them.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from verdant.care.coordinator import generate_care_for_purchase
from verdant.care.models import CareGenerationReport
from verdant.care.scheduler import DEFAULT_FREQUENCY_DAYS, INITIAL_OFFSET_DAYS
from verdant.db.adapter import DatabaseAdapter
from verdant.db.client import deactivate_subscription, upsert_stripe_customer

from .gateway import StripeGateway
from .models import CheckoutMode, PurchaseEvent
from .subscriptions import classify_subscription

logger = logging.getLogger(__name__)


class WebhookProcessor:
    """Dispatches verified Stripe events to their handlers."""

    def __init__(
        self,
        db: DatabaseAdapter,
        gateway: StripeGateway,
        initial_offset_days: int = INITIAL_OFFSET_DAYS,
        default_frequency_days: int = DEFAULT_FREQUENCY_DAYS,
    ):
        self.db = db
        self.gateway = gateway
        self.initial_offset_days = initial_offset_days
        self.default_frequency_days = default_frequency_days
        self._handlers: dict[str, Callable[[dict[str, Any], str, datetime], Any]] = {
            "checkout.session.completed": self.handle_checkout_completed,
            "customer.subscription.updated": self.handle_subscription_updated,
            "customer.subscription.deleted": self.handle_subscription_deleted,
        }

    def handle_event(self, event: dict[str, Any], now: datetime) -> Any:
        """Run the handler for an event's type. Unknown types are acknowledged and ignored."""
        event_type = event.get("type")
        event_id = event.get("id")
        handler = self._handlers.get(event_type)
        if handler is None:
            logger.info(f"Received unhandled Stripe event type: {event_type}")
            return None

        logger.info(f"Handling Stripe event {event_id} ({event_type})")
        return handler(event["data"]["object"], event_id, now)

    # =========================================================================
    # checkout.session.completed
    # =========================================================================

    def resolve_purchase(self, session: dict[str, Any], event_id: str) -> PurchaseEvent:
        """Fetch a session's line items and resolve each to a listing id."""
        metadata = session.get("metadata") or {}
        line_items = [
            self.gateway.resolve_line_item(item)
            for item in self.gateway.list_line_items(session["id"])
        ]
        return PurchaseEvent(
            event_id=event_id,
            session_id=session["id"],
            user_id=metadata.get("user_id"),
            mode=session.get("mode"),
            line_items=line_items,
        )

    def handle_checkout_completed(
        self,
        session: dict[str, Any],
        event_id: str,
        now: datetime,
    ) -> CareGenerationReport | None:
        """Record subscription customers, then generate care tasks for the purchase."""
        user_id = (session.get("metadata") or {}).get("user_id")
        if not user_id:
            logger.error(f"User ID not found in metadata of checkout session {session.get('id')}")
            return None

        if session.get("mode") == CheckoutMode.SUBSCRIPTION and session.get("subscription"):
            self._record_subscription_customer(session, user_id)

        purchase = self.resolve_purchase(session, event_id)
        if not purchase.line_items:
            logger.error(f"No line items found for checkout session {purchase.session_id}")
            return CareGenerationReport(event_id=event_id)

        logger.info(f"Generating care tasks for user {user_id} ({len(purchase.line_items)} line items)")
        return generate_care_for_purchase(
            self.db,
            user_id,
            purchase.listing_ids,
            now,
            event_id=event_id,
            initial_offset_days=self.initial_offset_days,
            default_frequency_days=self.default_frequency_days,
        )

    def _record_subscription_customer(self, session: dict[str, Any], user_id: str) -> None:
        subscription = self.gateway.retrieve_subscription(session["subscription"])
        period_end = subscription.get("current_period_end")
        try:
            upsert_stripe_customer(
                self.db,
                {
                    "user_id": user_id,
                    "stripe_customer_id": session.get("customer"),
                    "subscription_id": subscription["id"],
                    "plan_active": True,
                    "plan_expires": period_end * 1000 if period_end else None,
                },
            )
        except Exception as e:
            logger.error(f"Failed to upsert Stripe customer for user {user_id}: {e}")

    # =========================================================================
    # customer.subscription.*
    # =========================================================================

    def handle_subscription_updated(self, subscription: dict[str, Any], event_id: str, now: datetime):
        change = classify_subscription(subscription)
        logger.info(f"Subscription {change.subscription_id} updated: {change.type.value}")
        return change

    def handle_subscription_deleted(self, subscription: dict[str, Any], event_id: str, now: datetime) -> None:
        """Revoke the plan behind a cancelled subscription."""
        try:
            deactivate_subscription(self.db, subscription["id"])
            logger.info(f"Deactivated plan for subscription {subscription['id']}")
        except Exception as e:
            logger.error(f"Failed to deactivate subscription {subscription.get('id')}: {e}")
