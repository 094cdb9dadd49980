"""Classification of customer.subscription.updated events."""

from typing import Any

from .models import SubscriptionChange, SubscriptionChangeType


def _first_item_price(subscription: dict[str, Any]) -> dict[str, Any]:
    items = (subscription.get("items") or {}).get("data") or []
    if not items:
        return {}
    return items[0].get("price") or {}


def _invoice_id(invoice: Any) -> str:
    if isinstance(invoice, str):
        return invoice
    if invoice:
        return invoice.get("id") or ""
    return ""


def classify_subscription(subscription: dict[str, Any]) -> SubscriptionChange:
    """
    Decide whether an updated subscription is new, renewed or cancelled.

    - cancel_at_period_end with canceled_at set -> cancellation
    - created equal to current_period_start -> new subscription
    - otherwise -> renewal
    """
    base = {
        "subscription_id": subscription.get("id"),
        "customer_id": subscription.get("customer"),
        "status": subscription.get("status"),
        "current_period_end": subscription.get("current_period_end"),
    }

    if subscription.get("cancel_at_period_end") and subscription.get("canceled_at"):
        details = subscription.get("cancellation_details") or {}
        return SubscriptionChange(
            type=SubscriptionChangeType.CANCELLATION,
            cancel_at=subscription.get("cancel_at"),
            canceled_at=subscription.get("canceled_at"),
            reason=details.get("reason") or "unknown",
            **base,
        )

    price = _first_item_price(subscription)
    change_type = (
        SubscriptionChangeType.NEW_SUBSCRIPTION
        if subscription.get("created") == subscription.get("current_period_start")
        else SubscriptionChangeType.RENEWAL
    )
    return SubscriptionChange(
        type=change_type,
        current_period_start=subscription.get("current_period_start"),
        plan_amount=price.get("unit_amount") or 0,
        currency=subscription.get("currency"),
        latest_invoice=_invoice_id(subscription.get("latest_invoice")),
        **base,
    )
