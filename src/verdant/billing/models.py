"""Data models for payment events."""

from dataclasses import dataclass
from enum import Enum


class CheckoutMode(str, Enum):
    """Stripe Checkout session mode."""

    PAYMENT = "payment"
    SUBSCRIPTION = "subscription"
    SETUP = "setup"


class SubscriptionChangeType(str, Enum):
    """What a customer.subscription.updated event means for the plan."""

    NEW_SUBSCRIPTION = "new_subscription"
    RENEWAL = "renewal"
    CANCELLATION = "cancellation"


@dataclass
class SubscriptionChange:
    """Summary of a subscription update, as logged by the webhook."""

    type: SubscriptionChangeType
    subscription_id: str
    customer_id: str | None
    status: str | None
    current_period_end: int | None = None
    current_period_start: int | None = None
    plan_amount: int = 0
    currency: str | None = None
    latest_invoice: str | None = None
    cancel_at: int | None = None
    canceled_at: int | None = None
    reason: str | None = None


@dataclass
class PurchasedLineItem:
    """One purchased line item, resolved to our listing (when possible)."""

    line_item_id: str | None
    product_id: str | None
    listing_id: str | None = None


@dataclass
class PurchaseEvent:
    """A completed checkout, decoded from the payment processor's event."""

    event_id: str
    session_id: str
    user_id: str | None
    mode: str | None
    line_items: list[PurchasedLineItem]

    @property
    def listing_ids(self) -> list[str | None]:
        return [item.listing_id for item in self.line_items]
