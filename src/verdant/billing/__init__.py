"""Payment webhook intake."""

from .gateway import StripeGateway
from .models import PurchaseEvent, PurchasedLineItem, SubscriptionChange, SubscriptionChangeType
from .subscriptions import classify_subscription
from .webhook import WebhookProcessor

__all__ = [
    "PurchaseEvent",
    "PurchasedLineItem",
    "StripeGateway",
    "SubscriptionChange",
    "SubscriptionChangeType",
    "WebhookProcessor",
    "classify_subscription",
]
