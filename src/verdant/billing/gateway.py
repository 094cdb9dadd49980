"""
Stripe access for the webhook.

Thin wrapper so the webhook handlers depend on four calls rather than
the whole stripe module; tests substitute a fake.

Everything returned from here is a plain dict. StripeObject is not a
dict subclass in current stripe releases, so callers never see one.
"""

import logging
from typing import Any

import stripe

from .models import PurchasedLineItem

logger = logging.getLogger(__name__)

STRIPE_TIMEOUT = 45  # Seconds


class StripeGateway:
    """Stripe API calls used while processing webhook events."""

    def __init__(self, api_key: str, webhook_secret: str, line_items_limit: int = 100):
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.line_items_limit = line_items_limit

    def construct_event(self, payload: bytes, sig_header: str) -> dict[str, Any]:
        """
        Verify the signature and decode the event.

        Raises ValueError for an unparseable payload and
        stripe.SignatureVerificationError for a bad signature.
        """
        event = stripe.Webhook.construct_event(payload, sig_header, self.webhook_secret)
        return event.to_dict()

    def list_line_items(self, session_id: str) -> list[dict[str, Any]]:
        """List a Checkout session's line items."""
        line_items = stripe.checkout.Session.list_line_items(
            session_id,
            limit=self.line_items_limit,
            api_key=self.api_key,
        )
        return [item.to_dict() for item in line_items.data]

    def get_listing_id(self, product_id: str) -> str | None:
        """Read our listing id from a Stripe product's metadata."""
        product = stripe.Product.retrieve(product_id, api_key=self.api_key).to_dict()
        metadata = product.get("metadata") or {}
        return metadata.get("listing_id")

    def retrieve_subscription(self, subscription_id: str) -> dict[str, Any]:
        return stripe.Subscription.retrieve(subscription_id, api_key=self.api_key).to_dict()

    def resolve_line_item(self, item: dict[str, Any]) -> PurchasedLineItem:
        """
        Map a Stripe line item to a PurchasedLineItem.

        A missing product or listing_id leaves listing_id as None; Stripe
        errors while fetching the product are logged and do the same.
        """
        line_item_id = item.get("id")
        price = item.get("price") or {}
        product = price.get("product")
        # product is an id unless the line item was fetched with expand
        product_id = product if isinstance(product, str) else (product or {}).get("id")

        if not product_id:
            logger.warning(f"Stripe product id not found for line item {line_item_id}")
            return PurchasedLineItem(line_item_id=line_item_id, product_id=None)

        try:
            listing_id = self.get_listing_id(product_id)
        except stripe.StripeError as e:
            logger.error(f"Failed to retrieve Stripe product {product_id}: {e}")
            listing_id = None

        if not listing_id:
            logger.warning(f"listing_id not found in metadata of Stripe product {product_id}")

        return PurchasedLineItem(line_item_id=line_item_id, product_id=product_id, listing_id=listing_id)
