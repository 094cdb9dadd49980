"""Stripe webhook endpoint."""

import logging
from datetime import UTC, datetime

import stripe
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from verdant.billing.gateway import StripeGateway
from verdant.billing.webhook import WebhookProcessor
from verdant.config import settings
from verdant.db.adapter import DatabaseAdapter
from verdant.db.client import get_service_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def get_stripe_gateway() -> StripeGateway:
    return StripeGateway(
        api_key=settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret,
        line_items_limit=settings.line_items_limit,
    )


def get_webhook_db() -> DatabaseAdapter:
    """Service-role client; webhook calls carry no user session."""
    return get_service_client()


def get_webhook_processor(
    db: DatabaseAdapter = Depends(get_webhook_db),
    gateway: StripeGateway = Depends(get_stripe_gateway),
) -> WebhookProcessor:
    return WebhookProcessor(
        db,
        gateway,
        initial_offset_days=settings.care_initial_offset_days,
        default_frequency_days=settings.care_default_frequency_days,
    )


@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(None),
    processor: WebhookProcessor = Depends(get_webhook_processor),
) -> dict:
    """
    Receive a Stripe event.

    Returns 400 when the payload or signature is invalid. Once verified,
    the event is acknowledged even if care generation fails for some
    line items; only errors reaching Stripe itself yield a 500.
    """
    payload = await request.body()
    if not stripe_signature:
        raise HTTPException(status_code=400, detail="Missing Stripe-Signature header")

    try:
        event = processor.gateway.construct_event(payload, stripe_signature)
    except ValueError:
        logger.warning("Stripe webhook invalid payload")
        raise HTTPException(status_code=400, detail="Invalid payload")
    except stripe.SignatureVerificationError:
        logger.warning("Stripe webhook invalid signature")
        raise HTTPException(status_code=400, detail="Invalid signature")

    try:
        await run_in_threadpool(processor.handle_event, event, datetime.now(UTC))
    except Exception as e:
        logger.exception(f"Error processing Stripe event {event.get('id')}")
        raise HTTPException(status_code=500, detail=str(e))

    return {"received": True}
