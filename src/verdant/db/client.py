"""
Verdant - Supabase Client.

Low-level database access. All table queries go through here.

Functions below take the client (any DatabaseAdapter) as their first
argument; they do not swallow errors. Callers decide what a failure means.
"""

from typing import Any

from supabase import Client, create_client

from verdant.config import settings
from verdant.db.adapter import DatabaseAdapter

# Singleton service-role client
_service_client: Client | None = None


def get_service_client() -> Client:
    """
    Get the service-role Supabase client.

    Bypasses RLS. Used by the webhook pipeline and for token validation.
    """
    global _service_client

    if _service_client is None:
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _service_client


def get_authenticated_client(access_token: str) -> Client:
    """
    Get a Supabase client scoped to the user's JWT.

    RLS policies apply to every query made through it.
    """
    client = create_client(settings.supabase_url, settings.supabase_anon_key)
    client.postgrest.auth(access_token)
    return client


# =============================================================================
# Listing Operations
# =============================================================================


def get_listing_care(db: DatabaseAdapter, listing_id: str) -> dict | None:
    """Get a listing's stored care payload (care_details, care_tips)."""
    response = (
        db.table("listing")
        .select("care_details, care_tips")
        .eq("id", listing_id)
        .maybe_single()
        .execute()
    )
    if response is None:
        return None
    return response.data


def update_listing_tips(db: DatabaseAdapter, listing_id: str, care_tips: list[str]) -> None:
    """Replace a listing's care tips."""
    db.table("listing").update({"care_tips": care_tips}).eq("id", listing_id).execute()


def get_listing_detail(db: DatabaseAdapter, listing_id: str) -> dict | None:
    """Get the listing fields shown on the plant care page."""
    response = (
        db.table("listing")
        .select("id, species, images, care_tips")
        .eq("id", listing_id)
        .maybe_single()
        .execute()
    )
    if response is None:
        return None
    return response.data


# =============================================================================
# Care Task Operations
# =============================================================================


def insert_care_tasks(db: DatabaseAdapter, rows: list[dict[str, Any]]) -> list[dict]:
    """Insert care task rows in one batch."""
    response = db.table("care_task").insert(rows).execute()
    return response.data or []


def has_care_tasks_for_event(db: DatabaseAdapter, event_id: str, listing_id: str) -> bool:
    """Check whether a payment event already produced tasks for this listing."""
    response = (
        db.table("care_task")
        .select("id")
        .eq("source_event_id", event_id)
        .eq("listing_id", listing_id)
        .limit(1)
        .execute()
    )
    return bool(response.data)


def get_care_tasks_for_user(db: DatabaseAdapter, user_id: str) -> list[dict]:
    """Get all of a user's care tasks with listing species and images, oldest due first."""
    response = (
        db.table("care_task")
        .select("*, listing:listing_id (species, images)")
        .eq("user_id", user_id)
        .order("due_date")
        .execute()
    )
    return response.data or []


def get_care_tasks_for_listing(db: DatabaseAdapter, user_id: str, listing_id: str) -> list[dict]:
    """Get a user's care tasks for one listing, oldest due first."""
    response = (
        db.table("care_task")
        .select("*")
        .eq("user_id", user_id)
        .eq("listing_id", listing_id)
        .order("due_date")
        .execute()
    )
    return response.data or []


def update_care_task(
    db: DatabaseAdapter,
    task_id: str,
    updates: dict[str, Any],
    user_id: str | None = None,
) -> dict | None:
    """Update a care task. Returns the updated row, or None if nothing matched."""
    query = db.table("care_task").update(updates).eq("id", task_id)
    if user_id:
        query = query.eq("user_id", user_id)  # Security: ensure user owns task
    response = query.execute()
    if not response.data:
        return None
    return response.data[0]


# =============================================================================
# Stripe Customer Operations
# =============================================================================


def upsert_stripe_customer(db: DatabaseAdapter, customer: dict[str, Any]) -> None:
    """Create or update a user's Stripe customer record."""
    db.table("stripe_customers").upsert([customer]).execute()


def deactivate_subscription(db: DatabaseAdapter, subscription_id: str) -> None:
    """Mark the plan behind a subscription as inactive."""
    (
        db.table("stripe_customers")
        .update({"plan_active": False, "subscription_id": None})
        .eq("subscription_id", subscription_id)
        .execute()
    )
