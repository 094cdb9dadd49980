"""
Pytest configuration and fixtures for Verdant tests.
"""

import os
from datetime import datetime
from types import SimpleNamespace
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest

# Set test environment before importing verdant modules
os.environ["VERDANT_ENV"] = "development"
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_not_real")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")


# ---------------------------------------------------------------------------
# In-memory Supabase stand-in
# ---------------------------------------------------------------------------


class FakeQuery:
    """Supports the subset of the PostgREST builder the care pipeline uses."""

    def __init__(self, db: "FakeDatabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload: Any = None
        self.filters: list[tuple[str, Any]] = []
        self._single = False
        self._limit: int | None = None
        self._order: tuple[str, bool] | None = None

    def select(self, *args, **kwargs):
        self.op = "select"
        return self

    def insert(self, rows):
        self.op = "insert"
        self.payload = rows if isinstance(rows, list) else [rows]
        return self

    def upsert(self, rows):
        self.op = "upsert"
        self.payload = rows if isinstance(rows, list) else [rows]
        return self

    def update(self, values):
        self.op = "update"
        self.payload = values
        return self

    def eq(self, field, value):
        self.filters.append((field, value))
        return self

    def order(self, field, desc=False):
        self._order = (field, desc)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def maybe_single(self):
        self._single = True
        return self

    def _matches(self, row: dict) -> bool:
        return all(row.get(field) == value for field, value in self.filters)

    def execute(self):
        self.db.calls.append((self.table, self.op, self.payload, list(self.filters)))
        for (table, op), should_fail in self.db.failures.items():
            if table == self.table and op == self.op and should_fail(self.payload, self.filters):
                raise RuntimeError(f"simulated {op} failure on {table}")

        rows = self.db.tables.setdefault(self.table, [])

        if self.op in ("insert", "upsert"):
            inserted = []
            for row in self.payload:
                stored = {"id": f"{self.table}-{len(rows) + 1}", **row}
                rows.append(stored)
                inserted.append(dict(stored))
            return SimpleNamespace(data=inserted)

        if self.op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    updated.append(dict(row))
            return SimpleNamespace(data=updated)

        found = [dict(row) for row in rows if self._matches(row)]
        if self._order:
            field, desc = self._order
            found.sort(key=lambda r: r.get(field) or "", reverse=desc)
        if self._limit is not None:
            found = found[: self._limit]
        if self._single:
            return SimpleNamespace(data=found[0] if found else None)
        return SimpleNamespace(data=found)


class FakeDatabase:
    """Dict-of-lists table store with failure injection."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.calls: list[tuple] = []
        self.failures: dict[tuple[str, str], Callable[[Any, list], bool]] = {}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def add_listing(self, listing_id: str, care_details: str | None = None, **fields) -> dict:
        row = {"id": listing_id, "care_details": care_details, "care_tips": None, **fields}
        self.tables.setdefault("listing", []).append(row)
        return row

    def fail(self, table: str, op: str, when: Callable[[Any, list], bool] = lambda payload, filters: True):
        self.failures[(table, op)] = when

    def rows(self, table: str, **match) -> list[dict]:
        return [
            row for row in self.tables.get(table, [])
            if all(row.get(k) == v for k, v in match.items())
        ]


@pytest.fixture
def fake_db():
    """Fresh in-memory store for each test."""
    return FakeDatabase()


@pytest.fixture
def mock_supabase():
    """Mock Supabase client for unit tests."""
    mock_client = MagicMock()

    # Mock table operations
    mock_table = MagicMock()
    mock_table.select.return_value = mock_table
    mock_table.insert.return_value = mock_table
    mock_table.upsert.return_value = mock_table
    mock_table.update.return_value = mock_table
    mock_table.eq.return_value = mock_table
    mock_table.order.return_value = mock_table
    mock_table.limit.return_value = mock_table
    mock_table.maybe_single.return_value = mock_table
    mock_table.execute.return_value = MagicMock(data=[])

    mock_client.table.return_value = mock_table

    return mock_client


# ---------------------------------------------------------------------------
# Stripe stand-in
# ---------------------------------------------------------------------------


class FakeStripeGateway:
    """StripeGateway replacement that serves canned line items and products."""

    def __init__(self, webhook_secret: str = "whsec_test_secret"):
        from verdant.billing.gateway import StripeGateway

        self._real = StripeGateway(api_key="sk_test_not_real", webhook_secret=webhook_secret)
        self.webhook_secret = webhook_secret
        self.line_items: dict[str, list[dict]] = {}
        self.products: dict[str, dict] = {}
        self.subscriptions: dict[str, dict] = {}
        self.list_error: Exception | None = None

    def add_purchase(self, session_id: str, listing_ids: list[str | None]) -> None:
        items = []
        for n, listing_id in enumerate(listing_ids, start=1):
            product_id = f"prod_{session_id}_{n}"
            metadata = {"listing_id": listing_id} if listing_id else {}
            self.products[product_id] = {"id": product_id, "metadata": metadata}
            items.append({"id": f"li_{session_id}_{n}", "price": {"product": product_id}})
        self.line_items[session_id] = items

    def construct_event(self, payload: bytes, sig_header: str):
        return self._real.construct_event(payload, sig_header)

    def list_line_items(self, session_id: str) -> list[dict]:
        if self.list_error:
            raise self.list_error
        return self.line_items.get(session_id, [])

    def get_listing_id(self, product_id: str) -> str | None:
        return (self.products.get(product_id, {}).get("metadata") or {}).get("listing_id")

    def retrieve_subscription(self, subscription_id: str) -> dict:
        return self.subscriptions[subscription_id]

    def resolve_line_item(self, item):
        from verdant.billing.gateway import StripeGateway

        # Reuse the real mapping logic against this fake's product lookup
        return StripeGateway.resolve_line_item(self, item)


@pytest.fixture
def fake_gateway():
    return FakeStripeGateway()


def checkout_event(
    session_id: str = "cs_test_1",
    user_id: str | None = "user-1",
    event_id: str = "evt_test_1",
    mode: str = "payment",
    **session_fields,
) -> dict:
    """Build a checkout.session.completed event payload."""
    metadata = {"user_id": user_id} if user_id else {}
    return {
        "id": event_id,
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "mode": mode,
                "metadata": metadata,
                **session_fields,
            }
        },
    }


@pytest.fixture
def make_checkout_event():
    return checkout_event


@pytest.fixture
def now():
    """Fixed reference time for schedule assertions."""
    return datetime(2024, 1, 15, 9, 0)


@pytest.fixture
def structured_care_details():
    """A typical AI-authored care payload."""
    return (
        '{"actionable_tasks": ['
        '{"title": "Water", "description": "Water until it drains", "frequency_days": 10, "is_optional": false},'
        '{"title": "Mist", "description": "Mist the leaves", "frequency_days": 3, "is_optional": true},'
        '{"title": "Fertilize", "description": "Half-strength feed", "frequency_days": 14, "is_optional": false}'
        '], "care_tips": ["Bright indirect light", "Keep away from drafts"]}'
    )
