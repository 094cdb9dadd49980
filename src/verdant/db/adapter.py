"""
Database Adapter Protocol.

The care pipeline talks to storage through this thin interface rather
than a concrete Supabase client, so tests can hand it a fake.

The adapter mirrors the Supabase/PostgREST query builder: table()
returns a builder supporting .select(), .insert(), .update(), .eq(),
.execute() and friends. A supabase.Client satisfies it as-is.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DatabaseAdapter(Protocol):
    """
    Abstract database access for the care pipeline.

    The table() method returns a query builder. The concrete type depends
    on the backend (e.g., SyncRequestBuilder for Supabase); callers build
    queries fluently on it and finish with .execute(), which yields an
    object carrying .data.
    """

    def table(self, name: str) -> Any:
        """Return a query builder for the given table."""
        ...
