"""
Verdant - Database access.

Supabase clients plus the table operations used by the care pipeline.
"""

from verdant.db.adapter import DatabaseAdapter
from verdant.db.client import get_authenticated_client, get_service_client

__all__ = [
    "DatabaseAdapter",
    "get_authenticated_client",
    "get_service_client",
]
