"""Supabase client construction for database operations."""

from functools import lru_cache
from typing import Any

from supabase import Client, create_client

from src.core.config import get_settings


@lru_cache
def get_supabase_client() -> Client:
    """Get the cached Supabase client for database operations.

    Uses the secret key for backend operations, which bypasses RLS at the
    PostgREST level. Services never call this directly; the API layer
    builds the client once and passes it into each service constructor.

    Returns:
        Client: Supabase client instance.
    """
    settings = get_settings()
    return create_client(
        settings.supabase_url,
        settings.supabase_secret_key,
    )


async def check_database_connection(client: Client) -> dict[str, Any]:
    """Check if database connection is healthy.

    Args:
        client: Supabase client to check.

    Returns:
        dict: Connection status with 'healthy' boolean and optional 'error' message.
    """
    try:
        client.table("products").select("id").limit(1).execute()
        return {"healthy": True}
    except Exception as e:
        return {"healthy": False, "error": str(e)}
