import asyncio

import httpx
from loguru import logger
from postgrest.exceptions import APIError
from supabase import create_client, Client
from app.config import get_settings
from app.errors import DatabaseError

_client: Client | None = None


def get_supabase() -> Client:
    """Get or create a Supabase client using the service role key (backend only).

    Routes receive it through ``Depends(get_supabase)``; services take the
    client as an argument and never import it themselves.
    """
    global _client
    if _client is None:
        settings = get_settings()
        _client = create_client(settings.supabase_url, settings.supabase_service_key)
    return _client


async def run_query(query, action: str = "query"):
    """Execute a postgrest request builder off the event loop with a timeout.

    Raises DatabaseError on API errors, transport errors and timeouts.
    """
    settings = get_settings()
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(query.execute),
            timeout=settings.db_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.error(
            f"Database {action} timed out after {settings.db_timeout_seconds}s"
        )
        raise DatabaseError(f"Database {action} timed out")
    except APIError as e:
        logger.error(f"Database {action} failed: {e.message} (code={e.code})")
        raise DatabaseError(f"Database {action} failed", details=[str(e.message)])
    except httpx.HTTPError as e:
        logger.error(f"Database {action} transport error: {e}")
        raise DatabaseError(f"Database {action} failed")
