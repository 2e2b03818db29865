"""
Supabase client initialization and the sync-to-async bridge.

The Python SDK is synchronous: repositories write ``_xxx_sync`` methods
and decorate them with ``run_sync``, which runs them on a bounded thread
pool under the repository's timeout and maps store errors onto the
league error hierarchy.
"""

import asyncio
import concurrent.futures
import logging
from functools import wraps

import httpx
from postgrest.exceptions import APIError
from supabase import create_client, Client
from supabase.lib.client_options import ClientOptions

from core.domain.errors import Conflict, ExternalTimeout, PersistenceFailure

logger = logging.getLogger(__name__)

# PostgreSQL unique_violation
UNIQUE_VIOLATION = "23505"

# Dedicated bounded thread pool for DB operations - prevents exhausting the
# default executor when many Supabase calls run concurrently.
_db_executor = concurrent.futures.ThreadPoolExecutor(
    max_workers=10,
    thread_name_prefix="supabase-db",
)


def create_supabase_client(url: str, key: str, schema: str = "public", persist_session: bool = True) -> Client:
    """
    Build a Supabase client. ``persist_session=False`` gives a throwaway
    client for password sign-in so the shared service client never carries
    a user session.
    """
    if not url or not key:
        raise RuntimeError("Supabase credentials not configured (SUPABASE_URL, SUPABASE_SERVICE_KEY or SUPABASE_KEY)")

    if schema == "public" and persist_session:
        return create_client(url, key)

    return create_client(
        url, key,
        options=ClientOptions(schema=schema, persist_session=persist_session, auto_refresh_token=persist_session),
    )


def run_sync(func):
    """
    Decorator to run a synchronous Supabase method in async context.

    - bounded by ``self.timeout`` -> ExternalTimeout
    - unique violation -> Conflict
    - any other PostgREST / transport error -> PersistenceFailure
    """
    @wraps(func)
    async def wrapper(self, *args, **kwargs):
        operation = f"{type(self).__name__}.{func.__name__.removesuffix('_sync').lstrip('_')}"
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(_db_executor, lambda: func(self, *args, **kwargs)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"[DB] {operation} timed out after {self.timeout}s")
            raise ExternalTimeout(operation)
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.info(f"[DB] {operation} unique violation: {e.message}")
                raise Conflict() from e
            logger.error(f"[DB] {operation} failed: code={e.code} message={e.message} details={e.details}")
            raise PersistenceFailure(f"{e.code}: {e.message}", operation) from e
        except httpx.HTTPError as e:
            logger.error(f"[DB] {operation} transport error: {e}")
            raise PersistenceFailure(str(e), operation) from e
    return wrapper


class SupabaseRepository:
    """Base for Supabase-backed repositories: holds the client and call timeout"""

    def __init__(self, client: Client, timeout: float = 10.0):
        self.client = client
        self.timeout = timeout
