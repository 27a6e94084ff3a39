"""Supabase connection and client management."""

import asyncio
from typing import Optional

from supabase import AsyncClient, StorageException, acreate_client

from app.settings import settings
from app.utils.logging_config import logger

_supabase_admin_client: Optional[AsyncClient] = None
_supabase_admin_lock = asyncio.Lock()


async def supabase_admin() -> AsyncClient:
    global _supabase_admin_client
    async with _supabase_admin_lock:
        if _supabase_admin_client is None:
            if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
                raise RuntimeError(
                    "SUPABASE_URL and SUPABASE_SERVICE_KEY are required for the supabase storage backend"
                )
            _supabase_admin_client = await acreate_client(
                settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY
            )
    return _supabase_admin_client


async def check_supabase_connection():
    """
    Checks the connection to the Supabase client by listing buckets.
    Raises an exception if the connection fails.
    """
    try:
        supabase_client = await supabase_admin()
        await supabase_client.storage.list_buckets()
        logger.info("Supabase connection successful")
    except StorageException as e:
        logger.error(f"Supabase connection error: {e}")
        raise
