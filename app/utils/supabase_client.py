"""Shared Supabase admin client for the record store and the image bucket."""

from typing import Optional

from supabase import Client, create_client

from app.config.logger import app_logger
from app.config.settings import settings
from app.utils.errors import StorageError

_supabase_admin_client: Optional[Client] = None


def get_supabase_admin_client() -> Client:
    """Return the service-role client, creating it on first use.

    Raises:
        StorageError: If ``SUPABASE_URL`` / ``SUPABASE_SERVICE_ROLE_KEY`` are
            missing or the client cannot be created.
    """
    global _supabase_admin_client
    if _supabase_admin_client is None:
        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
            raise StorageError(
                "Supabase storage is not configured",
                detail="Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY",
            )
        try:
            _supabase_admin_client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
        except Exception as e:
            app_logger.error(f"Failed to initialize Supabase admin client: {e}")
            raise StorageError("Supabase client initialization failed") from e
        app_logger.info("Supabase admin client initialized")
    return _supabase_admin_client
