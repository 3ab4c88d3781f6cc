"""Supabase REST API record store.

This backend talks to Supabase over HTTPS (port 443), which works on hosting
platforms without direct Postgres connectivity.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from app.config.logger import app_logger
from app.db.base import RecordStore, primary_key_for
from app.utils.errors import StorageError
from app.utils.supabase_client import get_supabase_admin_client


def _serialize(data: Dict[str, Any]) -> Dict[str, Any]:
    """Convert values the REST API cannot encode (datetimes) to strings."""
    serialized = {}
    for key, value in data.items():
        if isinstance(value, datetime):
            serialized[key] = value.isoformat()
        elif isinstance(value, Enum):
            serialized[key] = value.value
        else:
            serialized[key] = value
    return serialized


class SupabaseRecordStore(RecordStore):
    """Supabase table operations behind the record store contract."""

    backend_name = "supabase"

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_supabase_admin_client()
        return self._client

    async def ping(self) -> tuple[bool, str]:
        """Check if Supabase connection is healthy."""
        try:
            self.client.table("users").select("id").limit(1).execute()
            return True, "Supabase REST API connection healthy"
        except Exception as e:
            return False, f"Supabase connection failed: {str(e)}"

    async def insert(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a record into any table."""
        try:
            response = self.client.table(table).insert(_serialize(data)).execute()
        except Exception as e:
            app_logger.error(f"Failed to insert into {table}: {e}")
            raise StorageError(f"Failed to insert into {table}") from e

        if response.data and len(response.data) > 0:
            return response.data[0]
        app_logger.error(f"Failed to insert into {table} - no data returned")
        raise StorageError(f"Failed to insert into {table}")

    async def find_by_id(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        id_column = primary_key_for(table)
        try:
            response = self.client.table(table).select("*").eq(id_column, record_id).limit(1).execute()
        except Exception as e:
            app_logger.error(f"Failed to read from {table}: {e}")
            raise StorageError(f"Failed to read from {table}") from e

        if response.data and len(response.data) > 0:
            return response.data[0]
        return None

    async def update(self, table: str, record_id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update a record in any table."""
        id_column = primary_key_for(table)
        try:
            response = self.client.table(table).update(_serialize(patch)).eq(id_column, record_id).execute()
        except Exception as e:
            app_logger.error(f"Failed to update record in {table}: {e}")
            raise StorageError(f"Failed to update record in {table}") from e

        if response.data and len(response.data) > 0:
            return response.data[0]
        return None

    async def delete_by_id(self, table: str, record_id: str) -> bool:
        """Delete a record from any table."""
        id_column = primary_key_for(table)
        try:
            response = self.client.table(table).delete().eq(id_column, record_id).execute()
        except Exception as e:
            app_logger.error(f"Failed to delete record from {table}: {e}")
            raise StorageError(f"Failed to delete record from {table}") from e
        return bool(response.data)

    async def query(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Get records from any table with optional filters."""
        try:
            query = self.client.table(table).select("*")

            for key, value in _serialize(filters or {}).items():
                query = query.eq(key, value)

            if order_by:
                query = query.order(order_by, desc=descending).order(primary_key_for(table), desc=descending)

            if limit:
                query = query.limit(limit)

            response = query.execute()
            return response.data or []
        except Exception as e:
            app_logger.error(f"Failed to get records from {table}: {e}")
            raise StorageError(f"Failed to get records from {table}") from e
