"""Record store contract shared by the SQL and Supabase backends.

Records travel as plain dicts keyed by column name. Every backend failure is
raised as ``StorageError``; a missing record is signalled by ``None`` /
``False`` return values, never by an exception.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from app.models.generation import GENERATIONS_TABLE
from app.models.persona import PERSONA_IMAGES_TABLE, PERSONAS_TABLE
from app.models.user import USERS_TABLE

# Primary key column per table (personas are keyed by their owner)
TABLE_PRIMARY_KEYS: Dict[str, str] = {
    USERS_TABLE: "id",
    PERSONAS_TABLE: "owner_id",
    PERSONA_IMAGES_TABLE: "id",
    GENERATIONS_TABLE: "id",
}


def primary_key_for(table: str) -> str:
    try:
        return TABLE_PRIMARY_KEYS[table]
    except KeyError:
        raise ValueError(f"Unknown table: {table}") from None


class RecordStore(ABC):
    """Keyed record storage with owner/filter queries."""

    backend_name: str = "abstract"

    async def init(self) -> None:
        """Prepare the backend (connections, tables)."""

    async def close(self) -> None:
        """Release backend resources."""

    @abstractmethod
    async def ping(self) -> tuple[bool, str]:
        """Run a lightweight health check."""

    @abstractmethod
    async def insert(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a record and return it as stored."""

    @abstractmethod
    async def find_by_id(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Return the record with the given primary key, or None."""

    @abstractmethod
    async def update(self, table: str, record_id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply ``patch`` and return the updated record, or None if absent."""

    @abstractmethod
    async def delete_by_id(self, table: str, record_id: str) -> bool:
        """Delete the record. Returns False when nothing was deleted."""

    @abstractmethod
    async def query(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Return records matching all equality ``filters``.

        Rows sharing an ``order_by`` value are ordered by primary key in the
        same direction.
        """
