"""Read-side queries over persisted generation records."""

from typing import List, Optional

from app.db.base import RecordStore
from app.models.generation import (
    GENERATIONS_TABLE,
    GenerationRecord,
    GenerationStats,
    GenerationStatus,
    GenerationType,
)
from app.utils.errors import ValidationError


def parse_type_filter(type_filter: Optional[str]) -> Optional[GenerationType]:
    """Turn an optional ``image``/``text`` string into a GenerationType."""
    if type_filter is None or type_filter == "" or type_filter == "all":
        return None
    try:
        return GenerationType(type_filter)
    except ValueError:
        raise ValidationError(
            f"Unsupported generation type filter: {type_filter}",
            detail="Expected one of: image, text",
        ) from None


class HistoryService:
    """Listing and aggregate counts, newest first."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def list(
        self,
        owner_id: str,
        type_filter: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[GenerationRecord]:
        filters = {"owner_id": owner_id}
        generation_type = parse_type_filter(type_filter)
        if generation_type is not None:
            filters["type"] = generation_type.value

        rows = await self.store.query(
            GENERATIONS_TABLE,
            filters=filters,
            order_by="created_at",
            descending=True,
            limit=limit,
        )
        return [GenerationRecord.model_validate(row) for row in rows]

    async def recent(self, owner_id: str, limit: int = 5) -> List[GenerationRecord]:
        return await self.list(owner_id, limit=limit)

    async def stats(self, owner_id: str) -> GenerationStats:
        """Counts over every record the owner has, recomputed on each call."""
        records = await self.list(owner_id)
        by_type = {generation_type.value: 0 for generation_type in GenerationType}
        by_status = {status.value: 0 for status in GenerationStatus}
        for record in records:
            by_type[record.type.value] += 1
            by_status[record.status.value] += 1
        return GenerationStats(total=len(records), by_type=by_type, by_status=by_status)
