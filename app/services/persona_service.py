"""Persona store: one persona per owner plus its reference images.

Images live in their own table and in the binary store. Removing an image
stages the binary aside, deletes the reference, and only then purges the
staged binary. A failure at either step leaves both in place.
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from app.config.logger import app_logger
from app.config.settings import settings
from app.db.base import RecordStore
from app.db.binary_store import BinaryStore
from app.models.persona import (
    PERSONA_IMAGES_TABLE,
    PERSONAS_TABLE,
    PersonaFields,
    PersonaImageRecord,
    PersonaRecord,
)
from app.utils.errors import NotFoundError, StorageError, ValidationError

ALLOWED_IMAGE_TYPES = {"image/png", "image/jpeg", "image/webp", "image/gif"}


class PersonaService:
    """Keyed persona storage with image upload and removal."""

    def __init__(
        self,
        store: RecordStore,
        binary_store: BinaryStore,
        max_upload_bytes: Optional[int] = None,
    ):
        self.store = store
        self.binary_store = binary_store
        self.max_upload_bytes = max_upload_bytes or settings.MAX_IMAGE_UPLOAD_BYTES

    async def find(self, owner_id: str) -> Optional[PersonaRecord]:
        """Return the owner's persona, or None if they never saved one."""
        row = await self.store.find_by_id(PERSONAS_TABLE, owner_id)
        if row is None:
            return None
        images = await self.list_images(owner_id)
        return PersonaRecord.model_validate({**row, "images": images})

    async def get(self, owner_id: str) -> PersonaRecord:
        persona = await self.find(owner_id)
        if persona is None:
            raise NotFoundError("Persona not found")
        return persona

    async def upsert(self, owner_id: str, fields: PersonaFields) -> PersonaRecord:
        """Create or fully replace the persona's text fields. Images are kept."""
        now = datetime.now(timezone.utc)
        payload = {**fields.model_dump(), "updated_at": now}

        existing = await self.store.find_by_id(PERSONAS_TABLE, owner_id)
        if existing is None:
            await self.store.insert(
                PERSONAS_TABLE,
                {"owner_id": owner_id, "created_at": now, **payload},
            )
            app_logger.info(f"Created persona for owner {owner_id}")
        else:
            await self.store.update(PERSONAS_TABLE, owner_id, payload)
            app_logger.info(f"Updated persona for owner {owner_id}")

        return await self.get(owner_id)

    async def list_images(self, owner_id: str) -> List[PersonaImageRecord]:
        rows = await self.store.query(
            PERSONA_IMAGES_TABLE,
            filters={"owner_id": owner_id},
            order_by="created_at",
            descending=False,
        )
        return [PersonaImageRecord.model_validate(row) for row in rows]

    def _validate_upload(self, data: bytes, content_type: Optional[str]) -> None:
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError(
                f"Unsupported image type: {content_type or 'unknown'}",
                detail=f"Allowed types: {', '.join(sorted(ALLOWED_IMAGE_TYPES))}",
            )
        if not data:
            raise ValidationError("Uploaded image is empty")
        if len(data) > self.max_upload_bytes:
            raise ValidationError(
                "Uploaded image is too large",
                detail=f"Maximum size is {self.max_upload_bytes} bytes, got {len(data)}",
            )

    async def add_image(
        self,
        owner_id: str,
        data: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> PersonaImageRecord:
        """Store the binary, then append the image reference."""
        self._validate_upload(data, content_type)

        stored = await self.binary_store.store(
            data,
            filename=filename,
            content_type=content_type,
            prefix=owner_id,
        )

        try:
            row = await self.store.insert(
                PERSONA_IMAGES_TABLE,
                {
                    "id": str(uuid4()),
                    "owner_id": owner_id,
                    "url": stored.url,
                    "storage_key": stored.key,
                    "filename": filename,
                    "content_type": content_type,
                    "size_bytes": len(data),
                    "created_at": datetime.now(timezone.utc),
                },
            )
        except StorageError:
            # Do not leave an orphaned binary behind
            try:
                await self.binary_store.delete(stored.key)
            except StorageError as cleanup_error:
                app_logger.error(f"Failed to clean up orphaned upload {stored.key}: {cleanup_error}")
            raise

        app_logger.info(f"Added persona image {row['id']} for owner {owner_id}")
        return PersonaImageRecord.model_validate(row)

    async def remove_image(self, owner_id: str, image_id: str) -> None:
        """Delete an image the owner uploaded.

        Raises:
            NotFoundError: The image does not exist or belongs to another owner.
            StorageError: The binary or the reference could not be deleted;
                both are kept.
        """
        row = await self.store.find_by_id(PERSONA_IMAGES_TABLE, image_id)
        if row is None or row.get("owner_id") != owner_id:
            raise NotFoundError("Persona image not found")

        key = row["storage_key"]
        staged_key = await self.binary_store.stage_delete(key)

        try:
            deleted = await self.store.delete_by_id(PERSONA_IMAGES_TABLE, image_id)
        except StorageError:
            if staged_key is not None:
                await self.binary_store.restore(staged_key, key)
            raise

        # The reference is gone, so the staged binary is unreachable either way
        if staged_key is not None:
            try:
                await self.binary_store.delete(staged_key)
            except StorageError as e:
                app_logger.error(f"Left staged upload {staged_key} behind after removing image {image_id}: {e}")

        if not deleted:
            raise NotFoundError("Persona image not found")
        app_logger.info(f"Removed persona image {image_id} for owner {owner_id}")
