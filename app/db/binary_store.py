"""Binary storage for persona reference images.

Two backends: a local directory served by the app's static mount, and a
Supabase Storage bucket. Both return a ``StoredObject`` whose ``key`` is what
``delete`` expects later.

Removal can be staged: ``stage_delete`` moves the object under ``.trash/`` so
it can be put back with ``restore`` until the caller commits by deleting the
staged key.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from uuid import uuid4

from app.config.logger import app_logger
from app.config.settings import settings
from app.utils.errors import StorageError
from app.utils.supabase_client import get_supabase_admin_client

TRASH_PREFIX = ".trash"

CONTENT_TYPE_SUFFIXES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


@dataclass(frozen=True)
class StoredObject:
    key: str
    url: str


def build_object_key(prefix: str, filename: Optional[str], content_type: Optional[str]) -> str:
    """Build a collision-free key such as ``<owner>/<hex>.png``."""
    suffix = CONTENT_TYPE_SUFFIXES.get(content_type or "")
    if suffix is None and filename:
        suffix = Path(filename).suffix.lower()
    return f"{prefix}/{uuid4().hex}{suffix or ''}"


class BinaryStore(ABC):
    """Store-by-bytes / delete-by-key contract."""

    backend_name: str = "abstract"

    @abstractmethod
    async def store(
        self,
        data: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
        prefix: str = "shared",
    ) -> StoredObject:
        """Persist ``data`` and return its locator."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the object. Raises ``StorageError`` on failure."""

    @abstractmethod
    async def stage_delete(self, key: str) -> Optional[str]:
        """Move the object aside and return its staged key.

        Returns None when the object is already gone.
        """

    @abstractmethod
    async def restore(self, staged_key: str, key: str) -> None:
        """Put a staged object back under ``key``."""


def staged_key_for(key: str) -> str:
    return f"{TRASH_PREFIX}/{key}"


class LocalBinaryStore(BinaryStore):
    """Files under ``root_dir``, exposed at ``url_prefix`` by a static mount."""

    backend_name = "local"

    def __init__(self, root_dir: Optional[Path] = None, url_prefix: Optional[str] = None):
        self.root_dir = Path(root_dir) if root_dir is not None else Path(settings.LOCAL_UPLOAD_DIR)
        self.url_prefix = (url_prefix if url_prefix is not None else settings.UPLOADS_URL_PREFIX).rstrip("/")

    def _path_for(self, key: str) -> Path:
        root = self.root_dir.resolve()
        path = (root / key).resolve()
        if root not in path.parents:
            raise StorageError(f"Invalid storage key: {key}")
        return path

    async def store(
        self,
        data: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
        prefix: str = "shared",
    ) -> StoredObject:
        key = build_object_key(prefix, filename, content_type)
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            app_logger.error(f"Failed to write {key} to local storage: {e}")
            raise StorageError("Failed to store uploaded file") from e

        app_logger.debug(f"Stored {len(data)} bytes at {path}")
        return StoredObject(key=key, url=f"{self.url_prefix}/{key}")

    async def delete(self, key: str) -> None:
        path = self._path_for(key)
        if not path.exists():
            app_logger.warning(f"Stored file already missing, nothing to delete: {key}")
            return
        try:
            path.unlink()
        except OSError as e:
            app_logger.error(f"Failed to delete {key} from local storage: {e}")
            raise StorageError("Failed to delete stored file") from e

    def _move(self, source_key: str, target_key: str) -> None:
        target = self._path_for(target_key)
        target.parent.mkdir(parents=True, exist_ok=True)
        self._path_for(source_key).replace(target)

    async def stage_delete(self, key: str) -> Optional[str]:
        if not self._path_for(key).exists():
            app_logger.warning(f"Stored file already missing, nothing to stage: {key}")
            return None
        staged_key = staged_key_for(key)
        try:
            self._move(key, staged_key)
        except OSError as e:
            app_logger.error(f"Failed to stage {key} for deletion: {e}")
            raise StorageError("Failed to delete stored file") from e
        return staged_key

    async def restore(self, staged_key: str, key: str) -> None:
        try:
            self._move(staged_key, key)
        except OSError as e:
            app_logger.error(f"Failed to restore {key} from {staged_key}: {e}")
            raise StorageError("Failed to restore stored file") from e


class SupabaseBinaryStore(BinaryStore):
    """Objects in a Supabase Storage bucket with public URLs."""

    backend_name = "supabase"

    def __init__(self, bucket: Optional[str] = None, client=None):
        self.bucket = bucket or settings.SUPABASE_STORAGE_BUCKET
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_supabase_admin_client()
        return self._client

    async def store(
        self,
        data: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
        prefix: str = "shared",
    ) -> StoredObject:
        key = build_object_key(prefix, filename, content_type)
        try:
            bucket = self.client.storage.from_(self.bucket)
            bucket.upload(key, data, {"content-type": content_type or "application/octet-stream"})
            url = bucket.get_public_url(key)
        except Exception as e:
            app_logger.error(f"Failed to upload {key} to bucket {self.bucket}: {e}")
            raise StorageError("Failed to store uploaded file") from e
        return StoredObject(key=key, url=url)

    async def delete(self, key: str) -> None:
        try:
            self.client.storage.from_(self.bucket).remove([key])
        except Exception as e:
            app_logger.error(f"Failed to delete {key} from bucket {self.bucket}: {e}")
            raise StorageError("Failed to delete stored file") from e

    async def stage_delete(self, key: str) -> Optional[str]:
        staged_key = staged_key_for(key)
        try:
            self.client.storage.from_(self.bucket).move(key, staged_key)
        except Exception as e:
            app_logger.error(f"Failed to stage {key} for deletion in bucket {self.bucket}: {e}")
            raise StorageError("Failed to delete stored file") from e
        return staged_key

    async def restore(self, staged_key: str, key: str) -> None:
        try:
            self.client.storage.from_(self.bucket).move(staged_key, key)
        except Exception as e:
            app_logger.error(f"Failed to restore {key} in bucket {self.bucket}: {e}")
            raise StorageError("Failed to restore stored file") from e
