"""Tests for persona storage and reference image handling."""

import asyncio

import pytest

from app.db.binary_store import LocalBinaryStore, StoredObject
from app.db.sql_store import SQLRecordStore
from app.models.persona import PersonaFields
from app.services.persona_service import PersonaService
from app.utils.errors import NotFoundError, StorageError, ValidationError

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-data"


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def service(sqlite_url, upload_dir):
    return PersonaService(SQLRecordStore(sqlite_url), LocalBinaryStore(upload_dir, "/uploads"))


class FailingDeleteStore(LocalBinaryStore):
    """Local store whose deletes always fail."""

    async def stage_delete(self, key: str):
        raise StorageError("Failed to delete stored file")

    async def delete(self, key: str) -> None:
        raise StorageError("Failed to delete stored file")


class TestPersonaFields:
    """Create, read and full-replace semantics."""

    def test_get_missing_persona_is_not_found(self, service):
        with pytest.raises(NotFoundError):
            run(service.get("owner-1"))
        assert run(service.find("owner-1")) is None

    def test_upsert_creates_then_reads_back(self, service):
        saved = run(service.upsert("owner-1", PersonaFields(bio="Founder", industry="Tech")))

        assert saved.owner_id == "owner-1"
        assert saved.bio == "Founder"
        assert saved.industry == "Tech"
        assert saved.target_audience == ""
        assert run(service.get("owner-1")).industry == "Tech"

    def test_upsert_is_full_replace(self, service):
        run(service.upsert("owner-1", PersonaFields(bio="Founder", industry="Tech", brand_tone="Casual")))
        saved = run(service.upsert("owner-1", PersonaFields(industry="Retail")))

        assert saved.industry == "Retail"
        assert saved.bio == ""
        assert saved.brand_tone == ""

    def test_one_persona_per_owner(self, service):
        run(service.upsert("owner-1", PersonaFields(industry="Tech")))
        run(service.upsert("owner-1", PersonaFields(industry="Retail")))
        run(service.upsert("owner-2", PersonaFields(industry="Finance")))

        assert run(service.get("owner-1")).industry == "Retail"
        assert run(service.get("owner-2")).industry == "Finance"

    def test_upsert_keeps_images(self, service):
        run(service.upsert("owner-1", PersonaFields(industry="Tech")))
        image = run(service.add_image("owner-1", PNG_BYTES, "me.png", "image/png"))

        saved = run(service.upsert("owner-1", PersonaFields(industry="Retail")))

        assert [i.id for i in saved.images] == [image.id]


class TestPersonaImages:
    """Upload, list and remove."""

    def test_add_image_stores_binary_and_reference(self, service, upload_dir):
        image = run(service.add_image("owner-1", PNG_BYTES, "me.png", "image/png"))

        assert image.owner_id == "owner-1"
        assert image.url.startswith("/uploads/owner-1/")
        assert image.url.endswith(".png")
        assert image.size_bytes == len(PNG_BYTES)
        assert (upload_dir / image.storage_key).read_bytes() == PNG_BYTES

    def test_images_listed_in_upload_order(self, service):
        first = run(service.add_image("owner-1", PNG_BYTES, "a.png", "image/png"))
        second = run(service.add_image("owner-1", b"jpeg-bytes", "b.jpg", "image/jpeg"))
        run(service.add_image("owner-2", PNG_BYTES, "c.png", "image/png"))

        assert [i.id for i in run(service.list_images("owner-1"))] == [first.id, second.id]

    def test_remove_one_of_two_images(self, service, upload_dir):
        run(service.upsert("owner-1", PersonaFields(industry="Tech")))
        keep = run(service.add_image("owner-1", PNG_BYTES, "a.png", "image/png"))
        drop = run(service.add_image("owner-1", PNG_BYTES, "b.png", "image/png"))

        run(service.remove_image("owner-1", drop.id))

        persona = run(service.get("owner-1"))
        assert [i.id for i in persona.images] == [keep.id]
        assert not (upload_dir / drop.storage_key).exists()
        assert (upload_dir / keep.storage_key).exists()

    def test_remove_foreign_image_is_not_found(self, service, upload_dir):
        image = run(service.add_image("owner-1", PNG_BYTES, "a.png", "image/png"))

        with pytest.raises(NotFoundError):
            run(service.remove_image("owner-2", image.id))
        assert (upload_dir / image.storage_key).exists()

    def test_remove_missing_image_is_not_found(self, service):
        with pytest.raises(NotFoundError):
            run(service.remove_image("owner-1", "does-not-exist"))

    def test_failed_binary_delete_keeps_reference(self, sqlite_url, upload_dir):
        service = PersonaService(SQLRecordStore(sqlite_url), FailingDeleteStore(upload_dir, "/uploads"))
        image = run(service.add_image("owner-1", PNG_BYTES, "a.png", "image/png"))

        with pytest.raises(StorageError):
            run(service.remove_image("owner-1", image.id))

        assert [i.id for i in run(service.list_images("owner-1"))] == [image.id]

    def test_failed_reference_delete_restores_binary(self, service, upload_dir, monkeypatch):
        image = run(service.add_image("owner-1", PNG_BYTES, "a.png", "image/png"))

        async def failing_delete_by_id(*args, **kwargs):
            raise StorageError("Record store unavailable")

        monkeypatch.setattr(service.store, "delete_by_id", failing_delete_by_id)

        with pytest.raises(StorageError):
            run(service.remove_image("owner-1", image.id))

        assert (upload_dir / image.storage_key).read_bytes() == PNG_BYTES
        assert [i.id for i in run(service.list_images("owner-1"))] == [image.id]

    def test_remove_leaves_nothing_staged(self, service, upload_dir):
        image = run(service.add_image("owner-1", PNG_BYTES, "a.png", "image/png"))

        run(service.remove_image("owner-1", image.id))

        assert not (upload_dir / ".trash" / image.storage_key).exists()
        assert not (upload_dir / image.storage_key).exists()

    def test_remove_first_of_two_keeps_second_url(self, service):
        first = run(service.add_image("owner-1", PNG_BYTES, "a.png", "image/png"))
        second = run(service.add_image("owner-1", PNG_BYTES, "b.png", "image/png"))

        run(service.remove_image("owner-1", first.id))

        assert [i.url for i in run(service.list_images("owner-1"))] == [second.url]

    def test_failed_reference_insert_cleans_up_binary(self, service, upload_dir, monkeypatch):
        stored = []
        original_store = service.binary_store.store

        async def tracking_store(*args, **kwargs):
            result = await original_store(*args, **kwargs)
            stored.append(result)
            return result

        async def failing_insert(table, data):
            raise StorageError("Failed to insert into persona_images")

        monkeypatch.setattr(service.binary_store, "store", tracking_store)
        monkeypatch.setattr(service.store, "insert", failing_insert)

        with pytest.raises(StorageError):
            run(service.add_image("owner-1", PNG_BYTES, "a.png", "image/png"))

        assert len(stored) == 1
        assert isinstance(stored[0], StoredObject)
        assert not (upload_dir / stored[0].key).exists()


class TestUploadValidation:
    """Rejected uploads never reach the binary store."""

    def test_rejects_non_image_type(self, service, upload_dir):
        with pytest.raises(ValidationError):
            run(service.add_image("owner-1", b"%PDF", "doc.pdf", "application/pdf"))
        assert not upload_dir.exists()

    def test_rejects_empty_upload(self, service):
        with pytest.raises(ValidationError):
            run(service.add_image("owner-1", b"", "a.png", "image/png"))

    def test_rejects_oversized_upload(self, sqlite_url, upload_dir):
        service = PersonaService(
            SQLRecordStore(sqlite_url),
            LocalBinaryStore(upload_dir, "/uploads"),
            max_upload_bytes=8,
        )
        with pytest.raises(ValidationError):
            run(service.add_image("owner-1", b"123456789", "a.png", "image/png"))
