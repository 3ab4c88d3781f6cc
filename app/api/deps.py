"""Service wiring exposed as FastAPI dependencies.

Backends are built lazily from settings and cached as module singletons.
Tests swap any of them through ``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Depends

from app.config.logger import app_logger
from app.config.settings import settings
from app.db.base import RecordStore
from app.db.binary_store import BinaryStore, LocalBinaryStore, SupabaseBinaryStore
from app.db.sql_store import SQLRecordStore
from app.db.supabase_db import SupabaseRecordStore
from app.services.account_service import AccountService
from app.services.generation_service import GenerationService
from app.services.history_service import HistoryService
from app.services.openai_provider import GenerationProvider, OpenAIProvider
from app.services.persona_service import PersonaService

_record_store: Optional[RecordStore] = None
_binary_store: Optional[BinaryStore] = None
_provider: Optional[GenerationProvider] = None


def get_record_store() -> RecordStore:
    """Return the configured record store (``sql`` or ``supabase``)."""
    global _record_store
    if _record_store is None:
        backend = settings.STORAGE_BACKEND.strip().lower()
        if backend == "supabase":
            _record_store = SupabaseRecordStore()
        elif backend == "sql":
            _record_store = SQLRecordStore()
        else:
            raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
        app_logger.info(f"Using {_record_store.backend_name} record store")
    return _record_store


def get_binary_store() -> BinaryStore:
    """Return the configured binary store (``local`` or ``supabase``)."""
    global _binary_store
    if _binary_store is None:
        backend = settings.BINARY_STORE_BACKEND.strip().lower()
        if backend == "supabase":
            _binary_store = SupabaseBinaryStore()
        elif backend == "local":
            _binary_store = LocalBinaryStore()
        else:
            raise ValueError(f"Unknown BINARY_STORE_BACKEND: {settings.BINARY_STORE_BACKEND}")
        app_logger.info(f"Using {_binary_store.backend_name} binary store")
    return _binary_store


def get_provider() -> GenerationProvider:
    global _provider
    if _provider is None:
        _provider = OpenAIProvider()
    return _provider


def get_account_service(store: RecordStore = Depends(get_record_store)) -> AccountService:
    return AccountService(store)


def get_persona_service(
    store: RecordStore = Depends(get_record_store),
    binary_store: BinaryStore = Depends(get_binary_store),
) -> PersonaService:
    return PersonaService(store, binary_store)


def get_history_service(store: RecordStore = Depends(get_record_store)) -> HistoryService:
    return HistoryService(store)


def get_generation_service(
    store: RecordStore = Depends(get_record_store),
    persona_service: PersonaService = Depends(get_persona_service),
    provider: GenerationProvider = Depends(get_provider),
    history: HistoryService = Depends(get_history_service),
) -> GenerationService:
    return GenerationService(store, persona_service, provider, history)
