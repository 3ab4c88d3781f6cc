"""Generation request lifecycle.

A request is validated, persisted as ``pending``, dispatched once to the
provider, and moved to exactly one terminal state:

    pending -> completed   (result set)
    pending -> failed      (error_message set)

Provider failures are recorded on the record rather than raised; ``create``
returns the failed record and the caller inspects ``status``. Validation and
storage errors abort the call. There is no retry and no cancellation.
"""

import time
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from fastapi.concurrency import run_in_threadpool

from app.config.logger import app_logger, log_generation_transition, log_performance
from app.db.base import RecordStore
from app.models.generation import (
    ALLOWED_MODELS,
    DEFAULT_MODELS,
    GENERATIONS_TABLE,
    GenerationRecord,
    GenerationStatus,
    GenerationType,
)
from app.services.history_service import HistoryService
from app.services.openai_provider import GenerationProvider
from app.services.persona_service import PersonaService
from app.services.prompt_composer import compose
from app.utils.errors import NotFoundError, ProviderError, StorageError, ValidationError

UNEXPECTED_FAILURE_MESSAGE = "Generation failed due to an unexpected provider error."


def validate_generation_request(
    generation_type: str,
    prompt: Optional[str],
    model: Optional[str] = None,
) -> tuple[GenerationType, str]:
    """Check prompt, type and model before anything is persisted.

    Returns:
        The parsed type and the model to use (the type's default when
        ``model`` is omitted).

    Raises:
        ValidationError: Blank prompt, unknown type, or a model not allowed
            for the type.
    """
    if prompt is None or not prompt.strip():
        raise ValidationError("Prompt must not be empty")

    try:
        parsed_type = GenerationType(generation_type)
    except ValueError:
        raise ValidationError(
            f"Unsupported generation type: {generation_type}",
            detail="Expected one of: image, text",
        ) from None

    selected_model = model or DEFAULT_MODELS[parsed_type]
    allowed = ALLOWED_MODELS[parsed_type]
    if selected_model not in allowed:
        raise ValidationError(
            f"Model '{selected_model}' is not available for {parsed_type.value} generation",
            detail=f"Allowed models: {', '.join(allowed)}",
        )
    return parsed_type, selected_model


class GenerationService:
    """Creates, reads, lists and deletes an owner's generation requests."""

    def __init__(
        self,
        store: RecordStore,
        persona_service: PersonaService,
        provider: GenerationProvider,
        history: Optional[HistoryService] = None,
    ):
        self.store = store
        self.persona_service = persona_service
        self.provider = provider
        self.history = history or HistoryService(store)

    def _operation_for(self, generation_type: GenerationType) -> Callable[[str, str], str]:
        operations: Dict[GenerationType, Callable[[str, str], str]] = {
            GenerationType.image: self.provider.generate_image,
            GenerationType.text: self.provider.generate_text,
        }
        return operations[generation_type]

    async def _load_persona(self, owner_id: str):
        # A persona is optional context; failing to read it must not strand
        # the record in pending.
        try:
            return await self.persona_service.find(owner_id)
        except StorageError as e:
            app_logger.warning(f"Persona lookup failed for owner {owner_id}, generating without persona: {e}")
            return None

    async def create(
        self,
        owner_id: str,
        generation_type: str,
        prompt: str,
        model: Optional[str] = None,
    ) -> GenerationRecord:
        """Run one generation request to a terminal state and return it."""
        parsed_type, selected_model = validate_generation_request(generation_type, prompt, model)

        generation_id = str(uuid4())
        await self.store.insert(
            GENERATIONS_TABLE,
            {
                "id": generation_id,
                "owner_id": owner_id,
                "type": parsed_type.value,
                "prompt": prompt,
                "model": selected_model,
                "status": GenerationStatus.pending.value,
                "result": None,
                "error_message": None,
                "created_at": datetime.now(timezone.utc),
                "completed_at": None,
            },
        )
        log_generation_transition(
            generation_id,
            GenerationStatus.pending.value,
            detail=f"{parsed_type.value}, {selected_model}",
            owner_id=owner_id,
        )

        persona = await self._load_persona(owner_id)
        final_prompt = compose(prompt, persona)

        operation = self._operation_for(parsed_type)
        start_time = time.perf_counter()
        try:
            artifact = await run_in_threadpool(operation, final_prompt, selected_model)
        except Exception as exc:
            error = exc if isinstance(exc, ProviderError) else ProviderError(UNEXPECTED_FAILURE_MESSAGE)
            if not isinstance(exc, ProviderError):
                app_logger.exception(f"Unexpected error from provider for generation {generation_id}")
            log_generation_transition(
                generation_id, GenerationStatus.failed.value, detail=f"{error.kind}: {error.message}"
            )
            patch = {
                "status": GenerationStatus.failed.value,
                "result": None,
                "error_message": error.message,
            }
        else:
            log_generation_transition(generation_id, GenerationStatus.completed.value)
            patch = {
                "status": GenerationStatus.completed.value,
                "result": artifact,
                "error_message": None,
            }
        log_performance(
            f"{parsed_type.value} generation",
            time.perf_counter() - start_time,
            model=selected_model,
            status=patch["status"],
        )

        patch["completed_at"] = datetime.now(timezone.utc)
        updated = await self.store.update(GENERATIONS_TABLE, generation_id, patch)
        if updated is None:
            # Deleted by the owner while the provider call was in flight
            raise NotFoundError("Generation was deleted before it finished")
        return GenerationRecord.model_validate(updated)

    async def get(self, owner_id: str, generation_id: str) -> GenerationRecord:
        """Return the owner's record; other owners' records read as missing."""
        row = await self.store.find_by_id(GENERATIONS_TABLE, generation_id)
        if row is None or row.get("owner_id") != owner_id:
            raise NotFoundError("Generation not found")
        return GenerationRecord.model_validate(row)

    async def delete(self, owner_id: str, generation_id: str) -> None:
        """Delete the owner's record. A second delete raises NotFoundError."""
        await self.get(owner_id, generation_id)
        deleted = await self.store.delete_by_id(GENERATIONS_TABLE, generation_id)
        if not deleted:
            raise NotFoundError("Generation not found")
        app_logger.info(f"Deleted generation {generation_id} for owner {owner_id}")

    async def list(self, owner_id: str, type_filter: Optional[str] = None) -> List[GenerationRecord]:
        return await self.history.list(owner_id, type_filter)
