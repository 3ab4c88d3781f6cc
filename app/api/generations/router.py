"""Image and text generation endpoints.

A create call blocks until the provider answers. Provider failures come back
as a 201 with ``status == "failed"`` and a readable ``error_message``; only
validation and storage problems produce error responses.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_generation_service, get_history_service
from app.api.generations.schemas import (
    CreateGenerationRequest,
    GenerationListResponse,
    GenerationResponse,
    GenerationStatsResponse,
    ModelCatalogResponse,
    TypedGenerationRequest,
)
from app.config.logger import app_logger
from app.models.generation import (
    ALLOWED_MODELS,
    DEFAULT_MODELS,
    GenerationRecord,
    GenerationStatus,
    GenerationType,
)
from app.services.generation_service import GenerationService
from app.services.history_service import HistoryService
from app.utils.auth import require_auth
from app.utils.responses import SuccessResponse, success_response

router = APIRouter(prefix="/v1/generations", tags=["generations"])


def _to_response(record: GenerationRecord) -> GenerationResponse:
    return GenerationResponse(**record.model_dump())


def _created_message(record: GenerationRecord) -> str:
    if record.status == GenerationStatus.completed:
        return f"{record.type.value.capitalize()} generated successfully"
    return f"{record.type.value.capitalize()} generation failed"


@router.post(
    "",
    response_model=SuccessResponse[GenerationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Generate an image or text",
)
async def create_generation(
    request: CreateGenerationRequest,
    user_id: str = Depends(require_auth),
    service: GenerationService = Depends(get_generation_service),
) -> SuccessResponse[GenerationResponse]:
    """Run a generation request to completion and return the stored record."""
    app_logger.info(f"Generation request: type={request.type} model={request.model}")
    record = await service.create(user_id, request.type, request.prompt, request.model)
    return success_response(data=_to_response(record), message=_created_message(record))


@router.post(
    "/image",
    response_model=SuccessResponse[GenerationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Generate an image",
)
async def create_image_generation(
    request: TypedGenerationRequest,
    user_id: str = Depends(require_auth),
    service: GenerationService = Depends(get_generation_service),
) -> SuccessResponse[GenerationResponse]:
    record = await service.create(user_id, GenerationType.image.value, request.prompt, request.model)
    return success_response(data=_to_response(record), message=_created_message(record))


@router.post(
    "/text",
    response_model=SuccessResponse[GenerationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Generate text",
)
async def create_text_generation(
    request: TypedGenerationRequest,
    user_id: str = Depends(require_auth),
    service: GenerationService = Depends(get_generation_service),
) -> SuccessResponse[GenerationResponse]:
    record = await service.create(user_id, GenerationType.text.value, request.prompt, request.model)
    return success_response(data=_to_response(record), message=_created_message(record))


@router.get(
    "",
    response_model=SuccessResponse[GenerationListResponse],
    summary="List the current user's generations",
)
async def list_generations(
    type: Optional[str] = Query(default=None, description="Filter by 'image' or 'text'"),
    user_id: str = Depends(require_auth),
    service: GenerationService = Depends(get_generation_service),
) -> SuccessResponse[GenerationListResponse]:
    """Newest first. Without ``type`` all generations are returned."""
    records = await service.list(user_id, type)
    return success_response(
        data=GenerationListResponse(
            generations=[_to_response(r) for r in records],
            total=len(records),
        ),
        message=f"Found {len(records)} generations",
    )


@router.get(
    "/stats",
    response_model=SuccessResponse[GenerationStatsResponse],
    summary="Generation counts for the dashboard",
)
async def generation_stats(
    recent_limit: int = Query(default=5, ge=0, le=50),
    user_id: str = Depends(require_auth),
    history: HistoryService = Depends(get_history_service),
) -> SuccessResponse[GenerationStatsResponse]:
    stats = await history.stats(user_id)
    recent = await history.recent(user_id, limit=recent_limit) if recent_limit else []
    return success_response(
        data=GenerationStatsResponse(
            **stats.model_dump(),
            recent=[_to_response(r) for r in recent],
        ),
        message="Generation stats retrieved successfully",
    )


@router.get(
    "/models",
    response_model=SuccessResponse[ModelCatalogResponse],
    summary="Models available per generation type",
)
async def list_models() -> SuccessResponse[ModelCatalogResponse]:
    return success_response(
        data=ModelCatalogResponse(
            allowed={t.value: list(models) for t, models in ALLOWED_MODELS.items()},
            defaults={t.value: model for t, model in DEFAULT_MODELS.items()},
        ),
        message="Available models retrieved successfully",
    )


@router.get(
    "/{generation_id}",
    response_model=SuccessResponse[GenerationResponse],
    summary="Get a generation by ID",
)
async def get_generation(
    generation_id: str,
    user_id: str = Depends(require_auth),
    service: GenerationService = Depends(get_generation_service),
) -> SuccessResponse[GenerationResponse]:
    record = await service.get(user_id, generation_id)
    return success_response(data=_to_response(record), message="Generation retrieved successfully")


@router.delete(
    "/{generation_id}",
    response_model=SuccessResponse[dict],
    summary="Delete a generation",
)
async def delete_generation(
    generation_id: str,
    user_id: str = Depends(require_auth),
    service: GenerationService = Depends(get_generation_service),
) -> SuccessResponse[dict]:
    await service.delete(user_id, generation_id)
    return success_response(
        data={"deleted": True, "generation_id": generation_id},
        message="Generation deleted successfully",
    )
