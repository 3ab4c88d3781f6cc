"""Persona profile and reference image endpoints."""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.api.deps import get_persona_service
from app.api.persona.schemas import (
    PersonaImageListResponse,
    PersonaImageResponse,
    PersonaRequest,
    PersonaResponse,
)
from app.config.logger import app_logger
from app.services.persona_service import PersonaService
from app.utils.auth import require_auth
from app.utils.responses import SuccessResponse, success_response

router = APIRouter(prefix="/v1/persona", tags=["persona"])


@router.get(
    "",
    response_model=SuccessResponse[PersonaResponse],
    summary="Get the current user's persona",
)
async def get_persona(
    user_id: str = Depends(require_auth),
    service: PersonaService = Depends(get_persona_service),
) -> SuccessResponse[PersonaResponse]:
    persona = await service.get(user_id)
    return success_response(
        data=PersonaResponse(**persona.model_dump()),
        message="Persona retrieved successfully",
    )


@router.post(
    "",
    response_model=SuccessResponse[PersonaResponse],
    summary="Create or replace the current user's persona",
)
async def save_persona(
    request: PersonaRequest,
    user_id: str = Depends(require_auth),
    service: PersonaService = Depends(get_persona_service),
) -> SuccessResponse[PersonaResponse]:
    """Replace all text fields at once. Uploaded images are kept."""
    persona = await service.upsert(user_id, request)
    return success_response(
        data=PersonaResponse(**persona.model_dump()),
        message="Persona saved successfully",
    )


@router.get(
    "/images",
    response_model=SuccessResponse[PersonaImageListResponse],
    summary="List persona images",
)
async def list_persona_images(
    user_id: str = Depends(require_auth),
    service: PersonaService = Depends(get_persona_service),
) -> SuccessResponse[PersonaImageListResponse]:
    images = await service.list_images(user_id)
    return success_response(
        data=PersonaImageListResponse(
            images=[PersonaImageResponse(**image.model_dump()) for image in images],
            total=len(images),
        ),
        message=f"Found {len(images)} persona images",
    )


@router.post(
    "/images",
    response_model=SuccessResponse[PersonaImageResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Upload a persona reference image",
)
async def upload_persona_image(
    file: UploadFile = File(..., description="Image file (png, jpeg, webp, gif)"),
    user_id: str = Depends(require_auth),
    service: PersonaService = Depends(get_persona_service),
) -> SuccessResponse[PersonaImageResponse]:
    try:
        data = await file.read()
    except Exception as e:
        app_logger.error(f"Failed to read uploaded image: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to read uploaded image.",
        )

    image = await service.add_image(
        user_id,
        data,
        filename=file.filename,
        content_type=file.content_type,
    )
    return success_response(
        data=PersonaImageResponse(**image.model_dump()),
        message="Image uploaded successfully",
    )


@router.delete(
    "/images/{image_id}",
    response_model=SuccessResponse[dict],
    summary="Delete a persona image",
)
async def delete_persona_image(
    image_id: str,
    user_id: str = Depends(require_auth),
    service: PersonaService = Depends(get_persona_service),
) -> SuccessResponse[dict]:
    await service.remove_image(user_id, image_id)
    return success_response(
        data={"deleted": True, "image_id": image_id},
        message="Image deleted successfully",
    )
