"""Request and response schemas for generation endpoints."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.models.generation import GenerationRecord, GenerationStats


class CreateGenerationRequest(BaseModel):
    """Request schema for POST /v1/generations."""

    type: str = Field(..., description="Artifact kind: 'image' or 'text'.")
    prompt: str = Field(..., description="What to create. Must not be blank.")
    model: Optional[str] = Field(
        default=None,
        description="Provider model. Defaults to dall-e-3 for images and gpt-4 for text.",
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "type": "text",
                "prompt": "Write a LinkedIn post about AI innovation",
                "model": "gpt-4",
            }
        }
    }


class TypedGenerationRequest(BaseModel):
    """Request schema for POST /v1/generations/image and /v1/generations/text."""

    prompt: str = Field(..., description="What to create. Must not be blank.")
    model: Optional[str] = Field(default=None, description="Provider model for this type.")

    model_config = {
        "json_schema_extra": {
            "example": {
                "prompt": "A professional headshot in a modern office",
                "model": "dall-e-3",
            }
        }
    }


class GenerationResponse(GenerationRecord):
    """Full generation record including terminal status."""


class GenerationListResponse(BaseModel):
    """Response schema for listing generations."""

    generations: List[GenerationResponse]
    total: int


class GenerationStatsResponse(GenerationStats):
    """Counts over all of the user's generations plus the most recent ones."""

    recent: List[GenerationResponse] = Field(default_factory=list)


class ModelCatalogResponse(BaseModel):
    """Allowed and default models per generation type."""

    allowed: Dict[str, List[str]]
    defaults: Dict[str, str]
