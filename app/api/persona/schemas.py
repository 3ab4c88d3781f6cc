"""Request and response schemas for persona endpoints."""

from typing import List

from pydantic import BaseModel

from app.models.persona import PersonaFields, PersonaImageRecord, PersonaRecord


class PersonaRequest(PersonaFields):
    """Request schema for POST /v1/persona. Omitted fields are saved as empty."""

    model_config = {
        "json_schema_extra": {
            "example": {
                "bio": "Founder building developer tools",
                "industry": "Tech",
                "target_audience": "Devs",
                "brand_tone": "Casual",
            }
        }
    }


class PersonaResponse(PersonaRecord):
    """Persona with its images in upload order."""


class PersonaImageResponse(PersonaImageRecord):
    """Single uploaded persona image."""


class PersonaImageListResponse(BaseModel):
    images: List[PersonaImageResponse]
    total: int
