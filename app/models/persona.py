"""Persona and persona image models."""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field as PydanticField
from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel

PERSONAS_TABLE = "personas"
PERSONA_IMAGES_TABLE = "persona_images"


class Persona(SQLModel, table=True):
    """A user's reusable content-generation profile.

    Keyed by ``owner_id`` so an owner can never hold more than one persona.
    """

    __tablename__ = PERSONAS_TABLE

    owner_id: str = Field(primary_key=True, max_length=64)
    bio: str = Field(default="", sa_column=Column(Text, nullable=False))
    industry: str = Field(default="", sa_column=Column(Text, nullable=False))
    target_audience: str = Field(default="", sa_column=Column(Text, nullable=False))
    brand_tone: str = Field(default="", sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )


class PersonaImage(SQLModel, table=True):
    """Reference image uploaded for a persona.

    ``storage_key`` locates the binary in the binary store; ``url`` is what
    clients display.
    """

    __tablename__ = PERSONA_IMAGES_TABLE

    id: str = Field(primary_key=True, max_length=36)
    owner_id: str = Field(index=True, max_length=64)
    url: str = Field(sa_column=Column(Text, nullable=False))
    storage_key: str = Field(max_length=512)
    filename: Optional[str] = Field(default=None, max_length=255)
    content_type: Optional[str] = Field(default=None, max_length=100)
    size_bytes: int = Field(default=0)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )


# Pydantic models used by the services and the API

class PersonaFields(BaseModel):
    """Text fields of a persona. Saving replaces all four at once."""

    bio: str = PydanticField(default="", max_length=5000)
    industry: str = PydanticField(default="", max_length=255)
    target_audience: str = PydanticField(default="", max_length=255)
    brand_tone: str = PydanticField(default="", max_length=255)

    def is_blank(self) -> bool:
        return not any(value.strip() for value in self.model_dump().values())


class PersonaImageRecord(BaseModel):
    """Persona image as returned by the services."""

    id: str
    owner_id: str
    url: str
    storage_key: str
    filename: Optional[str] = None
    content_type: Optional[str] = None
    size_bytes: int = 0
    created_at: datetime

    model_config = {"from_attributes": True}


class PersonaRecord(PersonaFields):
    """Persona with its images in upload order."""

    owner_id: str
    images: List[PersonaImageRecord] = PydanticField(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
