"""Generation request model: one image or text generation and its outcome."""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel

GENERATIONS_TABLE = "generations"


class GenerationType(str, Enum):
    """Kind of artifact a generation request produces."""

    image = "image"
    text = "text"


class GenerationStatus(str, Enum):
    """Lifecycle state. ``pending`` moves exactly once to a terminal state."""

    pending = "pending"
    completed = "completed"
    failed = "failed"


ALLOWED_MODELS: Dict[GenerationType, Tuple[str, ...]] = {
    GenerationType.image: ("dall-e-3", "dall-e-2"),
    GenerationType.text: ("gpt-4", "gpt-3.5-turbo"),
}

DEFAULT_MODELS: Dict[GenerationType, str] = {
    GenerationType.image: "dall-e-3",
    GenerationType.text: "gpt-4",
}


class Generation(SQLModel, table=True):
    """Persisted generation request."""

    __tablename__ = GENERATIONS_TABLE

    id: str = Field(primary_key=True, max_length=36)
    owner_id: str = Field(index=True, max_length=64, description="User who owns this generation")

    # Request details
    type: str = Field(index=True, max_length=10)
    prompt: str = Field(sa_column=Column(Text, nullable=False), description="Raw user prompt")
    model: str = Field(max_length=50)

    # Outcome
    status: str = Field(default=GenerationStatus.pending.value, max_length=20)
    result: Optional[str] = Field(
        default=None,
        sa_column=Column(Text),
        description="Image URL or generated text once completed"
    )
    error_message: Optional[str] = Field(default=None, sa_column=Column(Text))

    # Timestamps
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
    completed_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True))
    )


class GenerationRecord(BaseModel):
    """Generation request as returned by the services."""

    id: str
    owner_id: str
    type: GenerationType
    prompt: str
    model: str
    status: GenerationStatus
    result: Optional[str] = None
    error_message: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class GenerationStats(BaseModel):
    """Aggregate counts over all of an owner's generations."""

    total: int = 0
    by_type: Dict[str, int]
    by_status: Dict[str, int]
