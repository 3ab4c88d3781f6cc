"""Response envelopes shared by every studio endpoint.

Successful calls return ``SuccessResponse[T]``; domain errors are rendered as
``ErrorResponse`` by the exception handlers in ``app.main``.
"""

from datetime import datetime, timezone
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from app.config.settings import settings

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResponseMetadata(BaseModel):
    app_name: str = Field(default_factory=lambda: settings.APP_NAME)
    app_version: str = Field(default_factory=lambda: settings.APP_VERSION)
    timestamp: datetime = Field(default_factory=_utcnow)


class SuccessResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str = "Operation completed successfully"
    data: T
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx raised from a ``StudioError``."""

    success: bool = False
    error: str = Field(..., description="Short error category, e.g. 'Validation failed'")
    detail: Optional[str] = Field(default=None, description="Human-readable explanation")
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)

    model_config = {
        "json_schema_extra": {
            "example": {
                "success": False,
                "error": "Resource not found",
                "detail": "Generation not found",
                "metadata": {
                    "app_name": "Persona Content Studio",
                    "app_version": "1.0.0",
                    "timestamp": "2025-11-03T15:58:36Z",
                },
            }
        }
    }


def success_response(data: T, message: str = "Operation completed successfully") -> SuccessResponse[T]:
    return SuccessResponse(message=message, data=data)


def error_response(error: str, detail: Optional[str] = None) -> ErrorResponse:
    return ErrorResponse(error=error, detail=detail)
