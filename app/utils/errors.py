"""Error taxonomy shared by the services and the API layer.

Provider errors are absorbed by the generation lifecycle into ``failed``
records. Validation, not-found and storage errors abort the calling
operation and are translated to HTTP responses by the handlers registered
in ``app.main``.
"""

from typing import Optional


class StudioError(Exception):
    """Base class for all application errors."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(StudioError):
    """Malformed input. Always fixable by the caller; nothing is persisted."""

    status_code = 400
    error = "Validation failed"


class NotFoundError(StudioError):
    """Entity is absent or owned by someone else."""

    status_code = 404
    error = "Resource not found"


class StorageError(StudioError):
    """Record store or binary store failure."""

    status_code = 503
    error = "Storage unavailable"


class ProviderError(StudioError):
    """Generic generative-AI provider failure."""

    status_code = 502
    error = "Provider error"
    kind = "provider_error"


class ProviderUnavailable(ProviderError):
    """Provider could not be reached or is overloaded."""

    kind = "provider_unavailable"


class ProviderTimeout(ProviderError):
    """Provider did not answer within the configured bound."""

    kind = "provider_timeout"


class ProviderRejected(ProviderError):
    """Provider refused the request (content policy, permissions)."""

    kind = "provider_rejected"
