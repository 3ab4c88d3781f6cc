"""Provider adapter over OpenAI image and text generation.

Every failure leaving this module is one of ``ProviderUnavailable``,
``ProviderTimeout``, ``ProviderRejected`` or the fallback ``ProviderError``,
carrying a short human-readable message. Raw provider payloads are logged,
never returned.

Retry behavior:
    None. The OpenAI client is built with ``max_retries=0`` and a finite
    timeout; a single failed attempt is final and the user resubmits.
"""

from abc import ABC, abstractmethod
from typing import Optional

import openai
from openai import OpenAI

from app.config.logger import app_logger
from app.config.settings import settings
from app.utils.errors import (
    ProviderError,
    ProviderRejected,
    ProviderTimeout,
    ProviderUnavailable,
)

_openai_client: OpenAI | None = None

CONTENT_POLICY_CODES = {"content_policy_violation", "content_filter"}


def get_openai_client() -> OpenAI:
    """Return a singleton OpenAI client with bounded wait and no retries."""
    global _openai_client
    if _openai_client is None:
        if not settings.OPENAI_API_KEY:
            raise ProviderUnavailable("The content provider is not configured.")
        _openai_client = OpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.OPENAI_TIMEOUT_SECONDS,
            max_retries=0,
        )
        app_logger.info("OpenAI client initialized")
    return _openai_client


def normalize_provider_error(exc: Exception, label: str, timeout_seconds: float) -> ProviderError:
    """Map an exception raised while calling OpenAI onto the provider taxonomy.

    Args:
        exc: Exception raised by the SDK (or by client construction).
        label: ``"image"`` or ``"text"``, used in the message.
        timeout_seconds: Configured bound, reported in timeout messages.
    """
    if isinstance(exc, ProviderError):
        return exc
    # APITimeoutError subclasses APIConnectionError, so it is checked first
    if isinstance(exc, openai.APITimeoutError):
        return ProviderTimeout(
            f"The {label} provider did not respond within {timeout_seconds:g} seconds."
        )
    if isinstance(exc, openai.APIConnectionError):
        return ProviderUnavailable(f"The {label} provider could not be reached. Please try again later.")
    if isinstance(exc, openai.RateLimitError):
        return ProviderUnavailable(f"The {label} provider is busy (rate limited). Please try again later.")
    if isinstance(exc, openai.InternalServerError):
        return ProviderUnavailable(f"The {label} provider is temporarily unavailable.")
    if isinstance(exc, openai.BadRequestError):
        code = (getattr(exc, "code", None) or "").lower()
        if code in CONTENT_POLICY_CODES or "safety" in str(exc).lower():
            return ProviderRejected(
                f"The {label} request was rejected by the provider's content policy."
            )
        return ProviderError(f"The {label} provider could not process this request.")
    if isinstance(exc, (openai.PermissionDeniedError, openai.UnprocessableEntityError)):
        return ProviderRejected(f"The {label} provider refused this request.")
    if isinstance(exc, openai.AuthenticationError):
        return ProviderError(f"The {label} provider rejected the configured credentials.")
    return ProviderError(f"The {label} provider failed to generate content.")


class GenerationProvider(ABC):
    """Uniform contract over the two generation capabilities."""

    name = "abstract"

    @abstractmethod
    def generate_image(self, prompt: str, model: str) -> str:
        """Return the URL of a generated image."""

    @abstractmethod
    def generate_text(self, prompt: str, model: str) -> str:
        """Return generated text."""

    @abstractmethod
    def check_connection(self) -> tuple[bool, str]:
        """Return (ok, message) for the status endpoint."""


class OpenAIProvider(GenerationProvider):
    """OpenAI Images + Chat Completions adapter."""

    name = "openai"

    def __init__(
        self,
        client: Optional[OpenAI] = None,
        timeout_seconds: Optional[float] = None,
        image_size: Optional[str] = None,
    ):
        self._client = client
        self.timeout_seconds = timeout_seconds or settings.OPENAI_TIMEOUT_SECONDS
        self.image_size = image_size or settings.OPENAI_IMAGE_SIZE

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    def generate_image(self, prompt: str, model: str) -> str:
        try:
            response = self.client.images.generate(
                model=model,
                prompt=prompt,
                n=1,
                size=self.image_size,
            )
        except Exception as exc:
            app_logger.warning(f"OpenAI image generation failed ({type(exc).__name__}): {exc}")
            raise normalize_provider_error(exc, "image", self.timeout_seconds) from exc

        data = response.data or []
        url = data[0].url if data else None
        if not url:
            raise ProviderError("The image provider returned no image.")
        return url

    def generate_text(self, prompt: str, model: str) -> str:
        try:
            completion = self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": settings.OPENAI_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=settings.OPENAI_TEMPERATURE,
                max_tokens=settings.OPENAI_MAX_TOKENS,
            )
        except Exception as exc:
            app_logger.warning(f"OpenAI text generation failed ({type(exc).__name__}): {exc}")
            raise normalize_provider_error(exc, "text", self.timeout_seconds) from exc

        choices = completion.choices or []
        text = (choices[0].message.content or "").strip() if choices else ""
        if not text:
            raise ProviderError("The text provider returned an empty response.")
        return text

    def check_connection(self) -> tuple[bool, str]:
        """List models as a cheap connectivity and credentials check."""
        try:
            self.client.models.list()
            return True, "OpenAI connection healthy"
        except Exception as exc:
            app_logger.error(f"OpenAI connection failed: {exc}")
            return False, normalize_provider_error(exc, "content", self.timeout_seconds).message
