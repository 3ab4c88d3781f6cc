"""HS256 access tokens for studio accounts."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config.settings import settings

TOKEN_ALGORITHM = "HS256"


def create_local_token(user_id: str, email: str) -> str:
    """Issue a token whose ``sub`` is the owner id."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(seconds=settings.LOCAL_AUTH_TOKEN_EXP_SECONDS),
    }
    return jwt.encode(payload, settings.LOCAL_AUTH_SECRET, algorithm=TOKEN_ALGORITHM)


def decode_local_token(token: str) -> dict:
    """Decode and verify a token.

    Raises:
        ValueError: If the token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.LOCAL_AUTH_SECRET, algorithms=[TOKEN_ALGORITHM])
    except JWTError as exc:
        raise ValueError(f"Invalid token: {exc}") from exc
