"""Bearer token authentication dependencies.

Every studio endpoint except auth and health resolves the caller to an
owner id through ``require_auth``; services never see the token itself.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.utils.local_tokens import decode_local_token

security_scheme = HTTPBearer(
    scheme_name="Bearer",
    description="Bearer token authentication",
    auto_error=False,
)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_auth_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security_scheme),
) -> str:
    """Extract the Bearer token from the Authorization header."""
    if not credentials:
        raise _unauthorized("Missing or invalid authorization header")

    token = credentials.credentials.strip()
    if not token:
        raise _unauthorized("Missing authentication token")
    return token


async def verify_token(token: str = Depends(get_auth_token)) -> dict:
    """Decode the token and return ``{"user_id", "email"}``.

    Raises:
        HTTPException: 401 if the token is invalid, expired or lacks claims
    """
    try:
        payload = decode_local_token(token)
    except ValueError as exc:
        raise _unauthorized(str(exc)) from exc

    user_id = payload.get("sub")
    email = payload.get("email")
    if not user_id or not email:
        raise _unauthorized("Invalid token payload")
    return {"user_id": str(user_id), "email": email}


async def require_auth(token_payload: dict = Depends(verify_token)) -> str:
    """Dependency that yields the authenticated owner id."""
    return token_payload["user_id"]
