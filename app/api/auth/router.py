"""Authentication API routes.

Accounts live in the ``users`` table of whichever record store is
configured; tokens are local HS256 JWTs.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.auth.schemas import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from app.api.deps import get_account_service
from app.config.logger import app_logger
from app.config.settings import settings
from app.services.account_service import AccountService
from app.utils.auth import require_auth
from app.utils.local_tokens import create_local_token
from app.utils.passwords import hash_password, verify_password
from app.utils.responses import SuccessResponse, success_response

router = APIRouter(prefix="/v1/auth", tags=["auth"])


def _token_response(user: dict) -> TokenResponse:
    return TokenResponse(
        access_token=create_local_token(user["id"], user["email"]),
        token_type="bearer",
        expires_in=settings.LOCAL_AUTH_TOKEN_EXP_SECONDS,
        user_id=user["id"],
        email=user["email"],
    )


@router.post("/register", response_model=SuccessResponse[TokenResponse], status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
):
    """Register a new user account.

    Returns an access token for immediate use.
    """
    existing_user = await accounts.get_by_email(request.email)
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email already exists"
        )

    new_user = await accounts.create(
        email=request.email,
        hashed_password=hash_password(request.password),
        username=request.username,
        full_name=request.full_name,
    )

    app_logger.info(f"User registered: {new_user['email']} (ID: {new_user['id']})")

    return success_response(
        data=_token_response(new_user),
        message="User registered successfully"
    )


@router.post("/login", response_model=SuccessResponse[TokenResponse])
async def login(
    request: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
):
    """Authenticate user and return access token."""
    user = await accounts.get_by_email(request.email)

    if not user or not user.get("hashed_password"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    if not verify_password(request.password, user["hashed_password"]):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    if not user.get("is_active", False):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    await accounts.touch_last_login(user["id"])

    app_logger.info(f"User logged in: {user['email']} (ID: {user['id']})")

    return success_response(
        data=_token_response(user),
        message="Login successful"
    )


@router.get("/me", response_model=SuccessResponse[UserResponse])
async def get_current_user(
    user_id: str = Depends(require_auth),
    accounts: AccountService = Depends(get_account_service),
):
    """Get current authenticated user information."""
    user = await accounts.get_by_id(user_id)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return success_response(
        data=UserResponse(
            id=user["id"],
            email=user["email"],
            username=user.get("username"),
            full_name=user.get("full_name"),
            is_active=user.get("is_active", False),
            is_verified=user.get("is_verified", False),
        ),
        message="User information retrieved successfully"
    )
