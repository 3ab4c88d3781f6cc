"""Authentication request and response schemas."""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., description="Account password")

    model_config = {"json_schema_extra": {"example": {
        "email": "owner@studio.example.com",
        "password": "correct-horse-battery",
    }}}


class RegisterRequest(LoginRequest):
    """Registration adds a minimum password length and optional profile fields."""

    password: str = Field(..., min_length=8, description="Account password (minimum 8 characters)")
    username: Optional[str] = Field(default=None, max_length=100)
    full_name: Optional[str] = Field(default=None, max_length=255)


class TokenResponse(BaseModel):
    """Bearer token issued on register and login."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Seconds until the token expires")
    user_id: str = Field(..., description="Owner id used by all studio endpoints")
    email: str


class UserResponse(BaseModel):
    id: str
    email: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    is_active: bool
    is_verified: bool
