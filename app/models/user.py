"""Studio account. The account id is the ``owner_id`` on personas and generations."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

USERS_TABLE = "users"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    __tablename__ = USERS_TABLE

    id: str = Field(primary_key=True, max_length=36, description="uuid4 string")
    email: str = Field(unique=True, index=True, max_length=255, description="Stored lower-cased")
    username: Optional[str] = Field(default=None, max_length=100)
    full_name: Optional[str] = Field(default=None, max_length=255)
    hashed_password: Optional[str] = Field(default=None, max_length=255, description="salt$sha256 digest")
    is_active: bool = Field(default=True)
    is_verified: bool = Field(default=False)

    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True)))
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True)))
