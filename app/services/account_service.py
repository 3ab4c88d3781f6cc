"""User accounts stored in the record store's ``users`` table."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from app.config.logger import app_logger
from app.db.base import RecordStore
from app.models.user import USERS_TABLE


class AccountService:
    def __init__(self, store: RecordStore):
        self.store = store

    async def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        rows = await self.store.query(USERS_TABLE, filters={"email": email.lower()}, limit=1)
        return rows[0] if rows else None

    async def get_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self.store.find_by_id(USERS_TABLE, user_id)

    async def create(
        self,
        email: str,
        hashed_password: str,
        username: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        user = await self.store.insert(
            USERS_TABLE,
            {
                "id": str(uuid4()),
                "email": email.lower(),
                "username": username,
                "full_name": full_name,
                "hashed_password": hashed_password,
                "is_active": True,
                "is_verified": True,
                "created_at": now,
                "updated_at": now,
            },
        )
        app_logger.info(f"Created user {user['id']}")
        return user

    async def touch_last_login(self, user_id: str) -> None:
        now = datetime.now(timezone.utc)
        await self.store.update(USERS_TABLE, user_id, {"last_login_at": now, "updated_at": now})
