"""Record store backed by SQLModel over an async SQLAlchemy engine.

Works with Postgres (asyncpg) and SQLite (aiosqlite). Tables are created on
``init()`` from the models registered in ``app.models``.
"""

import ssl
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, Type
from urllib.parse import urlparse, urlunparse

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.config.logger import app_logger
from app.config.settings import settings
from app.db.base import RecordStore, primary_key_for
from app.models import Generation, Persona, PersonaImage, User
from app.utils.errors import StorageError

TABLE_MODELS: Dict[str, Type[SQLModel]] = {
    model.__tablename__: model
    for model in (User, Persona, PersonaImage, Generation)
}


def get_db_url(db_url: str) -> str:
    """Normalize a database URL for SQLAlchemy's async drivers."""
    if not db_url:
        raise ValueError("DATABASE_URL not configured")
    # SQLite or other non-Postgres URLs are returned as-is
    if db_url.startswith("sqlite"):
        return db_url

    # For Postgres URLs, strip sslmode (asyncpg handles SSL via connect_args)
    parsed = urlparse(db_url)
    query_parts = [p for p in parsed.query.split("&") if not p.startswith("sslmode=") and p]
    query = "&".join(query_parts)
    clean_url = urlunparse(
        (
            parsed.scheme,
            parsed.netloc,
            parsed.path,
            parsed.params,
            query,
            parsed.fragment,
        )
    )

    # Convert to asyncpg driver
    if clean_url.startswith("postgresql://"):
        clean_url = clean_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif clean_url.startswith("postgres://"):
        clean_url = clean_url.replace("postgres://", "postgresql+asyncpg://", 1)

    return clean_url


class SQLRecordStore(RecordStore):
    """SQLModel implementation of the record store."""

    backend_name = "sql"

    def __init__(self, database_url: Optional[str] = None, echo: bool = False):
        self.database_url = database_url or settings.effective_database_url
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_maker: Optional[async_sessionmaker] = None

    async def init(self) -> None:
        """Initialize the database engine and create tables."""
        if self._engine is not None:
            return

        try:
            db_url = get_db_url(self.database_url)
            app_logger.info("Initializing database connection")

            connect_args = {}
            engine_kwargs: Dict[str, Any] = {}
            if db_url.startswith("postgresql+asyncpg://"):
                # SSL context for Supabase / Postgres (no certificate verification)
                ssl_context = ssl.create_default_context()
                ssl_context.check_hostname = False
                ssl_context.verify_mode = ssl.CERT_NONE
                connect_args = {"ssl": ssl_context}
                engine_kwargs = {"pool_size": 20, "max_overflow": 0}
            else:
                engine_kwargs = {"poolclass": NullPool}

            engine = create_async_engine(
                db_url,
                echo=self.echo,
                connect_args=connect_args,
                **engine_kwargs,
            )

            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)

            self._engine = engine
            self._session_maker = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            app_logger.info("Database initialized successfully")
        except Exception as e:
            app_logger.error(f"Failed to initialize database: {e}")
            raise StorageError("Database initialization failed") from e

    async def close(self) -> None:
        """Dispose the database engine."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_maker = None
            app_logger.info("Database connection closed")

    @asynccontextmanager
    async def _session(self) -> AsyncGenerator[AsyncSession, None]:
        if self._session_maker is None:
            await self.init()
        async with self._session_maker() as session:
            yield session

    @staticmethod
    def _model_for(table: str) -> Type[SQLModel]:
        try:
            return TABLE_MODELS[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}") from None

    async def ping(self) -> tuple[bool, str]:
        """Run a lightweight health query against the database."""
        try:
            if self._engine is None:
                await self.init()
            async with self._engine.connect() as conn:
                result = await conn.execute(text("SELECT 1"))
                row = result.scalar()
            if row == 1:
                return True, "Database connection healthy"
            return False, f"Unexpected response: {row}"
        except Exception as e:
            return False, f"Database query failed: {str(e)}"

    async def insert(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        model_cls = self._model_for(table)
        try:
            async with self._session() as session:
                obj = model_cls(**data)
                session.add(obj)
                await session.commit()
                await session.refresh(obj)
                return obj.model_dump()
        except StorageError:
            raise
        except Exception as e:
            app_logger.error(f"Failed to insert into {table}: {e}")
            raise StorageError(f"Failed to insert into {table}") from e

    async def find_by_id(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        model_cls = self._model_for(table)
        try:
            async with self._session() as session:
                obj = await session.get(model_cls, record_id)
                return obj.model_dump() if obj is not None else None
        except StorageError:
            raise
        except Exception as e:
            app_logger.error(f"Failed to read from {table}: {e}")
            raise StorageError(f"Failed to read from {table}") from e

    async def update(self, table: str, record_id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        model_cls = self._model_for(table)
        try:
            async with self._session() as session:
                obj = await session.get(model_cls, record_id)
                if obj is None:
                    return None
                for key, value in patch.items():
                    setattr(obj, key, value)
                session.add(obj)
                await session.commit()
                await session.refresh(obj)
                return obj.model_dump()
        except StorageError:
            raise
        except Exception as e:
            app_logger.error(f"Failed to update record in {table}: {e}")
            raise StorageError(f"Failed to update record in {table}") from e

    async def delete_by_id(self, table: str, record_id: str) -> bool:
        model_cls = self._model_for(table)
        try:
            async with self._session() as session:
                obj = await session.get(model_cls, record_id)
                if obj is None:
                    return False
                await session.delete(obj)
                await session.commit()
                return True
        except StorageError:
            raise
        except Exception as e:
            app_logger.error(f"Failed to delete record from {table}: {e}")
            raise StorageError(f"Failed to delete record from {table}") from e

    async def query(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        model_cls = self._model_for(table)
        statement = select(model_cls)
        for key, value in (filters or {}).items():
            statement = statement.where(getattr(model_cls, key) == value)
        if order_by:
            column = getattr(model_cls, order_by)
            # Primary key breaks ties so equal timestamps keep a stable order
            tiebreak = getattr(model_cls, primary_key_for(table))
            if descending:
                statement = statement.order_by(column.desc(), tiebreak.desc())
            else:
                statement = statement.order_by(column.asc(), tiebreak.asc())
        if limit:
            statement = statement.limit(limit)

        try:
            async with self._session() as session:
                result = await session.exec(statement)
                return [row.model_dump() for row in result.all()]
        except StorageError:
            raise
        except Exception as e:
            app_logger.error(f"Failed to get records from {table}: {e}")
            raise StorageError(f"Failed to get records from {table}") from e
