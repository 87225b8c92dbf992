"""
Hello Directory Database Configuration

Database connection management:
- Async engine and session factory built once per process
- Start-up connection retry with exponential backoff
- Transaction-per-session helper with commit/rollback
"""

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..models import Base
from .config import Settings

logger = structlog.get_logger()


def _is_memory_sqlite(url: str) -> bool:
    return ":memory:" in url or url.rstrip("/").endswith("aiosqlite:")


class DatabaseManager:
    """
    Owner of the process-wide engine and session factory.

    Created in the application lifespan and disposed on shutdown.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker] = None

    def _engine_kwargs(self) -> Dict[str, Any]:
        url = self.settings.DATABASE_URL
        if self.settings.is_sqlite and _is_memory_sqlite(url):
            # One shared connection so every session sees the same database
            return {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        if self.settings.is_sqlite:
            return {}
        return {
            "pool_size": self.settings.DATABASE_POOL_SIZE,
            "max_overflow": self.settings.DATABASE_MAX_OVERFLOW,
            "pool_timeout": self.settings.DATABASE_POOL_TIMEOUT,
            "pool_pre_ping": True,
        }

    async def initialize(self, create_schema: bool = True) -> None:
        """Create engine and session factory, verify connectivity, create tables."""
        if self.engine is not None:
            return

        self.engine = create_async_engine(
            self.settings.DATABASE_URL, echo=False, **self._engine_kwargs()
        )
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        start_time = time.time()
        await self._connect_with_retry()
        if create_schema:
            await self.create_schema()

        logger.info(
            "Database initialized",
            dialect=self.engine.dialect.name,
            duration_seconds=round(time.time() - start_time, 3),
        )

    async def _connect_with_retry(self) -> None:
        @retry(
            stop=stop_after_attempt(self.settings.DATABASE_CONNECT_RETRIES),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type((OperationalError, ConnectionError, OSError)),
            before_sleep=lambda retry_state: logger.warning(
                "Database connection retry",
                attempt=retry_state.attempt_number,
                wait_time=retry_state.next_action.sleep,
            ),
            reraise=True,
        )
        async def _select_one() -> None:
            async with self.engine.connect() as conn:
                result = await conn.execute(text("SELECT 1"))
                if result.scalar() != 1:
                    raise RuntimeError("SELECT 1 returned an unexpected result")

        await _select_one()

    async def create_schema(self) -> None:
        """Create all tables known to the declarative base."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session wrapped in one transaction.

        Commits on success, rolls back and re-raises on any error.
        """
        if self.session_factory is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def health_check(self) -> Dict[str, Any]:
        """Check the database with ``SELECT 1``."""
        start_time = time.time()
        try:
            async with self.session() as session:
                result = await session.execute(text("SELECT 1"))
                healthy = result.scalar() == 1
            return {
                "status": "healthy" if healthy else "unhealthy",
                "response_time_ms": round((time.time() - start_time) * 1000, 2),
            }
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {"status": "unhealthy", "error": str(e)}

    async def close(self) -> None:
        """Dispose the engine and its pool."""
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None
            logger.info("Database connections closed")
