"""
Member Cache Database Configuration

Async database connection management:
- Engine creation with retry and exponential backoff
- Session factory with commit/rollback handling
- Health check and schema bootstrap for development
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Any, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy import text
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)
import structlog

from .config import Settings, get_settings
from ..models import Base

logger = structlog.get_logger()


class DatabaseManager:
    """
    Database connection manager.

    Owns the async engine and session factory. Sessions handed out by
    get_session() commit on success and roll back on any exception.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker] = None

    def _engine_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "echo": self.settings.DATABASE_ECHO,
            "pool_pre_ping": True,
        }
        if not self.settings.is_sqlite:
            kwargs.update(
                pool_size=self.settings.DATABASE_POOL_SIZE,
                max_overflow=self.settings.DATABASE_POOL_SIZE,
                pool_recycle=3600,
            )
        return kwargs

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((ConnectionError, OSError)),
        before_sleep=lambda retry_state: logger.warning(
            "Database connection retry",
            attempt=retry_state.attempt_number,
            wait_time=retry_state.next_action.sleep,
        ),
        reraise=True,
    )
    async def _create_engine_with_retry(self) -> AsyncEngine:
        """Create database engine and verify connectivity."""
        start_time = time.time()
        engine = create_async_engine(self.settings.DATABASE_URL, **self._engine_kwargs())

        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception:
            await engine.dispose()
            raise

        logger.info(
            "Database engine created successfully",
            duration_seconds=time.time() - start_time,
        )
        return engine

    async def initialize(self, engine: Optional[AsyncEngine] = None) -> None:
        """Initialize engine and session factory.

        Args:
            engine: Optional pre-built engine (used by tests)
        """
        if self.engine is not None:
            return

        try:
            self.engine = engine or await self._create_engine_with_retry()
            self.session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
            logger.info("Database initialized successfully")

        except Exception as e:
            logger.error(
                "Database initialization failed",
                error=str(e),
                exc_info=True,
            )
            raise

    async def create_tables(self) -> None:
        """Create all tables (development and tests; production uses Alembic)."""
        if not self.engine:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database tables ensured", tables=sorted(Base.metadata.tables))

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get database session with transaction management.

        Yields:
            AsyncSession: committed on success, rolled back on error
        """
        if not self.session_factory:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()

            except Exception as e:
                await session.rollback()

                logger.error(
                    "Database transaction failed",
                    error=str(e),
                    exc_info=True,
                )
                raise

    async def health_check(self) -> Dict[str, Any]:
        """Run SELECT 1 and report latency."""
        start_time = time.time()

        if not self.engine:
            return {"status": "unhealthy", "error": "Database not initialized"}

        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

            return {
                "status": "healthy",
                "response_time_ms": round((time.time() - start_time) * 1000, 2),
            }

        except Exception as e:
            logger.warning("Database health check failed", error=str(e))
            return {"status": "unhealthy", "error": str(e)}

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None

            logger.info("Database connections closed")


# Shared by the app lifespan and the API dependencies
database_manager = DatabaseManager()
