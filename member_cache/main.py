"""
Member Cache - Main FastAPI Application

Wires the database, the Redis cache backend and the members router.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse
import structlog

from . import __version__
from .api.endpoints import members_router
from .api.error_handlers import register_exception_handlers
from .core.config import get_settings
from .core.database import database_manager
from .core.logging import configure_logging
from .infrastructure.redis.redis_service import redis_service

logger = structlog.get_logger()
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and release the database and Redis."""
    configure_logging()
    logger.info("Starting Member Cache API", environment=settings.ENVIRONMENT)

    try:
        await database_manager.initialize()
        if not settings.is_production:
            await database_manager.create_tables()
        await redis_service.initialize()

        logger.info("Member Cache API started successfully", version=__version__)

    except Exception:
        logger.exception("Failed to initialize application")
        raise

    yield

    logger.info("Shutting down Member Cache API")
    await redis_service.close()
    await database_manager.close()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Member Cache API",
        version=__version__,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    register_exception_handlers(app)
    app.include_router(members_router)

    @app.get("/health", tags=["health"])
    async def health():
        redis_health = await redis_service.health_check()
        database_health = await database_manager.health_check()
        healthy = (
            redis_health["status"] == "healthy"
            and database_health["status"] == "healthy"
        )
        return JSONResponse(
            status_code=200 if healthy else 503,
            content={
                "status": "healthy" if healthy else "unhealthy",
                "version": __version__,
                "redis": redis_health,
                "database": database_health,
            },
        )

    return app


app = create_app()
