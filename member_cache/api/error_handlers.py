"""
Exception handlers mapping domain and Redis errors to HTTP responses.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from ..exceptions import MemberException, MemberNotFoundException
from ..infrastructure.redis.exceptions import (
    RedisException,
    RedisKeyNotFoundException,
)

logger = structlog.get_logger()


def _error_body(exc) -> dict:
    return {
        "error": exc.error_code,
        "message": exc.message,
        "details": exc.details,
    }


async def member_exception_handler(request: Request, exc: MemberException):
    status_code = 404 if isinstance(exc, MemberNotFoundException) else 400
    logger.info(
        "Member request failed",
        path=request.url.path,
        error_code=exc.error_code,
        status_code=status_code,
    )
    return JSONResponse(status_code=status_code, content=_error_body(exc))


async def redis_exception_handler(request: Request, exc: RedisException):
    if isinstance(exc, RedisKeyNotFoundException):
        status_code = 404
        logger.info("Cache key absent", path=request.url.path, **exc.details)
    else:
        status_code = 503
        logger.error(
            "Cache backend failure",
            path=request.url.path,
            error_code=exc.error_code,
            error=exc.message,
        )
    return JSONResponse(status_code=status_code, content=_error_body(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MemberException, member_exception_handler)
    app.add_exception_handler(RedisException, redis_exception_handler)
