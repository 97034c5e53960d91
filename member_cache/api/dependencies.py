"""
FastAPI dependencies.
"""

from functools import lru_cache

from ..core.config import get_settings
from ..core.database import database_manager
from ..infrastructure.redis.redis_service import redis_service
from ..services.member_service import MemberService


@lru_cache()
def get_member_service() -> MemberService:
    """Process-wide MemberService wired to the global database and Redis."""
    return MemberService(
        session_factory=database_manager.get_session,
        redis=redis_service,
        settings=get_settings(),
    )
