"""
Member Repository
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Member
from .base import BaseRepository


class MemberRepository(BaseRepository):
    """Persistence gateway for Member rows."""

    def __init__(self, session: AsyncSession):
        """Initialize member repository."""
        super().__init__(session, Member)
