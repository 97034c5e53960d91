"""
Repository Pattern Implementation

All data access goes through repositories.
"""

from .base import BaseRepository
from .member import MemberRepository

__all__ = [
    "BaseRepository",
    "MemberRepository",
]
