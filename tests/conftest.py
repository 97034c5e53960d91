"""
Main pytest configuration for member cache tests.

Provides an in-memory SQLite database, an in-memory Redis double and a
MemberService wired to both.
"""

import os
from fnmatch import fnmatchcase
from typing import Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing application modules
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_JSON"] = "false"

from member_cache.core.config import Settings
from member_cache.core.database import DatabaseManager
from member_cache.core.logging import configure_logging
from member_cache.infrastructure.redis.redis_service import RedisService
from member_cache.repositories import MemberRepository
from member_cache.schemas import MemberDTO
from member_cache.services.member_service import MemberService

configure_logging(level="DEBUG", json_logs=False)


class InMemoryRedis:
    """
    Minimal stand-in for redis.asyncio.Redis with decode_responses=True.

    Time is driven by advance() so TTL expiry is deterministic. SCAN pages
    through the sorted keyspace by COUNT; with repeat_scan_keys=True every
    page after the first also repeats the previous page's last key, the way
    a real SCAN may return a key more than once.
    """

    def __init__(self, repeat_scan_keys: bool = False):
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}
        self.now = 0.0
        self.repeat_scan_keys = repeat_scan_keys
        self.scan_calls = 0
        self.keys_calls = 0
        self.set_calls: List[Tuple[str, Optional[int]]] = []
        self.closed = False

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def _alive(self, key: str) -> bool:
        entry = self._data.get(key)
        if entry is None:
            return False
        expires_at = entry[1]
        if expires_at is not None and expires_at <= self.now:
            del self._data[key]
            return False
        return True

    def _live_keys(self) -> List[str]:
        return sorted(k for k in list(self._data) if self._alive(k))

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> Optional[str]:
        if not self._alive(key):
            return None
        return self._data[key][0]

    async def set(self, key: str, value, ex: Optional[int] = None, nx: bool = False):
        if nx and self._alive(key):
            return None
        expires_at = self.now + ex if ex else None
        self._data[key] = (value if isinstance(value, str) else str(value), expires_at)
        self.set_calls.append((key, ex))
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._alive(key):
                del self._data[key]
                removed += 1
        return removed

    async def ttl(self, key: str) -> int:
        if not self._alive(key):
            return -2
        expires_at = self._data[key][1]
        if expires_at is None:
            return -1
        return int(round(expires_at - self.now))

    async def scan(self, cursor: int = 0, match: Optional[str] = None, count: Optional[int] = None):
        self.scan_calls += 1
        keys = self._live_keys()
        count = count or 10
        start = int(cursor)
        end = start + count

        page = keys[start:end]
        if self.repeat_scan_keys and start > 0:
            page = [keys[start - 1]] + page
        if match is not None:
            page = [k for k in page if fnmatchcase(k, match)]

        next_cursor = end if end < len(keys) else 0
        return next_cursor, page

    async def keys(self, pattern: str = "*") -> List[str]:
        self.keys_calls += 1
        return [k for k in self._live_keys() if fnmatchcase(k, pattern)]

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def test_settings() -> Settings:
    """Settings for tests; small SCAN pages to exercise the cursor loop."""
    return Settings(
        ENVIRONMENT="test",
        DATABASE_URL="sqlite+aiosqlite://",
        REDIS_SCAN_COUNT=2,
        MEMBER_KEY_TTL_SECONDS=100,
        LOG_JSON=False,
    )


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def redis_service(test_settings, fake_redis) -> RedisService:
    return RedisService(settings=test_settings, client=fake_redis)


@pytest_asyncio.fixture
async def database(test_settings):
    """Initialized DatabaseManager over a private in-memory SQLite database."""
    manager = DatabaseManager(settings=test_settings)
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await manager.initialize(engine=engine)
    await manager.create_tables()
    try:
        yield manager
    finally:
        await manager.close()


@pytest.fixture
def member_service(database, redis_service, test_settings) -> MemberService:
    return MemberService(
        session_factory=database.get_session,
        redis=redis_service,
        settings=test_settings,
    )


@pytest.fixture
def find_all_calls(monkeypatch) -> List[int]:
    """Record every MemberRepository.find_all() call (one entry per call)."""
    calls: List[int] = []
    original = MemberRepository.find_all

    async def counting_find_all(self):
        calls.append(1)
        return await original(self)

    monkeypatch.setattr(MemberRepository, "find_all", counting_find_all)
    return calls


@pytest.fixture
def sample_members() -> List[MemberDTO]:
    return [
        MemberDTO(username="kim", telephone="010-1111-2222", age=31, gender="F"),
        MemberDTO(username="lee", telephone="010-3333-4444", age=27, gender="M"),
        MemberDTO(username="park", telephone="010-5555-6666", age=45, gender="F"),
    ]


@pytest_asyncio.fixture
async def seeded_members(member_service, sample_members) -> List[MemberDTO]:
    """Persist sample_members and return them with their ids."""
    return [await member_service.create_member(dto) for dto in sample_members]


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "redis: marks tests as Redis-related")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
