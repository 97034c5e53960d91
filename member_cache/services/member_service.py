"""
Member Service - caching facade over the member store

Two cache paths coexist:

- read-through: the whole member list under the "member" key, loaded on a
  miss and evicted by cache_reset()/cache_renewal(). This entry is the one
  invalidation acts on.
- manual: one "member::<id>" key per member written with a fixed TTL by
  get_member_list_by_redis_template() and read back by
  get_member_from_redis(). These keys are never evicted by writes and go
  stale until their TTL runs out.

Update and delete touch neither path.
"""

from typing import AsyncContextManager, Callable, List, Optional, Set

from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from ..constants import MEMBER_CACHE_NAME, SCAN_ALL_PATTERN, member_key
from ..core.config import Settings, get_settings
from ..exceptions import MemberNotFoundException
from ..infrastructure.redis.exceptions import RedisKeyNotFoundException
from ..infrastructure.redis.redis_service import RedisService
from ..mappers import MemberMapper, member_mapper
from ..repositories import MemberRepository
from ..schemas import MemberDTO, MemberDTOList
from .cache.read_through import ReadThroughCache

logger = structlog.get_logger()
tracer = trace.get_tracer(__name__)

SessionFactory = Callable[[], AsyncContextManager[AsyncSession]]


class MemberService:
    """
    Caching facade for members.

    Args:
        session_factory: Returns an async context manager yielding a session
            that commits on exit and rolls back on error
        redis: Cache backend client
        settings: TTLs and scan batch size
        mapper: Entity/DTO mapper
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        redis: RedisService,
        settings: Optional[Settings] = None,
        mapper: MemberMapper = member_mapper,
    ):
        self.settings = settings or get_settings()
        self.session_factory = session_factory
        self.redis = redis
        self.mapper = mapper
        self.member_list_cache: ReadThroughCache[List[MemberDTO]] = ReadThroughCache(
            redis,
            MEMBER_CACHE_NAME,
            MemberDTOList,
            ttl=self.settings.MEMBER_LIST_CACHE_TTL_SECONDS,
        )

    async def _load_members(self) -> List[MemberDTO]:
        async with self.session_factory() as session:
            members = await MemberRepository(session).find_all()
            return [self.mapper.to_dto(member) for member in members]

    # ---------- read-through path ----------

    async def get_member_list(self) -> List[MemberDTO]:
        """Full member list, served from the "member" cache entry when present."""
        return await self.member_list_cache.get_or_load(
            MEMBER_CACHE_NAME, self._load_members
        )

    async def get_member_by_proxy(self, member_id: int) -> MemberDTO:
        """
        Find one member in the cached list.

        Raises:
            MemberNotFoundException: If no element has this id
        """
        members = await self.get_member_list()
        logger.debug("Finding member in cached list", member_id=member_id)

        for member in members:
            if member.id == member_id:
                return member

        raise MemberNotFoundException(member_id)

    async def cache_reset(self) -> None:
        """Evict the read-through member list. Idempotent."""
        await self.member_list_cache.evict(MEMBER_CACHE_NAME)

    async def cache_renewal(self) -> List[MemberDTO]:
        """Evict the member list and immediately repopulate it."""
        await self.cache_reset()
        return await self.get_member_list()

    # ---------- manual path ----------

    async def get_member_list_by_redis_template(self) -> List[MemberDTO]:
        """
        Read all members fresh and write one "member::<id>" key per member.

        Every key is overwritten with MEMBER_KEY_TTL_SECONDS. The return value
        is the freshly mapped list, not a cache read-back.
        """
        members = await self._load_members()
        ttl = self.settings.MEMBER_KEY_TTL_SECONDS

        with tracer.start_as_current_span("member_service.populate_member_keys") as span:
            for member in members:
                await self.redis.set_json(
                    member_key(member.id), member.model_dump(mode="json"), ttl=ttl
                )
            span.set_attribute("cache.keys_written", len(members))

        logger.info("Member keys written", count=len(members), ttl=ttl)
        return members

    async def get_member_from_redis(self, member_id: int) -> MemberDTO:
        """
        Read one "member::<id>" key directly; never falls back to the database.

        Raises:
            RedisKeyNotFoundException: If the key is absent or expired
        """
        key = member_key(member_id)
        logger.debug("Reading member key", key=key)

        raw = await self.redis.get_json(key)
        if raw is None:
            raise RedisKeyNotFoundException(key)

        member = MemberDTO.model_validate(raw)
        logger.debug(
            "Member read from cache",
            key=key,
            member_id=member.id,
            username=member.username,
            telephone=member.telephone,
        )
        return member

    async def show_all_keys_by_scanning(self) -> Set[str]:
        """Every key in the cache backend, enumerated with cursor SCAN."""
        with tracer.start_as_current_span("member_service.scan_keys") as span:
            keys = await self.redis.scan_keys(
                SCAN_ALL_PATTERN, count=self.settings.REDIS_SCAN_COUNT
            )
            span.set_attribute("cache.keys_found", len(keys))

        for key in sorted(keys):
            logger.debug("Matched key", key=key)
        return keys

    # ---------- CRUD ----------

    async def create_member(self, dto: MemberDTO) -> MemberDTO:
        async with self.session_factory() as session:
            member = await MemberRepository(session).save(self.mapper.to_entity(dto))
            return self.mapper.to_dto(member)

    async def update_member(self, member_id: int, dto: MemberDTO) -> MemberDTO:
        """
        Replace every field of an existing member in one transaction.

        Raises:
            MemberNotFoundException: If the member does not exist
        """
        async with self.session_factory() as session:
            repository = MemberRepository(session)
            member = await repository.find_by_id(member_id)
            if member is not None:
                member.update(dto.username, dto.telephone, dto.age, dto.gender)
                member = await repository.save(member)

        # Not found is raised after the session has closed
        if member is None:
            raise MemberNotFoundException(member_id)
        return self.mapper.to_dto(member)

    async def delete_member(self, member_id: int) -> int:
        """
        Delete an existing member in one transaction and return its id.

        Raises:
            MemberNotFoundException: If the member does not exist
        """
        async with self.session_factory() as session:
            deleted = await MemberRepository(session).delete_by_id(member_id)

        if not deleted:
            raise MemberNotFoundException(member_id)
        return member_id
