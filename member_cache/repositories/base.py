"""
Base Repository

Generic async CRUD access over one SQLAlchemy model. The caller owns the
session and its transaction; repositories only flush.
"""

from typing import Any, Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import structlog

from ..models import Base

logger = structlog.get_logger()


class BaseRepository:
    """
    Base repository bound to one session and one model.

    NOTE: No generics; each repository subclass specifies its model type
    directly.
    """

    def __init__(self, session: AsyncSession, model: Type[Base]):
        """
        Bind the repository to a session and a mapped model.

        Args:
            session: Caller-owned AsyncSession
            model: SQLAlchemy model class

        Raises:
            TypeError: If session or model is of the wrong kind
        """
        if not isinstance(session, AsyncSession):
            raise TypeError(
                f"session must be AsyncSession instance, got {type(session).__name__}"
            )

        if not model or not hasattr(model, "__tablename__"):
            raise TypeError(
                f"model must be valid SQLAlchemy model with __tablename__, got {type(model).__name__}"
            )

        self.session = session
        self.model = model

    async def find_all(self) -> list[Base]:
        """
        List every entity ordered by primary key.

        Returns:
            List of entities (possibly empty)
        """
        try:
            stmt = select(self.model).order_by(self.model.id)
            result = await self.session.execute(stmt)
            entities = list(result.scalars().all())

            logger.debug(
                "Repository: Entities listed",
                model=self.model.__name__,
                count=len(entities),
            )

            return entities

        except Exception as e:
            logger.error(
                "Repository: Failed to list entities",
                model=self.model.__name__,
                error=str(e),
                exc_info=True,
            )
            raise

    async def find_by_id(self, id: Any) -> Optional[Base]:
        """
        Get entity by primary key.

        Args:
            id: Entity id (REQUIRED)

        Returns:
            Entity if found, None otherwise

        Raises:
            ValueError: If id is None
        """
        if id is None:
            raise ValueError("Entity id is required (cannot be None)")

        try:
            entity = await self.session.get(self.model, id)

            if entity:
                logger.debug(
                    "Repository: Entity retrieved",
                    model=self.model.__name__,
                    entity_id=str(id),
                )

            return entity

        except Exception as e:
            logger.error(
                "Repository: Failed to get entity",
                model=self.model.__name__,
                entity_id=str(id),
                error=str(e),
                exc_info=True,
            )
            raise

    async def save(self, obj: Base) -> Base:
        """
        Insert or update an entity and flush it.

        Args:
            obj: Entity instance to persist

        Returns:
            The persisted entity with generated columns populated

        Raises:
            ValueError: If obj is None
            TypeError: If obj is not an instance of the repository model
        """
        if obj is None:
            raise ValueError("Entity object is required (cannot be None)")

        if not isinstance(obj, self.model):
            raise TypeError(
                f"Entity must be {self.model.__name__} instance, got {type(obj).__name__}"
            )

        try:
            self.session.add(obj)
            await self.session.flush()
            await self.session.refresh(obj)

            logger.info(
                "Repository: Entity saved",
                model=self.model.__name__,
                entity_id=str(obj.id),
            )

            return obj

        except Exception as e:
            logger.error(
                "Repository: Failed to save entity",
                model=self.model.__name__,
                error=str(e),
                exc_info=True,
            )
            raise

    async def delete_by_id(self, id: Any) -> bool:
        """
        Hard delete entity by primary key.

        Args:
            id: Entity id (REQUIRED)

        Returns:
            True if a row was deleted, False if none matched

        Raises:
            ValueError: If id is None
        """
        if id is None:
            raise ValueError("Entity id is required (cannot be None)")

        try:
            existing = await self.session.get(self.model, id)
            deleted = existing is not None
            if deleted:
                await self.session.delete(existing)
                await self.session.flush()

                logger.info(
                    "Repository: Entity deleted",
                    model=self.model.__name__,
                    entity_id=str(id),
                )
            else:
                logger.warning(
                    "Repository: Entity not found for deletion",
                    model=self.model.__name__,
                    entity_id=str(id),
                )

            return deleted

        except Exception as e:
            logger.error(
                "Repository: Failed to delete entity",
                model=self.model.__name__,
                entity_id=str(id),
                error=str(e),
                exc_info=True,
            )
            raise
