"""
Base repository class with common CRUD operations using async SQLAlchemy.
Provides generic database operations that can be extended by specific repositories.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from estate_api.database import Base
from typing import TypeVar, Generic, Optional, Dict, Any, Type
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common CRUD operations.
    Every write commits its own unit of work and rolls back on failure.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository with model class and database session.

        Args:
            model: SQLAlchemy model class
            db: Async database session
        """
        self.model = model
        self.db = db

    @property
    def dialect_name(self) -> str:
        """Name of the SQL dialect the session is bound to."""
        return self.db.bind.dialect.name

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Create a new record in the database.

        Args:
            obj_in: Dictionary of field values for the new record

        Returns:
            Created model instance
        """
        try:
            db_obj = self.model(**obj_in)
            self.db.add(db_obj)
            await self.db.commit()
            await self.db.refresh(db_obj)
            logger.debug(f"Created {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create {self.model.__name__}: {e}")
            raise

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        """
        Get a record by its ID.

        Returns:
            Model instance if found, None otherwise
        """
        query = (
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        obj = result.scalar_one_or_none()

        if obj is None:
            logger.debug(f"{self.model.__name__} with id {id} not found")

        return obj

    async def update(self, id: int, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        """
        Update a record by its ID.

        Only keys present in obj_in are written; None is written as NULL.

        Returns:
            Updated model instance if found, None otherwise
        """
        db_obj = await self.get_by_id(id)
        if db_obj is None:
            return None

        try:
            self.apply_changes(db_obj, obj_in)
            await self.db.commit()
            await self.db.refresh(db_obj)
            logger.debug(f"Updated {self.model.__name__} with id: {id}")
            return db_obj
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to update {self.model.__name__} {id}: {e}")
            raise

    def apply_changes(self, db_obj: ModelType, obj_in: Dict[str, Any]) -> None:
        """Copy known attributes from obj_in onto db_obj without committing."""
        for field, value in obj_in.items():
            if hasattr(db_obj, field) and field not in ("id", "created_at", "updated_at"):
                setattr(db_obj, field, value)

    async def exists(self, id: int) -> bool:
        """Check whether a record with the given ID exists."""
        query = select(self.model.id).where(self.model.id == id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none() is not None
