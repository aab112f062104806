"""
Base repository with standardized CRUD operations.

Repositories only flush; committing and rolling back is owned by the
service layer's transaction scope.
"""

from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from outpass.config.logging import get_logger
from outpass.core.exceptions import ValidationError
from outpass.models.base import BaseModel

logger = get_logger(__name__)

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository bound to one model class and one session.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    # ==================== Read Operations ====================

    def get_by_id(self, entity_id: Any) -> Optional[ModelType]:
        """Get entity by primary key, or None."""
        if entity_id is None:
            return None
        return self.db.get(self.model, str(entity_id))

    def find_all(
        self,
        *criteria: Any,
        order_by: Optional[Any] = None,
    ) -> List[ModelType]:
        """
        Find entities matching all given criteria.

        Args:
            criteria: SQLAlchemy boolean expressions combined with AND
            order_by: Optional ordering expression, defaults to creation order

        Returns:
            List of matching entities
        """
        stmt = select(self.model).where(*criteria)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        elif hasattr(self.model, "created_at"):
            stmt = stmt.order_by(self.model.created_at.desc())
        return list(self.db.scalars(stmt).unique().all())

    def find_one(self, *criteria: Any) -> Optional[ModelType]:
        stmt = select(self.model).where(*criteria).limit(1)
        return self.db.scalars(stmt).unique().first()

    def count(self, *criteria: Any) -> int:
        stmt = select(func.count()).select_from(self.model).where(*criteria)
        return int(self.db.scalar(stmt) or 0)

    def exists(self, *criteria: Any) -> bool:
        return self.count(*criteria) > 0

    # ==================== Write Operations ====================

    def create(self, entity: ModelType) -> ModelType:
        """
        Add a new entity and flush so generated values are available.

        Raises:
            ValidationError: If a unique or integrity constraint is violated
        """
        self.db.add(entity)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ValidationError(
                f"{self.model.__name__} violates a uniqueness or integrity constraint",
                details={"error": str(e.orig)},
            ) from e
        logger.debug(f"Created {self.model.__name__} with id: {entity.id}")
        return entity

    def create_many(self, entities: Iterable[ModelType]) -> List[ModelType]:
        """Add several entities in one flush."""
        entities = list(entities)
        self.db.add_all(entities)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ValidationError(
                f"{self.model.__name__} batch violates a uniqueness or integrity constraint",
                details={"error": str(e.orig)},
            ) from e
        return entities

    def update(self, entity: ModelType, values: Dict[str, Any]) -> ModelType:
        """Apply attribute changes to a loaded entity and flush."""
        for key, value in values.items():
            if not hasattr(entity, key):
                raise ValidationError(f"Unknown field '{key}'", field=key)
            setattr(entity, key, value)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ValidationError(
                f"{self.model.__name__} update violates a uniqueness or integrity constraint",
                details={"error": str(e.orig)},
            ) from e
        return entity

    def delete(self, entity: ModelType) -> None:
        self.db.delete(entity)
        self.db.flush()
        logger.debug(f"Deleted {self.model.__name__} with id: {entity.id}")

    def refresh(self, entity: ModelType) -> ModelType:
        self.db.refresh(entity)
        return entity

    # ==================== Statement Helpers ====================

    def _execute_write(self, stmt: Any) -> int:
        """
        Run a bulk UPDATE and expire cached instances of the model.

        Statements run with ``synchronize_session=False``; expiring makes the
        next attribute access reload the values the database now holds.

        Returns:
            Number of rows matched by the statement
        """
        rowcount = self.db.execute(stmt).rowcount
        for instance in list(self.db.identity_map.values()):
            if isinstance(instance, self.model):
                self.db.expire(instance)
        return rowcount
