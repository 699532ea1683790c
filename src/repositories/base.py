"""Base repository with common CRUD operations."""
from typing import TypeVar, Generic, Type, Optional, List, Dict, Any
from sqlalchemy.orm import Session

from src.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with common database operations."""

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Create new record.

        Args:
            obj_in: Dictionary with object data

        Returns:
            Created model instance
        """
        db_obj = self.model(**obj_in)
        self.db.add(db_obj)
        self.db.commit()
        self.db.refresh(db_obj)
        return db_obj

    def get(self, id: Any, fresh: bool = False) -> Optional[ModelType]:
        """
        Get record by primary key.

        Args:
            id: Primary key value
            fresh: Bypass the session identity map and reload from the database

        Returns:
            Model instance or None if not found
        """
        query = self.db.query(self.model).filter(self.model.id == id)
        if fresh:
            query = query.execution_options(populate_existing=True)
        return query.first()

    def update(self, db_obj: ModelType, obj_in: Dict[str, Any]) -> ModelType:
        """
        Update fields on an already loaded record.

        Args:
            db_obj: Model instance
            obj_in: Dictionary with fields to update

        Returns:
            Updated model instance
        """
        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        self.db.commit()
        self.db.refresh(db_obj)
        return db_obj

    def get_by_field(self, field_name: str, field_value: Any) -> Optional[ModelType]:
        """
        Get record by specific field value.

        Args:
            field_name: Name of the field to filter by
            field_value: Value to match

        Returns:
            Model instance or None if not found
        """
        if not hasattr(self.model, field_name):
            return None

        return self.db.query(self.model).filter(
            getattr(self.model, field_name) == field_value
        ).first()

    def list_all(self) -> List[ModelType]:
        """Return every record ordered by primary key."""
        return self.db.query(self.model).order_by(self.model.id).all()

