"""
Base Repository - Organization-scoped repository pattern.

Every query issued through a repository is filtered to one organization
before rows reach the planning core.
"""
from typing import Generic, TypeVar, List, Optional, Type
from sqlalchemy.orm import Query, Session

from freight_planner.models import Base

T = TypeVar('T', bound=Base)


class BaseRepository(Generic[T]):
    """
    Base repository providing tenant-scoped data access.

    Type Parameters:
        T: The SQLAlchemy model type this repository manages; it must
           carry an `organization_id` column.
    """

    def __init__(self, session: Session, model_class: Type[T]):
        """
        Initialize the repository.

        Args:
            session: SQLAlchemy database session
            model_class: The model class this repository manages
        """
        self.session = session
        self.model_class = model_class

    def scoped(self, organization_id: int) -> Query:
        """Query of this model restricted to one organization."""
        return self.session.query(self.model_class).filter(
            self.model_class.organization_id == organization_id
        )

    def get(self, organization_id: int, entity_id: int) -> Optional[T]:
        """
        Retrieve an entity by primary key within an organization.

        Entities owned by another organization are reported as missing.
        """
        return self.scoped(organization_id).filter(
            self.model_class.id == entity_id
        ).first()

    def list(self, organization_id: int, limit: Optional[int] = None, offset: int = 0) -> List[T]:
        """List an organization's entities with optional pagination."""
        query = self.scoped(organization_id).order_by(self.model_class.id).offset(offset)
        if limit:
            query = query.limit(limit)
        return query.all()

    def count(self, organization_id: int) -> int:
        return self.scoped(organization_id).count()

    def exists(self, organization_id: int, **criteria) -> bool:
        """Check if an entity matching the criteria exists in the organization."""
        query = self.scoped(organization_id)
        for field, value in criteria.items():
            query = query.filter(getattr(self.model_class, field) == value)
        return query.first() is not None

    def add(self, entity: T) -> T:
        self.session.add(entity)
        return entity

    def delete(self, entity: T) -> None:
        self.session.delete(entity)

    def flush(self) -> None:
        """Flush pending changes to the database."""
        self.session.flush()
