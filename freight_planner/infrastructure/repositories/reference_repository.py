"""
Reference Repositories - Master data (cities, clients, suppliers, truck types)
and organization settings.
"""
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from freight_planner.models import (
    City, Client, Supplier, TruckType, Organization, OrganizationSettings
)
from .base_repository import BaseRepository, T


class ReferenceRepository(BaseRepository[T]):
    """Name-searchable master data with an active flag."""

    search_columns = ('name',)

    def search(
        self,
        organization_id: int,
        q: Optional[str] = None,
        is_active: Optional[bool] = True,
    ) -> List[T]:
        """
        List entities ordered by name.

        Args:
            q: Case-insensitive substring matched against the search columns
            is_active: Active flag to match; None lists every entity
        """
        query = self.scoped(organization_id)
        if q:
            pattern = f"%{q.strip().lower()}%"
            query = query.filter(or_(*[
                func.lower(getattr(self.model_class, column)).like(pattern)
                for column in self.search_columns
            ]))
        if is_active is not None:
            query = query.filter(self.model_class.is_active == is_active)
        return query.order_by(self.model_class.name, self.model_class.id).all()

    def find_by_name(self, organization_id: int, name: str) -> Optional[T]:
        return self.scoped(organization_id).filter(
            func.lower(self.model_class.name) == name.strip().lower()
        ).first()


class CityRepository(ReferenceRepository[City]):
    search_columns = ('name', 'code')

    def __init__(self, session: Session):
        super().__init__(session, City)

    def find_by_code(self, organization_id: int, code: str) -> Optional[City]:
        return self.scoped(organization_id).filter(City.code == code).first()


class ClientRepository(ReferenceRepository[Client]):
    def __init__(self, session: Session):
        super().__init__(session, Client)


class SupplierRepository(ReferenceRepository[Supplier]):
    def __init__(self, session: Session):
        super().__init__(session, Supplier)


class TruckTypeRepository(ReferenceRepository[TruckType]):
    def __init__(self, session: Session):
        super().__init__(session, TruckType)


class OrganizationRepository:
    """Organizations and their planning settings."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, organization_id: int) -> Optional[Organization]:
        return self.session.query(Organization).filter(
            Organization.id == organization_id
        ).first()

    def get_settings(self, organization_id: int) -> Optional[OrganizationSettings]:
        return self.session.query(OrganizationSettings).filter(
            OrganizationSettings.organization_id == organization_id
        ).first()
