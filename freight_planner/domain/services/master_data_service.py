"""
Master Data Service - Cities, clients, suppliers and truck types.

Names are unique per organization and kind, compared case-insensitively.
City codes are stored upper-case and are unique per organization; they
become part of every route key built from the city.
"""
import logging
import re
from typing import List, Mapping, Optional

from sqlalchemy.orm import Session

from freight_planner.models import City, Client, Supplier, TruckType
from freight_planner.infrastructure.repositories import (
    ReferenceRepository,
    CityRepository,
    ClientRepository,
    SupplierRepository,
    TruckTypeRepository,
    OrganizationRepository,
)
from ..exceptions import DuplicateReferenceError, ReferenceNotFoundError, ValidationError

logger = logging.getLogger(__name__)

CITY_CODE_PATTERN = re.compile(r'^[A-Z0-9]{2,10}$')


def normalize_city_code(code: Optional[str]) -> str:
    normalized = (code or "").strip().upper()
    if not CITY_CODE_PATTERN.match(normalized):
        raise ValidationError("code", "must be 2-10 letters or digits")
    return normalized


def _require_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("name", "name is required")
    return name


class MasterDataService:
    """Create, list and edit the organization's repository entities."""

    KINDS = {
        'city': ("City", CityRepository),
        'client': ("Client", ClientRepository),
        'supplier': ("Supplier", SupplierRepository),
        'truck_type': ("Truck type", TruckTypeRepository),
    }

    def __init__(self, session: Session):
        self.session = session
        self.org_repo = OrganizationRepository(session)
        self.repos = {kind: repo_class(session) for kind, (_, repo_class) in self.KINDS.items()}

    def _repo(self, kind: str) -> ReferenceRepository:
        return self.repos[kind]

    def _label(self, kind: str) -> str:
        return self.KINDS[kind][0]

    def _require_organization(self, organization_id: int) -> None:
        if self.org_repo.get(organization_id) is None:
            raise ReferenceNotFoundError("Organization", organization_id)

    def _check_unique_name(self, kind: str, organization_id: int, name: str, entity_id: Optional[int] = None):
        existing = self._repo(kind).find_by_name(organization_id, name)
        if existing is not None and existing.id != entity_id:
            raise DuplicateReferenceError(self._label(kind), name)

    def _check_unique_code(self, organization_id: int, code: str, entity_id: Optional[int] = None):
        existing = self.repos['city'].find_by_code(organization_id, code)
        if existing is not None and existing.id != entity_id:
            raise DuplicateReferenceError("City", code)

    def search(
        self,
        kind: str,
        organization_id: int,
        q: Optional[str] = None,
        is_active: Optional[bool] = True,
    ) -> List:
        return self._repo(kind).search(organization_id, q, is_active)

    def get(self, kind: str, organization_id: int, entity_id: int):
        entity = self._repo(kind).get(organization_id, entity_id)
        if entity is None:
            raise ReferenceNotFoundError(self._label(kind), entity_id)
        return entity

    def create(self, kind: str, organization_id: int, data: Mapping[str, Optional[str]]):
        """
        Create a city, client, supplier or truck type.

        Raises:
            ReferenceNotFoundError: unknown organization
            DuplicateReferenceError: name (or city code) already taken
            ValidationError: blank name or malformed city code
        """
        self._require_organization(organization_id)
        name = _require_name(data.get('name'))
        self._check_unique_name(kind, organization_id, name)

        if kind == 'city':
            code = normalize_city_code(data.get('code'))
            self._check_unique_code(organization_id, code)
            entity = City(organization_id=organization_id, name=name, code=code, region=data.get('region'))
        elif kind == 'client':
            entity = Client(organization_id=organization_id, name=name, code=data.get('code'))
        elif kind == 'supplier':
            entity = Supplier(organization_id=organization_id, name=name, code=data.get('code'))
        else:
            entity = TruckType(organization_id=organization_id, name=name)
        entity.is_active = True

        self._repo(kind).add(entity)
        self.session.flush()
        logger.info("Created %s %s '%s' for organization %s", self._label(kind).lower(), entity.id, name,
                    organization_id)
        return entity

    def update(self, kind: str, organization_id: int, entity_id: int, data: Mapping[str, object]):
        """
        Apply the fields present in `data`.

        City codes cannot change once set; existing forecasts carry route
        keys derived from them.
        """
        entity = self.get(kind, organization_id, entity_id)
        if 'name' in data and data['name'] is not None:
            name = _require_name(data['name'])
            self._check_unique_name(kind, organization_id, name, entity.id)
            entity.name = name
        if kind == 'city' and data.get('code') is not None:
            if normalize_city_code(data['code']) != entity.code:
                raise ValidationError("code", "city codes cannot be changed")
        if kind in ('client', 'supplier') and 'code' in data:
            entity.code = data['code']
        if kind == 'city' and 'region' in data:
            entity.region = data['region']
        if data.get('is_active') is not None:
            entity.is_active = bool(data['is_active'])
        self.session.flush()
        return entity
