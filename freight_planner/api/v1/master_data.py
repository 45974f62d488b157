"""
Master Data API Endpoints - Cities, clients, suppliers and truck types.

Implements, for each of /cities, /clients, /suppliers and /truck-types:
- GET   /api/v1/<kind> - List active entries (search by name, or code for cities)
- POST  /api/v1/<kind> - Create an entry
- GET   /api/v1/<kind>/{id} - Get one entry
- PATCH /api/v1/<kind>/{id} - Rename, edit or deactivate an entry
"""
from typing import List, Optional, Type
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from freight_planner.models import get_db
from freight_planner.domain.exceptions import DomainError
from freight_planner.domain.services import MasterDataService
from .deps import get_organization_id, http_error


# =============================================================================
# Pydantic Models
# =============================================================================

class CityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    code: str = Field(..., min_length=2, max_length=10)
    region: Optional[str] = Field(None, max_length=100)


class CityUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    code: Optional[str] = None
    region: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None


class CityResponse(BaseModel):
    id: int
    name: str
    code: str
    region: Optional[str]
    is_active: bool


class PartyCreate(BaseModel):
    """Request model for clients and suppliers."""
    name: str = Field(..., min_length=1, max_length=200)
    code: Optional[str] = Field(None, max_length=50)


class PartyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    code: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None


class PartyResponse(BaseModel):
    id: int
    name: str
    code: Optional[str]
    is_active: bool


class TruckTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class TruckTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    is_active: Optional[bool] = None


class TruckTypeResponse(BaseModel):
    id: int
    name: str
    is_active: bool


def serialize_entity(entity, fields) -> dict:
    data = {field: getattr(entity, field) for field in fields}
    data['is_active'] = bool(entity.is_active)
    return data


# =============================================================================
# Router factory
# =============================================================================

def build_router(
    kind: str,
    label: str,
    create_model: Type[BaseModel],
    update_model: Type[BaseModel],
    response_model: Type[BaseModel],
) -> APIRouter:
    """List, create, get and update endpoints for one kind of master data."""
    router = APIRouter()
    fields = [name for name in response_model.model_fields if name != 'is_active']

    @router.get("", response_model=List[response_model], summary=f"List {label}s")
    def list_entities(
        q: Optional[str] = Query(None, description="Case-insensitive search"),
        include_inactive: bool = Query(False),
        organization_id: int = Depends(get_organization_id),
        db: Session = Depends(get_db)
    ):
        service = MasterDataService(db)
        entities = service.search(kind, organization_id, q, None if include_inactive else True)
        return [serialize_entity(e, fields) for e in entities]

    @router.post(
        "",
        response_model=response_model,
        status_code=status.HTTP_201_CREATED,
        summary=f"Create a {label}"
    )
    def create_entity(
        payload: create_model,
        organization_id: int = Depends(get_organization_id),
        db: Session = Depends(get_db)
    ):
        service = MasterDataService(db)
        try:
            entity = service.create(kind, organization_id, payload.model_dump())
            db.commit()
        except DomainError as e:
            db.rollback()
            raise http_error(e)
        return serialize_entity(entity, fields)

    @router.get("/{entity_id}", response_model=response_model, summary=f"Get a {label}")
    def get_entity(
        entity_id: int,
        organization_id: int = Depends(get_organization_id),
        db: Session = Depends(get_db)
    ):
        try:
            entity = MasterDataService(db).get(kind, organization_id, entity_id)
        except DomainError as e:
            raise http_error(e)
        return serialize_entity(entity, fields)

    @router.patch("/{entity_id}", response_model=response_model, summary=f"Update a {label}")
    def update_entity(
        entity_id: int,
        payload: update_model,
        organization_id: int = Depends(get_organization_id),
        db: Session = Depends(get_db)
    ):
        service = MasterDataService(db)
        try:
            entity = service.update(kind, organization_id, entity_id, payload.model_dump(exclude_unset=True))
            db.commit()
        except DomainError as e:
            db.rollback()
            raise http_error(e)
        return serialize_entity(entity, fields)

    return router


cities_router = build_router('city', "city", CityCreate, CityUpdate, CityResponse)
clients_router = build_router('client', "client", PartyCreate, PartyUpdate, PartyResponse)
suppliers_router = build_router('supplier', "supplier", PartyCreate, PartyUpdate, PartyResponse)
truck_types_router = build_router('truck_type', "truck type", TruckTypeCreate, TruckTypeUpdate, TruckTypeResponse)
