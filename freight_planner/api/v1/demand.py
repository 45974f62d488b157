"""
Demand API Endpoints - CRUD for demand forecasts.

Implements:
- GET    /api/v1/demand - List forecasts (filter by period, client, route)
- POST   /api/v1/demand - Create a forecast (route key derived from cities)
- PATCH  /api/v1/demand/{id} - Update loads or truck type
- DELETE /api/v1/demand/{id} - Delete a forecast
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from freight_planner.models import get_db, DemandForecast
from freight_planner.infrastructure.repositories import DemandRepository
from freight_planner.domain.exceptions import DomainError
from freight_planner.domain.services import DemandService, quantities_from
from .deps import get_organization_id, http_error
from .schemas import SlotQuantities, SlotValues, slot_values

router = APIRouter()


# =============================================================================
# Pydantic Models
# =============================================================================

class DemandCreate(SlotQuantities):
    """Request model for creating a demand forecast."""
    planning_period_id: int
    client_id: int
    pickup_city_id: int
    dropoff_city_id: int
    truck_type_id: Optional[int] = None


class DemandUpdate(SlotQuantities):
    """Request model for updating a demand forecast."""
    truck_type_id: Optional[int] = None


class DemandResponse(SlotValues):
    id: int
    planning_period_id: int
    client_id: int
    pickup_city_id: int
    dropoff_city_id: int
    truck_type_id: Optional[int]
    route_key: str


def serialize_forecast(forecast: DemandForecast) -> dict:
    return {
        'id': forecast.id,
        'planning_period_id': forecast.planning_period_id,
        'client_id': forecast.client_id,
        'pickup_city_id': forecast.pickup_city_id,
        'dropoff_city_id': forecast.dropoff_city_id,
        'truck_type_id': forecast.truck_type_id,
        'route_key': forecast.route_key,
        **slot_values(forecast),
    }


# =============================================================================
# Endpoints
# =============================================================================

@router.get(
    "",
    response_model=List[DemandResponse],
    summary="List demand forecasts"
)
def list_demand(
    planning_period_id: Optional[int] = Query(None),
    client_id: Optional[int] = Query(None),
    route_key: Optional[str] = Query(None),
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    repo = DemandRepository(db)
    forecasts = repo.filtered(
        organization_id,
        planning_period_id=planning_period_id,
        client_id=client_id,
        route_key=route_key.upper() if route_key else None,
    )
    return [serialize_forecast(f) for f in forecasts]


@router.post(
    "",
    response_model=DemandResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a demand forecast",
    description="The route key is derived from the pickup and dropoff city codes"
)
def create_demand(
    payload: DemandCreate,
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = DemandService(db)
    try:
        forecast = service.create(
            organization_id,
            planning_period_id=payload.planning_period_id,
            client_id=payload.client_id,
            pickup_city_id=payload.pickup_city_id,
            dropoff_city_id=payload.dropoff_city_id,
            truck_type_id=payload.truck_type_id,
            quantities=quantities_from(payload.model_dump(exclude_unset=True)),
        )
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    return serialize_forecast(forecast)


@router.patch(
    "/{forecast_id}",
    response_model=DemandResponse,
    summary="Update a demand forecast"
)
def update_demand(
    forecast_id: int,
    payload: DemandUpdate,
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = DemandService(db)
    try:
        forecast = service.update(
            organization_id,
            forecast_id,
            quantities_from(payload.model_dump(exclude_unset=True)),
            truck_type_id=payload.truck_type_id,
        )
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    return serialize_forecast(forecast)


@router.delete(
    "/{forecast_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a demand forecast"
)
def delete_demand(
    forecast_id: int,
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = DemandService(db)
    try:
        service.delete(organization_id, forecast_id)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
