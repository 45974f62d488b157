"""
Supply API Endpoints - Commitments, supply planning targets and dispatch.

Implements:
- GET    /api/v1/supply - List commitments
- POST   /api/v1/supply - Create a commitment
- PATCH  /api/v1/supply/{id} - Update committed loads
- DELETE /api/v1/supply/{id} - Delete a commitment
- GET    /api/v1/supply/targets - Demand vs commitments gap per lane
- GET    /api/v1/supply/targets/export.csv - Gap report CSV
- GET    /api/v1/supply/dispatch - Supplier dispatch sheet
- GET    /api/v1/supply/dispatch/export.csv - Dispatch sheet CSV
"""
from datetime import datetime
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from freight_planner.config import get_config
from freight_planner.models import get_db, SupplyCommitment
from freight_planner.infrastructure.repositories import SupplyRepository
from freight_planner.domain.exceptions import DomainError
from freight_planner.domain.services import SupplyService, SupplyPlanningService, quantities_from
from .deps import get_organization_id, http_error
from .schemas import SlotQuantities, SlotValues, slot_values

router = APIRouter()


# =============================================================================
# Pydantic Models
# =============================================================================

class SupplyCreate(SlotQuantities):
    """Request model for creating a supply commitment."""
    planning_period_id: int
    supplier_id: int
    route_key: str = Field(..., min_length=1, max_length=50)
    truck_type_id: Optional[int] = None


class SupplyResponse(SlotValues):
    id: int
    planning_period_id: int
    supplier_id: int
    truck_type_id: Optional[int]
    route_key: str


class GapRecordResponse(BaseModel):
    """Coverage of one lane; vectors are {day1..day7|week1..week5, total}."""
    route_key: str
    forecast_count: int
    target: Dict[str, int]
    committed: Dict[str, int]
    gap: Dict[str, int]
    gap_percent: int
    capacity_percent: int
    truck_types: List[dict]
    clients: List[dict]
    commitments: List[dict]


class GapReportResponse(BaseModel):
    planning_period_id: int
    routes: List[GapRecordResponse]


class DispatchRouteResponse(BaseModel):
    route_key: str
    plan: Dict[str, int]


class SupplierDispatchResponse(BaseModel):
    supplier_id: int
    supplier_name: str
    routes: List[DispatchRouteResponse]
    totals: Dict[str, int]


class DispatchSheetResponse(BaseModel):
    period_id: int
    suppliers: List[SupplierDispatchResponse]
    grand_totals: Dict[str, int]


def serialize_commitment(commitment: SupplyCommitment) -> dict:
    return {
        'id': commitment.id,
        'planning_period_id': commitment.planning_period_id,
        'supplier_id': commitment.supplier_id,
        'truck_type_id': commitment.truck_type_id,
        'route_key': commitment.route_key,
        **slot_values(commitment),
    }


def csv_response(content: str, name: str) -> StreamingResponse:
    prefix = get_config().csv_filename_prefix
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={prefix}_{name}_{datetime.now().strftime('%Y%m%d')}.csv"
        }
    )


# =============================================================================
# Commitment Endpoints
# =============================================================================

@router.get(
    "",
    response_model=List[SupplyResponse],
    summary="List supply commitments"
)
def list_supply(
    planning_period_id: Optional[int] = Query(None),
    supplier_id: Optional[int] = Query(None),
    route_key: Optional[str] = Query(None),
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    repo = SupplyRepository(db)
    commitments = repo.filtered(
        organization_id,
        planning_period_id=planning_period_id,
        supplier_id=supplier_id,
        route_key=route_key.upper() if route_key else None,
    )
    return [serialize_commitment(c) for c in commitments]


@router.post(
    "",
    response_model=SupplyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a supply commitment"
)
def create_supply(
    payload: SupplyCreate,
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = SupplyService(db)
    try:
        commitment = service.create(
            organization_id,
            planning_period_id=payload.planning_period_id,
            supplier_id=payload.supplier_id,
            route_key=payload.route_key,
            truck_type_id=payload.truck_type_id,
            quantities=quantities_from(payload.model_dump(exclude_unset=True)),
        )
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    return serialize_commitment(commitment)


# =============================================================================
# Planning Views
# =============================================================================

@router.get(
    "/targets",
    response_model=GapReportResponse,
    summary="Get supply planning targets",
    description="Aggregated demand per lane against all commitments, worst-covered lanes first"
)
def get_supply_targets(
    planning_period_id: int,
    client_ids: List[int] = Query([]),
    truck_type_ids: List[int] = Query([]),
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = SupplyPlanningService(db)
    try:
        report = service.gap_report(organization_id, planning_period_id, client_ids, truck_type_ids)
    except DomainError as e:
        raise http_error(e)
    return {
        'planning_period_id': report.period.id,
        'routes': [r.as_dict() for r in report.records],
    }


@router.get(
    "/targets/export.csv",
    summary="Export supply planning targets as CSV"
)
def export_supply_targets(
    planning_period_id: int,
    client_ids: List[int] = Query([]),
    truck_type_ids: List[int] = Query([]),
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = SupplyPlanningService(db)
    try:
        frame = service.gap_report_frame(
            organization_id, planning_period_id,
            client_ids=client_ids, truck_type_ids=truck_type_ids,
        )
    except DomainError as e:
        raise http_error(e)
    return csv_response(service.to_csv(frame), "supply_targets")


@router.get(
    "/dispatch",
    response_model=DispatchSheetResponse,
    summary="Get the dispatch sheet",
    description="Committed loads grouped by supplier, then route"
)
def get_dispatch_sheet(
    planning_period_id: int,
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = SupplyPlanningService(db)
    try:
        sheet = service.dispatch_sheet(organization_id, planning_period_id)
    except DomainError as e:
        raise http_error(e)
    return sheet.as_dict()


@router.get(
    "/dispatch/export.csv",
    summary="Export the dispatch sheet as CSV"
)
def export_dispatch_sheet(
    planning_period_id: int,
    include_totals: bool = Query(False, description="Append supplier and grand total lines"),
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = SupplyPlanningService(db)
    try:
        frame = service.dispatch_frame(organization_id, planning_period_id, include_totals=include_totals)
    except DomainError as e:
        raise http_error(e)
    return csv_response(service.to_csv(frame), "dispatch")


# =============================================================================
# Commitment Item Endpoints
# =============================================================================

@router.patch(
    "/{commitment_id}",
    response_model=SupplyResponse,
    summary="Update a supply commitment"
)
def update_supply(
    commitment_id: int,
    payload: SlotQuantities,
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = SupplyService(db)
    try:
        commitment = service.update(
            organization_id, commitment_id, quantities_from(payload.model_dump(exclude_unset=True))
        )
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    return serialize_commitment(commitment)


@router.delete(
    "/{commitment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a supply commitment"
)
def delete_supply(
    commitment_id: int,
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = SupplyService(db)
    try:
        service.delete(organization_id, commitment_id)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
