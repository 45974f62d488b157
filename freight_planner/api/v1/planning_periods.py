"""
Planning Period API Endpoints.

Implements:
- GET  /api/v1/planning-periods - Current and upcoming periods
- GET  /api/v1/planning-periods/current - Period containing today
- POST /api/v1/planning-periods/{period_id}/lock - Lock against edits
- POST /api/v1/planning-periods/{period_id}/unlock - Reopen a locked period
"""
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from freight_planner.models import get_db, PlanningPeriod
from freight_planner.domain.entities import format_period_display
from freight_planner.domain.exceptions import DomainError
from freight_planner.domain.services import PlanningPeriodService
from .deps import get_organization_id, http_error

router = APIRouter()


# =============================================================================
# Pydantic Models
# =============================================================================

class PlanningPeriodResponse(BaseModel):
    """Planning period with display label."""
    id: int
    cycle_kind: str
    year: int
    sequence: int
    period_start: date
    period_end: date
    is_locked: bool
    is_current: bool
    display: str


class PlanningPeriodListResponse(BaseModel):
    periods: List[PlanningPeriodResponse]
    planning_cycle: str
    week_start_day: str


def serialize_period(period: PlanningPeriod, today: Optional[date] = None) -> dict:
    today = today or date.today()
    return {
        'id': period.id,
        'cycle_kind': period.cycle_kind,
        'year': period.year,
        'sequence': period.sequence,
        'period_start': period.period_start,
        'period_end': period.period_end,
        'is_locked': bool(period.is_locked),
        'is_current': period.period_start <= today <= period.period_end,
        'display': format_period_display(period.period_start, period.period_end),
    }


# =============================================================================
# Endpoints
# =============================================================================

@router.get(
    "",
    response_model=PlanningPeriodListResponse,
    summary="List current and upcoming planning periods",
    description="Periods follow the organization's planning cycle and are created on first access"
)
def list_planning_periods(
    count: Optional[int] = Query(None, ge=1, description="Number of periods (default from config)"),
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = PlanningPeriodService(db)
    try:
        settings = service.settings_for(organization_id)
        periods = service.upcoming(organization_id, count)
        db.commit()
    except DomainError as e:
        raise http_error(e)

    return {
        'periods': [serialize_period(p) for p in periods],
        'planning_cycle': settings.cycle_kind.value,
        'week_start_day': settings.week_start_day.value,
    }


@router.get(
    "/current",
    response_model=PlanningPeriodResponse,
    summary="Get the current planning period"
)
def get_current_period(
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = PlanningPeriodService(db)
    try:
        period = service.current(organization_id)
        db.commit()
    except DomainError as e:
        raise http_error(e)
    return serialize_period(period)


@router.post(
    "/{period_id}/lock",
    response_model=PlanningPeriodResponse,
    summary="Lock a planning period",
    description="Locked periods reject demand and supply changes"
)
def lock_period(
    period_id: int,
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = PlanningPeriodService(db)
    try:
        period = service.lock(organization_id, period_id)
        db.commit()
    except DomainError as e:
        raise http_error(e)
    return serialize_period(period)


@router.post(
    "/{period_id}/unlock",
    response_model=PlanningPeriodResponse,
    summary="Unlock a planning period"
)
def unlock_period(
    period_id: int,
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = PlanningPeriodService(db)
    try:
        period = service.unlock(organization_id, period_id)
        db.commit()
    except DomainError as e:
        raise http_error(e)
    return serialize_period(period)
