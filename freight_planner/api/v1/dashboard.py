"""
Dashboard API Endpoint.

Implements:
- GET /api/v1/dashboard - Current period totals, worst-covered lanes and recent forecasts
"""
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from freight_planner.models import get_db
from freight_planner.domain.exceptions import DomainError
from freight_planner.domain.services import DashboardService
from .deps import get_organization_id, http_error
from .planning_periods import PlanningPeriodResponse, serialize_period

router = APIRouter()


class DashboardMetricsResponse(BaseModel):
    total_demand: int
    total_committed: int
    supply_gap: int
    gap_percent: int
    active_routes: int


class GapRouteResponse(BaseModel):
    route_key: str
    target: int
    committed: int
    gap: int


class RecentForecastResponse(BaseModel):
    id: int
    route_key: str
    client_name: Optional[str]
    total: int
    created_at: Optional[datetime]


class DashboardResponse(BaseModel):
    current_period: PlanningPeriodResponse
    metrics: DashboardMetricsResponse
    top_gap_routes: List[GapRouteResponse]
    recent_forecasts: List[RecentForecastResponse]


@router.get(
    "",
    response_model=DashboardResponse,
    summary="Get the planning dashboard",
    description="Totals of the current period with the five largest lane gaps and latest forecasts"
)
def get_dashboard(
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = DashboardService(db)
    try:
        dashboard = service.overview(organization_id)
        db.commit()
    except DomainError as e:
        raise http_error(e)

    return {
        'current_period': serialize_period(dashboard.period),
        'metrics': dashboard.metrics.as_dict(),
        'top_gap_routes': [
            {
                'route_key': r.route_key,
                'target': r.target.total,
                'committed': r.committed.total,
                'gap': r.gap.total,
            }
            for r in dashboard.top_gap_routes
        ],
        'recent_forecasts': [
            {
                'id': f.id,
                'route_key': f.route_key,
                'client_name': f.client.name if f.client is not None else None,
                'total': f.total,
                'created_at': f.created_at,
            }
            for f in dashboard.recent_forecasts
        ],
    }
