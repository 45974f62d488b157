"""
Reporting API Endpoints.

Implements:
- GET /api/v1/reports/accuracy - Forecast accuracy against actual shipper requests
- GET /api/v1/reports/supplier-performance - Committed vs completed loads per supplier and period
- GET /api/v1/reports/performance - Supplier totals over the most recent periods
"""
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from freight_planner.models import get_db
from freight_planner.domain.exceptions import DomainError
from freight_planner.domain.services import SupplyPlanningService, SupplierPerformanceService
from .deps import get_organization_id, http_error

router = APIRouter()


class AccuracyRecordResponse(BaseModel):
    route_key: str
    forecasted: int
    actual_requested: int
    actual_fulfilled: int
    variance: int
    accuracy_percent: int
    fulfillment_rate: int


class AccuracySummaryResponse(BaseModel):
    total_forecasted: int
    total_actual_requested: int
    total_actual_fulfilled: int
    total_variance: int
    overall_accuracy: int
    overall_fulfillment_rate: int
    route_count: int


class AccuracyReportResponse(BaseModel):
    summary: AccuracySummaryResponse
    routes: List[AccuracyRecordResponse]


@router.get(
    "/accuracy",
    response_model=AccuracyReportResponse,
    summary="Forecast accuracy report",
    description="Compares forecast totals per lane with actual requests; "
                "the actuals window defaults to the period dates"
)
def get_accuracy_report(
    planning_period_id: int,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = SupplyPlanningService(db)
    try:
        report = service.accuracy_report(organization_id, planning_period_id, start_date, end_date)
    except DomainError as e:
        raise http_error(e)
    return report.as_dict()


class SupplierPerformanceResponse(BaseModel):
    supplier_id: int
    supplier_name: str
    committed: int
    completed: int
    variance: int
    fulfillment_rate: int
    status: str


class SupplierPeriodResponse(SupplierPerformanceResponse):
    period_start: date
    routes: List[str]


class PerformanceSummaryResponse(BaseModel):
    total_committed: int
    total_completed: int
    overall_variance: int
    overall_fulfillment_rate: int
    supplier_count: int
    period_count: int
    top_performers: List[SupplierPerformanceResponse]


class PerformanceReportResponse(BaseModel):
    start_date: Optional[date]
    end_date: Optional[date]
    summary: PerformanceSummaryResponse
    suppliers: List[SupplierPerformanceResponse]
    periods: List[SupplierPeriodResponse]


@router.get(
    "/supplier-performance",
    response_model=PerformanceReportResponse,
    summary="Supplier performance report",
    description="Committed loads per supplier and period against completions reported by the carriers"
)
def get_supplier_performance(
    start_date: Optional[date] = Query(None, description="Earliest period start"),
    end_date: Optional[date] = Query(None, description="Latest period start"),
    supplier_id: Optional[int] = Query(None),
    route_key: Optional[str] = Query(None),
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = SupplierPerformanceService(db)
    try:
        report = service.report(organization_id, start_date, end_date, supplier_id, route_key)
    except DomainError as e:
        raise http_error(e)
    return report.as_dict()


@router.get(
    "/performance",
    response_model=PerformanceReportResponse,
    summary="Recent supplier performance",
    description="Supplier performance over the current period and the given number of periods before it"
)
def get_recent_performance(
    weeks: int = Query(4, ge=0, le=52, description="Number of past periods to include"),
    organization_id: int = Depends(get_organization_id),
    db: Session = Depends(get_db)
):
    service = SupplierPerformanceService(db)
    try:
        report = service.recent(organization_id, weeks)
    except DomainError as e:
        raise http_error(e)
    return report.as_dict()
