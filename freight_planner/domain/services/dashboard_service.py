"""
Dashboard Service - Headline numbers of the current planning period.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from freight_planner.models import PlanningPeriod, DemandForecast
from freight_planner.infrastructure.repositories import DemandRepository
from .gap_reconciler import GapRecord
from .percentages import safe_percent
from .planning_period_service import PlanningPeriodService
from .supply_planning_service import SupplyPlanningService

logger = logging.getLogger(__name__)

TOP_GAP_ROUTES = 5
RECENT_FORECASTS = 5


@dataclass(frozen=True)
class DashboardMetrics:
    total_demand: int
    total_committed: int
    active_routes: int

    @property
    def supply_gap(self) -> int:
        return self.total_demand - self.total_committed

    @property
    def gap_percent(self) -> int:
        return safe_percent(self.supply_gap, self.total_demand)

    def as_dict(self) -> dict:
        return {
            'total_demand': self.total_demand,
            'total_committed': self.total_committed,
            'supply_gap': self.supply_gap,
            'gap_percent': self.gap_percent,
            'active_routes': self.active_routes,
        }


@dataclass(frozen=True)
class Dashboard:
    period: PlanningPeriod
    metrics: DashboardMetrics
    top_gap_routes: List[GapRecord]
    recent_forecasts: List[DemandForecast]


class DashboardService:
    """Summarizes the current period from the gap report."""

    def __init__(self, session: Session):
        self.session = session
        self.periods = PlanningPeriodService(session)
        self.planning = SupplyPlanningService(session)
        self.demand_repo = DemandRepository(session)

    def overview(self, organization_id: int, today: Optional[date] = None) -> Dashboard:
        """
        Current-period totals, the worst-covered lanes and the latest forecasts.

        Lanes count as active when they carry demand; the top gap routes
        are drawn from those lanes only, largest gap first.
        """
        period = self.periods.current(organization_id, today)
        report = self.planning.gap_report(organization_id, period.id)

        demand_routes = [r for r in report.records if r.forecast_count > 0]
        metrics = DashboardMetrics(
            total_demand=sum(r.target.total for r in report.records),
            total_committed=sum(r.committed.total for r in report.records),
            active_routes=len(demand_routes),
        )
        recent = self.demand_repo.recent(organization_id, period.id, RECENT_FORECASTS)

        logger.info(
            "Dashboard for organization %s, period %s: %d demand, %d committed",
            organization_id, period.id, metrics.total_demand, metrics.total_committed
        )
        return Dashboard(
            period=period,
            metrics=metrics,
            top_gap_routes=demand_routes[:TOP_GAP_ROUTES],
            recent_forecasts=recent,
        )
