"""
Supplier Performance Service - Loads commitments and the completions feed
for the performance reports.
"""
import logging
from datetime import date, timedelta
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from freight_planner.infrastructure.repositories import SupplyRepository, CompletionsRepository
from ..entities import CycleKind, add_months, period_window, vector_from_row
from .performance import CommitmentTotal, PerformanceReconciler, PerformanceReport
from .planning_period_service import PlanningPeriodService, PlanningSettings

logger = logging.getLogger(__name__)


class SupplierPerformanceService:
    """Service producing supplier performance reports."""

    def __init__(self, session: Session):
        self.session = session
        self.periods = PlanningPeriodService(session)
        self.supply_repo = SupplyRepository(session)
        self.completions_repo = CompletionsRepository(session)

    def _reconciler(self, settings: PlanningSettings) -> PerformanceReconciler:
        return PerformanceReconciler(
            lambda day: period_window(day, settings.effective_cycle, settings.week_start_day).start
        )

    def report(
        self,
        organization_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        supplier_id: Optional[int] = None,
        route_key: Optional[str] = None,
    ) -> PerformanceReport:
        """
        Committed versus completed loads per supplier and period.

        Periods are selected by their start date; completions are read up
        to the end of the period containing `end_date`.

        Raises:
            ReferenceNotFoundError: unknown organization
        """
        settings = self.periods.settings_for(organization_id)
        route_key = route_key.strip().upper() if route_key else None

        commitments = self.supply_repo.in_window(organization_id, start_date, end_date, supplier_id, route_key)
        rows = [
            CommitmentTotal(
                supplier_id=c.supplier_id,
                supplier_name=c.supplier.name if c.supplier is not None else "",
                period_start=c.planning_period.period_start,
                route_key=c.route_key,
                committed=vector_from_row(c, c.planning_period.cycle_kind).total,
            )
            for c in commitments
        ]

        completions_end = None
        if end_date:
            completions_end = period_window(end_date, settings.effective_cycle, settings.week_start_day).end
        completions = self.completions_repo.daily_totals(start_date, completions_end, route_key)

        report = self._reconciler(settings).reconcile(rows, completions, start_date, end_date)
        logger.info(
            "Supplier performance for organization %s: %d suppliers, overall %d%%",
            organization_id, report.summary.supplier_count, report.summary.overall_fulfillment_rate
        )
        return report

    def window(self, organization_id: int, periods_back: int = 4, today: Optional[date] = None) -> Tuple[date, date]:
        """Start of the period `periods_back` before the current one, and the current period's end."""
        settings = self.periods.settings_for(organization_id)
        current = period_window(today or date.today(), settings.effective_cycle, settings.week_start_day)
        if settings.effective_cycle is CycleKind.MONTHLY:
            start = add_months(current.start, -periods_back)
        else:
            start = current.start - timedelta(days=7 * periods_back)
        return start, current.end

    def recent(self, organization_id: int, periods_back: int = 4, today: Optional[date] = None) -> PerformanceReport:
        """Performance over the current period and the `periods_back` before it."""
        start, end = self.window(organization_id, periods_back, today)
        return self.report(organization_id, start, end)
