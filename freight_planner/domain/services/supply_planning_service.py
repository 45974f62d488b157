"""
Supply Planning Service - Gap, dispatch and accuracy views for a period.

Loads tenant-scoped rows through the repositories, hands them to the pure
aggregation core and shapes the results for the API and CSV exports.
"""
import io
import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

import pandas as pd
from sqlalchemy.orm import Session

from freight_planner.config import get_config
from freight_planner.models import PlanningPeriod
from freight_planner.infrastructure.repositories import (
    DemandRepository,
    SupplyRepository,
    ActualsRepository,
)
from ..entities import DemandRow, SupplyRow, slot_labels, slot_width
from .aggregation import DemandAggregator, SupplyAggregator
from .gap_reconciler import GapReconciler, GapRecord
from .dispatch import DispatchProjector, DispatchSheet
from .accuracy import AccuracyReconciler, AccuracyReport
from .planning_period_service import PlanningPeriodService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GapReport:
    period: PlanningPeriod
    records: List[GapRecord]


class SupplyPlanningService:
    """Service producing the supply planning, dispatch and accuracy views."""

    def __init__(self, session: Session):
        self.session = session
        self.periods = PlanningPeriodService(session)
        self.demand_repo = DemandRepository(session)
        self.supply_repo = SupplyRepository(session)
        self.actuals_repo = ActualsRepository(session)
        self.demand_aggregator = DemandAggregator()
        self.supply_aggregator = SupplyAggregator()

    # =========================================================================
    # Row loading
    # =========================================================================

    def _demand_rows(
        self,
        organization_id: int,
        period: PlanningPeriod,
        client_ids: Optional[Iterable[int]] = None,
        truck_type_ids: Optional[Iterable[int]] = None,
    ) -> List[DemandRow]:
        forecasts = self.demand_repo.for_period(organization_id, period.id, client_ids, truck_type_ids)
        return [DemandRow.from_entity(f, period.cycle_kind) for f in forecasts]

    def _supply_rows(self, organization_id: int, period: PlanningPeriod) -> List[SupplyRow]:
        commitments = self.supply_repo.for_period(organization_id, period.id)
        return [SupplyRow.from_entity(c, period.cycle_kind) for c in commitments]

    # =========================================================================
    # Views
    # =========================================================================

    def gap_report(
        self,
        organization_id: int,
        period_id: int,
        client_ids: Optional[Iterable[int]] = None,
        truck_type_ids: Optional[Iterable[int]] = None,
    ) -> GapReport:
        """
        Demand targets vs supply commitments per lane.

        Demand filters narrow the targets only; every commitment of the
        period is always counted.

        Raises:
            PeriodNotFoundError: period does not belong to the organization
        """
        period = self.periods.require_period(organization_id, period_id)
        demand_map = self.demand_aggregator.aggregate(
            period.id, self._demand_rows(organization_id, period, client_ids, truck_type_ids)
        )
        supply_map = self.supply_aggregator.aggregate(period.id, self._supply_rows(organization_id, period))
        records = GapReconciler().reconcile(demand_map, supply_map)

        logger.info(
            "Gap report for period %s: %d routes, %d under-supplied",
            period.id, len(records), sum(1 for r in records if r.gap.total > 0)
        )
        return GapReport(period=period, records=records)

    def dispatch_sheet(self, organization_id: int, period_id: int) -> DispatchSheet:
        """Supplier x route committed loads for a period."""
        period = self.periods.require_period(organization_id, period_id)
        by_supplier = self.supply_aggregator.aggregate_by_supplier(
            period.id, self._supply_rows(organization_id, period)
        )
        sheet = DispatchProjector().project(by_supplier, period.id, slot_width(period.cycle_kind))
        logger.info("Dispatch sheet for period %s: %d suppliers", period.id, len(sheet.suppliers))
        return sheet

    def accuracy_report(
        self,
        organization_id: int,
        period_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> AccuracyReport:
        """
        Forecast accuracy against the actuals feed.

        The actuals window defaults to the period's own dates.
        """
        period = self.periods.require_period(organization_id, period_id)
        demand_map = self.demand_aggregator.aggregate(period.id, self._demand_rows(organization_id, period))
        actuals = self.actuals_repo.totals_by_route_key(
            start_date or period.period_start,
            end_date or period.period_end,
        )
        report = AccuracyReconciler().reconcile(demand_map, actuals)
        logger.info(
            "Accuracy report for period %s: %d routes, overall accuracy %d%%",
            period.id, report.summary.route_count, report.summary.overall_accuracy
        )
        return report

    # =========================================================================
    # CSV exports
    # =========================================================================

    def _labels(self, organization_id: int, period: PlanningPeriod) -> List[str]:
        settings = self.periods.settings_for(organization_id)
        return slot_labels(period.cycle_kind, settings.week_start_day, rotate=get_config().rotate_day_labels)

    def gap_report_frame(self, organization_id: int, period_id: int, **filters) -> pd.DataFrame:
        """
        Gap report as a DataFrame.

        Columns: Route, then Target/Committed/Gap per slot, then totals,
        then Gap %.
        """
        report = self.gap_report(organization_id, period_id, **filters)
        labels = self._labels(organization_id, report.period)

        columns = ['Route']
        for label in labels + ['Total']:
            columns += [f'{label} Target', f'{label} Committed', f'{label} Gap']
        columns.append('Gap %')

        rows = []
        for record in report.records:
            row = [record.route_key]
            for i in range(record.target.width):
                row += [record.target[i], record.committed[i], record.gap[i]]
            row += [record.target.total, record.committed.total, record.gap.total, record.gap_percent]
            rows.append(row)

        return pd.DataFrame(rows, columns=columns)

    def dispatch_frame(
        self,
        organization_id: int,
        period_id: int,
        include_totals: bool = False,
    ) -> pd.DataFrame:
        """
        Dispatch sheet as a DataFrame.

        Columns: Supplier, Route, one column per slot label, Total. Every
        line is one supplier and route. With include_totals each supplier
        ends with a 'Total' route line and the sheet with a 'Grand Total'
        line.
        """
        period = self.periods.require_period(organization_id, period_id)
        sheet = self.dispatch_sheet(organization_id, period_id)
        labels = self._labels(organization_id, period)
        columns = ['Supplier', 'Route'] + labels + ['Total']

        rows = []
        for supplier in sheet.suppliers:
            for route in supplier.routes:
                rows.append([supplier.supplier_name, route.route_key, *route.slot_vector, route.slot_vector.total])
            if include_totals:
                totals = supplier.supplier_totals
                rows.append([supplier.supplier_name, 'Total', *totals, totals.total])
        if include_totals:
            grand = sheet.grand_totals
            rows.append(['Grand Total', '', *grand, grand.total])

        return pd.DataFrame(rows, columns=columns)

    @staticmethod
    def to_csv(frame: pd.DataFrame) -> str:
        output = io.StringIO()
        frame.to_csv(output, index=False)
        return output.getvalue()
