"""
Accuracy Reconciler - Forecasted demand versus observed shipper requests.

Per lane:
- variance         = actual_requested - forecasted
- accuracy_percent = max(0, round((1 - |variance| / forecasted) * 100)),
                     or 100 / 0 when nothing was forecast
- fulfillment_rate = round(actual_fulfilled / actual_requested * 100), or 0

The summary applies the same formulas to the summed totals; it is never an
average of per-lane percentages.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List

from ..entities.rows import ActualTotals
from .aggregation import AggregatedRoute
from .percentages import round_percent, safe_percent

logger = logging.getLogger(__name__)


def accuracy_percent(forecasted: int, actual_requested: int) -> int:
    if forecasted > 0:
        return max(0, round_percent(forecasted - abs(actual_requested - forecasted), forecasted))
    return 100 if actual_requested == 0 else 0


@dataclass(frozen=True)
class AccuracyRecord:
    route_key: str
    forecasted: int
    actual_requested: int
    actual_fulfilled: int
    variance: int
    accuracy_percent: int
    fulfillment_rate: int

    @classmethod
    def build(cls, route_key: str, forecasted: int, requested: int, fulfilled: int) -> 'AccuracyRecord':
        return cls(
            route_key=route_key,
            forecasted=forecasted,
            actual_requested=requested,
            actual_fulfilled=fulfilled,
            variance=requested - forecasted,
            accuracy_percent=accuracy_percent(forecasted, requested),
            fulfillment_rate=safe_percent(fulfilled, requested),
        )

    def as_dict(self) -> dict:
        return {
            'route_key': self.route_key,
            'forecasted': self.forecasted,
            'actual_requested': self.actual_requested,
            'actual_fulfilled': self.actual_fulfilled,
            'variance': self.variance,
            'accuracy_percent': self.accuracy_percent,
            'fulfillment_rate': self.fulfillment_rate,
        }


@dataclass(frozen=True)
class AccuracySummary:
    total_forecasted: int
    total_actual_requested: int
    total_actual_fulfilled: int
    total_variance: int
    overall_accuracy: int
    overall_fulfillment_rate: int
    route_count: int

    def as_dict(self) -> dict:
        return {
            'total_forecasted': self.total_forecasted,
            'total_actual_requested': self.total_actual_requested,
            'total_actual_fulfilled': self.total_actual_fulfilled,
            'total_variance': self.total_variance,
            'overall_accuracy': self.overall_accuracy,
            'overall_fulfillment_rate': self.overall_fulfillment_rate,
            'route_count': self.route_count,
        }


@dataclass(frozen=True)
class AccuracyReport:
    records: List[AccuracyRecord]
    summary: AccuracySummary

    def as_dict(self) -> dict:
        return {
            'summary': self.summary.as_dict(),
            'routes': [r.as_dict() for r in self.records],
        }


class AccuracyReconciler:
    """Joins aggregated demand with the actuals feed by route key."""

    def reconcile(
        self,
        demand_map: Dict[str, AggregatedRoute],
        actuals_by_route_key: Dict[str, ActualTotals],
    ) -> AccuracyReport:
        """
        Compare forecast totals against actual requests per lane.

        Args:
            demand_map: Output of DemandAggregator.aggregate
            actuals_by_route_key: Actual requested/fulfilled loads keyed by route key

        Returns:
            AccuracyReport with records sorted by |variance| descending
            (ties by route key) and a totals-based summary
        """
        records = []
        for route_key in set(demand_map) | set(actuals_by_route_key):
            demand = demand_map.get(route_key)
            actual = actuals_by_route_key.get(route_key) or ActualTotals()
            records.append(AccuracyRecord.build(
                route_key=route_key,
                forecasted=demand.slot_vector.total if demand else 0,
                requested=actual.requested,
                fulfilled=actual.fulfilled,
            ))

        records.sort(key=lambda r: (-abs(r.variance), r.route_key))

        total_forecasted = sum(r.forecasted for r in records)
        total_requested = sum(r.actual_requested for r in records)
        total_fulfilled = sum(r.actual_fulfilled for r in records)

        summary = AccuracySummary(
            total_forecasted=total_forecasted,
            total_actual_requested=total_requested,
            total_actual_fulfilled=total_fulfilled,
            total_variance=total_requested - total_forecasted,
            overall_accuracy=accuracy_percent(total_forecasted, total_requested),
            overall_fulfillment_rate=safe_percent(total_fulfilled, total_requested),
            route_count=len(records),
        )
        logger.debug("Accuracy reconciled over %d routes", len(records))
        return AccuracyReport(records=records, summary=summary)
