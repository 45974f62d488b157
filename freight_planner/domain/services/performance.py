"""
Supplier Performance - Committed loads versus loads carriers completed.

Per supplier and planning period:
- committed        = Σ commitment totals of the supplier in the period
- completed        = Σ completions of the carrier (matched by name,
                     case-insensitively) dated inside the period
- variance         = completed - committed
- fulfillment_rate = round(completed / committed * 100), or 0

Completions of a carrier in a period where the supplier committed nothing
are not credited. Supplier rows and the summary are built from the summed
totals, never from averaged percentages.
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .percentages import safe_percent

logger = logging.getLogger(__name__)

GOOD_RATE = 90
WARNING_RATE = 70
TOP_PERFORMERS = 5


def performance_status(rate: int) -> str:
    """'good' at 90% and above, 'warning' from 70%, otherwise 'poor'."""
    if rate >= GOOD_RATE:
        return "good"
    if rate >= WARNING_RATE:
        return "warning"
    return "poor"


def _name_key(name: Optional[str]) -> str:
    return (name or "").strip().casefold()


@dataclass(frozen=True)
class CommitmentTotal:
    """One commitment reduced to its total, tagged with its period start."""
    supplier_id: Any
    supplier_name: str
    period_start: date
    route_key: str
    committed: int


@dataclass(frozen=True)
class SupplierPeriodPerformance:
    supplier_id: Any
    supplier_name: str
    period_start: date
    committed: int
    completed: int
    routes: Tuple[str, ...] = ()

    @property
    def variance(self) -> int:
        return self.completed - self.committed

    @property
    def fulfillment_rate(self) -> int:
        return safe_percent(self.completed, self.committed)

    @property
    def status(self) -> str:
        return performance_status(self.fulfillment_rate)

    def as_dict(self) -> dict:
        return {
            'supplier_id': self.supplier_id,
            'supplier_name': self.supplier_name,
            'period_start': self.period_start.isoformat(),
            'committed': self.committed,
            'completed': self.completed,
            'variance': self.variance,
            'fulfillment_rate': self.fulfillment_rate,
            'status': self.status,
            'routes': list(self.routes),
        }


@dataclass(frozen=True)
class SupplierPerformance:
    """A supplier's totals over the whole report window."""
    supplier_id: Any
    supplier_name: str
    committed: int
    completed: int

    @property
    def variance(self) -> int:
        return self.completed - self.committed

    @property
    def fulfillment_rate(self) -> int:
        return safe_percent(self.completed, self.committed)

    @property
    def status(self) -> str:
        return performance_status(self.fulfillment_rate)

    def as_dict(self) -> dict:
        return {
            'supplier_id': self.supplier_id,
            'supplier_name': self.supplier_name,
            'committed': self.committed,
            'completed': self.completed,
            'variance': self.variance,
            'fulfillment_rate': self.fulfillment_rate,
            'status': self.status,
        }


@dataclass(frozen=True)
class PerformanceSummary:
    total_committed: int
    total_completed: int
    supplier_count: int
    period_count: int
    top_performers: Tuple[SupplierPerformance, ...]

    @property
    def overall_variance(self) -> int:
        return self.total_completed - self.total_committed

    @property
    def overall_fulfillment_rate(self) -> int:
        return safe_percent(self.total_completed, self.total_committed)

    def as_dict(self) -> dict:
        return {
            'total_committed': self.total_committed,
            'total_completed': self.total_completed,
            'overall_variance': self.overall_variance,
            'overall_fulfillment_rate': self.overall_fulfillment_rate,
            'supplier_count': self.supplier_count,
            'period_count': self.period_count,
            'top_performers': [p.as_dict() for p in self.top_performers],
        }


@dataclass(frozen=True)
class PerformanceReport:
    records: List[SupplierPeriodPerformance]
    suppliers: List[SupplierPerformance]
    summary: PerformanceSummary
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def as_dict(self) -> dict:
        return {
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'summary': self.summary.as_dict(),
            'suppliers': [s.as_dict() for s in self.suppliers],
            'periods': [r.as_dict() for r in self.records],
        }


class PerformanceReconciler:
    """
    Joins commitments with carrier completions per supplier and period.

    Attributes:
        period_start_fn: Maps a completion date to the start of the
            planning period containing it
    """

    def __init__(self, period_start_fn: Callable[[date], date]):
        self.period_start_fn = period_start_fn

    def completed_by_name_and_period(
        self,
        completions: Iterable[Tuple[Optional[str], date, int]],
    ) -> Dict[Tuple[str, date], int]:
        totals: Dict[Tuple[str, date], int] = {}
        for supplier_name, completion_date, loads in completions:
            key = (_name_key(supplier_name), self.period_start_fn(completion_date))
            totals[key] = totals.get(key, 0) + loads
        return totals

    def reconcile(
        self,
        commitments: Iterable[CommitmentTotal],
        completions: Iterable[Tuple[Optional[str], date, int]],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> PerformanceReport:
        """
        Build the per-period rows, supplier totals and summary.

        Args:
            commitments: Tenant-scoped commitment totals
            completions: (carrier name, completion date, loads) from the feed
            start_date: Reported window start (informational)
            end_date: Reported window end (informational)

        Returns:
            PerformanceReport with period rows newest first (ties by supplier
            name) and supplier rows lowest fulfillment rate first
        """
        grouped: Dict[Tuple[Any, date], dict] = OrderedDict()
        for row in commitments:
            entry = grouped.setdefault((row.supplier_id, row.period_start), {
                'name': row.supplier_name, 'committed': 0, 'routes': set(),
            })
            entry['committed'] += row.committed
            entry['routes'].add(row.route_key)

        completed = self.completed_by_name_and_period(completions)
        records = [
            SupplierPeriodPerformance(
                supplier_id=supplier_id,
                supplier_name=entry['name'],
                period_start=period_start,
                committed=entry['committed'],
                completed=completed.get((_name_key(entry['name']), period_start), 0),
                routes=tuple(sorted(entry['routes'])),
            )
            for (supplier_id, period_start), entry in grouped.items()
        ]
        records.sort(key=lambda r: (_name_key(r.supplier_name), str(r.supplier_id)))
        records.sort(key=lambda r: r.period_start, reverse=True)

        suppliers = self._supplier_totals(records)
        top = sorted(suppliers, key=lambda s: (-s.fulfillment_rate, _name_key(s.supplier_name)))
        summary = PerformanceSummary(
            total_committed=sum(r.committed for r in records),
            total_completed=sum(r.completed for r in records),
            supplier_count=len(suppliers),
            period_count=len({r.period_start for r in records}),
            top_performers=tuple(top[:TOP_PERFORMERS]),
        )
        logger.debug(
            "Supplier performance over %d suppliers and %d periods",
            summary.supplier_count, summary.period_count
        )
        return PerformanceReport(
            records=records,
            suppliers=sorted(suppliers, key=lambda s: (s.fulfillment_rate, _name_key(s.supplier_name))),
            summary=summary,
            start_date=start_date,
            end_date=end_date,
        )

    @staticmethod
    def _supplier_totals(records: List[SupplierPeriodPerformance]) -> List[SupplierPerformance]:
        totals: Dict[Any, List] = OrderedDict()
        for record in records:
            entry = totals.setdefault(record.supplier_id, [record.supplier_name, 0, 0])
            entry[1] += record.committed
            entry[2] += record.completed
        return [
            SupplierPerformance(supplier_id, name, committed, completed)
            for supplier_id, (name, committed, completed) in totals.items()
        ]
