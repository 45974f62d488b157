"""
Gap Reconciler - Demand targets versus supply commitments per lane.

Full outer join of aggregated demand and supply on route key:
- target    = Σ demand slots for the lane
- committed = Σ supply slots for the lane
- gap       = target - committed (positive means under-supplied)

Records are ordered worst-covered first.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from ..entities.slots import SlotVector
from ..exceptions import ReconciliationError
from .aggregation import AggregatedRoute, Contribution
from .percentages import safe_percent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GapRecord:
    """Coverage of one lane within a period."""
    route_key: str
    target: SlotVector
    committed: SlotVector
    gap: SlotVector
    gap_percent: int
    capacity_percent: int
    forecast_count: int
    demand_breakdown: Tuple[Contribution, ...]
    supply_breakdown: Tuple[Contribution, ...]
    truck_types: Tuple[Tuple[Any, str], ...] = ()

    def as_dict(self) -> dict:
        return {
            'route_key': self.route_key,
            'forecast_count': self.forecast_count,
            'target': self.target.as_dict(),
            'committed': self.committed.as_dict(),
            'gap': self.gap.as_dict(),
            'gap_percent': self.gap_percent,
            'capacity_percent': self.capacity_percent,
            'truck_types': [{'id': i, 'name': n} for i, n in self.truck_types],
            'clients': [c.as_dict() for c in self.demand_breakdown],
            'commitments': [c.as_dict() for c in self.supply_breakdown],
        }


class GapReconciler:
    """
    Reconciles aggregated demand against aggregated supply for one period.

    Invariants:
    - every route key present on either side yields exactly one record
    - gap.total == target.total - committed.total
    - gap_percent is 0 when the target is 0
    """

    def reconcile(
        self,
        demand_map: Dict[str, AggregatedRoute],
        supply_map: Dict[str, AggregatedRoute],
    ) -> List[GapRecord]:
        """
        Join demand and supply aggregates on route key.

        Args:
            demand_map: Output of DemandAggregator.aggregate
            supply_map: Output of SupplyAggregator.aggregate for the same period

        Returns:
            GapRecords sorted by gap total descending, then route key ascending
        """
        self._check_same_period(demand_map, supply_map)

        records = []
        for route_key in set(demand_map) | set(supply_map):
            demand = demand_map.get(route_key)
            supply = supply_map.get(route_key)

            width = (demand or supply).slot_vector.width
            target = demand.slot_vector if demand else SlotVector.zero(width)
            committed = supply.slot_vector if supply else SlotVector.zero(width)
            gap = target - committed

            records.append(GapRecord(
                route_key=route_key,
                target=target,
                committed=committed,
                gap=gap,
                gap_percent=safe_percent(gap.total, target.total),
                capacity_percent=safe_percent(committed.total, target.total),
                forecast_count=demand.contributor_count if demand else 0,
                demand_breakdown=demand.breakdown if demand else (),
                supply_breakdown=supply.breakdown if supply else (),
                truck_types=demand.tags if demand else (),
            ))

        records.sort(key=lambda r: (-r.gap.total, r.route_key))
        logger.debug(
            "Reconciled %d demand and %d supply routes into %d gap records",
            len(demand_map), len(supply_map), len(records)
        )
        return records

    @staticmethod
    def _check_same_period(
        demand_map: Dict[str, AggregatedRoute],
        supply_map: Dict[str, AggregatedRoute],
    ) -> None:
        periods = {a.period_id for a in demand_map.values()} | {a.period_id for a in supply_map.values()}
        if len(periods) > 1:
            raise ReconciliationError(
                "Demand and supply aggregates belong to different planning periods",
                details={'period_ids': sorted(str(p) for p in periods)},
            )
