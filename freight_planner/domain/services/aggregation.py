"""
Route Aggregation - Groups demand and supply rows by lane.

Implements the single grouping fold shared by every planning view:
- Demand: rows grouped by route key, per-client breakdown
- Supply: rows grouped by route key, per-supplier breakdown
- Dispatch: supply rows grouped by supplier, then by route

All functions are pure: no I/O, no shared state. Callers scope rows to
one organization and one planning period before aggregating.
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Hashable, Iterable, List, Optional, Tuple, TypeVar

from ..entities.route import require_route_key
from ..entities.rows import DemandRow, SupplyRow
from ..entities.slots import SlotVector, sum_vectors

logger = logging.getLogger(__name__)

TRow = TypeVar('TRow')
TKey = TypeVar('TKey', bound=Hashable)


@dataclass(frozen=True)
class Contribution:
    """One source row folded into an aggregate."""
    contributor_id: Any
    contributor_name: str
    slot_vector: SlotVector

    def as_dict(self) -> dict:
        return {
            'contributor_id': self.contributor_id,
            'contributor_name': self.contributor_name,
            **self.slot_vector.as_dict(),
        }


@dataclass(frozen=True)
class AggregatedRoute:
    """Summed slots for one lane within a period, with contributor breakdown."""
    route_key: str
    period_id: Any
    slot_vector: SlotVector
    contributor_count: int
    breakdown: Tuple[Contribution, ...] = ()
    tags: Tuple[Tuple[Any, str], ...] = ()


@dataclass(frozen=True)
class DispatchRoute:
    """One lane of a supplier's dispatch plan."""
    route_key: str
    slot_vector: SlotVector

    def as_dict(self) -> dict:
        return {'route_key': self.route_key, 'plan': self.slot_vector.as_dict()}


@dataclass(frozen=True)
class SupplierDispatchRow:
    """A supplier's committed lanes with supplier-level totals."""
    supplier_id: Any
    supplier_name: str
    routes: Tuple[DispatchRoute, ...]
    supplier_totals: SlotVector

    def as_dict(self) -> dict:
        return {
            'supplier_id': self.supplier_id,
            'supplier_name': self.supplier_name,
            'routes': [r.as_dict() for r in self.routes],
            'totals': self.supplier_totals.as_dict(),
        }


def _name_order(name: str, contributor_id: Any) -> tuple:
    return ((name or "").casefold(), name or "", str(contributor_id))


@dataclass
class Aggregator(Generic[TRow, TKey]):
    """
    Generic group-and-sum fold.

    Parameterized by key extraction and contributor extraction so every
    planning view shares the same summation rules.

    Attributes:
        key_fn: Row -> grouping key
        contributor_fn: Row -> (contributor_id, contributor_name)
        slots_fn: Row -> SlotVector
        tag_fn: Row -> (tag_id, tag_name) or None; distinct tags are
            collected per group, ordered by name
    """
    key_fn: Callable[[TRow], TKey]
    contributor_fn: Callable[[TRow], Tuple[Any, str]]
    slots_fn: Callable[[TRow], SlotVector] = field(default=lambda row: row.slots)
    tag_fn: Optional[Callable[[TRow], Optional[Tuple[Any, str]]]] = None

    def group(self, rows: Iterable[TRow]) -> Dict[TKey, List[TRow]]:
        """Group rows by key, preserving first-seen key order."""
        groups: Dict[TKey, List[TRow]] = OrderedDict()
        for row in rows:
            groups.setdefault(self.key_fn(row), []).append(row)
        return groups

    def fold(self, key: TKey, period_id: Any, rows: List[TRow]) -> AggregatedRoute:
        """Sum one group's slots and build its name-ordered breakdown."""
        contributions = []
        for row in rows:
            contributor_id, contributor_name = self.contributor_fn(row)
            contributions.append(Contribution(contributor_id, contributor_name, self.slots_fn(row)))
        contributions.sort(key=lambda c: _name_order(c.contributor_name, c.contributor_id))

        tags: Dict[Any, str] = {}
        if self.tag_fn is not None:
            for row in rows:
                tag = self.tag_fn(row)
                if tag is not None:
                    tags.setdefault(tag[0], tag[1])

        return AggregatedRoute(
            route_key=key,
            period_id=period_id,
            slot_vector=sum_vectors([c.slot_vector for c in contributions]),
            contributor_count=len(contributions),
            breakdown=tuple(contributions),
            tags=tuple(sorted(tags.items(), key=lambda t: _name_order(t[1], t[0]))),
        )

    def aggregate(self, period_id: Any, rows: Iterable[TRow]) -> Dict[TKey, AggregatedRoute]:
        """
        Aggregate rows of one period into one entry per key.

        Args:
            period_id: Planning period the rows belong to
            rows: Tenant- and period-scoped rows

        Returns:
            Dict of key -> AggregatedRoute (empty input yields an empty dict)
        """
        groups = self.group(rows)
        result = {key: self.fold(key, period_id, group) for key, group in groups.items()}
        logger.debug("Aggregated %d groups for period %s", len(result), period_id)
        return result


def _truck_type_tag(row: DemandRow) -> Optional[Tuple[Any, str]]:
    if row.truck_type_id is None:
        return None
    return row.truck_type_id, row.truck_type_name


class DemandAggregator:
    """
    Groups demand forecasts by route key with a per-client breakdown.

    The distinct truck types of each lane are carried as tags.
    """

    def __init__(self):
        self._aggregator: Aggregator[DemandRow, str] = Aggregator(
            key_fn=lambda row: require_route_key(row.route_key),
            contributor_fn=lambda row: (row.client_id, row.client_name),
            tag_fn=_truck_type_tag,
        )

    def aggregate(self, period_id: Any, rows: Iterable[DemandRow]) -> Dict[str, AggregatedRoute]:
        return self._aggregator.aggregate(period_id, rows)


class SupplyAggregator:
    """
    Groups supply commitments by route key with a per-supplier breakdown.

    Also provides the supplier-first grouping behind the dispatch sheet.
    """

    def __init__(self):
        self._aggregator: Aggregator[SupplyRow, str] = Aggregator(
            key_fn=lambda row: require_route_key(row.route_key),
            contributor_fn=lambda row: (row.supplier_id, row.supplier_name),
        )

    def aggregate(self, period_id: Any, rows: Iterable[SupplyRow]) -> Dict[str, AggregatedRoute]:
        return self._aggregator.aggregate(period_id, rows)

    def aggregate_by_supplier(
        self,
        period_id: Any,
        rows: Iterable[SupplyRow],
    ) -> Dict[Any, SupplierDispatchRow]:
        """
        Group commitments by supplier, then by route within each supplier.

        Suppliers are ordered by name, routes within a supplier by route key.
        Several commitments for the same supplier and lane collapse into one
        route line.

        Args:
            period_id: Planning period the rows belong to
            rows: Tenant- and period-scoped supply rows

        Returns:
            Ordered dict of supplier_id -> SupplierDispatchRow
        """
        by_supplier: Aggregator[SupplyRow, Any] = Aggregator(
            key_fn=lambda row: row.supplier_id,
            contributor_fn=lambda row: (row.supplier_id, row.supplier_name),
        )
        by_route: Aggregator[SupplyRow, str] = Aggregator(
            key_fn=lambda row: require_route_key(row.route_key),
            contributor_fn=lambda row: (row.supplier_id, row.supplier_name),
        )

        dispatch_rows = []
        for supplier_id, supplier_rows in by_supplier.group(rows).items():
            route_groups = by_route.aggregate(period_id, supplier_rows)
            routes = tuple(
                DispatchRoute(route_key=key, slot_vector=route_groups[key].slot_vector)
                for key in sorted(route_groups)
            )
            dispatch_rows.append(SupplierDispatchRow(
                supplier_id=supplier_id,
                supplier_name=supplier_rows[0].supplier_name,
                routes=routes,
                supplier_totals=sum_vectors([r.slot_vector for r in routes]),
            ))

        dispatch_rows.sort(key=lambda r: _name_order(r.supplier_name, r.supplier_id))
        return OrderedDict((r.supplier_id, r) for r in dispatch_rows)
