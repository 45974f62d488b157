"""
Dispatch Projector - Supplier-centric view of committed supply.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..entities.slots import SlotVector, WEEK_SLOTS, sum_vectors
from ..exceptions import InvariantViolationError
from .aggregation import SupplierDispatchRow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchSheet:
    """Suppliers x routes x slots matrix with grand totals."""
    period_id: Any
    suppliers: Tuple[SupplierDispatchRow, ...]
    grand_totals: SlotVector

    def as_dict(self) -> dict:
        return {
            'period_id': self.period_id,
            'suppliers': [s.as_dict() for s in self.suppliers],
            'grand_totals': self.grand_totals.as_dict(),
        }


class DispatchProjector:
    """Builds the dispatch sheet from SupplyAggregator.aggregate_by_supplier output."""

    def project(
        self,
        supply_by_supplier: Dict[Any, SupplierDispatchRow],
        period_id: Any = None,
        width: Optional[int] = None,
    ) -> DispatchSheet:
        """
        Sum supplier totals into grand totals, keeping supplier order.

        Args:
            supply_by_supplier: Ordered supplier_id -> SupplierDispatchRow
            period_id: Planning period of the sheet
            width: Slot width used when there are no suppliers

        Returns:
            DispatchSheet
        """
        suppliers = tuple(supply_by_supplier.values())
        for supplier in suppliers:
            route_sum = sum_vectors([r.slot_vector for r in supplier.routes], supplier.supplier_totals.width)
            if route_sum != supplier.supplier_totals:
                raise InvariantViolationError(
                    "supplier_totals",
                    expected=str(route_sum.as_dict()),
                    actual=str(supplier.supplier_totals.as_dict()),
                )

        grand_totals = sum_vectors([s.supplier_totals for s in suppliers], width or WEEK_SLOTS)
        logger.debug("Projected dispatch sheet with %d suppliers", len(suppliers))
        return DispatchSheet(period_id=period_id, suppliers=suppliers, grand_totals=grand_totals)
