"""
Planning Rows - Immutable demand and supply inputs to the aggregation core.

Rows are built from persisted forecasts/commitments after tenant scoping.
Any stored total travels along for reference only; aggregation always
recomputes it from the slots.
"""
from dataclasses import dataclass
from typing import Any, Optional

from .slots import SlotVector, vector_from_row


@dataclass(frozen=True)
class DemandRow:
    """
    One client's demand forecast for a lane within a period.

    Attributes:
        route_key: Lane identifier (e.g. 'RUHJED')
        period_id: Planning period identifier
        client_id: Contributing client
        client_name: Client display name (breakdown ordering)
        slots: Active-convention quantities
        stored_total: Denormalized total as persisted (not trusted)
        truck_type_id: Optional truck type (used for filtering)
        truck_type_name: Truck type display name, empty when untyped
    """
    route_key: str
    period_id: Any
    client_id: Any
    client_name: str
    slots: SlotVector
    stored_total: Optional[int] = None
    truck_type_id: Any = None
    truck_type_name: str = ""

    @classmethod
    def from_entity(cls, forecast, cycle_kind) -> 'DemandRow':
        client = getattr(forecast, 'client', None)
        truck_type = getattr(forecast, 'truck_type', None)
        return cls(
            route_key=forecast.route_key,
            period_id=forecast.planning_period_id,
            client_id=forecast.client_id,
            client_name=client.name if client is not None else "",
            slots=vector_from_row(forecast, cycle_kind),
            stored_total=forecast.total,
            truck_type_id=forecast.truck_type_id,
            truck_type_name=truck_type.name if truck_type is not None else "",
        )


@dataclass(frozen=True)
class SupplyRow:
    """
    One supplier's commitment for a lane within a period.

    Attributes:
        route_key: Lane identifier
        period_id: Planning period identifier
        supplier_id: Committing supplier
        supplier_name: Supplier display name
        slots: Active-convention committed quantities
        stored_total: Denormalized total as persisted (not trusted)
    """
    route_key: str
    period_id: Any
    supplier_id: Any
    supplier_name: str
    slots: SlotVector
    stored_total: Optional[int] = None

    @classmethod
    def from_entity(cls, commitment, cycle_kind) -> 'SupplyRow':
        supplier = getattr(commitment, 'supplier', None)
        return cls(
            route_key=commitment.route_key,
            period_id=commitment.planning_period_id,
            supplier_id=commitment.supplier_id,
            supplier_name=supplier.name if supplier is not None else "",
            slots=vector_from_row(commitment, cycle_kind),
            stored_total=commitment.total,
        )


@dataclass(frozen=True)
class ActualTotals:
    """Externally observed loads for a lane (analytics feed)."""
    requested: int = 0
    fulfilled: int = 0
