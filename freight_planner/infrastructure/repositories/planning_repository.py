"""
Demand, Supply and Actuals Repositories - Row sources for the planning core.
"""
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from freight_planner.models import (
    DemandForecast, SupplyCommitment, ActualShipperRequest, SupplierCompletion, Client, Supplier, PlanningPeriod,
)
from freight_planner.domain.entities import ActualTotals
from .base_repository import BaseRepository


class DemandRepository(BaseRepository[DemandForecast]):
    """Repository for demand forecasts."""

    def __init__(self, session: Session):
        super().__init__(session, DemandForecast)

    def for_period(
        self,
        organization_id: int,
        planning_period_id: int,
        client_ids: Optional[Iterable[int]] = None,
        truck_type_ids: Optional[Iterable[int]] = None,
    ) -> List[DemandForecast]:
        """
        Forecasts of one period, optionally filtered by client and truck type.

        Rows without a route key are excluded; they cannot be aggregated.
        """
        query = self.scoped(organization_id).options(
            joinedload(DemandForecast.client),
            joinedload(DemandForecast.truck_type),
        ).filter(
            DemandForecast.planning_period_id == planning_period_id,
            DemandForecast.route_key.isnot(None),
            DemandForecast.route_key != "",
        )
        client_ids = list(client_ids or [])
        truck_type_ids = list(truck_type_ids or [])
        if client_ids:
            query = query.filter(DemandForecast.client_id.in_(client_ids))
        if truck_type_ids:
            query = query.filter(DemandForecast.truck_type_id.in_(truck_type_ids))
        return query.join(Client).order_by(Client.name, DemandForecast.id).all()

    def find_duplicate(
        self,
        organization_id: int,
        planning_period_id: int,
        client_id: int,
        pickup_city_id: int,
        dropoff_city_id: int,
        truck_type_id: Optional[int],
        exclude_id: Optional[int] = None,
    ) -> Optional[DemandForecast]:
        query = self.scoped(organization_id).filter(
            DemandForecast.planning_period_id == planning_period_id,
            DemandForecast.client_id == client_id,
            DemandForecast.pickup_city_id == pickup_city_id,
            DemandForecast.dropoff_city_id == dropoff_city_id,
            DemandForecast.truck_type_id == truck_type_id,
        )
        if exclude_id is not None:
            query = query.filter(DemandForecast.id != exclude_id)
        return query.first()

    def filtered(
        self,
        organization_id: int,
        planning_period_id: Optional[int] = None,
        client_id: Optional[int] = None,
        route_key: Optional[str] = None,
    ) -> List[DemandForecast]:
        query = self.scoped(organization_id)
        if planning_period_id:
            query = query.filter(DemandForecast.planning_period_id == planning_period_id)
        if client_id:
            query = query.filter(DemandForecast.client_id == client_id)
        if route_key:
            query = query.filter(DemandForecast.route_key == route_key)
        return query.order_by(DemandForecast.client_id, DemandForecast.route_key).all()

    def recent(self, organization_id: int, planning_period_id: int, limit: int = 5) -> List[DemandForecast]:
        """Most recently created forecasts of a period."""
        return self.scoped(organization_id).options(
            joinedload(DemandForecast.client)
        ).filter(
            DemandForecast.planning_period_id == planning_period_id
        ).order_by(DemandForecast.created_at.desc(), DemandForecast.id.desc()).limit(limit).all()


class SupplyRepository(BaseRepository[SupplyCommitment]):
    """Repository for supply commitments."""

    def __init__(self, session: Session):
        super().__init__(session, SupplyCommitment)

    def for_period(self, organization_id: int, planning_period_id: int) -> List[SupplyCommitment]:
        """All commitments of one period with a usable route key."""
        return self.scoped(organization_id).options(
            joinedload(SupplyCommitment.supplier)
        ).filter(
            SupplyCommitment.planning_period_id == planning_period_id,
            SupplyCommitment.route_key.isnot(None),
            SupplyCommitment.route_key != "",
        ).join(Supplier).order_by(Supplier.name, SupplyCommitment.route_key).all()

    def filtered(
        self,
        organization_id: int,
        planning_period_id: Optional[int] = None,
        supplier_id: Optional[int] = None,
        route_key: Optional[str] = None,
    ) -> List[SupplyCommitment]:
        query = self.scoped(organization_id)
        if planning_period_id:
            query = query.filter(SupplyCommitment.planning_period_id == planning_period_id)
        if supplier_id:
            query = query.filter(SupplyCommitment.supplier_id == supplier_id)
        if route_key:
            query = query.filter(SupplyCommitment.route_key == route_key)
        return query.order_by(SupplyCommitment.supplier_id, SupplyCommitment.route_key).all()

    def in_window(
        self,
        organization_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        supplier_id: Optional[int] = None,
        route_key: Optional[str] = None,
    ) -> List[SupplyCommitment]:
        """Commitments of every period starting inside [start_date, end_date]."""
        query = self.scoped(organization_id).options(
            joinedload(SupplyCommitment.supplier),
            joinedload(SupplyCommitment.planning_period),
        ).join(PlanningPeriod, SupplyCommitment.planning_period_id == PlanningPeriod.id)
        if start_date:
            query = query.filter(PlanningPeriod.period_start >= start_date)
        if end_date:
            query = query.filter(PlanningPeriod.period_start <= end_date)
        if supplier_id:
            query = query.filter(SupplyCommitment.supplier_id == supplier_id)
        if route_key:
            query = query.filter(SupplyCommitment.route_key == route_key)
        return query.order_by(PlanningPeriod.period_start, SupplyCommitment.id).all()


class ActualsRepository:
    """
    Reads the external shipper-request feed.

    The feed is not tenant scoped and names its lane column `citym`;
    totals are returned keyed by route key.
    """

    def __init__(self, session: Session):
        self.session = session

    def totals_by_route_key(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Dict[str, ActualTotals]:
        query = self.session.query(
            ActualShipperRequest.citym,
            func.sum(ActualShipperRequest.loads_requested),
            func.sum(ActualShipperRequest.loads_fulfilled),
        )
        if start_date:
            query = query.filter(ActualShipperRequest.request_date >= start_date)
        if end_date:
            query = query.filter(ActualShipperRequest.request_date <= end_date)

        totals: Dict[str, List[int]] = defaultdict(lambda: [0, 0])
        for citym, requested, fulfilled in query.group_by(ActualShipperRequest.citym).all():
            route_key = (citym or "").strip().upper()
            if not route_key:
                continue
            totals[route_key][0] += int(requested or 0)
            totals[route_key][1] += int(fulfilled or 0)

        return {key: ActualTotals(requested=r, fulfilled=f) for key, (r, f) in totals.items()}


class CompletionsRepository:
    """
    Reads the carrier completions feed.

    Like the shipper-request feed it is not tenant scoped; rows carry the
    carrier's name rather than a supplier id.
    """

    def __init__(self, session: Session):
        self.session = session

    def daily_totals(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        route_key: Optional[str] = None,
    ) -> List[Tuple[str, date, int]]:
        """(supplier_name, completion_date, loads) summed per carrier and day."""
        query = self.session.query(
            SupplierCompletion.supplier_name,
            SupplierCompletion.completion_date,
            func.sum(SupplierCompletion.loads_completed),
        ).filter(SupplierCompletion.supplier_name.isnot(None))
        if start_date:
            query = query.filter(SupplierCompletion.completion_date >= start_date)
        if end_date:
            query = query.filter(SupplierCompletion.completion_date <= end_date)
        if route_key:
            query = query.filter(SupplierCompletion.citym == route_key)

        rows = query.group_by(SupplierCompletion.supplier_name, SupplierCompletion.completion_date).all()
        return [(name, day, int(loads or 0)) for name, day, loads in rows]
