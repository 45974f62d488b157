"""
Demand and Supply Write Services.

Enforces the write-path rules around the planning core:
- the planning period must exist and be unlocked
- referenced master data must belong to the organization
- only the period's active slot convention is stored; the other
  convention is zeroed and the total recomputed
"""
import logging
from typing import Dict, Mapping, Optional

from sqlalchemy.orm import Session

from freight_planner.models import DemandForecast, SupplyCommitment, PlanningPeriod
from freight_planner.infrastructure.repositories import (
    DemandRepository,
    SupplyRepository,
    CityRepository,
    ClientRepository,
    SupplierRepository,
    TruckTypeRepository,
)
from ..entities import (
    SlotVector, DAY_FIELDS, WEEK_FIELDS, build_route_key, slot_fields, vector_from_row,
)
from ..exceptions import DuplicateForecastError, ReferenceNotFoundError, ValidationError
from .planning_period_service import PlanningPeriodService

logger = logging.getLogger(__name__)


def apply_slots(entity, period: PlanningPeriod, quantities: Mapping[str, Optional[int]]) -> SlotVector:
    """
    Write the active slot convention onto a forecast or commitment.

    Quantities missing from `quantities` keep their current value; the
    inactive convention is zeroed and `total` recomputed.
    """
    active = slot_fields(period.cycle_kind)
    current = vector_from_row(entity, period.cycle_kind)
    values = []
    for field, existing in zip(active, current):
        value = quantities.get(field)
        values.append(existing if value is None else value)

    try:
        vector = SlotVector.of(values)
    except ValueError as e:
        raise ValidationError("quantities", str(e))

    for field in DAY_FIELDS + WEEK_FIELDS:
        setattr(entity, field, 0)
    for field, value in zip(active, vector):
        setattr(entity, field, value)
    entity.total = vector.total
    return vector


class DemandService:
    """Create, update and delete demand forecasts."""

    def __init__(self, session: Session):
        self.session = session
        self.periods = PlanningPeriodService(session)
        self.demand_repo = DemandRepository(session)
        self.city_repo = CityRepository(session)
        self.client_repo = ClientRepository(session)
        self.truck_type_repo = TruckTypeRepository(session)

    def _require(self, repo, label: str, organization_id: int, entity_id: int):
        entity = repo.get(organization_id, entity_id)
        if entity is None:
            raise ReferenceNotFoundError(label, entity_id)
        return entity

    def create(
        self,
        organization_id: int,
        planning_period_id: int,
        client_id: int,
        pickup_city_id: int,
        dropoff_city_id: int,
        truck_type_id: Optional[int],
        quantities: Mapping[str, Optional[int]],
    ) -> DemandForecast:
        """
        Create a forecast; the route key is derived from the city codes.

        Raises:
            PeriodNotFoundError, PeriodLockedError, ReferenceNotFoundError,
            DuplicateForecastError, ValidationError
        """
        period = self.periods.require_unlocked(organization_id, planning_period_id)
        self._require(self.client_repo, "Client", organization_id, client_id)
        pickup = self._require(self.city_repo, "City", organization_id, pickup_city_id)
        dropoff = self._require(self.city_repo, "City", organization_id, dropoff_city_id)
        if truck_type_id is not None:
            self._require(self.truck_type_repo, "Truck type", organization_id, truck_type_id)

        route_key = build_route_key(pickup.code, dropoff.code)
        if self.demand_repo.find_duplicate(
            organization_id, planning_period_id, client_id, pickup_city_id, dropoff_city_id, truck_type_id
        ):
            raise DuplicateForecastError(route_key, client_id)

        forecast = DemandForecast(
            organization_id=organization_id,
            planning_period_id=planning_period_id,
            client_id=client_id,
            pickup_city_id=pickup_city_id,
            dropoff_city_id=dropoff_city_id,
            truck_type_id=truck_type_id,
            route_key=route_key,
        )
        vector = apply_slots(forecast, period, quantities)
        self.demand_repo.add(forecast)
        self.session.flush()

        logger.info(
            "Created demand forecast %s for %s (%d loads) in period %s",
            forecast.id, route_key, vector.total, planning_period_id
        )
        return forecast

    def update(
        self,
        organization_id: int,
        forecast_id: int,
        quantities: Mapping[str, Optional[int]],
        truck_type_id: Optional[int] = None,
    ) -> DemandForecast:
        forecast = self._require(self.demand_repo, "Demand forecast", organization_id, forecast_id)
        period = self.periods.require_unlocked(organization_id, forecast.planning_period_id)
        if truck_type_id is not None and truck_type_id != forecast.truck_type_id:
            self._require(self.truck_type_repo, "Truck type", organization_id, truck_type_id)
            if self.demand_repo.find_duplicate(
                organization_id, forecast.planning_period_id, forecast.client_id,
                forecast.pickup_city_id, forecast.dropoff_city_id, truck_type_id,
                exclude_id=forecast.id,
            ):
                raise DuplicateForecastError(forecast.route_key, forecast.client_id)
            forecast.truck_type_id = truck_type_id
        apply_slots(forecast, period, quantities)
        self.session.flush()
        return forecast

    def delete(self, organization_id: int, forecast_id: int) -> None:
        forecast = self._require(self.demand_repo, "Demand forecast", organization_id, forecast_id)
        self.periods.require_unlocked(organization_id, forecast.planning_period_id)
        self.demand_repo.delete(forecast)
        self.session.flush()
        logger.info("Deleted demand forecast %s", forecast_id)


class SupplyService:
    """Create, update and delete supply commitments."""

    def __init__(self, session: Session):
        self.session = session
        self.periods = PlanningPeriodService(session)
        self.supply_repo = SupplyRepository(session)
        self.supplier_repo = SupplierRepository(session)
        self.truck_type_repo = TruckTypeRepository(session)

    def create(
        self,
        organization_id: int,
        planning_period_id: int,
        supplier_id: int,
        route_key: str,
        truck_type_id: Optional[int],
        quantities: Mapping[str, Optional[int]],
    ) -> SupplyCommitment:
        period = self.periods.require_unlocked(organization_id, planning_period_id)
        if self.supplier_repo.get(organization_id, supplier_id) is None:
            raise ReferenceNotFoundError("Supplier", supplier_id)
        if truck_type_id is not None and self.truck_type_repo.get(organization_id, truck_type_id) is None:
            raise ReferenceNotFoundError("Truck type", truck_type_id)

        route_key = (route_key or "").strip().upper()
        if not route_key:
            raise ValidationError("route_key", "route is required")

        commitment = SupplyCommitment(
            organization_id=organization_id,
            planning_period_id=planning_period_id,
            supplier_id=supplier_id,
            truck_type_id=truck_type_id,
            route_key=route_key,
        )
        vector = apply_slots(commitment, period, quantities)
        self.supply_repo.add(commitment)
        self.session.flush()

        logger.info(
            "Created supply commitment %s for %s (%d loads) in period %s",
            commitment.id, route_key, vector.total, planning_period_id
        )
        return commitment

    def update(
        self,
        organization_id: int,
        commitment_id: int,
        quantities: Mapping[str, Optional[int]],
    ) -> SupplyCommitment:
        commitment = self.supply_repo.get(organization_id, commitment_id)
        if commitment is None:
            raise ReferenceNotFoundError("Supply commitment", commitment_id)
        period = self.periods.require_unlocked(organization_id, commitment.planning_period_id)
        apply_slots(commitment, period, quantities)
        self.session.flush()
        return commitment

    def delete(self, organization_id: int, commitment_id: int) -> None:
        commitment = self.supply_repo.get(organization_id, commitment_id)
        if commitment is None:
            raise ReferenceNotFoundError("Supply commitment", commitment_id)
        self.periods.require_unlocked(organization_id, commitment.planning_period_id)
        self.supply_repo.delete(commitment)
        self.session.flush()
        logger.info("Deleted supply commitment %s", commitment_id)


def quantities_from(data: Mapping[str, Optional[int]]) -> Dict[str, Optional[int]]:
    """Pick slot fields out of a request payload."""
    return {f: data.get(f) for f in DAY_FIELDS + WEEK_FIELDS if f in data}
