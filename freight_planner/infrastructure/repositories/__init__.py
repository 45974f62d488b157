"""
Repository implementations for data access layer.
"""
from .base_repository import BaseRepository
from .planning_period_repository import PlanningPeriodRepository
from .planning_repository import DemandRepository, SupplyRepository, ActualsRepository, CompletionsRepository
from .reference_repository import (
    ReferenceRepository,
    CityRepository,
    ClientRepository,
    SupplierRepository,
    TruckTypeRepository,
    OrganizationRepository,
)

__all__ = [
    'BaseRepository',
    'PlanningPeriodRepository',
    'DemandRepository',
    'SupplyRepository',
    'ActualsRepository',
    'CompletionsRepository',
    'ReferenceRepository',
    'CityRepository',
    'ClientRepository',
    'SupplierRepository',
    'TruckTypeRepository',
    'OrganizationRepository',
]
