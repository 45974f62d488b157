"""
Domain Services - Aggregation, reconciliation and planning workflows.
"""

from .aggregation import (
    Aggregator, AggregatedRoute, Contribution, DemandAggregator, SupplyAggregator,
    DispatchRoute, SupplierDispatchRow,
)
from .gap_reconciler import GapReconciler, GapRecord
from .dispatch import DispatchProjector, DispatchSheet
from .accuracy import AccuracyReconciler, AccuracyRecord, AccuracySummary, AccuracyReport
from .planning_period_service import PlanningPeriodService, PlanningSettings
from .planning_write_service import DemandService, SupplyService, quantities_from
from .supply_planning_service import SupplyPlanningService, GapReport
from .performance import (
    PerformanceReconciler, PerformanceReport, PerformanceSummary, SupplierPerformance,
    SupplierPeriodPerformance, CommitmentTotal, performance_status,
)
from .performance_service import SupplierPerformanceService
from .dashboard_service import DashboardService, Dashboard, DashboardMetrics
from .master_data_service import MasterDataService, normalize_city_code

__all__ = [
    'Aggregator',
    'AggregatedRoute',
    'Contribution',
    'DemandAggregator',
    'SupplyAggregator',
    'DispatchRoute',
    'SupplierDispatchRow',
    'GapReconciler',
    'GapRecord',
    'DispatchProjector',
    'DispatchSheet',
    'AccuracyReconciler',
    'AccuracyRecord',
    'AccuracySummary',
    'AccuracyReport',
    'PlanningPeriodService',
    'PlanningSettings',
    'DemandService',
    'SupplyService',
    'quantities_from',
    'SupplyPlanningService',
    'GapReport',
    'PerformanceReconciler',
    'PerformanceReport',
    'PerformanceSummary',
    'SupplierPerformance',
    'SupplierPeriodPerformance',
    'CommitmentTotal',
    'performance_status',
    'SupplierPerformanceService',
    'DashboardService',
    'Dashboard',
    'DashboardMetrics',
    'MasterDataService',
    'normalize_city_code',
]
