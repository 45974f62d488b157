"""
API v1 - REST endpoints for demand/supply planning.

- Planning period endpoints (list, current, lock/unlock)
- Master data endpoints (cities, clients, suppliers, truck types)
- Demand endpoints (CRUD)
- Supply endpoints (CRUD, targets, dispatch, CSV exports)
- Dashboard endpoint (current period overview)
- Report endpoints (forecast accuracy, supplier performance)
"""
from fastapi import APIRouter

from .planning_periods import router as planning_periods_router
from .master_data import cities_router, clients_router, suppliers_router, truck_types_router
from .demand import router as demand_router
from .supply import router as supply_router
from .dashboard import router as dashboard_router
from .reports import router as reports_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(planning_periods_router, prefix="/planning-periods", tags=["Planning Periods"])
api_router.include_router(cities_router, prefix="/cities", tags=["Master Data"])
api_router.include_router(clients_router, prefix="/clients", tags=["Master Data"])
api_router.include_router(suppliers_router, prefix="/suppliers", tags=["Master Data"])
api_router.include_router(truck_types_router, prefix="/truck-types", tags=["Master Data"])
api_router.include_router(demand_router, prefix="/demand", tags=["Demand"])
api_router.include_router(supply_router, prefix="/supply", tags=["Supply"])
api_router.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(reports_router, prefix="/reports", tags=["Reports"])
