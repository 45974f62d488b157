"""
Main FastAPI Application for Freight Planner.
Provides the REST endpoints for demand/supply planning.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from freight_planner import __version__
from freight_planner.models import init_db
from freight_planner.api.v1 import api_router as v1_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Freight Planner API started")
    yield


app = FastAPI(
    title="Freight Planner",
    description="Weekly and monthly lane demand forecasts reconciled against supplier commitments",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(v1_router)


@app.get("/health")
def health():
    """Liveness check."""
    return {"status": "ok", "version": __version__}
