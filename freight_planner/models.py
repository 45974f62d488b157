"""
Database models and SQLAlchemy setup for Freight Planner.
All quantities are stored as integer load counts.
"""
from datetime import datetime
from sqlalchemy import (
    create_engine, Column, Integer, String, Boolean,
    DateTime, Date, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, sessionmaker, relationship

from freight_planner.config import get_config

DATABASE_URL = get_config().database_url
engine = create_engine(
    DATABASE_URL,
    echo=get_config().database_echo,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


# =============================================================================
# Tenancy
# =============================================================================

class Organization(Base):
    """Tenant. Every planning entity is scoped to one organization."""
    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    settings = relationship("OrganizationSettings", back_populates="organization", uselist=False)


class OrganizationSettings(Base):
    """Planning cycle preferences of an organization."""
    __tablename__ = "organization_settings"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey('organizations.id'), unique=True, nullable=False)
    planning_cycle = Column(String(10), default="WEEKLY")  # DAILY, WEEKLY, MONTHLY
    week_start_day = Column(String(10), default="SUNDAY")  # SUNDAY, MONDAY, SATURDAY
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    organization = relationship("Organization", back_populates="settings")


# =============================================================================
# Repositories (master data)
# =============================================================================

class City(Base):
    """Pickup/dropoff location. The code feeds route keys."""
    __tablename__ = "cities"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey('organizations.id'), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    code = Column(String(10), nullable=False)
    region = Column(String(100), nullable=True)
    is_active = Column(Boolean, default=True)

    __table_args__ = (
        UniqueConstraint('organization_id', 'code', name='uq_city_org_code'),
    )


class Client(Base):
    """Shipper whose demand is forecast."""
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey('organizations.id'), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    code = Column(String(50), nullable=True)
    is_active = Column(Boolean, default=True)


class Supplier(Base):
    """Carrier committing trucks against demand."""
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey('organizations.id'), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    code = Column(String(50), nullable=True)
    is_active = Column(Boolean, default=True)


class TruckType(Base):
    """Truck/resource type requested by a forecast."""
    __tablename__ = "truck_types"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey('organizations.id'), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    is_active = Column(Boolean, default=True)


# =============================================================================
# Planning Periods
# =============================================================================

class PlanningPeriod(Base):
    """
    One planning week or month of an organization.

    For MONTHLY organizations `sequence` holds the month number (1-12),
    otherwise the week number (1-53). Created lazily on first access.
    """
    __tablename__ = "planning_periods"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey('organizations.id'), nullable=False, index=True)
    cycle_kind = Column(String(10), nullable=False, default="WEEKLY")  # WEEKLY, MONTHLY
    year = Column(Integer, nullable=False)
    sequence = Column(Integer, nullable=False)
    period_start = Column(Date, nullable=False, index=True)
    period_end = Column(Date, nullable=False)
    is_locked = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('organization_id', 'year', 'sequence', 'cycle_kind', name='uq_period_org_year_seq'),
    )


# =============================================================================
# Demand and Supply
# =============================================================================

class SlotColumnsMixin:
    """Day slots for weekly planning, week slots for monthly planning."""
    day1 = Column(Integer, default=0, nullable=False)
    day2 = Column(Integer, default=0, nullable=False)
    day3 = Column(Integer, default=0, nullable=False)
    day4 = Column(Integer, default=0, nullable=False)
    day5 = Column(Integer, default=0, nullable=False)
    day6 = Column(Integer, default=0, nullable=False)
    day7 = Column(Integer, default=0, nullable=False)
    week1 = Column(Integer, default=0, nullable=False)
    week2 = Column(Integer, default=0, nullable=False)
    week3 = Column(Integer, default=0, nullable=False)
    week4 = Column(Integer, default=0, nullable=False)
    week5 = Column(Integer, default=0, nullable=False)
    total = Column(Integer, default=0, nullable=False)  # Denormalized, recomputed on read


class DemandForecast(SlotColumnsMixin, Base):
    """A client's forecast loads for a lane and truck type within a period."""
    __tablename__ = "demand_forecasts"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey('organizations.id'), nullable=False, index=True)
    planning_period_id = Column(Integer, ForeignKey('planning_periods.id'), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey('clients.id'), nullable=False, index=True)
    pickup_city_id = Column(Integer, ForeignKey('cities.id'), nullable=False)
    dropoff_city_id = Column(Integer, ForeignKey('cities.id'), nullable=False)
    truck_type_id = Column(Integer, ForeignKey('truck_types.id'), nullable=True, index=True)
    route_key = Column(String(50), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("Client")
    pickup_city = relationship("City", foreign_keys=[pickup_city_id])
    dropoff_city = relationship("City", foreign_keys=[dropoff_city_id])
    truck_type = relationship("TruckType")
    planning_period = relationship("PlanningPeriod")

    __table_args__ = (
        UniqueConstraint(
            'planning_period_id', 'client_id', 'pickup_city_id', 'dropoff_city_id', 'truck_type_id',
            name='uq_demand_period_client_lane_truck'
        ),
    )


class SupplyCommitment(SlotColumnsMixin, Base):
    """A supplier's committed loads for a lane within a period."""
    __tablename__ = "supply_commitments"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey('organizations.id'), nullable=False, index=True)
    planning_period_id = Column(Integer, ForeignKey('planning_periods.id'), nullable=False, index=True)
    supplier_id = Column(Integer, ForeignKey('suppliers.id'), nullable=False, index=True)
    truck_type_id = Column(Integer, ForeignKey('truck_types.id'), nullable=True)
    route_key = Column(String(50), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    supplier = relationship("Supplier")
    truck_type = relationship("TruckType")
    planning_period = relationship("PlanningPeriod")


# =============================================================================
# External Actuals Feed
# =============================================================================

class ActualShipperRequest(Base):
    """
    Observed shipper requests imported from the analytics feed.
    Not tenant scoped; `citym` carries the same value as a route key.
    """
    __tablename__ = "actual_shipper_requests"

    id = Column(Integer, primary_key=True, index=True)
    citym = Column(String(50), nullable=False, index=True)
    request_date = Column(Date, nullable=False, index=True)
    loads_requested = Column(Integer, default=0, nullable=False)
    loads_fulfilled = Column(Integer, default=0, nullable=False)
    imported_at = Column(DateTime, default=datetime.utcnow)


class SupplierCompletion(Base):
    """
    Loads completed by carriers, imported from the analytics feed.
    Not tenant scoped; carriers are matched to suppliers by name.
    """
    __tablename__ = "supplier_completions"

    id = Column(Integer, primary_key=True, index=True)
    supplier_name = Column(String(200), nullable=True, index=True)
    citym = Column(String(50), nullable=True, index=True)
    completion_date = Column(Date, nullable=False, index=True)
    loads_completed = Column(Integer, default=0, nullable=False)
    imported_at = Column(DateTime, default=datetime.utcnow)


def init_db():
    """Initialize the database and create all tables."""
    Base.metadata.create_all(bind=engine)


def get_db():
    """Database session dependency for FastAPI."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
