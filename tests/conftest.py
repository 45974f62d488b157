"""
Shared fixtures: in-memory database, seeded organization and API client.
"""
import os
from datetime import date
from pathlib import Path

os.environ.setdefault("FREIGHT_PLANNER_CONFIG", str(Path(__file__).parent / "freight_planner.test.yaml"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from freight_planner.models import (
    Base, get_db, Organization, OrganizationSettings, City, Client, Supplier, TruckType,
)

# Wednesday of week 10 (Sunday start: Mar 1 - Mar 7, 2026)
PLANNING_DAY = date(2026, 3, 4)


@pytest.fixture
def db_session():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


def seed_organization(session, name="Acme Logistics", cycle="WEEKLY", week_start="SUNDAY"):
    """Organization with settings, three cities, two shippers, two carriers and a truck type."""
    org = Organization(name=name)
    session.add(org)
    session.flush()
    session.add(OrganizationSettings(organization_id=org.id, planning_cycle=cycle, week_start_day=week_start))

    cities = {
        code: City(organization_id=org.id, name=city_name, code=code)
        for code, city_name in (("RUH", "Riyadh"), ("JED", "Jeddah"), ("DMM", "Dammam"))
    }
    shippers = {
        key: Client(organization_id=org.id, name=client_name)
        for key, client_name in (("A", "Alpha Foods"), ("B", "Beta Cement"))
    }
    carriers = {
        key: Supplier(organization_id=org.id, name=supplier_name)
        for key, supplier_name in (("X", "Xpress Haulage"), ("Y", "Yanbu Trucking"))
    }
    truck = TruckType(organization_id=org.id, name="Flatbed")
    session.add_all(list(cities.values()) + list(shippers.values()) + list(carriers.values()) + [truck])
    session.flush()

    return {
        'org': org,
        'cities': cities,
        'clients': shippers,
        'suppliers': carriers,
        'truck': truck,
    }


@pytest.fixture
def seeded(db_session):
    """A weekly, Sunday-start organization with master data."""
    data = seed_organization(db_session)
    db_session.commit()
    return data


@pytest.fixture
def client(db_session):
    """Test client bound to the per-test database."""
    from freight_planner.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
