"""
Tests for the v1 REST API.
"""
from datetime import date

import pytest

from freight_planner.models import ActualShipperRequest, SupplierCompletion


def headers(org_id):
    return {"X-Organization-Id": str(org_id)}


@pytest.fixture
def org_id(seeded):
    return seeded['org'].id


@pytest.fixture
def current_period(client, org_id):
    response = client.get("/api/v1/planning-periods/current", headers=headers(org_id))
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def planned(client, seeded, org_id, current_period):
    """RUHJED / JEDDMM demand with one commitment, created through the API."""
    cities = seeded['cities']
    clients = seeded['clients']
    period_id = current_period['id']
    payloads = [
        {'client_id': clients['A'].id, 'pickup_city_id': cities['RUH'].id, 'dropoff_city_id': cities['JED'].id,
         **{f'day{i}': 10 for i in range(1, 8)}},
        {'client_id': clients['B'].id, 'pickup_city_id': cities['RUH'].id, 'dropoff_city_id': cities['JED'].id,
         'day1': 5, 'day3': 5, 'day5': 5, 'day7': 5},
        {'client_id': clients['A'].id, 'pickup_city_id': cities['JED'].id, 'dropoff_city_id': cities['DMM'].id,
         'day1': 10, 'day2': 10, 'day3': 10, 'day4': 10, 'day5': 10},
    ]
    for payload in payloads:
        response = client.post(
            "/api/v1/demand", json={'planning_period_id': period_id, **payload}, headers=headers(org_id)
        )
        assert response.status_code == 201

    response = client.post("/api/v1/supply", json={
        'planning_period_id': period_id,
        'supplier_id': seeded['suppliers']['X'].id,
        'route_key': "RUHJED",
        **{f'day{i}': 12 for i in range(1, 8)},
    }, headers=headers(org_id))
    assert response.status_code == 201
    return period_id


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()['status'] == "ok"


class TestPlanningPeriodsApi:
    """Tests for /api/v1/planning-periods"""

    def test_current_contains_today(self, current_period):
        today = date.today().isoformat()
        assert current_period['period_start'] <= today <= current_period['period_end']
        assert current_period['is_current'] is True
        assert current_period['is_locked'] is False
        assert current_period['cycle_kind'] == "WEEKLY"

    def test_list_upcoming(self, client, org_id):
        response = client.get("/api/v1/planning-periods?count=3", headers=headers(org_id))
        assert response.status_code == 200
        data = response.json()
        assert len(data['periods']) == 3
        assert data['planning_cycle'] == "WEEKLY"
        assert data['week_start_day'] == "SUNDAY"
        assert [p['is_current'] for p in data['periods']] == [True, False, False]

    def test_missing_tenant_header(self, client):
        assert client.get("/api/v1/planning-periods/current").status_code == 422

    def test_unknown_organization(self, client, seeded):
        response = client.get("/api/v1/planning-periods/current", headers=headers(999))
        assert response.status_code == 404
        assert response.json()['detail']['code'] == "NOT_FOUND"

    def test_lock_blocks_demand(self, client, seeded, org_id, current_period):
        response = client.post(f"/api/v1/planning-periods/{current_period['id']}/lock", headers=headers(org_id))
        assert response.status_code == 200
        assert response.json()['is_locked'] is True

        response = client.post("/api/v1/demand", json={
            'planning_period_id': current_period['id'],
            'client_id': seeded['clients']['A'].id,
            'pickup_city_id': seeded['cities']['RUH'].id,
            'dropoff_city_id': seeded['cities']['JED'].id,
            'day1': 3,
        }, headers=headers(org_id))
        assert response.status_code == 423
        assert response.json()['detail']['code'] == "LOCKED"

        response = client.post(f"/api/v1/planning-periods/{current_period['id']}/unlock", headers=headers(org_id))
        assert response.json()['is_locked'] is False

    def test_lock_unknown_period(self, client, org_id):
        response = client.post("/api/v1/planning-periods/9999/lock", headers=headers(org_id))
        assert response.status_code == 404


class TestDemandApi:
    """Tests for /api/v1/demand"""

    def test_list(self, client, org_id, planned):
        response = client.get(f"/api/v1/demand?planning_period_id={planned}", headers=headers(org_id))
        assert response.status_code == 200
        rows = response.json()
        assert len(rows) == 3
        assert {r['route_key'] for r in rows} == {"RUHJED", "JEDDMM"}

    def test_filter_by_route(self, client, org_id, planned):
        response = client.get("/api/v1/demand?route_key=jeddmm", headers=headers(org_id))
        assert [r['total'] for r in response.json()] == [50]

    def test_duplicate(self, client, seeded, org_id, planned):
        response = client.post("/api/v1/demand", json={
            'planning_period_id': planned,
            'client_id': seeded['clients']['A'].id,
            'pickup_city_id': seeded['cities']['RUH'].id,
            'dropoff_city_id': seeded['cities']['JED'].id,
        }, headers=headers(org_id))
        assert response.status_code == 409
        assert response.json()['detail']['code'] == "DUPLICATE"

    def test_truck_type_change_conflict(self, client, seeded, org_id, planned):
        response = client.post("/api/v1/demand", json={
            'planning_period_id': planned,
            'client_id': seeded['clients']['A'].id,
            'pickup_city_id': seeded['cities']['RUH'].id,
            'dropoff_city_id': seeded['cities']['JED'].id,
            'truck_type_id': seeded['truck'].id,
            'day1': 2,
        }, headers=headers(org_id))
        assert response.status_code == 201

        rows = client.get(
            f"/api/v1/demand?route_key=RUHJED&client_id={seeded['clients']['A'].id}", headers=headers(org_id)
        ).json()
        untyped = next(r for r in rows if r['truck_type_id'] is None)
        response = client.patch(
            f"/api/v1/demand/{untyped['id']}", json={'truck_type_id': seeded['truck'].id}, headers=headers(org_id)
        )
        assert response.status_code == 409
        assert response.json()['detail']['code'] == "DUPLICATE"

        rows = client.get("/api/v1/demand?route_key=RUHJED", headers=headers(org_id)).json()
        assert sum(1 for r in rows if r['truck_type_id'] is None) == 2

    def test_negative_quantity_rejected(self, client, seeded, org_id, current_period):
        response = client.post("/api/v1/demand", json={
            'planning_period_id': current_period['id'],
            'client_id': seeded['clients']['A'].id,
            'pickup_city_id': seeded['cities']['RUH'].id,
            'dropoff_city_id': seeded['cities']['JED'].id,
            'day1': -4,
        }, headers=headers(org_id))
        assert response.status_code == 422

    def test_update_and_delete(self, client, org_id, planned):
        forecast = client.get("/api/v1/demand?route_key=JEDDMM", headers=headers(org_id)).json()[0]

        response = client.patch(f"/api/v1/demand/{forecast['id']}", json={'day6': 7}, headers=headers(org_id))
        assert response.status_code == 200
        assert response.json()['total'] == 57
        assert response.json()['day1'] == 10

        response = client.delete(f"/api/v1/demand/{forecast['id']}", headers=headers(org_id))
        assert response.status_code == 204
        assert client.get("/api/v1/demand?route_key=JEDDMM", headers=headers(org_id)).json() == []

    def test_other_tenant_cannot_see_rows(self, client, db_session, planned):
        from conftest import seed_organization
        other = seed_organization(db_session, name="Other Org")
        db_session.commit()
        response = client.get("/api/v1/demand", headers=headers(other['org'].id))
        assert response.json() == []


class TestSupplyApi:
    """Tests for /api/v1/supply"""

    def test_targets(self, client, org_id, planned):
        response = client.get(f"/api/v1/supply/targets?planning_period_id={planned}", headers=headers(org_id))
        assert response.status_code == 200
        routes = response.json()['routes']
        assert [r['route_key'] for r in routes] == ["JEDDMM", "RUHJED"]
        assert routes[0]['gap']['total'] == 50
        assert routes[0]['gap_percent'] == 100
        assert routes[1]['target']['total'] == 90
        assert routes[1]['committed']['total'] == 84
        assert routes[1]['gap_percent'] == 7
        assert routes[1]['forecast_count'] == 2
        assert routes[1]['truck_types'] == []

    def test_targets_client_filter(self, client, seeded, org_id, planned):
        response = client.get(
            f"/api/v1/supply/targets?planning_period_id={planned}&client_ids={seeded['clients']['B'].id}",
            headers=headers(org_id),
        )
        routes = response.json()['routes']
        assert [r['route_key'] for r in routes] == ["RUHJED"]
        assert routes[0]['gap']['total'] == -64

    def test_targets_unknown_period(self, client, org_id):
        response = client.get("/api/v1/supply/targets?planning_period_id=9999", headers=headers(org_id))
        assert response.status_code == 404

    def test_targets_csv(self, client, org_id, planned):
        response = client.get(
            f"/api/v1/supply/targets/export.csv?planning_period_id={planned}", headers=headers(org_id)
        )
        assert response.status_code == 200
        assert response.headers['content-type'].startswith("text/csv")
        assert "freight_supply_targets_" in response.headers['content-disposition']

        lines = response.text.strip().splitlines()
        header = lines[0].split(",")
        assert header[:4] == ["Route", "Sunday Target", "Sunday Committed", "Sunday Gap"]
        assert header[-1] == "Gap %"
        assert lines[1].startswith("JEDDMM,")
        assert lines[2].endswith(",90,84,6,7")

    def test_dispatch(self, client, org_id, planned):
        response = client.get(f"/api/v1/supply/dispatch?planning_period_id={planned}", headers=headers(org_id))
        assert response.status_code == 200
        data = response.json()
        assert data['suppliers'][0]['supplier_name'] == "Xpress Haulage"
        assert data['suppliers'][0]['routes'][0]['plan']['day1'] == 12
        assert data['grand_totals']['total'] == 84

    def test_dispatch_csv_header(self, client, org_id, planned):
        response = client.get(
            f"/api/v1/supply/dispatch/export.csv?planning_period_id={planned}", headers=headers(org_id)
        )
        lines = response.text.strip().splitlines()
        assert lines[0] == "Supplier,Route,Sunday,Monday,Tuesday,Wednesday,Thursday,Friday,Saturday,Total"
        assert lines[1:] == ["Xpress Haulage,RUHJED,12,12,12,12,12,12,12,84"]

    def test_dispatch_csv_with_totals(self, client, org_id, planned):
        response = client.get(
            f"/api/v1/supply/dispatch/export.csv?planning_period_id={planned}&include_totals=true",
            headers=headers(org_id),
        )
        lines = response.text.strip().splitlines()
        assert lines[2] == "Xpress Haulage,Total,12,12,12,12,12,12,12,84"
        assert lines[-1] == "Grand Total,,12,12,12,12,12,12,12,84"

    def test_update_and_delete_commitment(self, client, org_id, planned):
        commitment = client.get("/api/v1/supply?route_key=RUHJED", headers=headers(org_id)).json()[0]
        response = client.patch(f"/api/v1/supply/{commitment['id']}", json={'day1': 0}, headers=headers(org_id))
        assert response.json()['total'] == 72

        response = client.delete(f"/api/v1/supply/{commitment['id']}", headers=headers(org_id))
        assert response.status_code == 204
        assert client.get("/api/v1/supply", headers=headers(org_id)).json() == []

    def test_unknown_supplier(self, client, org_id, current_period):
        response = client.post("/api/v1/supply", json={
            'planning_period_id': current_period['id'],
            'supplier_id': 9999,
            'route_key': "RUHJED",
        }, headers=headers(org_id))
        assert response.status_code == 404


class TestReportsApi:
    """Tests for /api/v1/reports"""

    def test_accuracy(self, client, db_session, org_id, planned, current_period):
        db_session.add(ActualShipperRequest(
            citym="RUHJED",
            request_date=date.fromisoformat(current_period['period_start']),
            loads_requested=100,
            loads_fulfilled=80,
        ))
        db_session.commit()

        response = client.get(f"/api/v1/reports/accuracy?planning_period_id={planned}", headers=headers(org_id))
        assert response.status_code == 200
        data = response.json()
        assert data['summary']['total_forecasted'] == 140
        assert data['summary']['total_actual_requested'] == 100
        assert data['summary']['route_count'] == 2
        assert data['routes'][0]['route_key'] == "JEDDMM"
        assert data['routes'][1]['accuracy_percent'] == 89

    def test_supplier_performance(self, client, db_session, seeded, org_id, planned, current_period):
        db_session.add(SupplierCompletion(
            supplier_name="Xpress Haulage",
            citym="RUHJED",
            completion_date=date.fromisoformat(current_period['period_start']),
            loads_completed=42,
        ))
        db_session.commit()

        start = current_period['period_start']
        response = client.get(
            f"/api/v1/reports/supplier-performance?start_date={start}&end_date={start}", headers=headers(org_id)
        )
        assert response.status_code == 200
        data = response.json()
        assert len(data['periods']) == 1
        row = data['periods'][0]
        assert row['supplier_id'] == seeded['suppliers']['X'].id
        assert (row['committed'], row['completed'], row['variance']) == (84, 42, -42)
        assert row['fulfillment_rate'] == 50
        assert row['status'] == "poor"
        assert row['routes'] == ["RUHJED"]
        assert data['summary']['top_performers'][0]['supplier_name'] == "Xpress Haulage"

    def test_recent_performance(self, client, org_id, planned, current_period):
        response = client.get("/api/v1/reports/performance?weeks=0", headers=headers(org_id))
        assert response.status_code == 200
        data = response.json()
        assert data['start_date'] == current_period['period_start']
        assert data['summary']['total_committed'] == 84
        assert data['summary']['total_completed'] == 0
        assert data['suppliers'][0]['status'] == "poor"

    def test_performance_window_bounds(self, client, org_id):
        response = client.get("/api/v1/reports/performance?weeks=53", headers=headers(org_id))
        assert response.status_code == 422

    def test_performance_unknown_organization(self, client, seeded):
        response = client.get("/api/v1/reports/supplier-performance", headers=headers(999))
        assert response.status_code == 404


class TestDashboardApi:
    """Tests for /api/v1/dashboard"""

    def test_metrics(self, client, org_id, planned):
        response = client.get("/api/v1/dashboard", headers=headers(org_id))
        assert response.status_code == 200
        data = response.json()
        assert data['current_period']['id'] == planned
        assert data['metrics'] == {
            'total_demand': 140,
            'total_committed': 84,
            'supply_gap': 56,
            'gap_percent': 40,
            'active_routes': 2,
        }
        assert [(r['route_key'], r['gap']) for r in data['top_gap_routes']] == [("JEDDMM", 50), ("RUHJED", 6)]

    def test_recent_forecasts(self, client, org_id, planned):
        recent = client.get("/api/v1/dashboard", headers=headers(org_id)).json()['recent_forecasts']
        assert len(recent) == 3
        assert recent[0]['route_key'] == "JEDDMM"
        assert recent[0]['client_name'] == "Alpha Foods"
        assert recent[0]['total'] == 50

    def test_empty_period(self, client, org_id):
        data = client.get("/api/v1/dashboard", headers=headers(org_id)).json()
        assert data['metrics']['gap_percent'] == 0
        assert data['top_gap_routes'] == []
        assert data['recent_forecasts'] == []


class TestMasterDataApi:
    """Tests for /api/v1/cities, /clients, /suppliers and /truck-types"""

    def test_create_city_uppercases_code(self, client, org_id):
        response = client.post("/api/v1/cities", json={'name': "Abha", 'code': "ahb"}, headers=headers(org_id))
        assert response.status_code == 201
        data = response.json()
        assert data['code'] == "AHB"
        assert data['is_active'] is True

        response = client.get(f"/api/v1/cities/{data['id']}", headers=headers(org_id))
        assert response.json()['name'] == "Abha"

    def test_duplicate_city(self, client, org_id):
        response = client.post("/api/v1/cities", json={'name': "Riyadh 2", 'code': "ruh"}, headers=headers(org_id))
        assert response.status_code == 409
        assert response.json()['detail']['code'] == "DUPLICATE"

        response = client.post("/api/v1/cities", json={'name': "riyadh", 'code': "RYD"}, headers=headers(org_id))
        assert response.status_code == 409

    def test_malformed_city_code(self, client, org_id):
        response = client.post("/api/v1/cities", json={'name': "Tabuk", 'code': "T-1"}, headers=headers(org_id))
        assert response.status_code == 400

    def test_city_code_is_fixed(self, client, seeded, org_id):
        city_id = seeded['cities']['RUH'].id
        response = client.patch(f"/api/v1/cities/{city_id}", json={'code': "RYD"}, headers=headers(org_id))
        assert response.status_code == 400

        response = client.patch(f"/api/v1/cities/{city_id}", json={'region': "Central"}, headers=headers(org_id))
        assert response.status_code == 200
        assert response.json()['region'] == "Central"

    def test_search(self, client, org_id):
        response = client.get("/api/v1/cities?q=jed", headers=headers(org_id))
        assert [c['code'] for c in response.json()] == ["JED"]

        response = client.get("/api/v1/suppliers?q=haul", headers=headers(org_id))
        assert [s['name'] for s in response.json()] == ["Xpress Haulage"]

    def test_deactivated_entries_hidden_by_default(self, client, seeded, org_id):
        supplier_id = seeded['suppliers']['Y'].id
        response = client.patch(f"/api/v1/suppliers/{supplier_id}", json={'is_active': False}, headers=headers(org_id))
        assert response.status_code == 200
        assert response.json()['is_active'] is False

        names = [s['name'] for s in client.get("/api/v1/suppliers", headers=headers(org_id)).json()]
        assert names == ["Xpress Haulage"]

        response = client.get("/api/v1/suppliers?include_inactive=true", headers=headers(org_id))
        assert len(response.json()) == 2

    def test_unknown_entry(self, client, org_id):
        response = client.get("/api/v1/clients/999", headers=headers(org_id))
        assert response.status_code == 404

        response = client.patch("/api/v1/truck-types/999", json={'name': "Reefer"}, headers=headers(org_id))
        assert response.status_code == 404

    def test_rename_into_existing_name(self, client, seeded, org_id):
        client_id = seeded['clients']['B'].id
        response = client.patch(f"/api/v1/clients/{client_id}", json={'name': "ALPHA FOODS"}, headers=headers(org_id))
        assert response.status_code == 409

    def test_other_tenant_entries_hidden(self, client, db_session, seeded):
        from conftest import seed_organization
        other = seed_organization(db_session, name="Other Org")
        db_session.commit()
        response = client.get(f"/api/v1/cities/{seeded['cities']['RUH'].id}", headers=headers(other['org'].id))
        assert response.status_code == 404

    def test_created_entries_plan_demand(self, client, org_id, current_period):
        """Master data created through the API is usable by the planning endpoints."""
        pickup = client.post("/api/v1/cities", json={'name': "Tabuk", 'code': "tuu"}, headers=headers(org_id)).json()
        dropoff = client.post("/api/v1/cities", json={'name': "Hail", 'code': "HAS"}, headers=headers(org_id)).json()
        shipper = client.post("/api/v1/clients", json={'name': "Gamma Dairy"}, headers=headers(org_id)).json()
        truck = client.post("/api/v1/truck-types", json={'name': "Reefer"}, headers=headers(org_id)).json()
        carrier = client.post("/api/v1/suppliers", json={'name': "Zahid Lines", 'code': "ZL"},
                              headers=headers(org_id)).json()
        assert carrier['code'] == "ZL"

        response = client.post("/api/v1/demand", json={
            'planning_period_id': current_period['id'],
            'client_id': shipper['id'],
            'pickup_city_id': pickup['id'],
            'dropoff_city_id': dropoff['id'],
            'truck_type_id': truck['id'],
            'day1': 4,
        }, headers=headers(org_id))
        assert response.status_code == 201
        assert response.json()['route_key'] == "TUUHAS"
