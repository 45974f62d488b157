"""
Tests for demand versus supply gap reconciliation.
"""
import random

import pytest

from freight_planner.domain.entities import DemandRow, SupplyRow, SlotVector
from freight_planner.domain.exceptions import ReconciliationError
from freight_planner.domain.services import DemandAggregator, SupplyAggregator, GapReconciler
from freight_planner.domain.services.percentages import round_percent, safe_percent

PERIOD = 10
ROUTES = ["RUHJED", "JEDDMM", "DMMRUH", "RUHDMM", "JEDRUH", "DMMJED"]


def demand(route_key, client_id, client_name, slots, period=PERIOD):
    return DemandRow(route_key, period, client_id, client_name, SlotVector(tuple(slots)))


def supply(route_key, supplier_id, supplier_name, slots, period=PERIOD):
    return SupplyRow(route_key, period, supplier_id, supplier_name, SlotVector(tuple(slots)))


def reconcile(demand_rows, supply_rows):
    return GapReconciler().reconcile(
        DemandAggregator().aggregate(PERIOD, demand_rows),
        SupplyAggregator().aggregate(PERIOD, supply_rows),
    )


def random_rows(rng):
    demand_rows = [
        demand(rng.choice(ROUTES), i, f"Client {i}", [rng.randint(0, 20) for _ in range(7)])
        for i in range(rng.randint(0, 10))
    ]
    supply_rows = [
        supply(rng.choice(ROUTES), i, f"Supplier {i}", [rng.randint(0, 20) for _ in range(7)])
        for i in range(rng.randint(0, 10))
    ]
    return demand_rows, supply_rows


@pytest.fixture
def scenario():
    """Two lanes: RUHJED mostly covered, JEDDMM with no supply at all."""
    demand_rows = [
        demand("RUHJED", 1, "Client A", [10, 10, 10, 10, 10, 10, 10]),
        demand("RUHJED", 2, "Client B", [5, 0, 5, 0, 5, 0, 5]),
        demand("JEDDMM", 1, "Client A", [10, 10, 10, 10, 10, 0, 0]),
    ]
    supply_rows = [
        supply("RUHJED", 7, "Supplier X", [12, 12, 12, 12, 12, 12, 12]),
    ]
    return reconcile(demand_rows, supply_rows)


class TestGapScenario:
    """Literal two-lane scenario."""

    def test_partially_covered_route(self, scenario):
        record = next(r for r in scenario if r.route_key == "RUHJED")
        assert record.target.total == 90
        assert record.committed.total == 84
        assert record.gap.total == 6
        assert record.gap_percent == 7
        assert record.gap.slots == (3, -2, 3, -2, 3, -2, 3)
        assert record.forecast_count == 2
        assert record.capacity_percent == 93

    def test_uncovered_route(self, scenario):
        record = next(r for r in scenario if r.route_key == "JEDDMM")
        assert record.committed.total == 0
        assert record.committed == SlotVector.zero(7)
        assert record.gap.total == 50
        assert record.gap_percent == 100
        assert record.supply_breakdown == ()

    def test_larger_gap_first(self, scenario):
        assert [r.route_key for r in scenario] == ["JEDDMM", "RUHJED"]

    def test_serialized_record(self, scenario):
        data = scenario[1].as_dict()
        assert data['route_key'] == "RUHJED"
        assert data['target']['total'] == 90
        assert data['gap']['day2'] == -2
        assert [c['contributor_name'] for c in data['clients']] == ["Client A", "Client B"]
        assert data['commitments'][0]['contributor_id'] == 7
        assert data['truck_types'] == []

    def test_truck_types_come_from_demand(self):
        records = reconcile(
            [DemandRow("RUHJED", PERIOD, 1, "Client A", SlotVector((2,) * 7),
                       truck_type_id=5, truck_type_name="Curtainsider")],
            [supply("RUHJED", 7, "Supplier X", [1] * 7), supply("JEDDMM", 7, "Supplier X", [1] * 7)],
        )
        by_route = {r.route_key: r for r in records}
        assert by_route["RUHJED"].truck_types == ((5, "Curtainsider"),)
        assert by_route["RUHJED"].as_dict()['truck_types'] == [{'id': 5, 'name': "Curtainsider"}]
        assert by_route["JEDDMM"].truck_types == ()


class TestGapEdgeCases:
    """Tests for one-sided and degenerate lanes."""

    def test_supply_only_route(self):
        records = reconcile([], [supply("RUHJED", 7, "Supplier X", [2] * 7)])
        assert len(records) == 1
        record = records[0]
        assert record.target.total == 0
        assert record.gap.total == -14
        assert record.gap_percent == 0
        assert record.forecast_count == 0

    def test_over_supplied_route_has_negative_percent(self):
        records = reconcile(
            [demand("RUHJED", 1, "Client A", [10] * 7)],
            [supply("RUHJED", 7, "Supplier X", [12] * 7)],
        )
        assert records[0].gap.total == -14
        assert records[0].gap_percent == -20

    def test_monthly_vectors(self):
        records = reconcile(
            [demand("RUHJED", 1, "Client A", [5, 5, 5, 5, 0])],
            [],
        )
        assert records[0].committed == SlotVector.zero(5)
        assert records[0].gap.width == 5

    def test_empty_inputs(self):
        assert reconcile([], []) == []

    def test_mismatched_periods_rejected(self):
        demand_map = DemandAggregator().aggregate(1, [demand("RUHJED", 1, "A", [1] * 7, period=1)])
        supply_map = SupplyAggregator().aggregate(2, [supply("RUHJED", 7, "X", [1] * 7, period=2)])
        with pytest.raises(ReconciliationError):
            GapReconciler().reconcile(demand_map, supply_map)

    def test_ties_broken_by_route_key(self):
        records = reconcile(
            [demand(key, 1, "A", [1] * 7) for key in ("RUHJED", "DMMRUH", "JEDDMM")],
            [],
        )
        assert [r.route_key for r in records] == ["DMMRUH", "JEDDMM", "RUHJED"]


class TestGapProperties:
    """Properties checked over seeded random inputs."""

    def test_outer_join_completeness(self):
        rng = random.Random(2026)
        for _ in range(200):
            demand_rows, supply_rows = random_rows(rng)
            records = reconcile(demand_rows, supply_rows)
            expected = {r.route_key for r in demand_rows} | {r.route_key for r in supply_rows}
            assert len(records) == len(expected)
            assert {r.route_key for r in records} == expected

    def test_gap_identity(self):
        rng = random.Random(42)
        for _ in range(200):
            for record in reconcile(*random_rows(rng)):
                assert record.gap.total == record.target.total - record.committed.total
                assert record.gap == record.target - record.committed

    def test_percent_is_always_an_integer(self):
        rng = random.Random(5)
        for _ in range(200):
            for record in reconcile(*random_rows(rng)):
                assert isinstance(record.gap_percent, int)
                assert record.gap_percent <= 100
                if record.target.total == 0:
                    assert record.gap_percent == 0

    def test_sort_stability_under_reordering(self):
        rng = random.Random(99)
        for _ in range(100):
            demand_rows, supply_rows = random_rows(rng)
            first = reconcile(demand_rows, supply_rows)

            shuffled_demand, shuffled_supply = list(demand_rows), list(supply_rows)
            rng.shuffle(shuffled_demand)
            rng.shuffle(shuffled_supply)
            second = reconcile(shuffled_demand, shuffled_supply)

            assert [r.route_key for r in first] == [r.route_key for r in second]
            assert [r.gap for r in first] == [r.gap for r in second]
            keys = [(-r.gap.total, r.route_key) for r in first]
            assert keys == sorted(keys)


class TestPercentRounding:
    """Tests for integer percentage rounding."""

    def test_rounds_half_up(self):
        assert round_percent(1, 200) == 1
        assert round_percent(6, 90) == 7
        assert round_percent(1, 3) == 33
        assert round_percent(2, 3) == 67

    def test_negative_half_rounds_toward_positive(self):
        assert round_percent(-1, 200) == 0
        assert round_percent(-3, 200) == -1

    def test_zero_denominator(self):
        assert safe_percent(5, 0) == 0
        assert safe_percent(5, 0, default=100) == 100
        with pytest.raises(ValueError):
            round_percent(5, 0)
