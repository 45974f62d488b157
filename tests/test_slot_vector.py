"""
Tests for slot vectors and route keys.
"""
import pytest

from freight_planner.domain.entities import (
    SlotVector, sum_vectors, slot_width, slot_fields, vector_from_row,
    build_route_key, require_route_key, DAY_FIELDS, WEEK_FIELDS,
)
from freight_planner.domain.exceptions import ValidationError


class TestSlotVector:
    """Tests for SlotVector arithmetic and serialization."""

    def test_total_is_sum_of_slots(self):
        vector = SlotVector((5, 0, 5, 0, 5, 0, 5))
        assert vector.total == 20
        assert vector.width == 7

    def test_monthly_width(self):
        vector = SlotVector((1, 2, 3, 4, 5))
        assert vector.width == 5
        assert vector.total == 15

    def test_invalid_width_rejected(self):
        with pytest.raises(ValueError):
            SlotVector((1, 2, 3))

    def test_of_maps_missing_to_zero(self):
        assert SlotVector.of([None, 1, None, 2, None, 3, None]).slots == (0, 1, 0, 2, 0, 3, 0)

    def test_of_rejects_negative(self):
        with pytest.raises(ValueError):
            SlotVector.of([1, -1, 0, 0, 0, 0, 0])

    def test_add_and_subtract(self):
        a = SlotVector((10,) * 7)
        b = SlotVector((12,) * 7)
        assert (a + b).slots == (22,) * 7
        gap = a - b
        assert gap.slots == (-2,) * 7
        assert gap.total == a.total - b.total

    def test_width_mismatch_rejected(self):
        with pytest.raises(ValueError):
            SlotVector.zero(7) + SlotVector.zero(5)

    def test_as_dict_weekly(self):
        data = SlotVector((1, 2, 3, 4, 5, 6, 7)).as_dict()
        assert list(data) == list(DAY_FIELDS) + ['total']
        assert data['day7'] == 7
        assert data['total'] == 28

    def test_as_dict_monthly(self):
        data = SlotVector((1, 1, 1, 1, 1)).as_dict()
        assert list(data) == list(WEEK_FIELDS) + ['total']
        assert data['total'] == 5

    def test_sum_vectors_empty_uses_width(self):
        assert sum_vectors([], 5) == SlotVector.zero(5)
        assert sum_vectors([]).width == 7


class TestSlotConventions:
    """Tests for cycle-dependent slot selection."""

    def test_daily_plans_like_weekly(self):
        assert slot_width("DAILY") == 7
        assert slot_fields("DAILY") == DAY_FIELDS

    def test_monthly_uses_week_fields(self):
        assert slot_width("MONTHLY") == 5
        assert slot_fields("MONTHLY") == WEEK_FIELDS

    def test_vector_from_row_ignores_stored_total(self):
        row = {f: 2 for f in DAY_FIELDS}
        row['total'] = 999
        row['week1'] = 50
        vector = vector_from_row(row, "WEEKLY")
        assert vector.total == 14


class TestRouteKey:
    """Tests for route key construction."""

    def test_build_route_key(self):
        assert build_route_key("RUH", "JED") == "RUHJED"

    def test_build_route_key_normalizes(self):
        assert build_route_key(" ruh", "jed ") == "RUHJED"

    def test_empty_code_rejected(self):
        with pytest.raises(ValidationError):
            build_route_key("", "JED")
        with pytest.raises(ValidationError):
            build_route_key("RUH", None)

    def test_require_route_key_fails_loudly(self):
        assert require_route_key("RUHJED") == "RUHJED"
        with pytest.raises(AssertionError):
            require_route_key("")
        with pytest.raises(AssertionError):
            require_route_key(None)
