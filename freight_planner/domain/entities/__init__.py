"""
Domain Entities - Core immutable planning values.
"""

from .period import (
    CycleKind, WeekStartDay, PeriodKey, PeriodWindow,
    period_window, upcoming_windows, add_months, format_period_display, slot_labels,
)
from .slots import (
    SlotVector, WEEK_SLOTS, MONTH_SLOTS, DAY_FIELDS, WEEK_FIELDS,
    sum_vectors, slot_width, slot_fields, vector_from_row,
)
from .route import build_route_key, require_route_key
from .rows import DemandRow, SupplyRow, ActualTotals

__all__ = [
    'CycleKind', 'WeekStartDay', 'PeriodKey', 'PeriodWindow',
    'period_window', 'upcoming_windows', 'add_months', 'format_period_display', 'slot_labels',
    'SlotVector', 'WEEK_SLOTS', 'MONTH_SLOTS', 'DAY_FIELDS', 'WEEK_FIELDS',
    'sum_vectors', 'slot_width', 'slot_fields', 'vector_from_row',
    'build_route_key', 'require_route_key',
    'DemandRow', 'SupplyRow', 'ActualTotals',
]
