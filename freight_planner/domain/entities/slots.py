"""
Slot Vector Entity - Per-day or per-week quantities with a derived total.

Weekly (and daily) cycles use seven day slots; monthly cycles use five
week-of-month slots. The total is never stored, it is always the sum of
the slots.
"""
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from .period import CycleKind

WEEK_SLOTS = 7
MONTH_SLOTS = 5

DAY_FIELDS = tuple(f"day{i}" for i in range(1, WEEK_SLOTS + 1))
WEEK_FIELDS = tuple(f"week{i}" for i in range(1, MONTH_SLOTS + 1))


@dataclass(frozen=True)
class SlotVector:
    """
    Immutable ordered tuple of load counts.

    Aggregated and reconciled vectors hold non-negative counts; gap
    vectors produced by subtraction may go negative.
    """

    slots: Tuple[int, ...]

    def __post_init__(self):
        if len(self.slots) not in (WEEK_SLOTS, MONTH_SLOTS):
            raise ValueError(
                f"Slot vector must have {WEEK_SLOTS} or {MONTH_SLOTS} slots, got {len(self.slots)}"
            )
        object.__setattr__(self, 'slots', tuple(int(s) for s in self.slots))

    @classmethod
    def zero(cls, width: int = WEEK_SLOTS) -> 'SlotVector':
        return cls((0,) * width)

    @classmethod
    def of(cls, values: Iterable[int]) -> 'SlotVector':
        """Build a non-negative vector, rejecting negative or missing counts."""
        slots = tuple(0 if v is None else int(v) for v in values)
        if any(s < 0 for s in slots):
            raise ValueError(f"Slot quantities cannot be negative: {slots}")
        return cls(slots)

    @property
    def width(self) -> int:
        return len(self.slots)

    @property
    def total(self) -> int:
        return sum(self.slots)

    def _check_width(self, other: 'SlotVector') -> None:
        if other.width != self.width:
            raise ValueError(
                f"Cannot combine slot vectors of width {self.width} and {other.width}"
            )

    def __add__(self, other: 'SlotVector') -> 'SlotVector':
        self._check_width(other)
        return SlotVector(tuple(a + b for a, b in zip(self.slots, other.slots)))

    def __sub__(self, other: 'SlotVector') -> 'SlotVector':
        self._check_width(other)
        return SlotVector(tuple(a - b for a, b in zip(self.slots, other.slots)))

    def __iter__(self):
        return iter(self.slots)

    def __len__(self) -> int:
        return len(self.slots)

    def __getitem__(self, index: int) -> int:
        return self.slots[index]

    def field_names(self) -> Tuple[str, ...]:
        return DAY_FIELDS if self.width == WEEK_SLOTS else WEEK_FIELDS

    def as_dict(self) -> dict:
        """Serialize as {'day1': .., ..., 'total': ..} (or week1..week5)."""
        data = dict(zip(self.field_names(), self.slots))
        data['total'] = self.total
        return data


def sum_vectors(vectors: Sequence[SlotVector], width: int = WEEK_SLOTS) -> SlotVector:
    """Element-wise sum of vectors; an empty sequence yields a zero vector of `width`."""
    result = SlotVector.zero(vectors[0].width if vectors else width)
    for vector in vectors:
        result = result + vector
    return result


def slot_width(cycle_kind) -> int:
    """Number of active slots for a cycle kind (DAILY plans like WEEKLY)."""
    return MONTH_SLOTS if CycleKind.parse(cycle_kind) is CycleKind.MONTHLY else WEEK_SLOTS


def slot_fields(cycle_kind) -> Tuple[str, ...]:
    """Row attribute names of the active slot convention."""
    return WEEK_FIELDS if slot_width(cycle_kind) == MONTH_SLOTS else DAY_FIELDS


def vector_from_row(row, cycle_kind) -> SlotVector:
    """Read the active slots of an ORM row or mapping, ignoring any stored total."""
    fields: List[str] = list(slot_fields(cycle_kind))
    if isinstance(row, dict):
        return SlotVector.of(row.get(f, 0) for f in fields)
    return SlotVector.of(getattr(row, f, 0) for f in fields)
