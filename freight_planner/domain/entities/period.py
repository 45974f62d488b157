"""
Planning Period Entity - Tenant-scoped weekly or monthly planning windows.

Implements:
- Period identity (tenant, year, sequence, cycle kind)
- Window computation for a calendar day
- Upcoming period enumeration
- Slot column labels
"""
import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional, Union


class CycleKind(str, Enum):
    """Planning cycle of an organization."""
    DAILY = "DAILY"      # Planned exactly like WEEKLY
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"

    @classmethod
    def parse(cls, value: Union[str, 'CycleKind', None]) -> 'CycleKind':
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.WEEKLY
        return cls(str(value).upper())

    @property
    def effective(self) -> 'CycleKind':
        """Cycle used for period generation; DAILY resolves to WEEKLY."""
        return CycleKind.MONTHLY if self is CycleKind.MONTHLY else CycleKind.WEEKLY


class WeekStartDay(str, Enum):
    """Configurable first day of a planning week."""
    SUNDAY = "SUNDAY"
    MONDAY = "MONDAY"
    SATURDAY = "SATURDAY"

    @classmethod
    def parse(cls, value: Union[str, 'WeekStartDay', None]) -> 'WeekStartDay':
        if isinstance(value, cls):
            return value
        if not value:
            return cls.SUNDAY
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.SUNDAY

    @property
    def python_weekday(self) -> int:
        """date.weekday() value of this day (Monday == 0)."""
        return {"SUNDAY": 6, "MONDAY": 0, "SATURDAY": 5}[self.value]


DAY_NAMES = (
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
)
WEEK_OF_MONTH_NAMES = ("Week 1", "Week 2", "Week 3", "Week 4", "Week 5")


@dataclass(frozen=True)
class PeriodKey:
    """Identity of a planning period within an organization."""
    tenant_id: str
    year: int
    sequence: int  # week number 1-53, or month 1-12
    cycle_kind: CycleKind = CycleKind.WEEKLY

    def __post_init__(self):
        cycle = CycleKind.parse(self.cycle_kind).effective
        object.__setattr__(self, 'cycle_kind', cycle)
        upper = 12 if cycle is CycleKind.MONTHLY else 53
        if not 1 <= self.sequence <= upper:
            raise ValueError(f"Sequence {self.sequence} out of range 1-{upper} for {cycle.value}")

    @property
    def label(self) -> str:
        if self.cycle_kind is CycleKind.MONTHLY:
            return f"{self.year}-{self.sequence:02d}"
        return f"{self.year}-W{self.sequence:02d}"


@dataclass(frozen=True)
class PeriodWindow:
    """Calendar window of one planning period."""
    start: date
    end: date
    year: int
    sequence: int
    cycle_kind: CycleKind

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def key(self, tenant_id: str) -> PeriodKey:
        return PeriodKey(tenant_id, self.year, self.sequence, self.cycle_kind)


def week_start(day: date, week_start_day: WeekStartDay = WeekStartDay.SUNDAY) -> date:
    """Most recent week start day on or before `day`."""
    offset = (day.weekday() - week_start_day.python_weekday) % 7
    return day - timedelta(days=offset)


def period_window(
    day: date,
    cycle_kind: Union[str, CycleKind] = CycleKind.WEEKLY,
    week_start_day: Union[str, WeekStartDay] = WeekStartDay.SUNDAY,
) -> PeriodWindow:
    """
    Compute the planning period containing a day.

    Weeks are numbered so that week 1 is the week containing 1 January;
    a week belongs to the year its last day falls in, so the week that
    straddles New Year is week 1 of the new year.

    Args:
        day: Any date inside the period
        cycle_kind: Organization planning cycle
        week_start_day: First day of a planning week

    Returns:
        PeriodWindow with start/end dates and (year, sequence) identity
    """
    cycle = CycleKind.parse(cycle_kind).effective

    if cycle is CycleKind.MONTHLY:
        last_day = calendar.monthrange(day.year, day.month)[1]
        return PeriodWindow(
            start=day.replace(day=1),
            end=day.replace(day=last_day),
            year=day.year,
            sequence=day.month,
            cycle_kind=cycle,
        )

    start_day = WeekStartDay.parse(week_start_day)
    start = week_start(day, start_day)
    end = start + timedelta(days=6)
    week_year = end.year
    first_week_start = week_start(date(week_year, 1, 1), start_day)
    sequence = (start - first_week_start).days // 7 + 1

    return PeriodWindow(start=start, end=end, year=week_year, sequence=sequence, cycle_kind=cycle)


def add_months(day: date, months: int) -> date:
    """Shift a date by whole months, clamping the day of month."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def upcoming_windows(
    today: date,
    count: int,
    cycle_kind: Union[str, CycleKind] = CycleKind.WEEKLY,
    week_start_day: Union[str, WeekStartDay] = WeekStartDay.SUNDAY,
) -> List[PeriodWindow]:
    """Current period plus the next `count - 1` periods, in calendar order."""
    cycle = CycleKind.parse(cycle_kind).effective
    windows = []
    for i in range(max(count, 0)):
        if cycle is CycleKind.MONTHLY:
            day = add_months(today, i)
        else:
            day = today + timedelta(weeks=i)
        windows.append(period_window(day, cycle, week_start_day))
    return windows


def format_period_display(start: date, end: date) -> str:
    """
    Human readable period label.

    Full calendar months render as 'March 2026 (Mar 1 - Mar 31)',
    anything else as 'Mar 1 - Mar 7, 2026'.
    """
    is_full_month = (
        start.day == 1
        and start.month == end.month
        and start.year == end.year
        and end.day == calendar.monthrange(end.year, end.month)[1]
    )
    if is_full_month:
        return (
            f"{start.strftime('%B %Y')} "
            f"({start.strftime('%b')} {start.day} - {end.strftime('%b')} {end.day})"
        )
    return f"{start.strftime('%b')} {start.day} - {end.strftime('%b')} {end.day}, {end.year}"


def slot_labels(
    cycle_kind: Union[str, CycleKind] = CycleKind.WEEKLY,
    week_start_day: Optional[Union[str, WeekStartDay]] = None,
    rotate: bool = False,
) -> List[str]:
    """
    Column labels for the active slots of a cycle.

    Day slots are positional relative to the organization's week start day.
    Exports have always labelled them Sunday..Saturday regardless of that
    setting; pass rotate=True to label them from the configured start day.
    """
    if CycleKind.parse(cycle_kind).effective is CycleKind.MONTHLY:
        return list(WEEK_OF_MONTH_NAMES)
    if not rotate:
        return list(DAY_NAMES)
    first = DAY_NAMES.index(WeekStartDay.parse(week_start_day).value.capitalize())
    return list(DAY_NAMES[first:] + DAY_NAMES[:first])
