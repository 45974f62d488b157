"""
Planning Period Repository - Lazy get-or-create of planning windows.
"""
import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from freight_planner.models import PlanningPeriod
from freight_planner.domain.entities import PeriodWindow
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PlanningPeriodRepository(BaseRepository[PlanningPeriod]):
    """Repository for an organization's planning periods."""

    def __init__(self, session: Session):
        super().__init__(session, PlanningPeriod)

    def find(self, organization_id: int, year: int, sequence: int, cycle_kind: str) -> Optional[PlanningPeriod]:
        return self.scoped(organization_id).filter(
            PlanningPeriod.year == year,
            PlanningPeriod.sequence == sequence,
            PlanningPeriod.cycle_kind == cycle_kind,
        ).first()

    def find_containing(self, organization_id: int, day: date, cycle_kind: str) -> Optional[PlanningPeriod]:
        """Period of a cycle whose [period_start, period_end] contains `day`."""
        return self.scoped(organization_id).filter(
            PlanningPeriod.cycle_kind == cycle_kind,
            PlanningPeriod.period_start <= day,
            PlanningPeriod.period_end >= day,
        ).first()

    def get_or_create_many(self, organization_id: int, windows: List[PeriodWindow]) -> List[PlanningPeriod]:
        """
        Fetch the periods for the given windows, creating missing ones.

        Idempotent: existing periods are reused, so repeated calls return
        the same rows. Results follow the order of `windows`.

        Args:
            organization_id: Owning organization
            windows: Period windows to materialize

        Returns:
            PlanningPeriod rows in window order
        """
        if not windows:
            return []

        cycle_kind = windows[0].cycle_kind.value
        wanted = {(w.year, w.sequence) for w in windows}
        existing: Dict[Tuple[int, int], PlanningPeriod] = {
            (p.year, p.sequence): p
            for p in self.scoped(organization_id).filter(
                PlanningPeriod.cycle_kind == cycle_kind,
                PlanningPeriod.year.in_(sorted({y for y, _ in wanted})),
            ).all()
            if (p.year, p.sequence) in wanted
        }

        for window in windows:
            key = (window.year, window.sequence)
            if key in existing:
                continue
            period = PlanningPeriod(
                organization_id=organization_id,
                cycle_kind=cycle_kind,
                year=window.year,
                sequence=window.sequence,
                period_start=window.start,
                period_end=window.end,
                is_locked=False,
            )
            self.add(period)
            existing[key] = period
            logger.info(
                "Created %s planning period %s-%02d for organization %s",
                cycle_kind, window.year, window.sequence, organization_id
            )

        self.flush()
        return [existing[(w.year, w.sequence)] for w in windows]

    def get_or_create(self, organization_id: int, window: PeriodWindow) -> PlanningPeriod:
        return self.get_or_create_many(organization_id, [window])[0]
