"""
Planning Period Service - Period lookup, lazy creation and locking.

The current period is derived from today's date falling inside
[period_start, period_end]; there is no stored "current" flag.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from freight_planner.config import get_config
from freight_planner.models import PlanningPeriod
from freight_planner.infrastructure.repositories import (
    PlanningPeriodRepository,
    OrganizationRepository,
)
from ..entities import CycleKind, WeekStartDay, period_window, upcoming_windows
from ..exceptions import PeriodNotFoundError, PeriodLockedError, ReferenceNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanningSettings:
    """Resolved planning preferences of an organization."""
    cycle_kind: CycleKind
    week_start_day: WeekStartDay

    @property
    def effective_cycle(self) -> CycleKind:
        return self.cycle_kind.effective


class PlanningPeriodService:
    """Service for planning period lifecycle."""

    def __init__(self, session: Session):
        self.session = session
        self.period_repo = PlanningPeriodRepository(session)
        self.org_repo = OrganizationRepository(session)

    def settings_for(self, organization_id: int) -> PlanningSettings:
        """
        Planning cycle and week start of an organization.

        Falls back to the configured defaults when the organization has
        no settings row.
        """
        if self.org_repo.get(organization_id) is None:
            raise ReferenceNotFoundError("Organization", organization_id)

        config = get_config()
        settings = self.org_repo.get_settings(organization_id)
        cycle = settings.planning_cycle if settings and settings.planning_cycle else config.default_cycle
        start_day = settings.week_start_day if settings and settings.week_start_day else config.default_week_start_day
        return PlanningSettings(
            cycle_kind=CycleKind.parse(cycle),
            week_start_day=WeekStartDay.parse(start_day),
        )

    def get_or_create(self, organization_id: int, day: Optional[date] = None) -> PlanningPeriod:
        """Period containing `day` (default today), created on first access."""
        settings = self.settings_for(organization_id)
        window = period_window(day or date.today(), settings.effective_cycle, settings.week_start_day)
        return self.period_repo.get_or_create(organization_id, window)

    def current(self, organization_id: int, today: Optional[date] = None) -> PlanningPeriod:
        """The period whose window contains today."""
        return self.get_or_create(organization_id, today)

    def upcoming(
        self,
        organization_id: int,
        count: Optional[int] = None,
        today: Optional[date] = None,
    ) -> List[PlanningPeriod]:
        """
        Current plus upcoming periods, respecting the organization's cycle.

        Args:
            organization_id: Owning organization
            count: Number of periods (default from config, capped by config)
            today: Reference date (default: today)

        Returns:
            PlanningPeriod rows in calendar order
        """
        config = get_config()
        count = config.upcoming_count if count is None else count
        count = max(1, min(count, config.max_upcoming_count))

        settings = self.settings_for(organization_id)
        windows = upcoming_windows(
            today or date.today(), count, settings.effective_cycle, settings.week_start_day
        )
        return self.period_repo.get_or_create_many(organization_id, windows)

    def require_period(self, organization_id: int, period_id: int) -> PlanningPeriod:
        """Fetch a period of the organization or raise PeriodNotFoundError."""
        period = self.period_repo.get(organization_id, period_id)
        if period is None:
            raise PeriodNotFoundError(period_id)
        return period

    def require_unlocked(self, organization_id: int, period_id: int) -> PlanningPeriod:
        """Fetch a period that accepts demand/supply writes."""
        period = self.require_period(organization_id, period_id)
        if period.is_locked:
            logger.warning(
                "Rejected write to locked period %s of organization %s", period_id, organization_id
            )
            raise PeriodLockedError(period_id)
        return period

    def lock(self, organization_id: int, period_id: int) -> PlanningPeriod:
        period = self.require_period(organization_id, period_id)
        period.is_locked = True
        self.session.flush()
        logger.info("Locked planning period %s of organization %s", period_id, organization_id)
        return period

    def unlock(self, organization_id: int, period_id: int) -> PlanningPeriod:
        """Explicit admin action; the only way a locked period reopens."""
        period = self.require_period(organization_id, period_id)
        period.is_locked = False
        self.session.flush()
        logger.info("Unlocked planning period %s of organization %s", period_id, organization_id)
        return period
