"""
Tests for the click CLI.
"""
from datetime import date

import pytest
from click.testing import CliRunner

from cli import cli
from freight_planner.models import Base, SessionLocal, engine
from freight_planner.domain.services import PlanningPeriodService, SupplyService
from conftest import seed_organization


@pytest.fixture
def app_db():
    """Fresh schema on the application engine used by the CLI commands."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def planned(app_db):
    data = seed_organization(app_db)
    period = PlanningPeriodService(app_db).current(data['org'].id, date.today())
    SupplyService(app_db).create(
        data['org'].id, period.id, data['suppliers']['X'].id, "RUHJED", None,
        {f'day{i}': 3 for i in range(1, 8)},
    )
    app_db.commit()
    return data['org'].id, period.id


@pytest.fixture
def runner():
    return CliRunner()


class TestCli:
    """Tests for CLI commands."""

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_init_db(self, runner, app_db):
        result = runner.invoke(cli, ['init-db'])
        assert result.exit_code == 0
        assert "Database initialized" in result.output

    def test_periods(self, runner, planned):
        org_id, period_id = planned
        result = runner.invoke(cli, ['periods', str(org_id), '--count', '3'])
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert len(lines) == 3
        assert lines[0].startswith("*")
        assert str(period_id) in lines[0]

    def test_periods_unknown_organization(self, runner, app_db):
        result = runner.invoke(cli, ['periods', '999'])
        assert result.exit_code != 0
        assert "not found" in result.output

    def test_lock_and_unlock(self, runner, app_db, planned):
        org_id, period_id = planned
        result = runner.invoke(cli, ['lock', str(org_id), str(period_id)])
        assert result.exit_code == 0
        assert "locked" in result.output

        result = runner.invoke(cli, ['periods', str(org_id), '--count', '1'])
        assert "[locked]" in result.output

        result = runner.invoke(cli, ['unlock', str(org_id), str(period_id)])
        assert result.exit_code == 0

    def test_gaps(self, runner, planned):
        org_id, period_id = planned
        result = runner.invoke(cli, ['gaps', str(org_id), str(period_id)])
        assert result.exit_code == 0
        assert "RUHJED" in result.output
        assert "-21" in result.output

    def test_gaps_csv(self, runner, planned):
        org_id, period_id = planned
        result = runner.invoke(cli, ['gaps', str(org_id), str(period_id), '--csv'])
        assert result.exit_code == 0
        assert result.output.splitlines()[0].startswith("Route,Sunday Target")

    def test_dispatch_csv(self, runner, planned):
        org_id, period_id = planned
        result = runner.invoke(cli, ['dispatch', str(org_id), str(period_id), '--csv'])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "Supplier,Route,Sunday,Monday,Tuesday,Wednesday,Thursday,Friday,Saturday,Total"
        assert lines[1] == "Xpress Haulage,RUHJED,3,3,3,3,3,3,3,21"
        assert len(lines) == 2

    def test_dispatch_csv_with_totals(self, runner, planned):
        org_id, period_id = planned
        result = runner.invoke(cli, ['dispatch', str(org_id), str(period_id), '--csv', '--totals'])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[2] == "Xpress Haulage,Total,3,3,3,3,3,3,3,21"
        assert lines[3] == "Grand Total,,3,3,3,3,3,3,3,21"

    def test_dispatch_unknown_period(self, runner, planned):
        org_id, _ = planned
        result = runner.invoke(cli, ['dispatch', str(org_id), '9999'])
        assert result.exit_code != 0
        assert "not found" in result.output
