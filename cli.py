#!/usr/bin/env python3
"""
CLI for Freight Planner.

Usage:
    python cli.py serve --port 8000
    python cli.py init-db
    python cli.py periods 1 --count 4
    python cli.py gaps 1 12

Commands:
    serve     Start the API server
    init-db   Create all database tables
    periods   List current and upcoming planning periods
    lock      Lock a planning period against edits
    unlock    Reopen a locked planning period
    gaps      Print the supply gap report of a period
    dispatch  Print the dispatch sheet of a period
"""
import click
import logging

from freight_planner import __version__
from freight_planner.config import get_config

# Configure logging
logging.basicConfig(
    level=getattr(logging, get_config().log_level, logging.INFO),
    format=get_config().log_format
)
logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__)
def cli():
    """Freight Planner CLI.

    Forecast lane demand per planning period and reconcile it
    against supplier commitments.
    """
    pass


@cli.command()
@click.option('--port', type=int, default=8000, help='Server port')
@click.option('--host', default='0.0.0.0', help='Server host')
@click.option('--reload', is_flag=True, help='Enable auto-reload')
def serve(port: int, host: str, reload: bool):
    """Start the API server.

    Runs the FastAPI application with uvicorn.

    Example:
        python cli.py serve --port 8000 --reload
    """
    import uvicorn

    click.echo(click.style('Freight Planner - API Server', fg='cyan', bold=True))
    click.echo(f"Starting server at http://{host}:{port}")
    click.echo("Press CTRL+C to stop\n")

    uvicorn.run(
        "freight_planner.main:app",
        host=host,
        port=port,
        reload=reload
    )


@cli.command('init-db')
def init_db_command():
    """Create all database tables."""
    from freight_planner.models import init_db

    init_db()
    click.echo(click.style(f"Database initialized: {get_config().database_url}", fg='green'))


@cli.command()
@click.argument('organization_id', type=int)
@click.option('--count', type=int, default=None, help='Number of periods (default from config)')
def periods(organization_id: int, count: int):
    """List current and upcoming planning periods of an organization.

    Missing periods are created on the way.
    """
    from datetime import date
    from freight_planner.models import SessionLocal
    from freight_planner.domain.entities import format_period_display
    from freight_planner.domain.exceptions import DomainError
    from freight_planner.domain.services import PlanningPeriodService

    db = SessionLocal()
    try:
        service = PlanningPeriodService(db)
        try:
            rows = service.upcoming(organization_id, count)
            db.commit()
        except DomainError as e:
            db.rollback()
            raise click.ClickException(e.message)

        today = date.today()
        for period in rows:
            marker = '*' if period.period_start <= today <= period.period_end else ' '
            lock = ' [locked]' if period.is_locked else ''
            click.echo(
                f"{marker} {period.id:>5}  {period.cycle_kind:<8} {period.year}-{period.sequence:02d}  "
                f"{format_period_display(period.period_start, period.period_end)}{lock}"
            )
    finally:
        db.close()


def _set_lock(organization_id: int, period_id: int, locked: bool):
    from freight_planner.models import SessionLocal
    from freight_planner.domain.exceptions import DomainError
    from freight_planner.domain.services import PlanningPeriodService

    db = SessionLocal()
    try:
        service = PlanningPeriodService(db)
        try:
            if locked:
                service.lock(organization_id, period_id)
            else:
                service.unlock(organization_id, period_id)
            db.commit()
        except DomainError as e:
            db.rollback()
            raise click.ClickException(e.message)
    finally:
        db.close()


@cli.command()
@click.argument('organization_id', type=int)
@click.argument('period_id', type=int)
def lock(organization_id: int, period_id: int):
    """Lock a planning period against demand and supply edits."""
    _set_lock(organization_id, period_id, True)
    click.echo(click.style(f"Period {period_id} locked", fg='yellow'))


@cli.command()
@click.argument('organization_id', type=int)
@click.argument('period_id', type=int)
def unlock(organization_id: int, period_id: int):
    """Reopen a locked planning period."""
    _set_lock(organization_id, period_id, False)
    click.echo(click.style(f"Period {period_id} unlocked", fg='green'))


@cli.command()
@click.argument('organization_id', type=int)
@click.argument('period_id', type=int)
@click.option('--client', 'client_ids', type=int, multiple=True, help='Restrict demand to a client (repeatable)')
@click.option('--csv', 'as_csv', is_flag=True, help='Output as CSV')
def gaps(organization_id: int, period_id: int, client_ids: tuple, as_csv: bool):
    """Print demand targets against commitments per route.

    Example:
        python cli.py gaps 1 12 --client 3 --csv > gaps.csv
    """
    from freight_planner.models import SessionLocal
    from freight_planner.domain.exceptions import DomainError
    from freight_planner.domain.services import SupplyPlanningService

    db = SessionLocal()
    try:
        service = SupplyPlanningService(db)
        try:
            if as_csv:
                frame = service.gap_report_frame(organization_id, period_id, client_ids=list(client_ids))
                click.echo(service.to_csv(frame), nl=False)
                return
            report = service.gap_report(organization_id, period_id, list(client_ids))
        except DomainError as e:
            raise click.ClickException(e.message)

        click.echo(click.style(f"Supply gaps - period {period_id}", fg='cyan', bold=True))
        click.echo(f"{'Route':<12}{'Target':>8}{'Committed':>11}{'Gap':>7}{'Gap %':>7}")
        for record in report.records:
            click.echo(
                f"{record.route_key:<12}{record.target.total:>8}{record.committed.total:>11}"
                f"{record.gap.total:>7}{record.gap_percent:>6}%"
            )
    finally:
        db.close()


@cli.command()
@click.argument('organization_id', type=int)
@click.argument('period_id', type=int)
@click.option('--csv', 'as_csv', is_flag=True, help='Output as CSV')
@click.option('--totals', 'include_totals', is_flag=True, help='Append supplier and grand total lines to the CSV')
def dispatch(organization_id: int, period_id: int, as_csv: bool, include_totals: bool):
    """Print committed loads grouped by supplier and route."""
    from freight_planner.models import SessionLocal
    from freight_planner.domain.exceptions import DomainError
    from freight_planner.domain.services import SupplyPlanningService

    db = SessionLocal()
    try:
        service = SupplyPlanningService(db)
        try:
            if as_csv:
                frame = service.dispatch_frame(organization_id, period_id, include_totals=include_totals)
                click.echo(service.to_csv(frame), nl=False)
                return
            sheet = service.dispatch_sheet(organization_id, period_id)
        except DomainError as e:
            raise click.ClickException(e.message)

        click.echo(click.style(f"Dispatch sheet - period {period_id}", fg='cyan', bold=True))
        for supplier in sheet.suppliers:
            click.echo(click.style(supplier.supplier_name, bold=True))
            for route in supplier.routes:
                plan = ' '.join(f"{v:>3}" for v in route.slot_vector)
                click.echo(f"  {route.route_key:<12}{plan}  = {route.slot_vector.total}")
            click.echo(f"  {'Total':<12}{' '.join(f'{v:>3}' for v in supplier.supplier_totals)}"
                       f"  = {supplier.supplier_totals.total}")
        click.echo(f"Grand total: {sheet.grand_totals.total}")
    finally:
        db.close()


if __name__ == '__main__':
    cli()
