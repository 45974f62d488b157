"""initial_planning_schema

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

Creates the demand/supply planning schema:
- organizations and organization_settings (planning cycle, week start)
- master data: cities, clients, suppliers, truck_types
- planning_periods (lazily created weeks/months, lock flag)
- demand_forecasts and supply_commitments with day/week slot columns
- actual_shipper_requests (external actuals feed)
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _slot_columns():
    names = [f'day{i}' for i in range(1, 8)] + [f'week{i}' for i in range(1, 6)] + ['total']
    return [sa.Column(name, sa.Integer(), nullable=False, server_default='0') for name in names]


def _master_table(name: str, *columns):
    op.create_table(
        name,
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        *columns,
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(f'ix_{name}_id', name, ['id'], unique=False)
    op.create_index(f'ix_{name}_organization_id', name, ['organization_id'], unique=False)


def upgrade() -> None:
    """Upgrade schema."""

    # =========================================================================
    # 1. Tenancy
    # =========================================================================
    op.create_table(
        'organizations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_organizations_id', 'organizations', ['id'], unique=False)

    op.create_table(
        'organization_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('planning_cycle', sa.String(length=10), nullable=True),
        sa.Column('week_start_day', sa.String(length=10), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('organization_id'),
    )
    op.create_index('ix_organization_settings_id', 'organization_settings', ['id'], unique=False)

    # =========================================================================
    # 2. Master data
    # =========================================================================
    op.create_table(
        'cities',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('code', sa.String(length=10), nullable=False),
        sa.Column('region', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('organization_id', 'code', name='uq_city_org_code'),
    )
    op.create_index('ix_cities_id', 'cities', ['id'], unique=False)
    op.create_index('ix_cities_organization_id', 'cities', ['organization_id'], unique=False)

    _master_table(
        'clients',
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=True),
    )
    _master_table(
        'suppliers',
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=True),
    )
    _master_table(
        'truck_types',
        sa.Column('name', sa.String(length=100), nullable=False),
    )

    # =========================================================================
    # 3. Planning periods
    # =========================================================================
    op.create_table(
        'planning_periods',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('cycle_kind', sa.String(length=10), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.Column('period_start', sa.Date(), nullable=False),
        sa.Column('period_end', sa.Date(), nullable=False),
        sa.Column('is_locked', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('organization_id', 'year', 'sequence', 'cycle_kind', name='uq_period_org_year_seq'),
    )
    op.create_index('ix_planning_periods_id', 'planning_periods', ['id'], unique=False)
    op.create_index('ix_planning_periods_organization_id', 'planning_periods', ['organization_id'], unique=False)
    op.create_index('ix_planning_periods_period_start', 'planning_periods', ['period_start'], unique=False)

    # =========================================================================
    # 4. Demand and supply
    # =========================================================================
    op.create_table(
        'demand_forecasts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('planning_period_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('pickup_city_id', sa.Integer(), nullable=False),
        sa.Column('dropoff_city_id', sa.Integer(), nullable=False),
        sa.Column('truck_type_id', sa.Integer(), nullable=True),
        sa.Column('route_key', sa.String(length=50), nullable=False),
        *_slot_columns(),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.ForeignKeyConstraint(['planning_period_id'], ['planning_periods.id']),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['pickup_city_id'], ['cities.id']),
        sa.ForeignKeyConstraint(['dropoff_city_id'], ['cities.id']),
        sa.ForeignKeyConstraint(['truck_type_id'], ['truck_types.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'planning_period_id', 'client_id', 'pickup_city_id', 'dropoff_city_id', 'truck_type_id',
            name='uq_demand_period_client_lane_truck'
        ),
    )
    for column in ('id', 'organization_id', 'planning_period_id', 'client_id', 'truck_type_id', 'route_key'):
        op.create_index(f'ix_demand_forecasts_{column}', 'demand_forecasts', [column], unique=False)

    op.create_table(
        'supply_commitments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('planning_period_id', sa.Integer(), nullable=False),
        sa.Column('supplier_id', sa.Integer(), nullable=False),
        sa.Column('truck_type_id', sa.Integer(), nullable=True),
        sa.Column('route_key', sa.String(length=50), nullable=False),
        *_slot_columns(),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.ForeignKeyConstraint(['planning_period_id'], ['planning_periods.id']),
        sa.ForeignKeyConstraint(['supplier_id'], ['suppliers.id']),
        sa.ForeignKeyConstraint(['truck_type_id'], ['truck_types.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    for column in ('id', 'organization_id', 'planning_period_id', 'supplier_id', 'route_key'):
        op.create_index(f'ix_supply_commitments_{column}', 'supply_commitments', [column], unique=False)

    # =========================================================================
    # 5. External actuals feed
    # =========================================================================
    op.create_table(
        'actual_shipper_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('citym', sa.String(length=50), nullable=False),
        sa.Column('request_date', sa.Date(), nullable=False),
        sa.Column('loads_requested', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('loads_fulfilled', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('imported_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_actual_shipper_requests_id', 'actual_shipper_requests', ['id'], unique=False)
    op.create_index('ix_actual_shipper_requests_citym', 'actual_shipper_requests', ['citym'], unique=False)
    op.create_index(
        'ix_actual_shipper_requests_request_date', 'actual_shipper_requests', ['request_date'], unique=False
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('actual_shipper_requests')
    op.drop_table('supply_commitments')
    op.drop_table('demand_forecasts')
    op.drop_table('planning_periods')
    op.drop_table('truck_types')
    op.drop_table('suppliers')
    op.drop_table('clients')
    op.drop_table('cities')
    op.drop_table('organization_settings')
    op.drop_table('organizations')
