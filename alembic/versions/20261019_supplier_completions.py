"""supplier_completions

Revision ID: 20261019_completions
Revises: 20261019_initial
Create Date: 2026-10-19 14:00:00.000000

Adds the carrier completions feed used by the supplier performance reports.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_completions'
down_revision: Union[str, Sequence[str], None] = '20261019_initial'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'supplier_completions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('supplier_name', sa.String(length=200), nullable=True),
        sa.Column('citym', sa.String(length=50), nullable=True),
        sa.Column('completion_date', sa.Date(), nullable=False),
        sa.Column('loads_completed', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('imported_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    for column in ('id', 'supplier_name', 'citym', 'completion_date'):
        op.create_index(f'ix_supplier_completions_{column}', 'supplier_completions', [column], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('supplier_completions')
