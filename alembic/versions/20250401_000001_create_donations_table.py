"""Create donations table

Revision ID: 20250401_000001
Revises: None
Create Date: 2025-04-01

This migration creates the donations table. receipt_no is unique: the
constraint is what rejects a second donation with the same receipt.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20250401_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the donations table."""
    op.create_table(
        'donations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('receipt_no', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=10), nullable=False),
        sa.Column('community', sa.String(length=20), nullable=False, server_default='any'),
        sa.Column('location', sa.String(length=100), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('payment_mode', sa.String(length=20), nullable=False),
        sa.Column('inscription', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('donation_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    # Lookups by receipt, donor phone and date window
    op.create_index('ix_donations_receipt_no', 'donations', ['receipt_no'], unique=True)
    op.create_index('ix_donations_phone', 'donations', ['phone'])
    op.create_index('ix_donations_donation_date', 'donations', ['donation_date'])


def downgrade() -> None:
    """Drop the donations table."""
    op.drop_index('ix_donations_donation_date', table_name='donations')
    op.drop_index('ix_donations_phone', table_name='donations')
    op.drop_index('ix_donations_receipt_no', table_name='donations')
    op.drop_table('donations')
