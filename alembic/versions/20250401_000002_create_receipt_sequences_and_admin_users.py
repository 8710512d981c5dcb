"""Create receipt_sequences and admin_users tables

Revision ID: 20250401_000002
Revises: 20250401_000001
Create Date: 2025-04-01

receipt_sequences holds one counter row per calendar year.
admin_users replaces the admin accounts that used to live in configuration.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20250401_000002'
down_revision: Union[str, None] = '20250401_000001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the receipt_sequences and admin_users tables."""
    op.create_table(
        'receipt_sequences',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('last_receipt_number', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('year', name='uq_receipt_sequences_year'),
    )

    op.create_table(
        'admin_users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='admin'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_admin_users_username', 'admin_users', ['username'], unique=True)


def downgrade() -> None:
    """Drop the receipt_sequences and admin_users tables."""
    op.drop_index('ix_admin_users_username', table_name='admin_users')
    op.drop_table('admin_users')
    op.drop_table('receipt_sequences')
