"""Add withdrawal requests

Revision ID: 20261019_000002
Revises: 20261019_000001
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000002'
down_revision: Union[str, None] = '20261019_000001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'withdrawal_requests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('investment_id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('requested_by', sa.Integer(), nullable=True),
        sa.Column('withdrawal_type', sa.String(10), nullable=False),
        sa.Column('amount', sa.DECIMAL(18, 8), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('processed_by', sa.Integer(), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.String(500), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['investment_id'], ['investments.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['owner_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['requested_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['processed_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.CheckConstraint('amount > 0', name='check_withdrawal_request_amount_positive'),
        sa.CheckConstraint(
            "withdrawal_type IN ('partial', 'total')",
            name='check_withdrawal_request_type',
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name='check_withdrawal_request_status',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_withdrawal_requests_investment_id', 'withdrawal_requests', ['investment_id'])
    op.create_index(
        'idx_withdrawal_request_investment_status',
        'withdrawal_requests',
        ['investment_id', 'status'],
    )


def downgrade() -> None:
    op.drop_index('idx_withdrawal_request_investment_status', 'withdrawal_requests')
    op.drop_index('ix_withdrawal_requests_investment_id', 'withdrawal_requests')
    op.drop_table('withdrawal_requests')
