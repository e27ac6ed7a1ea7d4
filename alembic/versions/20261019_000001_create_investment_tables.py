"""Create investment club tables

Revision ID: 20261019_000001
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Actors and hierarchy pointers
    op.create_table(
        'profiles',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('tier', sa.String(20), nullable=False, server_default='investor'),
        sa.Column('advisor_id', sa.Integer(), nullable=True),
        sa.Column('office_id', sa.Integer(), nullable=True),
        sa.Column('distributor_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['advisor_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['office_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['distributor_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.CheckConstraint(
            "tier IN ('distributor', 'office', 'advisor', 'investor', 'admin')",
            name='check_profile_tier',
        ),
        sa.CheckConstraint(
            'advisor_id IS NULL OR advisor_id <> id',
            name='check_profile_advisor_not_self',
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('idx_profile_tier', 'profiles', ['tier'])
    op.create_index('ix_profiles_advisor_id', 'profiles', ['advisor_id'])
    op.create_index('ix_profiles_office_id', 'profiles', ['office_id'])
    op.create_index('ix_profiles_distributor_id', 'profiles', ['distributor_id'])

    # Rate table
    op.create_table(
        'rentability_rates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tier', sa.String(20), nullable=True),
        sa.Column('commitment_period', sa.Integer(), nullable=True),
        sa.Column('liquidity_class', sa.String(20), nullable=True),
        sa.Column('condition_ids', postgresql.JSONB(), nullable=True),
        sa.Column('monthly_rate', sa.DECIMAL(10, 6), nullable=False),
        sa.Column('description', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            'monthly_rate > 0 AND monthly_rate < 1',
            name='check_rentability_rate_fraction',
        ),
        sa.CheckConstraint(
            '(commitment_period IS NULL) = (liquidity_class IS NULL)',
            name='check_rentability_rate_period_liquidity_pair',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'idx_rentability_rate_lookup', 'rentability_rates',
        ['tier', 'commitment_period', 'liquidity_class'],
    )

    # Investments
    op.create_table(
        'investments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.DECIMAL(18, 8), nullable=False),
        sa.Column('commitment_period', sa.Integer(), nullable=False),
        sa.Column('liquidity_class', sa.String(20), nullable=False, server_default='monthly'),
        sa.Column('monthly_rate', sa.DECIMAL(10, 6), nullable=True),
        sa.Column('condition_ids', postgresql.JSONB(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('payment_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('receipt_ref', sa.String(512), nullable=True),
        sa.Column('renewal_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('original_investment_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('current_cycle_start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_renewal_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_by', sa.Integer(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('withdrawn_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('parent_investment_id', sa.Integer(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['owner_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['approved_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['parent_investment_id'], ['investments.id'], ondelete='SET NULL'),
        sa.CheckConstraint('amount > 0', name='check_investment_amount_positive'),
        sa.CheckConstraint(
            'commitment_period IN (3, 6, 12, 24, 36)',
            name='check_investment_commitment_period',
        ),
        sa.CheckConstraint(
            "liquidity_class IN ('monthly', 'semiannual', 'annual', 'biennial', 'triennial')",
            name='check_investment_liquidity_class',
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'active', 'withdrawn')",
            name='check_investment_status',
        ),
        sa.CheckConstraint('renewal_count >= 0', name='check_investment_renewal_count_non_negative'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_investments_owner_id', 'investments', ['owner_id'])
    op.create_index('ix_investments_status', 'investments', ['status'])
    op.create_index('ix_investments_parent_investment_id', 'investments', ['parent_investment_id'])
    op.create_index('idx_investment_owner_status', 'investments', ['owner_id', 'status'])

    # Renewal history (append-only)
    op.create_table(
        'investment_renewals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('investment_id', sa.Integer(), nullable=False),
        sa.Column('renewal_number', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(30), nullable=False),
        sa.Column('previous_payment_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('previous_commitment_period', sa.Integer(), nullable=False),
        sa.Column('previous_liquidity_class', sa.String(20), nullable=False),
        sa.Column('previous_monthly_rate', sa.DECIMAL(10, 6), nullable=True),
        sa.Column('previous_expiry_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('new_payment_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('new_commitment_period', sa.Integer(), nullable=False),
        sa.Column('new_liquidity_class', sa.String(20), nullable=False),
        sa.Column('new_monthly_rate', sa.DECIMAL(10, 6), nullable=True),
        sa.Column('new_expiry_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('additional_amount', sa.DECIMAL(18, 8), nullable=True),
        sa.Column('additional_investment_id', sa.Integer(), nullable=True),
        sa.Column('renewed_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['investment_id'], ['investments.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['additional_investment_id'], ['investments.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['renewed_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('investment_id', 'renewal_number', name='uq_investment_renewal_number'),
        sa.CheckConstraint(
            "action IN ('renew', 'renew_with_new_rules', 'suggest_increase')",
            name='check_investment_renewal_action',
        ),
        sa.CheckConstraint(
            'additional_amount IS NULL OR additional_amount > 0',
            name='check_investment_renewal_additional_positive',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_investment_renewals_investment_id', 'investment_renewals', ['investment_id'])

    # Notification outbox
    op.create_table(
        'notification_outbox',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=False),
        sa.Column('event', sa.String(50), nullable=False),
        sa.Column('payload', postgresql.JSONB(), nullable=False, server_default='{}'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['actor_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notification_outbox_actor_id', 'notification_outbox', ['actor_id'])
    op.create_index('idx_notification_outbox_status', 'notification_outbox', ['status', 'created_at'])


def downgrade() -> None:
    op.drop_index('idx_notification_outbox_status', 'notification_outbox')
    op.drop_index('ix_notification_outbox_actor_id', 'notification_outbox')
    op.drop_table('notification_outbox')

    op.drop_index('ix_investment_renewals_investment_id', 'investment_renewals')
    op.drop_table('investment_renewals')

    op.drop_index('idx_investment_owner_status', 'investments')
    op.drop_index('ix_investments_parent_investment_id', 'investments')
    op.drop_index('ix_investments_status', 'investments')
    op.drop_index('ix_investments_owner_id', 'investments')
    op.drop_table('investments')

    op.drop_index('idx_rentability_rate_lookup', 'rentability_rates')
    op.drop_table('rentability_rates')

    op.drop_index('ix_profiles_distributor_id', 'profiles')
    op.drop_index('ix_profiles_office_id', 'profiles')
    op.drop_index('ix_profiles_advisor_id', 'profiles')
    op.drop_index('idx_profile_tier', 'profiles')
    op.drop_table('profiles')
