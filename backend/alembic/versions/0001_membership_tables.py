"""Create membership tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_membership_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, plans, subscriptions and pending requests."""

    op.create_table(
        'subscription_plans',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('price', sa.Float, nullable=False),
        sa.Column('period', sa.String(20), nullable=False),
        sa.Column('period_length_days', sa.Integer),
        sa.Column('description', sa.Text),
        sa.Column('features', sa.JSON, nullable=False),
        sa.Column('max_sessions', sa.Integer),
        sa.Column('is_active', sa.Boolean, server_default='true', nullable=False, index=True),

        # Timestamps
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('email', sa.String(255)),
        sa.Column('display_name', sa.String(255)),
        sa.Column('photo_url', sa.Text),
        sa.Column('active_subscription_id', sa.String(36), index=True),
        sa.Column('subscription_history', sa.JSON, nullable=False),

        # Timestamps
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(128), nullable=False, index=True),
        sa.Column('user_email', sa.String(255), nullable=False),
        sa.Column('user_display_name', sa.String(255), nullable=False),

        # Plan snapshot
        sa.Column('plan_id', sa.String(64), nullable=False),
        sa.Column('plan_name', sa.String(100), nullable=False),
        sa.Column('price', sa.Float, nullable=False),

        sa.Column('status', sa.String(20), server_default='active', nullable=False, index=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),

        # Session allowance
        sa.Column('max_sessions', sa.Integer),
        sa.Column('used_sessions', sa.Integer, server_default='0', nullable=False),

        sa.Column('payment_method', sa.String(50), server_default='counter', nullable=False),
        sa.Column('approved_at', sa.DateTime(timezone=True)),
        sa.Column('approved_by', sa.String(128)),
        sa.Column('extension_log', sa.JSON, nullable=False),

        # Timestamps
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),

        sa.CheckConstraint('end_date >= start_date', name='ck_subscriptions_dates'),
    )

    op.create_table(
        'pending_subscriptions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(128), nullable=False, index=True),
        sa.Column('user_email', sa.String(255), nullable=False),
        sa.Column('user_display_name', sa.String(255), nullable=False),

        # Plan snapshot
        sa.Column('plan_id', sa.String(64), nullable=False),
        sa.Column('plan_name', sa.String(100), nullable=False),
        sa.Column('price', sa.Float, nullable=False),

        sa.Column('status', sa.String(20), server_default='pending', nullable=False, index=True),
        sa.Column('payment_method', sa.String(50), server_default='counter', nullable=False),
        sa.Column('request_date', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('approved_at', sa.DateTime(timezone=True)),
        sa.Column('rejected_at', sa.DateTime(timezone=True)),
        sa.Column('subscription_id', sa.String(36)),

        # Timestamps
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),

        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name='ck_pending_subscriptions_status',
        ),
    )


def downgrade() -> None:
    """Drop membership tables."""
    op.drop_table('pending_subscriptions')
    op.drop_table('subscriptions')
    op.drop_table('users')
    op.drop_table('subscription_plans')
