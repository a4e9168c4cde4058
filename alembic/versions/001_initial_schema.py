"""Initial schema with all tables.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users (members and console operators)
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('phone', sa.String(30), nullable=False, server_default=''),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column('password_set', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('role', sa.String(20), nullable=False, server_default='USER'),
        sa.Column('google_id', sa.String(100), nullable=True),
        sa.Column('fcm_token', sa.String(512), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Destination catalog
    op.create_table(
        'destinations',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('duration_days', sa.Integer(), nullable=False),
        sa.Column('best_months', sa.JSON(), nullable=False),
        sa.Column('difficulty', sa.String(20), nullable=False, server_default='easy'),
        sa.Column('status', sa.String(20), nullable=False, server_default='available'),
        sa.Column('image_url', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Plan catalog
    op.create_table(
        'plan_configs',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('plan_type', sa.String(20), nullable=False, unique=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('days', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'plan_destinations',
        sa.Column('plan_id', sa.String(36), sa.ForeignKey('plan_configs.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('destination_id', sa.String(36), sa.ForeignKey('destinations.id', ondelete='CASCADE'), primary_key=True),
    )

    # Memberships (one per user)
    op.create_table(
        'memberships',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('plan_type', sa.String(20), nullable=False),
        sa.Column('membership_number', sa.String(10), nullable=True, unique=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='UNPAID'),
        sa.Column('payment_amount', sa.Numeric(10, 2), nullable=True),
        sa.Column('total_days', sa.Integer(), nullable=False),
        sa.Column('used_days', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('custom_days_added', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('activated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_memberships_status', 'memberships', ['status'])

    op.create_table(
        'membership_destinations',
        sa.Column('membership_id', sa.String(36), sa.ForeignKey('memberships.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('destination_id', sa.String(36), sa.ForeignKey('destinations.id', ondelete='CASCADE'), primary_key=True),
    )

    # Per-year membership number counter
    op.create_table(
        'membership_counters',
        sa.Column('year', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('counter', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Manual payments
    op.create_table(
        'payments',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('membership_id', sa.String(36), sa.ForeignKey('memberships.id', ondelete='SET NULL'), nullable=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('method', sa.String(50), nullable=True),
        sa.Column('gateway_reference', sa.String(100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='SUCCESS'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Chat concierge history
    op.create_table(
        'chat_messages',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_chat_messages_user_id', 'chat_messages', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_chat_messages_user_id', table_name='chat_messages')
    op.drop_table('chat_messages')
    op.drop_table('payments')
    op.drop_table('membership_counters')
    op.drop_table('membership_destinations')
    op.drop_index('ix_memberships_status', table_name='memberships')
    op.drop_table('memberships')
    op.drop_table('plan_destinations')
    op.drop_table('plan_configs')
    op.drop_table('destinations')
    op.drop_table('users')
