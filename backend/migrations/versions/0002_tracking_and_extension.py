"""shopper users, click telemetry, extension settings

Revision ID: 0002_tracking_and_extension
Revises: 0001_initial_schema
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0002_tracking_and_extension'
down_revision = '0001_initial_schema'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False, unique=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('country', sa.String(length=8), nullable=True),
        sa.Column('device_id', sa.String(length=128), nullable=True),
        sa.Column('platform', sa.String(length=32), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    op.create_table('clicks',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('merchant_id', sa.String(length=36), sa.ForeignKey('merchants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('coupon_id', sa.String(length=36), sa.ForeignKey('coupons.id', ondelete='SET NULL'), nullable=True),
        sa.Column('source', sa.String(length=64), nullable=True),
        sa.Column('platform', sa.String(length=32), nullable=True),
        sa.Column('device_info', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('referrer', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_clicks_user_id', 'clicks', ['user_id'])
    op.create_index('ix_clicks_merchant_id', 'clicks', ['merchant_id'])
    op.create_index('ix_clicks_coupon_id', 'clicks', ['coupon_id'])
    op.create_index('ix_clicks_created_at', 'clicks', ['created_at'])

    op.create_table('extension_settings',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('key', sa.String(length=128), nullable=False, unique=True),
        sa.Column('value', sa.JSON(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_extension_settings_key', 'extension_settings', ['key'])

    # batch mode: SQLite cannot add a foreign key with plain ALTER TABLE
    with op.batch_alter_table('conversions') as batch:
        batch.add_column(sa.Column('user_id', sa.String(length=36), nullable=True))
        batch.create_foreign_key('fk_conversions_user_id', 'users', ['user_id'], ['id'], ondelete='SET NULL')
        batch.create_index('ix_conversions_user_id', ['user_id'])


def downgrade():
    with op.batch_alter_table('conversions') as batch:
        batch.drop_index('ix_conversions_user_id')
        batch.drop_constraint('fk_conversions_user_id', type_='foreignkey')
        batch.drop_column('user_id')
    for name in ('extension_settings', 'clicks', 'users'):
        op.drop_table(name)
