"""Initial fulfillment workflow schema

Revision ID: 3f1c2a9d8e01
Revises:
Create Date: 2026-10-19 09:12:44.318207

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Revision identifiers used by Alembic
revision: str = '3f1c2a9d8e01'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SIZE_FIELDS = ("yxs", "ys", "ym", "yl", "xs", "s", "m", "l", "xl", "xxl", "xxxl", "xxxxl")


def _size_columns():
    return [sa.Column(size, sa.Integer(), nullable=True) for size in SIZE_FIELDS]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'manufacturers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('contact_name', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('lead_time_days', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_manufacturers_id', 'manufacturers', ['id'])

    op.create_table(
        'user_manufacturer_associations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('manufacturer_id', sa.Integer(), sa.ForeignKey('manufacturers.id'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_user_manufacturer_associations_id', 'user_manufacturer_associations', ['id'])
    op.create_index('ix_user_manufacturer_associations_user_id', 'user_manufacturer_associations', ['user_id'])
    op.create_index('ix_user_manufacturer_associations_manufacturer_id', 'user_manufacturer_associations',
                    ['manufacturer_id'])

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('sku', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('base_price', sa.Float(), sa.CheckConstraint('base_price >= 0'), nullable=False),
        sa.Column('image_url', sa.String(), nullable=True),
    )
    op.create_index('ix_products_id', 'products', ['id'])
    op.create_index('ix_products_sku', 'products', ['sku'], unique=True)
    op.create_index('ix_products_name', 'products', ['name'])

    op.create_table(
        'product_variants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('variant_code', sa.String(), nullable=False, unique=True),
        sa.Column('color', sa.String(), nullable=True),
        sa.Column('msrp', sa.Float(), nullable=True),
        sa.Column('cost', sa.Float(), nullable=True),
        sa.Column('image_url', sa.String(), nullable=True),
    )
    op.create_index('ix_product_variants_id', 'product_variants', ['id'])
    op.create_index('ix_product_variants_product_id', 'product_variants', ['product_id'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_code', sa.String(), nullable=False),
        sa.Column('order_name', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=True),
        sa.Column('priority', sa.String(), nullable=True),
        sa.Column('est_delivery', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('subtotal', sa.Float(), nullable=True),
        sa.Column('tax_amount', sa.Float(), nullable=True),
        sa.Column('total', sa.Float(), nullable=True),
        sa.Column('invoice_url', sa.String(), nullable=True),
    )
    op.create_index('ix_orders_id', 'orders', ['id'])
    op.create_index('ix_orders_order_code', 'orders', ['order_code'], unique=True)

    op.create_table(
        'order_line_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('variant_id', sa.Integer(), sa.ForeignKey('product_variants.id'), nullable=True),
        sa.Column('item_name', sa.String(), nullable=True),
        sa.Column('image_url', sa.String(), nullable=True),
        *_size_columns(),
        sa.Column('unit_price', sa.Float(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
    )
    op.create_index('ix_order_line_items_id', 'order_line_items', ['id'])
    op.create_index('ix_order_line_items_order_id', 'order_line_items', ['order_id'])

    op.create_table(
        'order_line_item_manufacturers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('line_item_id', sa.Integer(), sa.ForeignKey('order_line_items.id', ondelete='CASCADE'),
                  nullable=False),
        sa.Column('manufacturer_id', sa.Integer(), sa.ForeignKey('manufacturers.id'), nullable=False),
        sa.Column('lead_time_days', sa.Integer(), nullable=True),
        sa.Column('unit_cost', sa.Float(), nullable=True),
        sa.Column('status', sa.String(), nullable=True),
        sa.Column('estimated_completion', sa.DateTime(timezone=True), nullable=True),
        sa.Column('assigned_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_order_line_item_manufacturers_id', 'order_line_item_manufacturers', ['id'])
    op.create_index('ix_order_line_item_manufacturers_line_item_id', 'order_line_item_manufacturers',
                    ['line_item_id'])
    op.create_index('ix_order_line_item_manufacturers_manufacturer_id', 'order_line_item_manufacturers',
                    ['manufacturer_id'])

    op.create_table(
        'manufacturing',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=False, unique=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('manufacturer_id', sa.Integer(), sa.ForeignKey('manufacturers.id'), nullable=True),
        sa.Column('assigned_to', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('priority', sa.String(), nullable=False),
        sa.Column('special_instructions', sa.Text(), nullable=True),
        sa.Column('tracking_number', sa.String(), nullable=True),
        sa.Column('archived', sa.Boolean(), nullable=False),
        sa.Column('archived_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('archived_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('version', sa.Integer(), nullable=False),
    )
    op.create_index('ix_manufacturing_id', 'manufacturing', ['id'])
    op.create_index('ix_manufacturing_manufacturer_id', 'manufacturing', ['manufacturer_id'])

    op.create_table(
        'manufacturing_updates',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('manufacturing_id', sa.Integer(), sa.ForeignKey('manufacturing.id'), nullable=False),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('updated_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('manufacturer_id', sa.Integer(), sa.ForeignKey('manufacturers.id'), nullable=True),
        sa.Column('tracking_number', sa.String(), nullable=True),
        sa.Column('estimated_completion', sa.DateTime(timezone=True), nullable=True),
        sa.Column('actual_completion_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('progress_percentage', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_manufacturing_updates_id', 'manufacturing_updates', ['id'])
    op.create_index('ix_manufacturing_updates_manufacturing_id', 'manufacturing_updates', ['manufacturing_id'])

    op.create_table(
        'manufacturing_update_line_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('manufacturing_update_id', sa.Integer(),
                  sa.ForeignKey('manufacturing_updates.id', ondelete='CASCADE'), nullable=False),
        sa.Column('line_item_id', sa.Integer(), nullable=False),
        sa.Column('product_name', sa.String(), nullable=True),
        sa.Column('variant_code', sa.String(), nullable=True),
        sa.Column('variant_color', sa.String(), nullable=True),
        sa.Column('image_url', sa.String(), nullable=True),
        *_size_columns(),
        sa.Column('mockup_image_url', sa.String(), nullable=True),
        sa.Column('mockup_uploaded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('mockup_uploaded_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('actual_cost', sa.Float(), nullable=True),
        sa.Column('sizes_confirmed', sa.Boolean(), nullable=False),
        sa.Column('sizes_confirmed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('sizes_confirmed_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('manufacturer_completed', sa.Boolean(), nullable=False),
        sa.Column('manufacturer_completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('manufacturer_completed_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('descriptors', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('manufacturing_update_id', 'line_item_id', name='uq_update_line_item'),
    )
    op.create_index('ix_manufacturing_update_line_items_id', 'manufacturing_update_line_items', ['id'])
    op.create_index('ix_manufacturing_update_line_items_manufacturing_update_id',
                    'manufacturing_update_line_items', ['manufacturing_update_id'])
    op.create_index('ix_manufacturing_update_line_items_line_item_id', 'manufacturing_update_line_items',
                    ['line_item_id'])

    op.create_table(
        'manufacturer_jobs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('manufacturing_id', sa.Integer(), sa.ForeignKey('manufacturing.id', ondelete='CASCADE'),
                  nullable=False, unique=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('manufacturer_id', sa.Integer(), sa.ForeignKey('manufacturers.id'), nullable=True),
        sa.Column('manufacturer_status', sa.String(), nullable=False),
        sa.Column('public_status', sa.String(), nullable=False),
        sa.Column('required_delivery_date', sa.Date(), nullable=True),
        sa.Column('promised_ship_date', sa.Date(), nullable=True),
        sa.Column('event_date', sa.Date(), nullable=True),
        sa.Column('latest_arrival_date', sa.Date(), nullable=True),
        sa.Column('sample_required', sa.Boolean(), nullable=False),
        sa.Column('fabric_type', sa.String(), nullable=True),
        sa.Column('print_method', sa.String(), nullable=True),
        sa.Column('special_instructions', sa.Text(), nullable=True),
        sa.Column('internal_notes', sa.Text(), nullable=True),
        sa.Column('priority', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('version', sa.Integer(), nullable=False),
    )
    op.create_index('ix_manufacturer_jobs_id', 'manufacturer_jobs', ['id'])
    op.create_index('ix_manufacturer_jobs_order_id', 'manufacturer_jobs', ['order_id'])
    op.create_index('ix_manufacturer_jobs_manufacturer_id', 'manufacturer_jobs', ['manufacturer_id'])
    op.create_index('ix_manufacturer_jobs_manufacturer_status', 'manufacturer_jobs', ['manufacturer_status'])
    op.create_index('ix_manufacturer_jobs_public_status', 'manufacturer_jobs', ['public_status'])

    op.create_table(
        'manufacturer_events',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('manufacturer_job_id', sa.Integer(),
                  sa.ForeignKey('manufacturer_jobs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('event_type', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('previous_value', sa.Text(), nullable=True),
        sa.Column('new_value', sa.Text(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_manufacturer_events_id', 'manufacturer_events', ['id'])
    op.create_index('ix_manufacturer_events_manufacturer_job_id', 'manufacturer_events', ['manufacturer_job_id'])
    op.create_index('ix_manufacturer_events_event_type', 'manufacturer_events', ['event_type'])
    op.create_index('ix_manufacturer_events_created_at', 'manufacturer_events', ['created_at'])

    op.create_table(
        'logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('ts', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('action', sa.String(length=50), nullable=True),
        sa.Column('resource', sa.String(length=50), nullable=True),
        sa.Column('resource_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('ip', sa.String(length=64), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
    )
    op.create_index('ix_logs_id', 'logs', ['id'])
    op.create_index('ix_logs_ts', 'logs', ['ts'])
    op.create_index('ix_logs_action', 'logs', ['action'])
    op.create_index('ix_logs_resource', 'logs', ['resource'])
    op.create_index('ix_logs_resource_id', 'logs', ['resource_id'])
    op.create_index('ix_logs_status', 'logs', ['status'])


def downgrade() -> None:
    """Downgrade schema."""
    # Children first
    op.drop_table('logs')
    op.drop_table('manufacturer_events')
    op.drop_table('manufacturer_jobs')
    op.drop_table('manufacturing_update_line_items')
    op.drop_table('manufacturing_updates')
    op.drop_table('manufacturing')
    op.drop_table('order_line_item_manufacturers')
    op.drop_table('order_line_items')
    op.drop_table('orders')
    op.drop_table('product_variants')
    op.drop_table('products')
    op.drop_table('user_manufacturer_associations')
    op.drop_table('manufacturers')
    op.drop_table('users')
