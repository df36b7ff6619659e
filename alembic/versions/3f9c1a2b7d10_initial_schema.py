"""initial_schema

Revision ID: 3f9c1a2b7d10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f9c1a2b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ENUMS = {
    'user_role_enum': ('USER', 'ADMIN', 'AFFILIATE'),
    'user_status_enum': ('ACTIVE', 'INACTIVE', 'PENDING', 'BANNED'),
    'audit_action_enum': (
        'LOGIN', 'LOGIN_FAILED', 'REGISTER', 'USER_UPDATED', 'USER_DELETED',
        'AFFILIATE_APPROVED', 'CONFIG_UPDATED', 'PRODUCT_CREATED',
        'PRODUCT_UPDATED', 'PRODUCT_DELETED', 'PRODUCT_ACCOUNTS_ADDED',
        'ORDER_CREATED', 'ORDER_STATUS_CHANGED', 'ORDER_ITEM_DELIVERED',
        'RECHARGE_CREATED', 'RECHARGE_APPROVED', 'RECHARGE_REJECTED',
        'WALLET_ADJUSTED', 'COMMISSION_PAID', 'COMMISSION_CANCELLED',
    ),
    'delivery_type_enum': ('AUTOMATIC', 'MANUAL'),
    'product_status_enum': ('ACTIVE', 'INACTIVE'),
    'product_account_status_enum': ('AVAILABLE', 'ASSIGNED'),
    'order_status_enum': ('PENDING', 'PROCESSING', 'COMPLETED', 'CANCELLED', 'REFUNDED'),
    'payment_status_enum': ('PENDING', 'PAID', 'FAILED', 'REFUNDED'),
    'commission_status_enum': ('PENDING', 'PAID', 'CANCELLED'),
    'recharge_status_enum': ('PENDING', 'APPROVED', 'REJECTED'),
    'transaction_type_enum': ('RECHARGE', 'PURCHASE', 'REFUND', 'COMMISSION', 'ADMIN_ADJUSTMENT'),
    'transaction_direction_enum': ('CREDIT', 'DEBIT'),
}


def enum(name: str) -> postgresql.ENUM:
    # Types are created up front; columns must not try to create them again.
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def money(name: str, nullable: bool = False, **kwargs) -> sa.Column:
    return sa.Column(name, sa.Numeric(12, 2), nullable=nullable, **kwargs)


def upgrade() -> None:
    """Upgrade schema - Luffy Streaming initial tables."""
    bind = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    # Accounts
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('role', enum('user_role_enum'), nullable=False),
        sa.Column('status', enum('user_status_enum'), nullable=False),
        money('wallet'),
        sa.Column('referral_code', sa.String(20), nullable=True),
        sa.Column('referred_by_id', sa.Uuid(), nullable=True),
        money('total_commissions'),
        money('pending_commissions'),
        sa.Column('failed_login_attempts', sa.Integer(), nullable=False),
        sa.Column('locked_until', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('email_verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('wallet >= 0', name=op.f('ck_users_wallet_non_negative')),
        sa.CheckConstraint(
            'pending_commissions >= 0',
            name=op.f('ck_users_pending_commissions_non_negative'),
        ),
        sa.ForeignKeyConstraint(
            ['referred_by_id'], ['users.id'],
            name=op.f('fk_users_referred_by_id_users'), ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_referral_code'), 'users', ['referral_code'], unique=True)
    op.create_index(op.f('ix_users_referred_by_id'), 'users', ['referred_by_id'])
    op.create_index(op.f('ix_users_role'), 'users', ['role'])
    op.create_index(op.f('ix_users_status'), 'users', ['status'])

    op.create_table(
        'system_config',
        sa.Column('key', sa.String(64), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('description', sa.String(255), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('key', name=op.f('pk_system_config')),
    )

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('action', enum('audit_action_enum'), nullable=False),
        sa.Column('entity', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.String(64), nullable=True),
        sa.Column('details', postgresql.JSONB(), nullable=True),
        sa.Column('ip_address', sa.String(64), nullable=True),
        sa.Column('user_agent', sa.String(512), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name=op.f('fk_audit_logs_user_id_users'), ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_audit_logs')),
    )
    op.create_index(op.f('ix_audit_logs_user_id'), 'audit_logs', ['user_id'])
    op.create_index('ix_audit_logs_entity_entity_id', 'audit_logs', ['entity', 'entity_id'])
    op.create_index('ix_audit_logs_created_at', 'audit_logs', ['created_at'])

    # Store
    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('provider', sa.String(100), nullable=False),
        sa.Column('category', sa.String(100), nullable=True),
        money('price_usd'),
        money('price_pen'),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('sold', sa.Integer(), nullable=False),
        sa.Column('delivery_type', enum('delivery_type_enum'), nullable=False),
        sa.Column('status', enum('product_status_enum'), nullable=False),
        sa.Column('featured', sa.Boolean(), nullable=False),
        sa.Column('image', sa.String(500), nullable=True),
        sa.Column('meta_title', sa.String(255), nullable=True),
        sa.Column('meta_description', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('stock >= 0', name=op.f('ck_products_stock_non_negative')),
        sa.CheckConstraint('sold >= 0', name=op.f('ck_products_sold_non_negative')),
        sa.CheckConstraint(
            'price_usd >= 0', name=op.f('ck_products_price_usd_non_negative')
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_products')),
    )
    op.create_index(op.f('ix_products_slug'), 'products', ['slug'], unique=True)
    op.create_index(op.f('ix_products_category'), 'products', ['category'])
    op.create_index(op.f('ix_products_status'), 'products', ['status'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_number', sa.String(20), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        money('subtotal'),
        money('discount'),
        money('total'),
        sa.Column('status', enum('order_status_enum'), nullable=False),
        sa.Column('payment_status', enum('payment_status_enum'), nullable=False),
        sa.Column('affiliate_id', sa.Uuid(), nullable=True),
        money('commission_amount', nullable=True),
        sa.Column('commission_paid', sa.Boolean(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], name=op.f('fk_orders_user_id_users')
        ),
        sa.ForeignKeyConstraint(
            ['affiliate_id'], ['users.id'],
            name=op.f('fk_orders_affiliate_id_users'), ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_orders')),
    )
    op.create_index(op.f('ix_orders_order_number'), 'orders', ['order_number'], unique=True)
    op.create_index(op.f('ix_orders_user_id'), 'orders', ['user_id'])
    op.create_index(op.f('ix_orders_affiliate_id'), 'orders', ['affiliate_id'])
    op.create_index(op.f('ix_orders_status'), 'orders', ['status'])
    op.create_index(op.f('ix_orders_created_at'), 'orders', ['created_at'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        money('price_usd'),
        money('price_pen'),
        money('subtotal'),
        sa.Column('product_name', sa.String(255), nullable=False),
        sa.Column('product_provider', sa.String(100), nullable=False),
        sa.Column('delivery_type', enum('delivery_type_enum'), nullable=False),
        sa.Column('delivered', sa.Boolean(), nullable=False),
        sa.Column('delivered_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('delivery_data', sa.Text(), nullable=True),
        sa.CheckConstraint('quantity > 0', name=op.f('ck_order_items_quantity_positive')),
        sa.ForeignKeyConstraint(
            ['order_id'], ['orders.id'],
            name=op.f('fk_order_items_order_id_orders'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['product_id'], ['products.id'], name=op.f('fk_order_items_product_id_products')
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_order_items')),
    )
    op.create_index(op.f('ix_order_items_order_id'), 'order_items', ['order_id'])
    op.create_index(op.f('ix_order_items_product_id'), 'order_items', ['product_id'])

    op.create_table(
        'product_accounts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('credentials', sa.Text(), nullable=False),
        sa.Column('status', enum('product_account_status_enum'), nullable=False),
        sa.Column('order_item_id', sa.Uuid(), nullable=True),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['product_id'], ['products.id'],
            name=op.f('fk_product_accounts_product_id_products'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['order_item_id'], ['order_items.id'],
            name=op.f('fk_product_accounts_order_item_id_order_items'),
            ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_product_accounts')),
    )
    op.create_index(
        'ix_product_accounts_product_status', 'product_accounts', ['product_id', 'status']
    )

    op.create_table(
        'commissions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('affiliate_id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), nullable=False),
        money('order_total'),
        sa.Column('commission_rate', sa.Numeric(5, 4), nullable=False),
        money('amount'),
        sa.Column('status', enum('commission_status_enum'), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['affiliate_id'], ['users.id'], name=op.f('fk_commissions_affiliate_id_users')
        ),
        sa.ForeignKeyConstraint(
            ['order_id'], ['orders.id'], name=op.f('fk_commissions_order_id_orders')
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_commissions')),
        sa.UniqueConstraint('order_id', name=op.f('uq_commissions_order_id')),
    )
    op.create_index(op.f('ix_commissions_affiliate_id'), 'commissions', ['affiliate_id'])
    op.create_index(op.f('ix_commissions_status'), 'commissions', ['status'])

    # Wallet
    op.create_table(
        'recharges',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        money('amount'),
        sa.Column('status', enum('recharge_status_enum'), nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('payment_reference', sa.String(255), nullable=True),
        sa.Column('payment_proof', sa.Text(), nullable=True),
        sa.Column('approved_by', sa.Uuid(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('amount > 0', name=op.f('ck_recharges_amount_positive')),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], name=op.f('fk_recharges_user_id_users')
        ),
        sa.ForeignKeyConstraint(
            ['approved_by'], ['users.id'],
            name=op.f('fk_recharges_approved_by_users'), ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_recharges')),
    )
    op.create_index(op.f('ix_recharges_user_id'), 'recharges', ['user_id'])
    op.create_index(op.f('ix_recharges_status'), 'recharges', ['status'])

    op.create_table(
        'wallet_transactions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('idempotency_key', sa.String(100), nullable=False),
        sa.Column('transaction_type', enum('transaction_type_enum'), nullable=False),
        sa.Column('direction', enum('transaction_direction_enum'), nullable=False),
        money('amount'),
        money('balance_before'),
        money('balance_after'),
        sa.Column('description', sa.String(500), nullable=False),
        sa.Column('reference_type', sa.String(50), nullable=True),
        sa.Column('reference_id', sa.String(64), nullable=True),
        sa.Column('initiated_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            'amount > 0', name=op.f('ck_wallet_transactions_amount_positive')
        ),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], name=op.f('fk_wallet_transactions_user_id_users')
        ),
        sa.ForeignKeyConstraint(
            ['initiated_by'], ['users.id'],
            name=op.f('fk_wallet_transactions_initiated_by_users'), ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_wallet_transactions')),
    )
    op.create_index(
        op.f('ix_wallet_transactions_idempotency_key'),
        'wallet_transactions',
        ['idempotency_key'],
        unique=True,
    )
    op.create_index(op.f('ix_wallet_transactions_user_id'), 'wallet_transactions', ['user_id'])
    op.create_index(
        'ix_wallet_transactions_user_created', 'wallet_transactions', ['user_id', 'created_at']
    )


def downgrade() -> None:
    """Downgrade schema - drop every table and enum type."""
    for table in (
        'wallet_transactions',
        'recharges',
        'commissions',
        'product_accounts',
        'order_items',
        'orders',
        'products',
        'audit_logs',
        'system_config',
        'users',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for name in reversed(list(ENUMS)):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
