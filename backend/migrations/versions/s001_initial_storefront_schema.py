"""initial storefront schema

Revision ID: s001
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the complete storefront schema from scratch:
- customer, address: accounts and their shipping addresses
- category, product: the catalog
- order: placed orders (incomplete -> complete)
- shopping_cart, shopping_cart_item: carts and their lines
- session: server-side browser sessions
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 's001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ============================================================================
    # customer / address
    # ============================================================================
    op.create_table(
        'customer',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=128), nullable=False),
        sa.Column('last_name', sa.String(length=128), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('phone_number', sa.String(length=32), nullable=True),
        sa.Column('user_name', sa.String(length=64), nullable=True),
        sa.Column('password', sa.String(length=255), nullable=False),  # bcrypt hash
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'address',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('street_number', sa.Integer(), nullable=False),
        sa.Column('civic_number', sa.Integer(), nullable=True),
        sa.Column('street_name', sa.String(length=255), nullable=False),
        sa.Column('city', sa.String(length=128), nullable=False),
        sa.Column('province', sa.String(length=128), nullable=False),
        sa.Column('country', sa.String(length=128), nullable=False),
        sa.Column('postal_code', sa.String(length=16), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['customer_id'], ['customer.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_address_customer_id', 'address', ['customer_id'])

    # ============================================================================
    # category / product
    # ============================================================================
    op.create_table(
        'category',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'product',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('url', sa.String(length=2048), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('inventory', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['category_id'], ['category.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_product_category_id', 'product', ['category_id'])

    # ============================================================================
    # order: address_id has no ON DELETE so a used address cannot be removed
    # ============================================================================
    op.create_table(
        'order',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.Enum('incomplete', 'complete', name='order_status',
                                    native_enum=False, create_constraint=True),
                  nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('address_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['customer_id'], ['customer.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['address_id'], ['address.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_order_customer_id', 'order', ['customer_id'])
    op.create_index('ix_order_address_id', 'order', ['address_id'])

    # ============================================================================
    # shopping_cart / shopping_cart_item
    # ============================================================================
    op.create_table(
        'shopping_cart',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['customer_id'], ['customer.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['order_id'], ['order.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id'),
    )
    op.create_index('ix_shopping_cart_customer_id', 'shopping_cart', ['customer_id'])
    # At most one active (not checked out) cart per customer
    op.create_index(
        'uq_shopping_cart_active_customer',
        'shopping_cart',
        ['customer_id'],
        unique=True,
        sqlite_where=sa.text('order_id IS NULL'),
        postgresql_where=sa.text('order_id IS NULL'),
    )

    op.create_table(
        'shopping_cart_item',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shopping_cart_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('added_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['shopping_cart_id'], ['shopping_cart.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['product.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('shopping_cart_id', 'product_id',
                            name='uq_shopping_cart_item_cart_product'),
    )
    op.create_index('ix_shopping_cart_item_shopping_cart_id', 'shopping_cart_item', ['shopping_cart_id'])
    op.create_index('ix_shopping_cart_item_product_id', 'shopping_cart_item', ['product_id'])

    # ============================================================================
    # session: server-side browser sessions keyed by the session_id cookie
    # ============================================================================
    op.create_table(
        'session',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_used_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_session_expires_at', 'session', ['expires_at'])


def downgrade():
    """Drop all tables (destructive operation)."""
    op.drop_table('session')
    op.drop_table('shopping_cart_item')
    op.drop_table('shopping_cart')
    op.drop_table('order')
    op.drop_table('product')
    op.drop_table('category')
    op.drop_table('address')
    op.drop_table('customer')
