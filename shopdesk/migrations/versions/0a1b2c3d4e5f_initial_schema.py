"""initial_schema

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0a1b2c3d4e5f'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Money is stored in ten-thousandths of a currency unit (see models/money.py)
_MONEY = sa.BigInteger()


def upgrade() -> None:
    """Create products, credits, bills and activity_logs tables."""
    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', _MONEY, nullable=False),
        sa.Column('image', sa.String(length=1024), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.CheckConstraint('quantity >= 0', name='ck_products_quantity_non_negative'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_products_name', 'products', ['name'])
    op.create_index('ix_products_category', 'products', ['category'])

    op.create_table(
        'credits',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('phone_number', sa.String(length=50), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('type', sa.Enum('given', 'taken', name='credittype'), nullable=False),
        sa.Column('total_amount', _MONEY, nullable=False),
        sa.Column('amount_paid', _MONEY, nullable=False),
        sa.Column('remaining_amount', _MONEY, nullable=False),
        sa.Column('is_paid', sa.Boolean(), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_credits_date', 'credits', ['date'])
    op.create_index('ix_credits_type', 'credits', ['type'])
    op.create_index('ix_credits_name', 'credits', ['name'])

    op.create_table(
        'credit_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('credit_id', sa.Uuid(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=True),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', _MONEY, nullable=False),
        sa.Column('total_price', _MONEY, nullable=False),
        sa.ForeignKeyConstraint(['credit_id'], ['credits.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_credit_items_credit', 'credit_items', ['credit_id'])

    op.create_table(
        'credit_payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('credit_id', sa.Uuid(), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.Column('amount', _MONEY, nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['credit_id'], ['credits.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('credit_id', 'sequence', name='uq_credit_payments_sequence'),
    )
    op.create_index('ix_credit_payments_credit', 'credit_payments', ['credit_id'])

    op.create_table(
        'bills',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('total', _MONEY, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_bills_date', 'bills', ['date'])

    op.create_table(
        'bill_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('bill_id', sa.Uuid(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('price', _MONEY, nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('line_total', _MONEY, nullable=False),
        sa.ForeignKeyConstraint(['bill_id'], ['bills.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_bill_items_bill', 'bill_items', ['bill_id'])

    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column(
            'type',
            sa.Enum(
                'add', 'buy', 'sell', 'bill', 'credit', 'payment', 'delete', 'update', 'error',
                name='logtype',
            ),
            nullable=False,
        ),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('related_item_id', sa.String(length=255), nullable=True),
        sa.Column('related_item_name', sa.String(length=255), nullable=True),
        sa.Column('related_item_type', sa.String(length=50), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_activity_logs_timestamp', 'activity_logs', ['timestamp'])
    op.create_index('ix_activity_logs_type', 'activity_logs', ['type'])


def downgrade() -> None:
    """Drop every table created by upgrade()."""
    op.drop_index('ix_activity_logs_type', table_name='activity_logs')
    op.drop_index('ix_activity_logs_timestamp', table_name='activity_logs')
    op.drop_table('activity_logs')
    op.drop_index('ix_bill_items_bill', table_name='bill_items')
    op.drop_table('bill_items')
    op.drop_index('ix_bills_date', table_name='bills')
    op.drop_table('bills')
    op.drop_index('ix_credit_payments_credit', table_name='credit_payments')
    op.drop_table('credit_payments')
    op.drop_index('ix_credit_items_credit', table_name='credit_items')
    op.drop_table('credit_items')
    op.drop_index('ix_credits_name', table_name='credits')
    op.drop_index('ix_credits_type', table_name='credits')
    op.drop_index('ix_credits_date', table_name='credits')
    op.drop_table('credits')
    op.drop_index('ix_products_category', table_name='products')
    op.drop_index('ix_products_name', table_name='products')
    op.drop_table('products')
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP TYPE IF EXISTS logtype")
        op.execute("DROP TYPE IF EXISTS credittype")
