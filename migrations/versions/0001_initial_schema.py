"""Initial schema: buildings, units, customers, rentals, payments

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

unit_status = sa.Enum('available', 'rented', 'reserved', 'maintenance', name='unit_status')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'buildings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('address', sa.String(500), nullable=False),
        sa.Column('floors', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_climate_controlled', sa.Boolean(), nullable=True, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('floors >= 1', name='ck_buildings_floors_positive'),
    )

    op.create_table(
        'units',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('building_id', sa.Uuid(), nullable=False),
        sa.Column('number', sa.String(50), nullable=False),
        sa.Column('size', sa.String(10), nullable=False),
        sa.Column('price_per_month', sa.Float(), nullable=False),
        sa.Column('is_climate_controlled', sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column('status', unit_status, nullable=False, server_default='available'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['building_id'], ['buildings.id']),
        sa.UniqueConstraint('building_id', 'number', name='uq_units_building_number'),
    )
    op.create_index('ix_units_building_id', 'units', ['building_id'])
    op.create_index('ix_units_status', 'units', ['status'])

    op.create_table(
        'customers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_customers_email', 'customers', ['email'])

    op.create_table(
        'rentals',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('unit_id', sa.Uuid(), nullable=False),
        sa.Column('customer_id', sa.Uuid(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('total_amount', sa.Float(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['unit_id'], ['units.id']),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id']),
        sa.CheckConstraint('total_amount >= 0', name='ck_rentals_total_amount_non_negative'),
    )
    op.create_index('ix_rentals_unit_id', 'rentals', ['unit_id'])
    op.create_index('ix_rentals_customer_id', 'rentals', ['customer_id'])
    op.create_index('ix_rentals_status', 'rentals', ['status'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('rental_id', sa.Uuid(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('method', sa.String(20), nullable=False),
        sa.Column('is_late', sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['rental_id'], ['rentals.id']),
        sa.CheckConstraint('amount > 0', name='ck_payments_amount_positive'),
    )
    op.create_index('ix_payments_rental_id', 'payments', ['rental_id'])


def downgrade() -> None:
    op.drop_table('payments')
    op.drop_table('rentals')
    op.drop_table('customers')
    op.drop_table('units')
    op.drop_table('buildings')
    unit_status.drop(op.get_bind(), checkfirst=True)
