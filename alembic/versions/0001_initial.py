"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'], unique=False)

    op.create_table('buses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('bus_number', sa.String(length=128), nullable=False),
        sa.Column('bus_type', sa.String(length=64), nullable=False),
        sa.Column('total_seats', sa.Integer(), nullable=False),
        sa.Column('origin', sa.String(length=128), nullable=False),
        sa.Column('destination', sa.String(length=128), nullable=False),
        sa.Column('departure_time', sa.String(length=32), nullable=False),
        sa.Column('arrival_time', sa.String(length=32), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('total_seats > 0', name='ck_bus_total_seats_positive'),
    )
    op.create_index('ix_buses_bus_number', 'buses', ['bus_number'], unique=False)
    op.create_index('ix_buses_origin', 'buses', ['origin'], unique=False)
    op.create_index('ix_buses_destination', 'buses', ['destination'], unique=False)

    op.create_table('seat_availability',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('bus_id', sa.Integer(), nullable=False),
        sa.Column('travel_date', sa.String(length=32), nullable=False),
        sa.Column('seat_number', sa.String(length=16), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.UniqueConstraint('bus_id', 'travel_date', 'seat_number', name='uq_seat_availability_bus_date_seat'),
    )
    op.create_index('ix_seat_availability_bus_date', 'seat_availability', ['bus_id', 'travel_date'], unique=False)

    op.create_table('bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('bus_id', sa.Integer(), nullable=False),
        sa.Column('seat_number', sa.String(length=16), nullable=False),
        sa.Column('travel_date', sa.String(length=32), nullable=False),
        sa.Column('booking_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='Confirmed'),
        sa.Column('passenger', sa.JSON(), nullable=True),
    )
    op.create_index('ix_bookings_user_id', 'bookings', ['user_id'], unique=False)
    op.create_index('ix_bookings_bus_id', 'bookings', ['bus_id'], unique=False)
    op.create_index('ix_bookings_status', 'bookings', ['status'], unique=False)
    op.create_index('ix_booking_bus_date_seat', 'bookings', ['bus_id', 'travel_date', 'seat_number'], unique=False)


def downgrade():
    op.drop_index('ix_booking_bus_date_seat', table_name='bookings')
    op.drop_index('ix_bookings_status', table_name='bookings')
    op.drop_index('ix_bookings_bus_id', table_name='bookings')
    op.drop_index('ix_bookings_user_id', table_name='bookings')
    op.drop_table('bookings')
    op.drop_index('ix_seat_availability_bus_date', table_name='seat_availability')
    op.drop_table('seat_availability')
    op.drop_index('ix_buses_destination', table_name='buses')
    op.drop_index('ix_buses_origin', table_name='buses')
    op.drop_index('ix_buses_bus_number', table_name='buses')
    op.drop_table('buses')
    op.drop_index('ix_users_role', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
