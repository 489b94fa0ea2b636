"""Create initial schema

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '20261018_0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

def _has_table(bind, name: str) -> bool:
    try:
        insp = inspect(bind)
        return insp.has_table(name)
    except Exception:
        return False

def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]

def upgrade() -> None:
    bind = op.get_bind()

    # SQLAlchemy persists enum member names
    userrole_enum = sa.Enum('ADMIN', 'GUEST', name='userrole')
    roomstatus_enum = sa.Enum('AVAILABLE', 'OCCUPIED', 'MAINTENANCE', 'CLEANING', name='roomstatus')
    reservationstatus_enum = sa.Enum('PENDING', 'CONFIRMED', 'CHECKED_IN', 'CANCELLED', 'COMPLETED', name='reservationstatus')
    invoicestatus_enum = sa.Enum('UNPAID', 'PAID', name='invoicestatus')
    requeststatus_enum = sa.Enum('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELLED', name='requeststatus')
    notificationtype_enum = sa.Enum(
        'BOOKING_CONFIRMED', 'PAYMENT_UPDATE', 'REQUEST_STATUS', 'MENU_UPDATE', 'NEW_ORDER', name='notificationtype'
    )

    if not _has_table(bind, 'users'):
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('password_hash', sa.String(length=255), nullable=False),
            sa.Column('role', userrole_enum, nullable=False),
            sa.Column('staff_role', sa.String(length=100), nullable=True),
            sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
            *_timestamps(),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
        op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)

    if not _has_table(bind, 'rooms'):
        op.create_table('rooms',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('number', sa.String(length=20), nullable=False),
            sa.Column('type', sa.String(length=50), nullable=False),
            sa.Column('price', sa.Numeric(10, 2), nullable=False),
            sa.Column('capacity', sa.Integer(), nullable=False),
            sa.Column('floor', sa.String(length=20), nullable=True),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('amenities', sa.Text(), server_default='', nullable=False),
            sa.Column('status', roomstatus_enum, nullable=False),
            sa.Column('available', sa.Boolean(), server_default=sa.true(), nullable=False),
            *_timestamps(),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_rooms_number'), 'rooms', ['number'], unique=True)
        op.create_index(op.f('ix_rooms_id'), 'rooms', ['id'], unique=False)

    if not _has_table(bind, 'reservations'):
        op.create_table('reservations',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('room_id', sa.Integer(), nullable=False),
            sa.Column('check_in', sa.Date(), nullable=False),
            sa.Column('check_out', sa.Date(), nullable=False),
            sa.Column('status', reservationstatus_enum, nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.ForeignKeyConstraint(['room_id'], ['rooms.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_reservations_id'), 'reservations', ['id'], unique=False)
        op.create_index(op.f('ix_reservations_user_id'), 'reservations', ['user_id'], unique=False)
        op.create_index(op.f('ix_reservations_room_id'), 'reservations', ['room_id'], unique=False)
        op.create_index('ix_reservations_room_check_in_check_out', 'reservations', ['room_id', 'check_in', 'check_out'], unique=False)

    if not _has_table(bind, 'invoices'):
        op.create_table('invoices',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('amount', sa.Numeric(10, 2), nullable=False),
            sa.Column('status', invoicestatus_enum, nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_invoices_id'), 'invoices', ['id'], unique=False)
        op.create_index(op.f('ix_invoices_user_id'), 'invoices', ['user_id'], unique=False)

    if not _has_table(bind, 'menu_items'):
        op.create_table('menu_items',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('category', sa.String(length=100), nullable=False),
            sa.Column('price', sa.Numeric(10, 2), nullable=False),
            sa.Column('available', sa.Boolean(), server_default=sa.true(), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_menu_items_id'), 'menu_items', ['id'], unique=False)
        op.create_index(op.f('ix_menu_items_category'), 'menu_items', ['category'], unique=False)

    if not _has_table(bind, 'requests'):
        op.create_table('requests',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('menu_item_id', sa.Integer(), nullable=True),
            sa.Column('quantity', sa.Integer(), server_default='1', nullable=False),
            sa.Column('special_instructions', sa.Text(), server_default='', nullable=False),
            sa.Column('status', requeststatus_enum, nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.ForeignKeyConstraint(['menu_item_id'], ['menu_items.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_requests_id'), 'requests', ['id'], unique=False)
        op.create_index(op.f('ix_requests_user_id'), 'requests', ['user_id'], unique=False)

    if not _has_table(bind, 'notifications'):
        op.create_table('notifications',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(length=200), nullable=False),
            sa.Column('message', sa.Text(), nullable=False),
            sa.Column('type', notificationtype_enum, nullable=False),
            sa.Column('related_id', sa.Integer(), nullable=True),
            sa.Column('is_read', sa.Boolean(), server_default=sa.false(), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_notifications_id'), 'notifications', ['id'], unique=False)
        op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'], unique=False)


def downgrade() -> None:
    bind = op.get_bind()
    for table in ('notifications', 'requests', 'menu_items', 'invoices', 'reservations', 'rooms', 'users'):
        if _has_table(bind, table):
            op.drop_table(table)

    if bind.dialect.name == 'postgresql':
        for enum_name in ('notificationtype', 'requeststatus', 'invoicestatus', 'reservationstatus', 'roomstatus', 'userrole'):
            sa.Enum(name=enum_name).drop(bind, checkfirst=True)
