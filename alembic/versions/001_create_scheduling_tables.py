"""create scheduling tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUMS = {
    'agenda_status': ('active', 'inactive'),
    'agenda_location': ('Cabinet A', 'Cabinet B', 'En ligne'),
    'slot_status': ('available', 'reserved', 'unavailable'),
    'actor_type': ('patient', 'doctor', 'admin'),
    'recipient_type': ('patient', 'doctor'),
    'notification_type': ('confirmation', 'cancellation', 'reminder'),
    'notification_channel': ('email', 'sms'),
    'notification_status': ('pending', 'sent', 'failed'),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    # Identity records
    op.create_table(
        'doctors',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('specialty', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
    )
    op.create_index(op.f('ix_doctors_email'), 'doctors', ['email'], unique=True)

    op.create_table(
        'patients',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
    )
    op.create_index(op.f('ix_patients_email'), 'patients', ['email'], unique=True)

    op.create_table(
        'admins',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('role', sa.String(), nullable=False, server_default='admin'),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
    )
    op.create_index(op.f('ix_admins_email'), 'admins', ['email'], unique=True)

    # Calendars, days and their slots
    op.create_table(
        'agendas',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('doctor_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('doctors.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day', sa.Date(), nullable=False),
        sa.Column('status', _enum('agenda_status'), nullable=False),
        sa.Column('location', _enum('agenda_location'), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('doctor_id', 'day', name='uq_agendas_doctor_day'),
    )
    op.create_index(op.f('ix_agendas_doctor_id'), 'agendas', ['doctor_id'], unique=False)
    op.create_index(op.f('ix_agendas_day'), 'agendas', ['day'], unique=False)

    op.create_table(
        'creneaux',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('agenda_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('agendas.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day', sa.Date(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('agenda_id', 'day', name='uq_creneaux_agenda_day'),
    )
    op.create_index(op.f('ix_creneaux_agenda_id'), 'creneaux', ['agenda_id'], unique=False)
    op.create_index(op.f('ix_creneaux_day'), 'creneaux', ['day'], unique=False)

    op.create_table(
        'time_slots',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('creneau_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('creneaux.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('time', sa.String(length=5), nullable=False),
        sa.Column('status', _enum('slot_status'), nullable=False),
        sa.Column('patient_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('patients.id'), nullable=True),
        sa.Column('motif', sa.Text(), nullable=True),
        sa.Column('reserved_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column('cancelled_by_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('cancelled_by_type', _enum('actor_type'), nullable=True),
        sa.UniqueConstraint('creneau_id', 'time', name='uq_time_slots_creneau_time'),
        sa.CheckConstraint(
            "(status = 'reserved') = (patient_id IS NOT NULL)",
            name='ck_time_slots_occupant_matches_status',
        ),
    )
    op.create_index(op.f('ix_time_slots_creneau_id'), 'time_slots', ['creneau_id'], unique=False)
    op.create_index(op.f('ix_time_slots_status'), 'time_slots', ['status'], unique=False)
    op.create_index(op.f('ix_time_slots_patient_id'), 'time_slots', ['patient_id'], unique=False)

    # Delivery history; no foreign keys so it outlives deleted days
    op.create_table(
        'notifications',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('recipient_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('recipient_type', _enum('recipient_type'), nullable=False),
        sa.Column('creneau_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('time_slot_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('type', _enum('notification_type'), nullable=False),
        sa.Column('channel', _enum('notification_channel'), nullable=False),
        sa.Column('subject', sa.String(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('status', _enum('notification_status'), nullable=False),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
    )
    op.create_index(op.f('ix_notifications_id'), 'notifications', ['id'], unique=False)
    op.create_index(op.f('ix_notifications_recipient_id'), 'notifications', ['recipient_id'], unique=False)
    op.create_index(op.f('ix_notifications_creneau_id'), 'notifications', ['creneau_id'], unique=False)


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('time_slots')
    op.drop_table('creneaux')
    op.drop_table('agendas')
    op.drop_table('admins')
    op.drop_table('patients')
    op.drop_table('doctors')

    bind = op.get_bind()
    for name, values in reversed(list(ENUMS.items())):
        postgresql.ENUM(*values, name=name).drop(bind, checkfirst=True)
