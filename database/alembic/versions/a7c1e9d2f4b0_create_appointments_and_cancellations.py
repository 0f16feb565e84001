"""create appointments and appointment_cancellations tables

Revision ID: a7c1e9d2f4b0
Revises:
Create Date: 2026-10-17

Creates the appointment lifecycle tables. appointment_cancellations keeps an
audit record per cancellation action with loose (non-FK) references to the
cancelled appointment, the acting user and the optional replacement
appointment.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = 'a7c1e9d2f4b0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


APPOINTMENT_STATUSES = ('booked', 'upcoming', 'completed', 'cancelled')
CANCELLATION_REASONS = (
    'patient-request',
    'doctor-unavailable',
    'emergency',
    'weather',
    'system-error',
    'other',
)
CANCELLED_BY_ROLES = ('patient', 'doctor', 'admin', 'system')


def upgrade() -> None:
    appointment_status = postgresql.ENUM(*APPOINTMENT_STATUSES, name='appointment_status', create_type=False)
    cancellation_reason = postgresql.ENUM(*CANCELLATION_REASONS, name='cancellation_reason', create_type=False)
    cancelled_by_role = postgresql.ENUM(*CANCELLED_BY_ROLES, name='cancelled_by_role', create_type=False)

    bind = op.get_bind()
    appointment_status.create(bind, checkfirst=True)
    cancellation_reason.create(bind, checkfirst=True)
    cancelled_by_role.create(bind, checkfirst=True)

    op.create_table(
        'appointments',
        sa.Column('id', sa.UUID(), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('patient_id', sa.UUID(), nullable=False),
        sa.Column('doctor_id', sa.UUID(), nullable=False),
        sa.Column('start_time', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('status', appointment_status, nullable=False, server_default='upcoming'),
        sa.Column('reason', sa.String(500), nullable=True),
        sa.Column('cancelled_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('completed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_appointments_patient_id', 'appointments', ['patient_id'])
    op.create_index('ix_appointments_doctor_id', 'appointments', ['doctor_id'])
    op.create_index('ix_appointments_start_time', 'appointments', ['start_time'])
    op.create_index('ix_appointments_status', 'appointments', ['status'])
    op.create_index('idx_appointments_status_start_time', 'appointments', ['status', 'start_time'])

    op.create_table(
        'appointment_cancellations',
        sa.Column('id', sa.UUID(), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('appointment_id', sa.UUID(), nullable=False),
        sa.Column('reason', cancellation_reason, nullable=False),
        sa.Column('reason_details', sa.Text(), nullable=True),
        sa.Column('cancelled_by', cancelled_by_role, nullable=False),
        sa.Column('cancelled_by_user_id', sa.UUID(), nullable=False),
        sa.Column('is_rescheduled', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('new_appointment_id', sa.UUID(), nullable=True),
        sa.Column('cancelled_at', sa.TIMESTAMP(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )

    # Access patterns: by appointment, by actor, most recent first
    op.create_index('idx_appointment_cancellations_appointment_id',
                    'appointment_cancellations', ['appointment_id'])
    op.create_index('idx_appointment_cancellations_cancelled_by',
                    'appointment_cancellations', ['cancelled_by'])
    op.create_index('idx_appointment_cancellations_cancelled_at_desc',
                    'appointment_cancellations', [sa.text('cancelled_at DESC')])


def downgrade() -> None:
    op.drop_index('idx_appointment_cancellations_cancelled_at_desc', table_name='appointment_cancellations')
    op.drop_index('idx_appointment_cancellations_cancelled_by', table_name='appointment_cancellations')
    op.drop_index('idx_appointment_cancellations_appointment_id', table_name='appointment_cancellations')
    op.drop_table('appointment_cancellations')

    op.drop_index('idx_appointments_status_start_time', table_name='appointments')
    op.drop_index('ix_appointments_status', table_name='appointments')
    op.drop_index('ix_appointments_start_time', table_name='appointments')
    op.drop_index('ix_appointments_doctor_id', table_name='appointments')
    op.drop_index('ix_appointments_patient_id', table_name='appointments')
    op.drop_table('appointments')

    op.execute('DROP TYPE IF EXISTS cancelled_by_role')
    op.execute('DROP TYPE IF EXISTS cancellation_reason')
    op.execute('DROP TYPE IF EXISTS appointment_status')
