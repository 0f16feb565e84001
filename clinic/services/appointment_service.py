"""
Appointment status service - Lifecycle transitions for appointments.

Transitions:
- cancel_appointment: booked/upcoming -> cancelled (sets cancelled_at)
- complete_appointment: booked/upcoming -> completed (sets completed_at)

Any other starting status is rejected with AppointmentStateError.

These transitions never write AppointmentCancellation records. Recording why
and by whom an appointment was cancelled is a separate call to
clinic.services.cancellation_service.create_cancellation, and the two writes
are not atomic.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from database.connection import get_async_session
from database.models import (
    ACTIVE_APPOINTMENT_STATUSES,
    Appointment,
    AppointmentStatus,
    utcnow,
)

logger = logging.getLogger(__name__)


class AppointmentServiceError(Exception):
    """Base exception for appointment service errors."""
    pass


class AppointmentNotFoundError(AppointmentServiceError):
    """Raised when an appointment does not exist."""
    pass


class AppointmentStateError(AppointmentServiceError):
    """Raised when the current status does not allow the requested transition."""

    def __init__(self, action: str, status: AppointmentStatus):
        super().__init__(f"Cannot {action} an appointment that is already {status.value}.")
        self.action = action
        self.status = status


class AppointmentPersistenceError(AppointmentServiceError):
    """Raised when the database read or write fails."""
    pass


async def get_appointment(appointment_id: UUID) -> Optional[Appointment]:
    """Get an appointment by id, or None if it does not exist."""
    try:
        async with get_async_session() as session:
            result = await session.execute(
                select(Appointment).where(Appointment.id == appointment_id)
            )
            return result.scalars().first()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching appointment {appointment_id}: {e}", exc_info=True)
        raise AppointmentPersistenceError(f"Could not fetch appointment {appointment_id}") from e


async def _transition(
    appointment_id: UUID,
    action: str,
    target: AppointmentStatus,
) -> Appointment:
    """Move an active appointment to a terminal status and stamp the matching timestamp."""
    now: datetime = utcnow()

    try:
        async with get_async_session() as session:
            result = await session.execute(
                select(Appointment)
                .where(Appointment.id == appointment_id)
                .with_for_update()
            )
            appointment = result.scalars().first()

            if not appointment:
                raise AppointmentNotFoundError(f"Appointment {appointment_id} not found")

            if appointment.status not in ACTIVE_APPOINTMENT_STATUSES:
                logger.warning(
                    f"Rejected {action} of appointment {appointment_id}: status={appointment.status.value}",
                    extra={"appointment_id": appointment_id, "error_code": "INVALID_STATUS"},
                )
                raise AppointmentStateError(action, appointment.status)

            appointment.status = target
            if target == AppointmentStatus.CANCELLED:
                appointment.cancelled_at = now
            else:
                appointment.completed_at = now

            await session.commit()
    except SQLAlchemyError as e:
        logger.error(f"Error during {action} of appointment {appointment_id}: {e}", exc_info=True)
        raise AppointmentPersistenceError(
            f"Could not {action} appointment {appointment_id}"
        ) from e

    logger.info(
        f"Appointment {appointment_id} marked as {target.value}",
        extra={"appointment_id": appointment_id},
    )
    return appointment


async def cancel_appointment(appointment_id: UUID) -> Appointment:
    """
    Cancel an active appointment.

    Raises:
        AppointmentNotFoundError: No appointment with that id
        AppointmentStateError: Appointment is already completed or cancelled
        AppointmentPersistenceError: Database update failed
    """
    return await _transition(appointment_id, "cancel", AppointmentStatus.CANCELLED)


async def complete_appointment(appointment_id: UUID) -> Appointment:
    """
    Mark an active appointment as completed.

    Raises:
        AppointmentNotFoundError: No appointment with that id
        AppointmentStateError: Appointment is already completed or cancelled
        AppointmentPersistenceError: Database update failed
    """
    return await _transition(appointment_id, "complete", AppointmentStatus.COMPLETED)
