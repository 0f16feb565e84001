"""
Appointment cancellation service - Audit trail of cancellation actions.

This service writes and reads AppointmentCancellation records:
- create_cancellation: Record why and by whom an appointment was cancelled
- link_reschedule: Attach the replacement appointment once a reschedule completes
- get_cancellation / list_cancellations_for_appointment / list_recent_cancellations:
  Reads for dashboards and reporting views
- count_cancellations_by_actor: Totals per actor role for reporting

Architecture:
- Called by the REST handlers (patient, doctor, admin) and by automated
  system processes when an appointment is cancelled
- Does NOT change the appointment status. That is done separately by
  clinic.services.appointment_service.cancel_appointment, and the two
  writes are not paired in a transaction
- Validation errors are raised immediately and are never retried
- Database errors are logged and surfaced as CancellationPersistenceError
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from clinic.validators.cancellation_validators import (
    validate_actor_role,
    validate_cancellation_request,
)
from database.connection import get_async_session
from database.models import AppointmentCancellation, CancelledByRole, utcnow
from shared.config import get_settings

logger = logging.getLogger(__name__)


class CancellationServiceError(Exception):
    """Base exception for cancellation service errors."""
    pass


class CancellationValidationError(CancellationServiceError):
    """Raised when cancellation input fails validation. Not retryable."""

    def __init__(self, error_code: str, message: str):
        super().__init__(message)
        self.error_code = error_code
        self.message = message


class CancellationNotFoundError(CancellationServiceError):
    """Raised when a cancellation record does not exist."""
    pass


class RescheduleConflictError(CancellationServiceError):
    """Raised when a cancellation is already linked to a different appointment."""
    pass


class CancellationPersistenceError(CancellationServiceError):
    """Raised when the database read or write fails."""
    pass


async def create_cancellation(
    appointment_id: UUID,
    reason: str,
    cancelled_by: str,
    cancelled_by_user_id: UUID,
    reason_details: Optional[str] = None,
) -> AppointmentCancellation:
    """
    Create an audit record for an appointment cancellation.

    The record is inserted with cancelled_at set to the current time,
    is_rescheduled=False and no new_appointment_id. The referenced
    appointment is not modified.

    Args:
        appointment_id: UUID of the cancelled appointment
        reason: One of CancellationReason values (e.g. "patient-request")
        cancelled_by: One of CancelledByRole values (e.g. "patient")
        cancelled_by_user_id: UUID of the acting user (not validated against any table)
        reason_details: Optional free text, trimmed, at most 500 characters

    Returns:
        The persisted AppointmentCancellation

    Raises:
        CancellationValidationError: Invalid reason, actor role, details or missing reference
        CancellationPersistenceError: Database insert failed
    """
    validation = validate_cancellation_request(
        appointment_id=appointment_id,
        reason=reason,
        cancelled_by=cancelled_by,
        cancelled_by_user_id=cancelled_by_user_id,
        reason_details=reason_details,
    )
    if not validation["valid"]:
        raise CancellationValidationError(
            validation["error_code"], validation["error_message"]
        )

    request = validation["request"]
    cancellation = AppointmentCancellation(
        appointment_id=request.appointment_id,
        reason=request.reason,
        reason_details=request.reason_details,
        cancelled_by=request.cancelled_by,
        cancelled_by_user_id=request.cancelled_by_user_id,
        is_rescheduled=False,
        new_appointment_id=None,
        cancelled_at=utcnow(),
    )

    try:
        async with get_async_session() as session:
            session.add(cancellation)
            await session.commit()
    except SQLAlchemyError as e:
        logger.error(
            f"Error creating cancellation for appointment {request.appointment_id}: {e}",
            exc_info=True,
            extra={"appointment_id": request.appointment_id},
        )
        raise CancellationPersistenceError(
            f"Could not store cancellation for appointment {request.appointment_id}"
        ) from e

    logger.info(
        f"Cancellation {cancellation.id} recorded for appointment {cancellation.appointment_id} | "
        f"reason={cancellation.reason.value} | cancelled_by={cancellation.cancelled_by.value}",
        extra={
            "cancellation_id": cancellation.id,
            "appointment_id": cancellation.appointment_id,
            "cancelled_by": cancellation.cancelled_by.value,
        },
    )
    return cancellation


async def link_reschedule(
    cancellation_id: UUID,
    new_appointment_id: UUID,
) -> AppointmentCancellation:
    """
    Mark a cancellation as rescheduled and link the replacement appointment.

    Linking is first-write-wins: once a cancellation points at a replacement
    appointment it cannot be re-pointed. Linking again to the same
    appointment is a no-op.

    Args:
        cancellation_id: UUID of the existing cancellation record
        new_appointment_id: UUID of the replacement appointment

    Returns:
        The updated AppointmentCancellation

    Raises:
        CancellationNotFoundError: No cancellation with that id
        RescheduleConflictError: Already linked to a different appointment
        CancellationPersistenceError: Database update failed
    """
    try:
        async with get_async_session() as session:
            result = await session.execute(
                select(AppointmentCancellation)
                .where(AppointmentCancellation.id == cancellation_id)
                .with_for_update()
            )
            cancellation = result.scalars().first()

            if not cancellation:
                raise CancellationNotFoundError(f"Cancellation {cancellation_id} not found")

            if cancellation.is_rescheduled and cancellation.new_appointment_id is not None:
                if cancellation.new_appointment_id == new_appointment_id:
                    return cancellation
                logger.warning(
                    f"Reschedule link rejected for cancellation {cancellation_id}: "
                    f"already linked to {cancellation.new_appointment_id}",
                    extra={
                        "cancellation_id": cancellation_id,
                        "new_appointment_id": new_appointment_id,
                        "error_code": "RESCHEDULE_CONFLICT",
                    },
                )
                raise RescheduleConflictError(
                    f"Cancellation {cancellation_id} is already linked to "
                    f"appointment {cancellation.new_appointment_id}"
                )

            cancellation.is_rescheduled = True
            cancellation.new_appointment_id = new_appointment_id
            await session.commit()
    except SQLAlchemyError as e:
        logger.error(
            f"Error linking reschedule for cancellation {cancellation_id}: {e}",
            exc_info=True,
            extra={"cancellation_id": cancellation_id},
        )
        raise CancellationPersistenceError(
            f"Could not link reschedule for cancellation {cancellation_id}"
        ) from e

    logger.info(
        f"Cancellation {cancellation_id} rescheduled to appointment {new_appointment_id}",
        extra={
            "cancellation_id": cancellation_id,
            "appointment_id": cancellation.appointment_id,
            "new_appointment_id": new_appointment_id,
        },
    )
    return cancellation


async def get_cancellation(cancellation_id: UUID) -> Optional[AppointmentCancellation]:
    """Get a cancellation record by id, or None if it does not exist."""
    try:
        async with get_async_session() as session:
            result = await session.execute(
                select(AppointmentCancellation).where(
                    AppointmentCancellation.id == cancellation_id
                )
            )
            return result.scalars().first()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching cancellation {cancellation_id}: {e}", exc_info=True)
        raise CancellationPersistenceError(
            f"Could not fetch cancellation {cancellation_id}"
        ) from e


async def list_cancellations_for_appointment(
    appointment_id: UUID,
) -> list[AppointmentCancellation]:
    """
    Get all cancellation records of an appointment.

    Args:
        appointment_id: UUID of the appointment

    Returns:
        List of AppointmentCancellation, most recent first
    """
    try:
        async with get_async_session() as session:
            result = await session.execute(
                select(AppointmentCancellation)
                .where(AppointmentCancellation.appointment_id == appointment_id)
                .order_by(AppointmentCancellation.cancelled_at.desc())
            )
            return list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error(
            f"Error fetching cancellations for appointment {appointment_id}: {e}",
            exc_info=True,
            extra={"appointment_id": appointment_id},
        )
        raise CancellationPersistenceError(
            f"Could not fetch cancellations for appointment {appointment_id}"
        ) from e


async def list_recent_cancellations(
    limit: Optional[int] = None,
    cancelled_by: Optional[str] = None,
) -> list[AppointmentCancellation]:
    """
    Get the most recent cancellations, optionally filtered by actor role.

    Args:
        limit: Maximum number of records (default: RECENT_CANCELLATIONS_LIMIT setting)
        cancelled_by: Optional actor role filter (e.g. "doctor")

    Returns:
        List of AppointmentCancellation ordered by cancelled_at descending

    Raises:
        CancellationValidationError: Unknown actor role filter
    """
    if limit is None:
        limit = get_settings().RECENT_CANCELLATIONS_LIMIT

    stmt = select(AppointmentCancellation)
    if cancelled_by is not None:
        validation = validate_actor_role(cancelled_by)
        if not validation["valid"]:
            raise CancellationValidationError(
                validation["error_code"], validation["error_message"]
            )
        stmt = stmt.where(AppointmentCancellation.cancelled_by == validation["role"])

    stmt = stmt.order_by(AppointmentCancellation.cancelled_at.desc()).limit(limit)

    try:
        async with get_async_session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Error fetching recent cancellations: {e}", exc_info=True)
        raise CancellationPersistenceError("Could not fetch recent cancellations") from e


async def count_cancellations_by_actor() -> dict[str, int]:
    """
    Count cancellation records per actor role.

    Returns:
        Dict mapping every CancelledByRole value to its count (zero-filled),
        e.g. {"patient": 12, "doctor": 3, "admin": 0, "system": 1}
    """
    counts: dict[str, int] = {role.value: 0 for role in CancelledByRole}

    try:
        async with get_async_session() as session:
            result = await session.execute(
                select(
                    AppointmentCancellation.cancelled_by,
                    func.count(AppointmentCancellation.id),
                ).group_by(AppointmentCancellation.cancelled_by)
            )
            for role, count in result.all():
                counts[CancelledByRole(role).value] = count
    except SQLAlchemyError as e:
        logger.error(f"Error counting cancellations by actor: {e}", exc_info=True)
        raise CancellationPersistenceError("Could not count cancellations") from e

    return counts
