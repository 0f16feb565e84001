"""
Unit tests for appointment_service.py - Appointment status transitions.

Tests coverage:
- cancel_appointment() / complete_appointment() from active statuses
- Rejection from terminal statuses with the original status in the message
- Unknown appointments
- Transitions never create cancellation records
"""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from clinic.services.appointment_service import (
    AppointmentNotFoundError,
    AppointmentStateError,
    cancel_appointment,
    complete_appointment,
    get_appointment,
)
from clinic.services.cancellation_service import list_cancellations_for_appointment
from database.models import Appointment, AppointmentStatus


@pytest.fixture
def make_appointment(session):
    """Factory that stores an appointment with the given status."""

    async def _make(status: AppointmentStatus = AppointmentStatus.UPCOMING) -> Appointment:
        appointment = Appointment(
            patient_id=uuid4(),
            doctor_id=uuid4(),
            start_time=datetime.now(UTC) + timedelta(days=3),
            status=status,
            reason="Persistent cough",
        )
        session.add(appointment)
        await session.commit()
        return appointment

    return _make


class TestAppointmentDefaults:
    """Test Appointment model defaults."""

    @pytest.mark.asyncio
    async def test_new_appointment_is_upcoming(self, session):
        appointment = Appointment(
            patient_id=uuid4(),
            doctor_id=uuid4(),
            start_time=datetime.now(UTC) + timedelta(days=1),
        )
        session.add(appointment)
        await session.commit()

        stored = await get_appointment(appointment.id)
        assert stored.status == AppointmentStatus.UPCOMING
        assert stored.cancelled_at is None
        assert stored.completed_at is None
        assert stored.created_at is not None

    @pytest.mark.asyncio
    async def test_get_unknown_returns_none(self, setup_database):
        assert await get_appointment(uuid4()) is None


class TestCancelAppointment:
    """Test the cancel transition."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [AppointmentStatus.UPCOMING, AppointmentStatus.BOOKED])
    async def test_cancel_active(self, make_appointment, status):
        appointment = await make_appointment(status)

        cancelled = await cancel_appointment(appointment.id)

        assert cancelled.status == AppointmentStatus.CANCELLED
        assert cancelled.cancelled_at is not None
        stored = await get_appointment(appointment.id)
        assert stored.status == AppointmentStatus.CANCELLED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED])
    async def test_cancel_terminal_is_rejected(self, make_appointment, status):
        appointment = await make_appointment(status)

        with pytest.raises(AppointmentStateError) as exc_info:
            await cancel_appointment(appointment.id)

        assert str(exc_info.value) == f"Cannot cancel an appointment that is already {status.value}."
        stored = await get_appointment(appointment.id)
        assert stored.status == status

    @pytest.mark.asyncio
    async def test_cancel_unknown(self, setup_database):
        with pytest.raises(AppointmentNotFoundError):
            await cancel_appointment(uuid4())

    @pytest.mark.asyncio
    async def test_cancel_does_not_create_cancellation_record(self, make_appointment):
        appointment = await make_appointment()

        await cancel_appointment(appointment.id)

        assert await list_cancellations_for_appointment(appointment.id) == []


class TestCompleteAppointment:
    """Test the complete transition."""

    @pytest.mark.asyncio
    async def test_complete_upcoming(self, make_appointment):
        appointment = await make_appointment()

        completed = await complete_appointment(appointment.id)

        assert completed.status == AppointmentStatus.COMPLETED
        assert completed.completed_at is not None
        assert completed.cancelled_at is None

    @pytest.mark.asyncio
    async def test_complete_cancelled_is_rejected(self, make_appointment):
        appointment = await make_appointment(AppointmentStatus.CANCELLED)

        with pytest.raises(AppointmentStateError) as exc_info:
            await complete_appointment(appointment.id)

        assert exc_info.value.action == "complete"
        assert exc_info.value.status == AppointmentStatus.CANCELLED
        assert str(exc_info.value) == "Cannot complete an appointment that is already cancelled."

    @pytest.mark.asyncio
    async def test_complete_unknown(self, setup_database):
        with pytest.raises(AppointmentNotFoundError):
            await complete_appointment(uuid4())
