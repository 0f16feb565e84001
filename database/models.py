"""
SQLAlchemy ORM models for the appointment lifecycle tables.

This module defines:
- appointments: Scheduled patient/doctor encounters with a lifecycle status
- appointment_cancellations: Audit records describing why and by whom an
  appointment was cancelled, with an optional reschedule link

All models use:
- UUID primary keys (auto-generated)
- TIMESTAMP WITH TIME ZONE for datetime fields
- Loose UUID references (no foreign keys) to patients, doctors and users,
  which live in collections outside this schema
"""

from datetime import UTC, datetime
from enum import Enum as PyEnum
from uuid import UUID, uuid4

from sqlalchemy import (
    TIMESTAMP,
    Boolean,
    Index,
    String,
    Text,
    Uuid,
)
from sqlalchemy import (
    Enum as SQLEnum,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Maximum length of free-text cancellation details (after trimming)
REASON_DETAILS_MAX_LENGTH = 500


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(UTC)


# ============================================================================
# Base Class
# ============================================================================


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


# ============================================================================
# Enums
# ============================================================================


class AppointmentStatus(str, PyEnum):
    """Appointment lifecycle status."""

    BOOKED = "booked"
    UPCOMING = "upcoming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def __str__(self):
        return self.value


# Statuses from which an appointment can still be cancelled or completed
ACTIVE_APPOINTMENT_STATUSES = frozenset(
    {AppointmentStatus.BOOKED, AppointmentStatus.UPCOMING}
)


class CancellationReason(str, PyEnum):
    """Closed taxonomy of cancellation causes."""

    PATIENT_REQUEST = "patient-request"
    DOCTOR_UNAVAILABLE = "doctor-unavailable"
    EMERGENCY = "emergency"
    WEATHER = "weather"
    SYSTEM_ERROR = "system-error"
    OTHER = "other"

    def __str__(self):
        return self.value


class CancelledByRole(str, PyEnum):
    """Role of the actor that cancelled an appointment."""

    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"
    SYSTEM = "system"  # Automated processes

    def __str__(self):
        return self.value


# ============================================================================
# Transactional Models
# ============================================================================


class Appointment(Base):
    """
    Appointment model - Patient/doctor encounters with a lifecycle status.

    Status transitions (booked/upcoming -> completed/cancelled) are applied by
    clinic.services.appointment_service. Cancellation audit entries are kept
    separately in AppointmentCancellation and are never written here.
    """

    __tablename__ = "appointments"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    # Loose references (patients and doctors are managed elsewhere)
    patient_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    doctor_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)

    # Scheduling
    start_time: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, index=True
    )

    # Status tracking
    # Note: values_callable stores the enum .value ("upcoming") instead of .name
    status: Mapped[AppointmentStatus] = mapped_column(
        SQLEnum(
            AppointmentStatus,
            name="appointment_status",
            values_callable=lambda x: [e.value for e in x],
        ),
        default=AppointmentStatus.UPCOMING,
        nullable=False,
        index=True,
    )

    # Visit reason provided by the patient
    reason: Mapped[str | None] = mapped_column(String(REASON_DETAILS_MAX_LENGTH), nullable=True)

    # Lifecycle timestamps
    cancelled_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index("idx_appointments_status_start_time", "status", "start_time"),
    )

    def __repr__(self) -> str:
        return f"<Appointment(id={self.id}, patient_id={self.patient_id}, status='{self.status.value}')>"


class AppointmentCancellation(Base):
    """
    AppointmentCancellation model - Audit trail of appointment cancellations.

    One record is written per cancellation action (patient, doctor, admin or an
    automated system process). Records are never deleted. The only mutation
    allowed after creation is linking a replacement appointment once a
    reschedule completes (is_rescheduled + new_appointment_id).

    References are intentionally loose: appointment_id, cancelled_by_user_id
    and new_appointment_id are plain UUIDs without foreign keys. Existence
    checks are the caller's responsibility.
    """

    __tablename__ = "appointment_cancellations"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    # Cancelled appointment (weak reference for audit purposes)
    appointment_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)

    # Cancellation details
    reason: Mapped[CancellationReason] = mapped_column(
        SQLEnum(
            CancellationReason,
            name="cancellation_reason",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    reason_details: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Actor
    cancelled_by: Mapped[CancelledByRole] = mapped_column(
        SQLEnum(
            CancelledByRole,
            name="cancelled_by_role",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    cancelled_by_user_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)

    # Rescheduling info (if applicable)
    is_rescheduled: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )
    new_appointment_id: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)

    # Timestamps
    cancelled_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    # Indexes
    __table_args__ = (
        Index("idx_appointment_cancellations_appointment_id", "appointment_id"),
        Index("idx_appointment_cancellations_cancelled_by", "cancelled_by"),
        Index(
            "idx_appointment_cancellations_cancelled_at_desc",
            "cancelled_at",
            postgresql_ops={"cancelled_at": "DESC"},
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<AppointmentCancellation(id={self.id}, appointment_id={self.appointment_id}, "
            f"reason='{self.reason.value}', cancelled_by='{self.cancelled_by.value}')>"
        )
