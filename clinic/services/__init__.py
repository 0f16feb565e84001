"""
Clinic services module.

Provides business logic services over the appointment tables.

Services:
- cancellation_service: Cancellation audit records and reschedule links
- appointment_service: Appointment status transitions (cancel, complete)
"""

from clinic.services.appointment_service import (
    cancel_appointment,
    complete_appointment,
    get_appointment,
)
from clinic.services.cancellation_service import (
    count_cancellations_by_actor,
    create_cancellation,
    get_cancellation,
    link_reschedule,
    list_cancellations_for_appointment,
    list_recent_cancellations,
)

__all__ = [
    # Appointment service
    "cancel_appointment",
    "complete_appointment",
    "get_appointment",
    # Cancellation service
    "count_cancellations_by_actor",
    "create_cancellation",
    "get_cancellation",
    "link_reschedule",
    "list_cancellations_for_appointment",
    "list_recent_cancellations",
]
