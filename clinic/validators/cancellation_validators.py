"""
Cancellation Validators for the appointment cancellation audit trail.

Validators that check input constraints before a cancellation record is
written. Used by clinic.services.cancellation_service.

Error codes:
- MISSING_APPOINTMENT: No appointment reference given
- INVALID_APPOINTMENT_REFERENCE: Appointment reference is not a UUID
- INVALID_REASON: Reason outside the closed taxonomy
- INVALID_ACTOR_ROLE: cancelled_by outside {patient, doctor, admin, system}
- MISSING_ACTING_USER: No acting user identifier given
- INVALID_ACTING_USER: Acting user identifier is not a UUID
- REASON_DETAILS_TOO_LONG: Trimmed details exceed 500 characters
- INVALID_REASON_DETAILS: Details are not text
"""

import logging
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from database.models import (
    REASON_DETAILS_MAX_LENGTH,
    CancellationReason,
    CancelledByRole,
)

logger = logging.getLogger(__name__)


# field -> (code when missing, code when invalid, message)
_FIELD_ERRORS: dict[str, tuple[str, str, str]] = {
    "appointment_id": (
        "MISSING_APPOINTMENT",
        "INVALID_APPOINTMENT_REFERENCE",
        "missing appointment reference",
    ),
    "reason": ("INVALID_REASON", "INVALID_REASON", "invalid reason"),
    "cancelled_by": ("INVALID_ACTOR_ROLE", "INVALID_ACTOR_ROLE", "invalid actor role"),
    "cancelled_by_user_id": (
        "MISSING_ACTING_USER",
        "INVALID_ACTING_USER",
        "missing acting user",
    ),
    "reason_details": (
        "INVALID_REASON_DETAILS",
        "INVALID_REASON_DETAILS",
        "invalid reason details",
    ),
}

REASON_DETAILS_TOO_LONG_MESSAGE = (
    f"reason details must be at most {REASON_DETAILS_MAX_LENGTH} characters"
)


class CancellationRequest(BaseModel):
    """Validated input for creating a cancellation record."""

    model_config = ConfigDict(frozen=True)

    appointment_id: UUID
    reason: CancellationReason
    cancelled_by: CancelledByRole
    cancelled_by_user_id: UUID
    reason_details: str | None = None

    @field_validator("reason_details")
    @classmethod
    def trim_reason_details(cls, v: str | None) -> str | None:
        """Trim surrounding whitespace; blank details are stored as absent."""
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        if len(v) > REASON_DETAILS_MAX_LENGTH:
            raise ValueError(REASON_DETAILS_TOO_LONG_MESSAGE)
        return v


def _describe_error(error: dict[str, Any]) -> tuple[str, str]:
    """Map a single pydantic error to (error_code, error_message)."""
    field = str(error["loc"][0]) if error.get("loc") else ""
    missing_code, invalid_code, message = _FIELD_ERRORS.get(
        field, ("INVALID_INPUT", "INVALID_INPUT", "invalid input")
    )

    if field == "reason_details" and REASON_DETAILS_TOO_LONG_MESSAGE in error.get("msg", ""):
        return "REASON_DETAILS_TOO_LONG", REASON_DETAILS_TOO_LONG_MESSAGE

    is_missing = error.get("type") == "missing" or error.get("input") is None
    if is_missing:
        return missing_code, message
    return invalid_code, message


def validate_cancellation_request(**fields: Any) -> dict:
    """
    Validate the input of a cancellation record.

    Args:
        **fields: appointment_id, reason, cancelled_by, cancelled_by_user_id,
            reason_details (optional)

    Returns:
        dict with validation result:
            {
                "valid": bool,
                "error_code": str | None,
                "error_message": str | None,
                "request": CancellationRequest | None
            }

    Example:
        >>> validate_cancellation_request(
        ...     appointment_id=appt_id, reason="weather",
        ...     cancelled_by="admin", cancelled_by_user_id=admin_id,
        ... )
        {"valid": True, "error_code": None, "error_message": None, "request": CancellationRequest(...)}

        >>> validate_cancellation_request(..., reason="invalid-value", ...)
        {"valid": False, "error_code": "INVALID_REASON", "error_message": "invalid reason", "request": None}
    """
    try:
        request = CancellationRequest(**fields)
    except ValidationError as e:
        error_code, error_message = _describe_error(e.errors()[0])
        logger.warning(
            f"Cancellation request rejected: {error_message}",
            extra={"error_code": error_code},
        )
        return {
            "valid": False,
            "error_code": error_code,
            "error_message": error_message,
            "request": None,
        }

    return {
        "valid": True,
        "error_code": None,
        "error_message": None,
        "request": request,
    }


def validate_actor_role(cancelled_by: Any) -> dict:
    """
    Validate a cancelled_by role used as a query filter.

    Returns:
        dict: {"valid": bool, "error_code": str | None,
               "error_message": str | None, "role": CancelledByRole | None}
    """
    try:
        role = CancelledByRole(cancelled_by)
    except ValueError:
        return {
            "valid": False,
            "error_code": "INVALID_ACTOR_ROLE",
            "error_message": "invalid actor role",
            "role": None,
        }
    return {"valid": True, "error_code": None, "error_message": None, "role": role}
