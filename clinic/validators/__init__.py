"""
Input validators for the clinic services.

Validators:
- validate_cancellation_request: Checks a cancellation before it is recorded
- validate_actor_role: Checks a cancelled_by role used as a filter
"""

from clinic.validators.cancellation_validators import (
    CancellationRequest,
    validate_actor_role,
    validate_cancellation_request,
)

__all__ = [
    "CancellationRequest",
    "validate_actor_role",
    "validate_cancellation_request",
]
