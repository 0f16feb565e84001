"""
Utility functions shared by dashboards and reports.

- display_labels: Appointment badge and triage priority labels
"""

from clinic.utils.display_labels import (
    PENDING_TRIAGE_LABEL,
    PRIORITY_LABELS,
    badge_text,
    badge_variant,
    priority_label,
)

__all__ = [
    "PENDING_TRIAGE_LABEL",
    "PRIORITY_LABELS",
    "badge_text",
    "badge_variant",
    "priority_label",
]
