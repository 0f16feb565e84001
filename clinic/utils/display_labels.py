"""
Display labels derived from appointment data.

Pure, stateless helpers used by dashboards and reporting views:
- badge_variant / badge_text: Status badge shown next to an appointment
- priority_label: Human label of a triage priority code

Note: badge_variant and badge_text treat every unrecognized status as the
"else" case (secondary / "Completed"). A cancelled appointment is therefore
shown as "Completed". This matches the dashboards in production and is kept
as is until the badge set is extended.
"""

from typing import Any

PENDING_TRIAGE_LABEL = "Pending Triage"

# Triage code -> label (exact, case-sensitive match)
PRIORITY_LABELS: dict[str, str] = {
    "RED": "🔴 Immediate (P1)",
    "P1": "🔴 Immediate (P1)",
    "YELLOW": "🟡 Urgent (P2)",
    "P2": "🟡 Urgent (P2)",
    "GREEN": "🟢 Minor (P3)",
    "P3": "🟢 Minor (P3)",
    "BLACK": "⚫ Non-Urgent (P4)",
    "P4": "⚫ Non-Urgent (P4)",
}


def badge_variant(status: Any) -> str:
    """Return "default" for completed appointments, "secondary" otherwise."""
    return "default" if status == "completed" else "secondary"


def badge_text(status: Any) -> str:
    """Return "Upcoming" for upcoming appointments, "Completed" otherwise."""
    return "Upcoming" if status == "upcoming" else "Completed"


def priority_label(priority_code: Any, explicit_label: Any = None) -> str:
    """
    Map a triage priority code to its display label.

    Args:
        priority_code: Triage code such as "RED" or "P1". Any type is accepted.
        explicit_label: Caller override. When truthy it is returned verbatim.

    Returns:
        The override, the mapped label, or "Pending Triage" for anything unknown

    Example:
        >>> priority_label("P2")
        '🟡 Urgent (P2)'
        >>> priority_label("RED", "Custom Label")
        'Custom Label'
        >>> priority_label(None)
        'Pending Triage'
    """
    if explicit_label:
        return explicit_label
    if not isinstance(priority_code, str):
        return PENDING_TRIAGE_LABEL
    return PRIORITY_LABELS.get(priority_code, PENDING_TRIAGE_LABEL)
