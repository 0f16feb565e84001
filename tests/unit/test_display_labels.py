"""Unit tests for appointment badge and triage priority labels."""

import pytest

from clinic.utils.display_labels import (
    PENDING_TRIAGE_LABEL,
    badge_text,
    badge_variant,
    priority_label,
)
from database.models import AppointmentStatus


class TestPriorityLabel:
    """Tests for priority_label()."""

    @pytest.mark.parametrize(
        "color_code, p_code, expected",
        [
            ("RED", "P1", "🔴 Immediate (P1)"),
            ("YELLOW", "P2", "🟡 Urgent (P2)"),
            ("GREEN", "P3", "🟢 Minor (P3)"),
            ("BLACK", "P4", "⚫ Non-Urgent (P4)"),
        ],
    )
    def test_color_and_p_codes_share_label(self, color_code, p_code, expected):
        assert priority_label(color_code) == expected
        assert priority_label(p_code) == expected

    def test_explicit_label_overrides_known_code(self):
        assert priority_label("RED", "Custom Label") == "Custom Label"

    def test_explicit_label_overrides_unknown_code(self):
        assert priority_label(None, "Seen by nurse") == "Seen by nurse"

    def test_empty_explicit_label_is_ignored(self):
        assert priority_label("P3", "") == "🟢 Minor (P3)"
        assert priority_label("P3", None) == "🟢 Minor (P3)"

    @pytest.mark.parametrize("code", [None, "", 123, True, False, 0, "UNKNOWN", 1.5])
    def test_unknown_inputs_are_pending_triage(self, code):
        assert priority_label(code) == PENDING_TRIAGE_LABEL

    def test_missing_code_is_pending_triage(self):
        assert priority_label(None) == "Pending Triage"

    def test_match_is_case_sensitive(self):
        assert priority_label("red") == "Pending Triage"
        assert priority_label("p1") == "Pending Triage"
        assert priority_label(" RED") == "Pending Triage"

    def test_unhashable_input_does_not_raise(self):
        assert priority_label(["RED"]) == "Pending Triage"
        assert priority_label({"code": "P1"}) == "Pending Triage"


class TestBadgeVariant:
    """Tests for badge_variant()."""

    def test_completed_is_default(self):
        assert badge_variant("completed") == "default"

    def test_upcoming_is_secondary(self):
        assert badge_variant("upcoming") == "secondary"

    @pytest.mark.parametrize("status", ["cancelled", "booked", "anything-else", "", None, "Completed"])
    def test_everything_else_is_secondary(self, status):
        assert badge_variant(status) == "secondary"

    def test_accepts_status_enum(self):
        assert badge_variant(AppointmentStatus.COMPLETED) == "default"
        assert badge_variant(AppointmentStatus.CANCELLED) == "secondary"


class TestBadgeText:
    """Tests for badge_text()."""

    def test_upcoming(self):
        assert badge_text("upcoming") == "Upcoming"

    def test_completed(self):
        assert badge_text("completed") == "Completed"

    @pytest.mark.parametrize("status", ["cancelled", "booked", "anything-else", "", None])
    def test_everything_else_falls_back_to_completed(self, status):
        # Unrecognized statuses (cancelled included) render as "Completed"
        assert badge_text(status) == "Completed"

    def test_accepts_status_enum(self):
        assert badge_text(AppointmentStatus.UPCOMING) == "Upcoming"
