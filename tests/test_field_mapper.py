"""
Tests for the enum field mapper (job_tracker/core/field_mapper.py).

Covers form <-> storage translation, the round-trip law for every mapped
value, and the logged fallback to defaults on unknown input.
"""

import pytest

from job_tracker.core.field_mapper import (
    FIELD_MAPPINGS,
    ApplicationStatus,
    EmploymentType,
    FieldMapping,
    WorkType,
    default_for,
    to_presentation,
    to_storage,
)


# ============================================================
# Known spellings
# ============================================================


class TestToStorage:
    @pytest.mark.parametrize("field, form_value, stored", [
        ("employment_type", "full-time", "full_time"),
        ("employment_type", "part-time", "part_time"),
        ("employment_type", "contract", "contract"),
        ("employment_type", "internship", "internship"),
        ("work_type", "on-site", "on_site"),
        ("work_type", "hybrid", "hybrid"),
        ("work_type", "remote", "remote"),
        ("priority", "urgent", "urgent"),
        ("status", "interview_scheduled", "interview_scheduled"),
        ("interview_type", "in-person", "in_person"),
    ])
    def test_form_spelling(self, field, form_value, stored):
        assert to_storage(field, form_value) == stored

    def test_storage_spelling_is_accepted(self, log_messages):
        assert to_storage("employment_type", "part_time") == "part_time"
        assert to_storage("work_type", "on_site") == "on_site"
        assert log_messages == []

    def test_enum_member_is_accepted(self):
        assert to_storage("work_type", WorkType.HYBRID) == "hybrid"


class TestToPresentation:
    def test_hyphenated_spellings(self):
        assert to_presentation("employment_type", "full_time") == "full-time"
        assert to_presentation("work_type", "on_site") == "on-site"
        assert to_presentation("interview_type", "in_person") == "in-person"

    def test_status_is_unchanged(self):
        for status in ApplicationStatus:
            assert to_presentation("status", status.value) == status.value


# ============================================================
# Round trip
# ============================================================


class TestRoundTrip:
    @pytest.mark.parametrize("field", sorted(FIELD_MAPPINGS))
    def test_storage_values_survive_round_trip(self, field):
        for member in FIELD_MAPPINGS[field].enum:
            assert to_storage(field, to_presentation(field, member.value)) == member.value

    @pytest.mark.parametrize("field", sorted(FIELD_MAPPINGS))
    def test_form_values_survive_round_trip(self, field):
        for spelling in FIELD_MAPPINGS[field].presentation_values:
            assert to_presentation(field, to_storage(field, spelling)) == spelling


# ============================================================
# Fallback behaviour
# ============================================================


class TestFallback:
    def test_missing_value_uses_default_silently(self, log_messages):
        assert to_storage("employment_type", None) == "full_time"
        assert to_storage("work_type", "") == "remote"
        assert to_storage("priority", None) == "medium"
        assert to_storage("status", None) == "applied"
        assert log_messages == []

    def test_unknown_value_uses_default_and_warns(self, log_messages):
        assert to_storage("employment_type", "freelance") == "full_time"
        assert len(log_messages) == 1
        assert "freelance" in log_messages[0]
        assert "employment_type" in log_messages[0]

    def test_unknown_stored_value_presents_default(self, log_messages):
        assert to_presentation("work_type", "moon_base") == "remote"
        assert len(log_messages) == 1

    def test_defaults(self):
        assert default_for("employment_type") == EmploymentType.FULL_TIME.value
        assert default_for("interview_type") == "phone"

    def test_unregistered_field_raises(self):
        with pytest.raises(KeyError):
            to_storage("colour", "red")

    def test_incomplete_table_is_rejected(self):
        with pytest.raises(ValueError):
            FieldMapping(WorkType, {"remote": WorkType.REMOTE}, default=WorkType.REMOTE)
