# tests/models/test_fields.py
"""
Tests for the Field Stores: section completeness, weighted percentages,
type checks and freezing.
"""

import pytest

from medintake.core.exceptions import ValidationError, WorkflowError
from medintake.models.fields import (
    DispatchFieldStore,
    GeoLocation,
    TriageFields,
    TriageFieldStore,
    VerificationFields,
    VerificationFieldStore,
    create_field_store,
)
from medintake.models.flow_models import DurationBucket, SeverityRating, WorkflowKind


PERSONAL = {
    "first_name": "Ada",
    "last_name": "Okafor",
    "email": "ada.okafor@example.org",
    "phone": "+1 555 0100",
}
PROFESSIONAL = {
    "license_number": "MD-448812",
    "specialization": "Cardiology",
    "hospital_affiliation": "St. Mary's Hospital",
    "years_of_experience": "6-10",
}
DOCUMENTS = {
    "medical_license": "uploads/license.pdf",
    "government_id": "uploads/id.png",
    "hospital_letter": "uploads/letter.pdf",
}


def fill(store, values):
    for name, value in values.items():
        store.set_field(name, value)


# ===========================================
# COMPLETENESS
# ===========================================

@pytest.mark.unit
class TestCompleteness:

    def test_new_store_is_empty(self):
        store = VerificationFieldStore()

        assert store.completeness_percentage() == 0
        assert store.missing_sections() == ["personal", "professional", "documents"]
        assert not store.is_complete()

    @pytest.mark.parametrize("sections, expected", [
        ((PERSONAL,), 33),
        ((PROFESSIONAL,), 33),
        ((DOCUMENTS,), 34),
        ((PERSONAL, PROFESSIONAL), 66),
        ((PERSONAL, DOCUMENTS), 67),
        ((PERSONAL, PROFESSIONAL, DOCUMENTS), 100),
    ])
    def test_verification_weighted_percentage(self, sections, expected):
        store = VerificationFieldStore()
        for values in sections:
            fill(store, values)

        assert store.completeness_percentage() == expected

    def test_hundred_only_when_every_section_complete(self):
        store = VerificationFieldStore()
        fill(store, PERSONAL)
        fill(store, PROFESSIONAL)
        fill(store, {"medical_license": "a.pdf", "government_id": "b.png"})

        assert store.completeness_percentage() == 66
        assert store.missing_sections() == ["documents"]
        assert store.missing_fields("documents") == ["hospital_letter"]

    def test_percentage_never_decreases_while_filling(self):
        store = VerificationFieldStore()
        previous = store.completeness_percentage()

        for values in (PERSONAL, PROFESSIONAL, DOCUMENTS):
            for name, value in values.items():
                store.set_field(name, value)
                current = store.completeness_percentage()
                assert current >= previous
                assert 0 <= current <= 100
                previous = current

        assert previous == 100

    def test_dispatch_sections_weigh_half_each(self):
        store = DispatchFieldStore()
        store.set_field("emergency_tier", "urgent")
        assert store.completeness_percentage() == 50

        store.set_field("location", {"latitude": 1.0, "longitude": 2.0, "address": "Dock 4"})
        assert store.completeness_percentage() == 100
        assert store.completeness_ratio() == 1.0

    def test_triage_photo_is_optional(self):
        store = TriageFieldStore()
        fill(store, {"symptoms": "Cough", "severity": "moderate", "duration": "days"})

        assert store.get_field("photo") is None
        assert store.is_complete()
        assert store.section_status() == {"symptoms": True}

    def test_whitespace_text_does_not_count(self):
        store = TriageFieldStore()
        fill(store, {"symptoms": "   ", "severity": "low", "duration": "hours"})

        assert not store.is_section_complete("symptoms")
        assert store.missing_fields("symptoms") == ["symptoms"]

    def test_clearing_a_field_reopens_its_section(self):
        store = VerificationFieldStore()
        fill(store, PERSONAL)
        assert store.is_section_complete("personal")

        store.clear_field("email")
        assert not store.is_section_complete("personal")
        assert store.completeness_percentage() == 0

    def test_unknown_section_raises(self):
        with pytest.raises(ValidationError):
            TriageFieldStore().is_section_complete("billing")


# ===========================================
# TYPE CHECKS
# ===========================================

@pytest.mark.unit
class TestFieldTypes:

    def test_choice_is_converted_to_enum(self):
        store = TriageFieldStore()
        store.set_field("severity", "high")
        store.set_field("duration", "weeks")

        assert store.get_field("severity") == SeverityRating.HIGH
        assert store.get_field("duration") == DurationBucket.WEEKS

    def test_unlisted_choice_leaves_section_incomplete(self):
        store = TriageFieldStore()
        fill(store, {"symptoms": "Rash", "severity": "catastrophic", "duration": "days"})

        assert store.get_field("severity") == "catastrophic"
        assert not store.is_complete()

    def test_wrong_type_raises(self):
        store = TriageFieldStore()

        with pytest.raises(ValidationError) as exc_info:
            store.set_field("symptoms", 42)
        assert exc_info.value.field == "symptoms"

    def test_unknown_field_raises(self):
        with pytest.raises(ValidationError):
            TriageFieldStore().set_field("blood_type", "A+")

    def test_location_from_dict(self):
        store = DispatchFieldStore()
        store.set_field("location", {"latitude": 52.52, "longitude": 13.405, "address": "Berlin"})

        location = store.get_field("location")
        assert isinstance(location, GeoLocation)
        assert location.address == "Berlin"

    def test_location_out_of_range_raises(self):
        store = DispatchFieldStore()

        with pytest.raises(ValidationError):
            store.set_field("location", {"latitude": 120.0, "longitude": 0.0, "address": "Nowhere"})

    def test_create_field_store_per_kind(self):
        assert isinstance(create_field_store(WorkflowKind.TRIAGE), TriageFieldStore)
        assert isinstance(create_field_store("dispatch"), DispatchFieldStore)
        assert isinstance(create_field_store(WorkflowKind.VERIFICATION), VerificationFieldStore)

    def test_document_slots(self):
        assert TriageFieldStore().document_slots == ["photo"]
        assert VerificationFieldStore().document_slots == [
            "medical_license", "government_id", "hospital_letter"
        ]


# ===========================================
# FREEZING
# ===========================================

@pytest.mark.unit
class TestFreeze:

    def test_freeze_incomplete_lists_sections(self):
        store = VerificationFieldStore()
        fill(store, PERSONAL)

        with pytest.raises(ValidationError) as exc_info:
            store.freeze()

        assert exc_info.value.sections == ["professional", "documents"]
        assert exc_info.value.details["sections"] == ["professional", "documents"]
        assert not store.is_frozen

    def test_freeze_returns_typed_snapshot(self):
        store = TriageFieldStore()
        fill(store, {"symptoms": "Sore throat", "severity": "low", "duration": "days", "photo": "  "})

        snapshot = store.freeze()

        assert isinstance(snapshot, TriageFields)
        assert snapshot.severity == SeverityRating.LOW
        assert snapshot.photo is None
        assert store.is_frozen

    def test_snapshot_is_immutable(self):
        store = VerificationFieldStore()
        fill(store, {**PERSONAL, **PROFESSIONAL, **DOCUMENTS})

        snapshot = store.freeze()

        assert isinstance(snapshot, VerificationFields)
        with pytest.raises(Exception):
            snapshot.email = "other@example.org"

    def test_frozen_store_rejects_changes(self):
        store = DispatchFieldStore()
        fill(store, {
            "location": {"latitude": 1.0, "longitude": 1.0, "address": "Pier 9"},
            "emergency_tier": "moderate",
        })
        store.freeze()

        with pytest.raises(WorkflowError):
            store.set_field("emergency_tier", "critical")

        store.unfreeze()
        store.set_field("emergency_tier", "critical")
        assert store.to_dict()["emergency_tier"] == "critical"
