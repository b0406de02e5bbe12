"""Field binders: coercion, nested containers, multi-select and resume merge."""

import pytest

from app.wizard.binders import (
    ProfileUpdateError,
    apply_resume_fields,
    apply_updates,
    set_field,
    set_nested_field,
    toggle_set_member,
)
from models.profile import (
    ApplicantProfile,
    EducationLevel,
    ForeignExperience,
    LanguageTestType,
    MaritalStatus,
    Province,
)
from models.wizard import FieldUpdate, NestedUpdate, ProfileUpdateBatch, ToggleUpdate


def test_defaults_match_wizard_mount_state():
    profile = ApplicantProfile()
    assert profile.age == 25
    assert profile.country_of_residence == "India"
    assert profile.marital_status == MaritalStatus.NEVER_MARRIED
    assert profile.education_level == EducationLevel.BACHELOR
    assert profile.savings == 25000
    assert profile.language_details.test_type == LanguageTestType.NONE
    assert profile.preferred_provinces == []
    assert profile.spouse is None


def test_set_field_returns_new_profile():
    before = ApplicantProfile()
    after = set_field(before, "age", "31")
    assert after.age == 31
    assert before.age == 25


def test_numeric_coercion_rules():
    profile = ApplicantProfile()
    assert set_field(profile, "age", "").age == 0
    assert set_field(profile, "work_experience_years", "3.7").work_experience_years == 3
    assert set_field(profile, "english_score", "6.5").english_score == 6.5

    for bad in ("abc", "-1", "nan", "inf", True):
        with pytest.raises(ProfileUpdateError):
            set_field(profile, "age", bad)


def test_boolean_coercion():
    profile = ApplicantProfile()
    assert set_field(profile, "has_eca", "true").has_eca is True
    assert set_field(profile, "passport_valid", "false").passport_valid is False
    assert set_field(profile, "has_job_offer", 1).has_job_offer is True
    with pytest.raises(ProfileUpdateError):
        set_field(profile, "has_eca", "maybe")


def test_blank_select_clears_optional_choice():
    chosen = set_field(ApplicantProfile(), "immigration_category", "PNP")
    assert chosen.immigration_category.value == "PNP"
    assert set_field(chosen, "immigration_category", "").immigration_category is None


def test_unknown_and_container_fields_rejected():
    profile = ApplicantProfile()
    with pytest.raises(ProfileUpdateError):
        set_field(profile, "favourite_colour", "blue")
    with pytest.raises(ProfileUpdateError):
        set_field(profile, "spouse", {})
    with pytest.raises(ProfileUpdateError):
        set_field(profile, "country_of_residence", "Atlantis")


def test_spouse_follows_marital_status():
    profile = set_field(ApplicantProfile(), "marital_status", "Married")
    assert profile.spouse is not None
    assert profile.spouse.coming_to_canada is False

    profile = set_field(profile, "marital_status", "Divorced")
    assert profile.spouse is None


def test_toggle_preferred_provinces():
    profile = toggle_set_member(ApplicantProfile(), "preferred_provinces", "Ontario")
    profile = toggle_set_member(profile, "preferred_provinces", "Alberta")
    assert profile.preferred_provinces == [Province.ONTARIO, Province.ALBERTA]

    profile = toggle_set_member(profile, "preferred_provinces", "Ontario")
    assert profile.preferred_provinces == [Province.ALBERTA]

    with pytest.raises(ProfileUpdateError):
        toggle_set_member(profile, "preferred_provinces", "Yukon")
    with pytest.raises(ProfileUpdateError):
        toggle_set_member(profile, "age", 3)


def test_nested_language_scores():
    profile = set_nested_field(ApplicantProfile(), "language_details", "test_type", "IELTS")
    profile = set_nested_field(profile, "language_details", "speaking", "7.5")
    assert profile.language_details.test_type == LanguageTestType.IELTS
    assert profile.language_details.speaking == 7.5

    with pytest.raises(ProfileUpdateError):
        set_nested_field(profile, "language_details", "test_type", "Klingon")


def test_french_details_created_on_first_write():
    profile = ApplicantProfile()
    assert profile.french_details is None
    profile = set_nested_field(profile, "french_details", "reading", 8)
    assert profile.french_details is not None
    assert profile.french_details.reading == 8


def test_spouse_update_is_noop_without_spouse():
    profile = ApplicantProfile()
    after = set_nested_field(profile, "spouse", "is_canadian", "true")
    assert after.spouse is None
    assert after == profile


def test_spouse_boolean_strings_parse():
    profile = set_field(ApplicantProfile(), "marital_status", "Common-Law")
    profile = set_nested_field(profile, "spouse", "coming_to_canada", "true")
    profile = set_nested_field(profile, "spouse", "is_canadian", "false")
    profile = set_nested_field(profile, "spouse.language_scores", "listening", "8")
    assert profile.spouse.coming_to_canada is True
    assert profile.spouse.is_canadian is False
    assert profile.spouse.language_scores.listening == 8.0


def test_batch_is_atomic():
    profile = ApplicantProfile()
    batch = ProfileUpdateBatch.model_validate({
        "updates": [
            {"kind": "field", "name": "name", "value": "Asha"},
            {"kind": "field", "name": "age", "value": "old"},
        ]
    })
    with pytest.raises(ProfileUpdateError):
        apply_updates(profile, batch.updates)
    assert profile.name == ""


def test_discriminated_updates_parse_and_apply():
    batch = ProfileUpdateBatch.model_validate({
        "updates": [
            {"kind": "field", "name": "marital_status", "value": "Married"},
            {"kind": "toggle", "field": "preferred_provinces", "value": "Manitoba"},
            {"kind": "nested", "container": "spouse", "field": "coming_to_canada", "value": "true"},
        ]
    })
    assert isinstance(batch.updates[0], FieldUpdate)
    assert isinstance(batch.updates[1], ToggleUpdate)
    assert isinstance(batch.updates[2], NestedUpdate)

    profile = apply_updates(ApplicantProfile(), batch.updates)
    assert profile.preferred_provinces == [Province.MANITOBA]
    assert profile.spouse.coming_to_canada is True


def test_resume_merge_keeps_previous_values_for_unusable_fields():
    profile = set_field(ApplicantProfile(), "name", "Old Name")
    merged, applied = apply_resume_fields(profile, {
        "name": "Priya Sharma",
        "country": "Narnia",
        "education_level": "Associate Degree",
        "field_of_study": "Nursing",
        "work_experience_years": 4,
    })
    assert merged.name == "Priya Sharma"
    assert merged.country_of_residence == "India"
    assert merged.education_level == EducationLevel.BACHELOR
    assert merged.field_of_study == "Nursing"
    assert merged.work_experience_years == 4
    assert merged.foreign_work_experience == ForeignExperience.ONE
    assert "country_of_residence" not in applied
    assert "education_level" not in applied


def test_resume_merge_resets_foreign_band_without_experience():
    profile = set_field(ApplicantProfile(), "foreign_work_experience", "2-3")
    merged, _ = apply_resume_fields(profile, {"name": "A", "country": "Brazil", "education_level": "Master"})
    assert merged.country_of_residence == "Brazil"
    assert merged.education_level == EducationLevel.MASTER
    assert merged.foreign_work_experience == ForeignExperience.NONE
