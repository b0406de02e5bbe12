"""Applicant profile schema shared by every wizard step."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class ApplicantType(str, Enum):
    STUDENT = "Student"
    WORKER = "Worker"
    PARTNER = "Partner"  # consultant / agency
    SUPER_ADMIN = "SuperAdmin"  # platform owner


class MaritalStatus(str, Enum):
    NEVER_MARRIED = "Never Married"
    MARRIED = "Married"
    COMMON_LAW = "Common-Law"
    DIVORCED = "Divorced"
    SEPARATED = "Separated"
    WIDOWED = "Widowed"
    ANNULLED = "Annulled"


class EducationLevel(str, Enum):
    HIGH_SCHOOL = "High School"
    DIPLOMA = "Diploma"
    BACHELOR = "Bachelor"
    MASTER = "Master"
    PHD = "PhD"
    MEDICAL_PROFESSIONAL = "Medical Professional"


class WorkLocation(str, Enum):
    INSIDE = "Inside Canada"
    OUTSIDE = "Outside Canada"
    BOTH = "Both"


class CanadianExperience(str, Enum):
    NONE = "None"
    ONE = "1"
    TWO_THREE = "2-3"
    FOUR_PLUS = "4-5+"


class ForeignExperience(str, Enum):
    NONE = "None"
    ONE = "1"
    TWO_THREE = "2-3"
    THREE_PLUS = "3+"


class LanguageTestType(str, Enum):
    NONE = "None"
    IELTS = "IELTS"
    IELTS_ACADEMIC = "IELTS Academic"
    CELPIP = "CELPIP-G"
    PTE_CORE = "PTE Core"
    TEF = "TEF Canada"
    TCF = "TCF Canada"
    TOEFL = "TOEFL"
    DUOLINGO = "Duolingo"


class TeerTier(str, Enum):
    TEER_0 = "TEER 0"
    TEER_1_3 = "TEER 1-3"
    TEER_4_5 = "TEER 4-5"


class Province(str, Enum):
    ONTARIO = "Ontario"
    BRITISH_COLUMBIA = "British Columbia"
    ALBERTA = "Alberta"
    QUEBEC = "Quebec"
    MANITOBA = "Manitoba"
    ATLANTIC = "Atlantic Provinces"


class ImmigrationCategory(str, Enum):
    EXPRESS_ENTRY = "Express Entry"
    PNP = "PNP"
    STUDY_PERMIT = "Study Permit"
    WORK_PERMIT = "Work Permit"
    FAMILY = "Family Sponsorship"
    BUSINESS = "Business / Start-up Visa"
    NOT_SURE = "Not Sure"


COUNTRIES: list[str] = [
    "India", "China", "Philippines", "Nigeria", "France", "United States", "United Kingdom", "Pakistan", "Iran", "Brazil",
    "Vietnam", "South Korea", "Mexico", "Colombia", "Bangladesh", "Morocco", "Algeria", "Lebanon", "Egypt", "Turkey",
    "Afghanistan", "Albania", "Argentina", "Australia", "Austria", "Belgium", "Chile", "Costa Rica", "Croatia",
    "Czech Republic", "Denmark", "Ethiopia", "Finland", "Germany", "Ghana", "Greece", "Hong Kong", "Hungary",
    "Indonesia", "Ireland", "Israel", "Italy", "Jamaica", "Japan", "Kenya", "Malaysia", "Netherlands", "New Zealand",
    "Norway", "Peru", "Poland", "Portugal", "Romania", "Russia", "Saudi Arabia", "Singapore", "South Africa", "Spain",
    "Sri Lanka", "Sweden", "Switzerland", "Taiwan", "Thailand", "Ukraine", "United Arab Emirates", "Zimbabwe", "Other",
]

PARTNERED_STATUSES = (MaritalStatus.MARRIED, MaritalStatus.COMMON_LAW)


def requires_spouse(status: MaritalStatus | str) -> bool:
    """True when the marital status implies a partner (married / common-law)."""
    return MaritalStatus(status) in PARTNERED_STATUSES


class LanguageScores(BaseModel):
    test_type: LanguageTestType = Field(LanguageTestType.NONE, description="Official test taken, or 'None'")
    speaking: float = Field(0, ge=0)
    listening: float = Field(0, ge=0)
    reading: float = Field(0, ge=0)
    writing: float = Field(0, ge=0)
    overall_score: Optional[float] = Field(None, ge=0, description="Overall band score, if reported")

    @property
    def has_test(self) -> bool:
        return self.test_type != LanguageTestType.NONE


class SpouseProfile(BaseModel):
    """Accompanying partner; only exists while the applicant is married or common-law."""

    is_canadian: bool = Field(False, description="Spouse is a Canadian citizen or PR")
    coming_to_canada: bool = Field(False, description="Spouse will accompany the applicant")
    education_level: EducationLevel = EducationLevel.BACHELOR
    canadian_work_experience_years: CanadianExperience = CanadianExperience.NONE
    language_scores: LanguageScores = Field(default_factory=LanguageScores)


class ApplicantProfile(BaseModel):
    # Identity
    name: str = ""
    age: int = Field(25, ge=0)
    country_of_residence: str = Field("India", description="One of COUNTRIES")
    passport_valid: bool = True

    # Family
    marital_status: MaritalStatus = MaritalStatus.NEVER_MARRIED
    has_sibling_in_canada: bool = Field(False, description="Sibling who is a citizen or PR, 18+")
    parents_in_canada: bool = False
    bringing_dependents: bool = False
    spouse: Optional[SpouseProfile] = None

    # Intent
    immigration_category: Optional[ImmigrationCategory] = None

    # Education
    education_level: EducationLevel = EducationLevel.BACHELOR
    field_of_study: str = ""
    intended_study_field: str = ""
    has_eca: bool = Field(False, description="Educational Credential Assessment completed")
    has_canadian_education: bool = False
    grades_or_gpa: str = Field("", description="Free text, e.g. '75%' or '3.5/4.0'")

    # Work
    work_experience_years: int = Field(0, ge=0)
    work_experience_location: Optional[WorkLocation] = None
    canadian_work_experience: CanadianExperience = CanadianExperience.NONE
    foreign_work_experience: ForeignExperience = ForeignExperience.NONE
    job_role: str = ""

    # Language
    english_score: float = Field(0, ge=0, description="General band score (resume fallback)")
    language_details: LanguageScores = Field(default_factory=LanguageScores)
    has_french: bool = False
    french_details: Optional[LanguageScores] = None

    # Financial
    savings: int = Field(25000, ge=0, description="Available funds in CAD")
    savings_exempt: bool = False

    # Legal history
    has_visa_history: bool = False
    has_refusal_history: bool = False
    has_criminal_record: bool = False
    has_medical_condition: bool = False

    # Employer
    has_job_offer: bool = False
    job_offer_is_lmia: bool = False
    job_offer_teer: Optional[TeerTier] = None

    # Programs
    has_nomination_certificate: bool = False
    certificate_of_qualification: bool = Field(False, description="Provincial trade certificate")
    target_province: Province = Province.ONTARIO
    preferred_provinces: list[Province] = Field(default_factory=list)

    @field_validator("country_of_residence")
    @classmethod
    def supported_country(cls, value: str) -> str:
        if value not in COUNTRIES:
            raise ValueError(f"Unsupported country of residence: {value}")
        return value

    @field_validator("preferred_provinces")
    @classmethod
    def unique_provinces(cls, value: list[Province]) -> list[Province]:
        seen: list[Province] = []
        for province in value:
            if province not in seen:
                seen.append(province)
        return seen

    @model_validator(mode="after")
    def sync_spouse(self) -> "ApplicantProfile":
        if requires_spouse(self.marital_status):
            if self.spouse is None:
                self.spouse = SpouseProfile()
        elif self.spouse is not None:
            self.spouse = None
        return self


def spouse_accompanying(profile: ApplicantProfile) -> bool:
    """A foreign partner who is coming to Canada adds the spouse-factors step."""
    spouse = profile.spouse
    if spouse is None or not requires_spouse(profile.marital_status):
        return False
    return not spouse.is_canadian and spouse.coming_to_canada
