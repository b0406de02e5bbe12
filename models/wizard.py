"""Schemas for the wizard API: view states, profile updates and session snapshots."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from models.analysis import AnalysisResult
from models.profile import ApplicantProfile, ApplicantType


class ViewState(str, Enum):
    COUNTRY_SELECTION = "country-selection"
    LANDING = "landing"
    ASSESSMENT = "assessment"
    USER_DASHBOARD = "user-dashboard"
    PARTNER_DASHBOARD = "partner-dashboard"
    SUPER_ADMIN_DASHBOARD = "super-admin-dashboard"


class NestedContainer(str, Enum):
    LANGUAGE_DETAILS = "language_details"
    FRENCH_DETAILS = "french_details"
    SPOUSE = "spouse"
    SPOUSE_LANGUAGE = "spouse.language_scores"


class FieldUpdate(BaseModel):
    """Set one top-level profile attribute."""

    kind: Literal["field"] = "field"
    name: str = Field(..., description="ApplicantProfile attribute, e.g. 'age'")
    value: Any = None


class ToggleUpdate(BaseModel):
    """Add or remove one member of a list-valued attribute (multi-select checkbox)."""

    kind: Literal["toggle"] = "toggle"
    field: str = Field(..., description="List-valued attribute, e.g. 'preferred_provinces'")
    value: Any


class NestedUpdate(BaseModel):
    """Set one attribute of a nested container (language scores, spouse)."""

    kind: Literal["nested"] = "nested"
    container: NestedContainer
    field: str
    value: Any = None


ProfileUpdate = Annotated[Union[FieldUpdate, ToggleUpdate, NestedUpdate], Field(discriminator="kind")]


class ProfileUpdateBatch(BaseModel):
    updates: list[ProfileUpdate] = Field(..., min_length=1)


class DestinationSelect(BaseModel):
    country: str = Field(..., description="Destination id, e.g. 'canada'")


class StartAssessment(BaseModel):
    applicant_type: ApplicantType


class Destination(BaseModel):
    id: str
    name: str
    flag: str
    active: bool
    description: str


class StepInfo(BaseModel):
    current: int
    total: int
    title: str
    can_advance: bool
    can_retreat: bool
    is_final: bool


class WizardStateOut(BaseModel):
    """Snapshot of one wizard session as seen by the UI."""

    session_id: str
    view: ViewState
    destination: Optional[str] = None
    applicant_type: Optional[ApplicantType] = None
    step: Optional[StepInfo] = None
    profile: ApplicantProfile
    submitted_profile: Optional[ApplicantProfile] = None
    loading: bool = False
    parsing: bool = False
    has_result: bool = False
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None
    notice: Optional[str] = None


class ResumeParseOut(BaseModel):
    extracted: dict = Field(default_factory=dict, description="Raw fields returned by the resume parser")
    applied_fields: list[str] = Field(default_factory=list)
    state: WizardStateOut


class FormOptions(BaseModel):
    """Choice lists the wizard renders for the active persona."""

    applicant_type: ApplicantType
    step_titles: list[str]
    countries: list[str]
    marital_statuses: list[str]
    education_levels: list[str]
    language_tests: list[str]
    canadian_experience: list[str]
    foreign_experience: list[str]
    work_locations: list[str]
    teer_tiers: list[str]
    provinces: list[str]
    immigration_categories: list[str]
    funds_note: Optional[str] = None
