"""Schemas for the eligibility analysis returned by the analyzer collaborator."""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from models.profile import ApplicantProfile, ApplicantType


class PathwayType(str, Enum):
    FEDERAL = "Federal"
    PROVINCIAL = "Provincial"
    STUDY = "Study"
    BUSINESS = "Business"
    FAMILY = "Family"


def _clamp_percent(value: Any) -> float:
    if value is None:
        return 0.0
    number = float(value)
    if not math.isfinite(number):
        return 0.0
    return max(0.0, min(100.0, number))


def _floor_zero(value: Any) -> float:
    if value is None:
        return 0.0
    number = float(value)
    if not math.isfinite(number):
        return 0.0
    return max(0.0, number)


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        return [value]
    return list(value)


class Pathway(BaseModel):
    name: str
    description: str = ""
    eligibility_score: float = Field(0, description="0-100")
    timeline: str = ""
    type: PathwayType = PathwayType.FEDERAL

    @field_validator("eligibility_score", mode="before")
    @classmethod
    def clamp_score(cls, value: Any) -> float:
        return _clamp_percent(value)


class CrsProjections(BaseModel):
    """Student scenarios: now, after 1 or 2 years of Canadian study, and 2 years study + 1 year work."""

    current: float = 0
    one_year_study: float = 0
    two_year_study: float = 0
    two_year_study_plus_work: float = 0

    @field_validator("current", "one_year_study", "two_year_study", "two_year_study_plus_work", mode="before")
    @classmethod
    def floor_scores(cls, value: Any) -> float:
        return _floor_zero(value)


class StudyRecommendation(BaseModel):
    program_name: str
    institution: str = ""
    location: str = ""
    tuition: str = ""
    match_reason: str = ""


class AnalysisResult(BaseModel):
    overall_success_probability: float = Field(..., description="0-100")
    crs_score_prediction: float = Field(..., description="Projected CRS score")
    future_crs_predictions: Optional[CrsProjections] = Field(None, description="Only for students")
    risk_factors: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    assumptions: list[str] = Field(default_factory=list)
    recommended_pathways: list[Pathway] = Field(default_factory=list)
    other_pathways: list[Pathway] = Field(default_factory=list)
    strategic_advice: list[str] = Field(default_factory=list)
    study_recommendations: list[StudyRecommendation] = Field(default_factory=list)

    @field_validator("overall_success_probability", mode="before")
    @classmethod
    def clamp_probability(cls, value: Any) -> float:
        return _clamp_percent(value)

    @field_validator("crs_score_prediction", mode="before")
    @classmethod
    def floor_crs(cls, value: Any) -> float:
        return _floor_zero(value)

    # Older responses sent strategic_advice as a single paragraph
    @field_validator(
        "risk_factors",
        "strengths",
        "assumptions",
        "recommended_pathways",
        "other_pathways",
        "strategic_advice",
        "study_recommendations",
        mode="before",
    )
    @classmethod
    def coerce_lists(cls, value: Any) -> list:
        return _as_list(value)


class AnalysisRequest(BaseModel):
    """What the wizard hands to an analyzer: the profile, the persona and the declared assumptions."""

    profile: ApplicantProfile
    applicant_type: ApplicantType
    assumptions: list[str] = Field(default_factory=list)


class RankedPathway(Pathway):
    status: str = Field(..., description="'Recommended' or 'Evaluated'")
    competitiveness: str = ""
    eligibility: str = ""


class ProjectionRow(BaseModel):
    label: str
    score: float
    bar_ratio: float


class ResultView(BaseModel):
    """Display-ready shape of an AnalysisResult."""

    applicant_type: ApplicantType
    applicant_name: str = ""
    success_probability: float
    success_band: str
    crs_score: float
    crs_bar_ratio: float
    projections: list[ProjectionRow] = Field(default_factory=list)
    top_pathways: list[Pathway] = Field(default_factory=list)
    pathways: list[RankedPathway] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)
    assumptions: list[str] = Field(default_factory=list)
    strategic_advice: list[str] = Field(default_factory=list)
    study_recommendations: list[StudyRecommendation] = Field(default_factory=list)
