"""
Utility module turning an AnalysisResult into what the user dashboard shows.
"""

from typing import Any, List, Optional

from models.analysis import AnalysisResult, Pathway, ProjectionRow, RankedPathway, ResultView
from models.profile import ApplicantProfile, ApplicantType

RECOMMENDED = "Recommended"
EVALUATED = "Evaluated"

# Bars are drawn against 600: the usual target range for a competitive profile
CRS_BAR_SCALE = 600.0

PROJECTION_LABELS = [
    ("current", "Current profile"),
    ("one_year_study", "Option 1: After 1 Year Study"),
    ("two_year_study", "Option 2: After 2 Years Study"),
    ("two_year_study_plus_work", "Option 3: 2 Years Study + 1 Year Work"),
]


def clamp_percentage(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number:  # NaN
        return 0.0
    return max(0.0, min(100.0, number))


def competitiveness_band(score: float) -> str:
    if score >= 80:
        return "Highly Competitive"
    if score >= 60:
        return "Competitive"
    if score >= 40:
        return "Low Probability"
    return "Not Competitive"


def eligibility_label(score: float) -> str:
    return "Eligible" if score > 0 else "Not Eligible"


def crs_bar_ratio(score: float) -> float:
    return max(0.0, min(score / CRS_BAR_SCALE, 1.0))


def merge_pathways(recommended: List[Pathway], other: Optional[List[Pathway]] = None) -> List[RankedPathway]:
    """
    One ranked table: recommended pathways first, then by eligibility score
    (highest first). Ties keep their original order.
    """
    ranked = [
        RankedPathway(
            **p.model_dump(),
            status=status,
            competitiveness=competitiveness_band(p.eligibility_score),
            eligibility=eligibility_label(p.eligibility_score),
        )
        for status, group in ((RECOMMENDED, recommended), (EVALUATED, other or []))
        for p in group
    ]
    return sorted(ranked, key=lambda p: (p.status != RECOMMENDED, -p.eligibility_score))


def build_result_view(
    result: AnalysisResult,
    profile: Optional[ApplicantProfile],
    applicant_type: ApplicantType,
) -> ResultView:
    probability = clamp_percentage(result.overall_success_probability)

    projections: List[ProjectionRow] = []
    if result.future_crs_predictions is not None:
        scores = result.future_crs_predictions.model_dump()
        projections = [
            ProjectionRow(label=label, score=scores[key], bar_ratio=crs_bar_ratio(scores[key]))
            for key, label in PROJECTION_LABELS
        ]

    return ResultView(
        applicant_type=applicant_type,
        applicant_name=profile.name if profile else "",
        success_probability=probability,
        success_band=competitiveness_band(probability),
        crs_score=result.crs_score_prediction,
        crs_bar_ratio=crs_bar_ratio(result.crs_score_prediction),
        projections=projections,
        top_pathways=result.recommended_pathways[:3],
        pathways=merge_pathways(result.recommended_pathways, result.other_pathways),
        strengths=result.strengths,
        risk_factors=result.risk_factors,
        assumptions=result.assumptions,
        strategic_advice=result.strategic_advice,
        study_recommendations=result.study_recommendations,
    )
