"""
Offline analyzer: scores a profile with the CRS grids and fixed program rules.

Produces the same AnalysisResult shape as the LLM analyzer, so the wizard can
run without an OpenRouter key (ANALYZER_BACKEND=rules) and tests have a
deterministic backend.
"""

from __future__ import annotations

import logging

from app.ai.analysis_prompts import STUDENT_FUNDS_NOTE
from app.ai.crs_agent import clb_levels, estimate_crs, profile_to_crs_input, project_student_crs
from models.analysis import AnalysisRequest, AnalysisResult, CrsProjections, Pathway, PathwayType, StudyRecommendation
from models.profile import ApplicantProfile, ApplicantType, EducationLevel, LanguageTestType

logger = logging.getLogger(__name__)

# Recent all-program / CEC draw cutoffs hover around this score
TYPICAL_CRS_CUTOFF = 500
STUDENT_LIVING_COST = 20635
ASSUMED_TUITION = 20000
# FSW proof of funds for a single applicant
FSW_SETTLEMENT_FUNDS = 15263

_INSTITUTIONS = {
    "Ontario": [("Humber Polytechnic", "Toronto, ON"), ("University of Waterloo", "Waterloo, ON")],
    "British Columbia": [("British Columbia Institute of Technology", "Burnaby, BC"), ("Simon Fraser University", "Burnaby, BC")],
    "Alberta": [("Southern Alberta Institute of Technology", "Calgary, AB"), ("University of Alberta", "Edmonton, AB")],
    "Quebec": [("Dawson College", "Montreal, QC"), ("Concordia University", "Montreal, QC")],
    "Manitoba": [("Red River College Polytechnic", "Winnipeg, MB"), ("University of Manitoba", "Winnipeg, MB")],
    "Atlantic Provinces": [("Nova Scotia Community College", "Halifax, NS"), ("Memorial University", "St. John's, NL")],
}


def _crs_score_to_percent(crs: int) -> float:
    return round(min(100.0, max(0.0, (crs - 300) / (TYPICAL_CRS_CUTOFF - 300) * 80)))


def _history_risks(profile: ApplicantProfile) -> tuple[int, list[str]]:
    penalty = 0
    risks: list[str] = []
    if profile.has_criminal_record:
        penalty += 30
        risks.append("A criminal record can make an applicant inadmissible; rehabilitation may be required.")
    if profile.has_refusal_history:
        penalty += 15
        risks.append("Previous visa refusals must be disclosed and addressed in the new application.")
    if profile.has_medical_condition:
        penalty += 10
        risks.append("Medical conditions may trigger an excessive-demand assessment.")
    if not profile.passport_valid:
        penalty += 10
        risks.append("A valid passport is required before any application can be submitted.")
    return penalty, risks


def _student_programs(profile: ApplicantProfile) -> list[StudyRecommendation]:
    field = profile.intended_study_field or profile.field_of_study or "General Studies"
    provinces = [profile.target_province.value] + [p.value for p in profile.preferred_provinces]
    seen: list[str] = []
    for province in provinces:
        if province not in seen:
            seen.append(province)

    recs: list[StudyRecommendation] = []
    for province in seen:
        college, university = _INSTITUTIONS[province]
        recs.append(StudyRecommendation(
            program_name=f"{field} - Graduate Certificate (1 year)",
            institution=college[0],
            location=college[1],
            tuition="$17,000 - $22,000 CAD / year",
            match_reason=f"Builds on your {profile.education_level.value} and qualifies for a PGWP in {province}.",
        ))
        if profile.education_level in (EducationLevel.BACHELOR, EducationLevel.MASTER):
            recs.append(StudyRecommendation(
                program_name=f"Master of {field} (2 years)",
                institution=university[0],
                location=university[1],
                tuition="$25,000 - $40,000 CAD / year",
                match_reason="A 2-year Canadian master's earns the longest PGWP and the most CRS points.",
            ))
        if len(recs) >= 4:
            break
    return recs[:4]


def analyze_student(request: AnalysisRequest) -> AnalysisResult:
    profile = request.profile
    assumed = 5 if profile.language_details.test_type == LanguageTestType.NONE else None
    projections = project_student_crs(profile, assumed_clb=assumed)

    probability = 70
    strengths: list[str] = []
    risks: list[str] = []
    advice: list[str] = [STUDENT_FUNDS_NOTE]

    required_funds = ASSUMED_TUITION + STUDENT_LIVING_COST
    if profile.savings_exempt:
        strengths.append("Exempt from standard proof of funds.")
    elif profile.savings >= required_funds:
        probability += 10
        strengths.append(f"Savings of ${profile.savings:,} CAD cover tuition and living costs.")
    else:
        probability -= 20
        risks.append(f"Savings of ${profile.savings:,} CAD are below the estimated ${required_funds:,} CAD needed.")
        advice.append("Add a sponsor's funds or a GIC to meet proof of funds.")

    if profile.language_details.has_test:
        probability += 5
        strengths.append(f"{profile.language_details.test_type.value} result on file.")
    else:
        risks.append("No English test yet; most institutions require IELTS Academic, PTE or TOEFL for admission.")
        advice.append("Book an English test early; admission letters depend on it.")

    if profile.has_visa_history:
        probability += 5
        strengths.append("Prior travel history supports genuine temporary intent.")

    penalty, history_risks = _history_risks(profile)
    probability -= penalty
    risks.extend(history_risks)

    if profile.age >= 30:
        risks.append("Study gap and age may require a strong statement of purpose.")

    advice.append("Choose a program of at least 2 years to qualify for a 3-year PGWP.")
    advice.append("Gain one year of skilled Canadian work after graduation to qualify for CEC.")

    probability = max(5, min(95, probability))
    pathways = [
        Pathway(
            name="Study Permit",
            description="Enrol at a Designated Learning Institution and obtain a study permit.",
            eligibility_score=probability,
            timeline="8-16 weeks processing",
            type=PathwayType.STUDY,
        ),
        Pathway(
            name="Post-Graduation Work Permit (PGWP)",
            description="Open work permit for up to 3 years after an eligible program.",
            eligibility_score=max(0, probability - 5),
            timeline="After graduation",
            type=PathwayType.STUDY,
        ),
        Pathway(
            name="Canadian Experience Class (after graduation)",
            description="Express Entry with one year of skilled Canadian work experience.",
            eligibility_score=_crs_score_to_percent(projections["two_year_study_plus_work"]),
            timeline="3-4 years",
            type=PathwayType.FEDERAL,
        ),
        Pathway(
            name=f"{profile.target_province.value} International Graduate Stream",
            description="Provincial nomination for graduates of in-province institutions.",
            eligibility_score=max(0, probability - 15),
            timeline="2-4 years",
            type=PathwayType.PROVINCIAL,
        ),
    ]
    recommended = [p for p in pathways if p.eligibility_score >= 50]
    other = [p for p in pathways if p.eligibility_score < 50]

    return AnalysisResult(
        overall_success_probability=probability,
        crs_score_prediction=projections["current"],
        future_crs_predictions=CrsProjections(**projections),
        risk_factors=risks,
        strengths=strengths,
        assumptions=list(request.assumptions),
        recommended_pathways=recommended,
        other_pathways=other,
        strategic_advice=advice,
        study_recommendations=_student_programs(profile),
    )


def analyze_worker(request: AnalysisRequest) -> AnalysisResult:
    profile = request.profile
    crs = estimate_crs(profile)
    inp, _ = profile_to_crs_input(profile)
    clb_min = min(inp.first_language)
    crs_percent = _crs_score_to_percent(crs.total)

    strengths: list[str] = []
    risks: list[str] = []
    advice: list[str] = []

    if 20 <= profile.age <= 29:
        strengths.append("Age is in the maximum-points band (20-29).")
    elif profile.age >= 40:
        risks.append("Age points drop sharply after 40.")
    if clb_min >= 9:
        strengths.append("CLB 9+ in every skill unlocks the top language and transferability points.")
    elif clb_min == 0:
        risks.append("No designated language test result; Express Entry requires IELTS General, CELPIP-G, PTE Core, TEF or TCF.")
        advice.append("Take IELTS General Training or CELPIP-G; CLB 9 adds up to 100+ CRS points.")
    elif clb_min < 7:
        risks.append(f"Lowest skill is CLB {clb_min}; most programs need CLB 7.")
        advice.append("Retake the language test to reach CLB 7 in every skill.")
    if inp.canadian_work_years >= 1:
        strengths.append("Canadian work experience qualifies you for CEC.")
    if profile.has_french and inp.second_language and min(inp.second_language) >= 7:
        strengths.append("French at NCLC 7+ earns bonus points and French-category draws.")
    elif not profile.has_french:
        advice.append("French at NCLC 7 adds up to 50 bonus points and access to French-language draws.")
    if not profile.has_eca and not profile.has_canadian_education:
        risks.append("An Educational Credential Assessment is required for foreign education.")
        advice.append("Order an ECA (WES or similar) now; it takes several weeks.")
    if profile.has_sibling_in_canada:
        strengths.append("A sibling in Canada adds 15 points.")

    penalty, history_risks = _history_risks(profile)
    risks.extend(history_risks)

    skilled_work = inp.canadian_work_years + inp.foreign_work_years >= 1
    pathways: list[Pathway] = []

    cec_ok = inp.canadian_work_years >= 1 and clb_min >= 7
    pathways.append(Pathway(
        name="Canadian Experience Class (CEC)",
        description="Express Entry for applicants with 1+ year of skilled Canadian work.",
        eligibility_score=crs_percent if cec_ok else 0,
        timeline="6-8 months after ITA",
        type=PathwayType.FEDERAL,
    ))

    funds_ok = profile.savings >= FSW_SETTLEMENT_FUNDS or profile.savings_exempt or profile.has_job_offer
    fsw_ok = skilled_work and clb_min >= 7 and funds_ok
    if skilled_work and clb_min >= 7 and not funds_ok:
        risks.append(f"FSW requires about ${FSW_SETTLEMENT_FUNDS:,} CAD in settlement funds.")
    pathways.append(Pathway(
        name="Federal Skilled Worker Program (FSWP)",
        description="Express Entry for skilled workers with foreign experience.",
        eligibility_score=crs_percent if fsw_ok else 0,
        timeline="6-8 months after ITA",
        type=PathwayType.FEDERAL,
    ))

    s, l, r, w = inp.first_language
    fst_ok = (profile.certificate_of_qualification or profile.has_job_offer) and min(s, l) >= 5 and min(r, w) >= 4
    pathways.append(Pathway(
        name="Federal Skilled Trades Program (FSTP)",
        description="Express Entry for qualified tradespeople with a certificate or job offer.",
        eligibility_score=crs_percent if fst_ok else 0,
        timeline="6-8 months after ITA",
        type=PathwayType.FEDERAL,
    ))

    pnp_score = 95 if profile.has_nomination_certificate else 60 if profile.has_job_offer else 35 if skilled_work else 10
    pathways.append(Pathway(
        name=f"{profile.target_province.value} Provincial Nominee Program",
        description="A nomination adds 600 CRS points through an enhanced PNP stream.",
        eligibility_score=pnp_score,
        timeline="12-18 months",
        type=PathwayType.PROVINCIAL,
    ))

    french = clb_levels(profile.french_details) if profile.has_french else (0, 0, 0, 0)
    if min(french) >= 7:
        pathways.append(Pathway(
            name="Express Entry - French-language proficiency category",
            description="Category-based draws with lower cutoffs for strong French speakers.",
            eligibility_score=min(100, crs_percent + 30),
            timeline="6-8 months after ITA",
            type=PathwayType.FEDERAL,
        ))

    if profile.has_job_offer and profile.job_offer_is_lmia:
        strengths.append("An LMIA-supported job offer strengthens work permit and PNP options.")

    advice.append(f"Your estimated CRS is {crs.total}; recent general draws have needed around {TYPICAL_CRS_CUTOFF}.")
    if crs.total < TYPICAL_CRS_CUTOFF and not profile.has_nomination_certificate:
        advice.append("A provincial nomination (+600) is the fastest way past the cutoff.")

    recommended = [p for p in pathways if p.eligibility_score >= 50]
    other = [p for p in pathways if p.eligibility_score < 50]
    best = max((p.eligibility_score for p in pathways), default=0)
    probability = max(0, min(100, best - penalty))

    return AnalysisResult(
        overall_success_probability=probability,
        crs_score_prediction=crs.total,
        risk_factors=risks,
        strengths=strengths,
        assumptions=list(request.assumptions),
        recommended_pathways=recommended,
        other_pathways=other,
        strategic_advice=advice,
    )


def run_rules_analysis(request: AnalysisRequest) -> AnalysisResult:
    if request.applicant_type == ApplicantType.STUDENT:
        result = analyze_student(request)
    elif request.applicant_type == ApplicantType.WORKER:
        result = analyze_worker(request)
    else:
        raise ValueError(f"No assessment for applicant type {request.applicant_type.value}")
    logger.info(
        "Rules analysis for %s: probability=%.0f crs=%.0f",
        request.applicant_type.value,
        result.overall_success_probability,
        result.crs_score_prediction,
    )
    return result
