"""
Prompt text for the profile analysis agent.

The CRS policy assumptions live here as data so the submission gate can
attach them to every result, whichever analyzer produced it.
"""

from __future__ import annotations

from models.analysis import AnalysisRequest
from models.profile import ApplicantProfile, ApplicantType, LanguageScores, LanguageTestType

IELTS_ACADEMIC_ASSUMPTION = (
    "IELTS Academic scores were treated as IELTS General Training scores (same CLB level) for the CRS estimate."
)
STUDENT_NO_TEST_ASSUMPTION = (
    "No English test on file: CLB 5 (approx. IELTS 5.0) was assumed for the current CRS estimate, "
    "as admission to a Canadian program requires at least this level."
)
WORKER_NO_TEST_ASSUMPTION = "No English test on file: language factors were scored at 0 CRS points."

STUDENT_FUNDS_NOTE = "Proof of funds for a study permit is first-year tuition + $20,635 CAD for living expenses."

AGENT_ROLE = "Canadian Immigration Assessment Specialist"
AGENT_GOAL = (
    "Assess an applicant's chances of immigrating to Canada, estimate their Express Entry CRS score "
    "and rank the pathways that fit their profile."
)
AGENT_BACKSTORY = (
    "You are an expert Canadian immigration analyst. You know the Express Entry programs (CEC, FSWP, FSTP "
    "and category-based draws), the Provincial Nominee Program streams and the study permit to PGWP to PR "
    "route. You apply the CRS grids precisely and state every assumption you make. You never give legal "
    "advice and you always return strict JSON."
)

OUTPUT_SCHEMA = """{
  "overall_success_probability": number 0-100,
  "crs_score_prediction": number,
  "future_crs_predictions": {            // students only, otherwise null
    "current": number,
    "one_year_study": number,
    "two_year_study": number,
    "two_year_study_plus_work": number
  },
  "risk_factors": [string],
  "strengths": [string],
  "assumptions": [string],
  "recommended_pathways": [
    {"name": string, "description": string, "eligibility_score": number 0-100,
     "timeline": string, "type": "Federal|Provincial|Study|Business|Family"}
  ],
  "other_pathways": [ same shape as recommended_pathways ],
  "strategic_advice": [string],
  "study_recommendations": [             // students only
    {"program_name": string, "institution": string, "location": string,
     "tuition": string, "match_reason": string}
  ]
}"""


def policy_assumptions(profile: ApplicantProfile, applicant_type: ApplicantType) -> list[str]:
    """Assumptions the CRS estimate makes for this profile, in display order."""
    assumptions: list[str] = []
    test_type = profile.language_details.test_type
    if test_type == LanguageTestType.IELTS_ACADEMIC:
        assumptions.append(IELTS_ACADEMIC_ASSUMPTION)
    elif test_type == LanguageTestType.NONE:
        if applicant_type == ApplicantType.STUDENT:
            assumptions.append(STUDENT_NO_TEST_ASSUMPTION)
        elif applicant_type == ApplicantType.WORKER:
            assumptions.append(WORKER_NO_TEST_ASSUMPTION)
    return assumptions


def _describe_language(scores: LanguageScores | None) -> str:
    if scores is None or not scores.has_test:
        return "None"
    overall = scores.overall_score if scores.overall_score is not None else "n/a"
    return (
        f"{scores.test_type.value} - Overall:{overall}, R:{scores.reading}, W:{scores.writing}, "
        f"L:{scores.listening}, S:{scores.speaking}"
    )


def _persona_instructions(profile: ApplicantProfile, applicant_type: ApplicantType) -> str:
    if applicant_type == ApplicantType.STUDENT:
        return (
            "CONTEXT: THE APPLICANT IS A PROSPECTIVE INTERNATIONAL STUDENT.\n"
            "1. Estimate study permit approval probability from finances, study gap, home ties and intent.\n"
            f"   {STUDENT_FUNDS_NOTE}\n"
            "2. Suggest 3-4 matching programs at Designated Learning Institutions (study_recommendations).\n"
            "3. Project CRS scores (future_crs_predictions):\n"
            "   - current: the profile as it is now\n"
            "   - one_year_study: after a 1-year Canadian credential\n"
            "   - two_year_study: after a 2-year Canadian credential\n"
            "   - two_year_study_plus_work: 2-year credential plus 1 year of Canadian work (CEC eligible)\n"
        )
    teer = profile.job_offer_teer.value if profile.job_offer_teer else "N/A"
    category = profile.immigration_category.value if profile.immigration_category else "Not stated"
    return (
        "CONTEXT: THE APPLICANT IS A SKILLED WORKER SEEKING PERMANENT RESIDENCE.\n"
        "Reference the current Express Entry programs (CEC, FSWP, FSTP, category-based draws) and PNP streams.\n"
        f"- Preferred category: {category}\n"
        f"- ECA completed: {profile.has_eca}\n"
        f"- Job offer: {profile.has_job_offer} (LMIA: {profile.job_offer_is_lmia}, TEER: {teer})\n"
        f"- Provincial nomination: {profile.has_nomination_certificate}\n"
        "Set future_crs_predictions and study_recommendations to null / [].\n"
    )


def _profile_details(profile: ApplicantProfile) -> str:
    lines = [
        f"- Name: {profile.name or 'Not provided'}",
        f"- Age: {profile.age}",
        f"- Country of residence: {profile.country_of_residence}",
        f"- Marital status: {profile.marital_status.value}",
        f"- Education: {profile.education_level.value} in {profile.field_of_study or 'n/a'} "
        f"(Canadian: {profile.has_canadian_education}, ECA: {profile.has_eca})",
        f"- Work: {profile.work_experience_years} years, Canadian {profile.canadian_work_experience.value}, "
        f"foreign {profile.foreign_work_experience.value}, role: {profile.job_role or 'n/a'}",
        f"- English: {_describe_language(profile.language_details)}",
        f"- French: {_describe_language(profile.french_details) if profile.has_french else 'None'}",
        f"- Savings: {profile.savings} CAD (exempt: {profile.savings_exempt})",
        f"- Sibling in Canada: {profile.has_sibling_in_canada}",
        f"- Trade certificate of qualification: {profile.certificate_of_qualification}",
        f"- Visa history: {profile.has_visa_history}, refusals: {profile.has_refusal_history}, "
        f"criminal record: {profile.has_criminal_record}, medical condition: {profile.has_medical_condition}",
        f"- Target province: {profile.target_province.value}; "
        f"preferred: {', '.join(p.value for p in profile.preferred_provinces) or 'none'}",
    ]
    if profile.intended_study_field:
        lines.append(f"- Intended field of study: {profile.intended_study_field}")
    if profile.grades_or_gpa:
        lines.append(f"- Grades / GPA: {profile.grades_or_gpa}")
    spouse = profile.spouse
    if spouse is not None:
        lines.append(
            f"- Spouse: Canadian {spouse.is_canadian}, accompanying {spouse.coming_to_canada}, "
            f"education {spouse.education_level.value}, Canadian work {spouse.canadian_work_experience_years.value}, "
            f"language {_describe_language(spouse.language_scores)}"
        )
    return "\n".join(lines)


def build_analysis_prompt(request: AnalysisRequest) -> str:
    profile = request.profile
    policy = "\n".join(f"{i}. {a}" for i, a in enumerate(request.assumptions, start=1)) or "None for this profile."
    return f"""Assess this applicant for immigration to Canada.

{_persona_instructions(profile, request.applicant_type)}
## Profile details
{_profile_details(profile)}

## CRS calculation rules
- IELTS Academic scores count as IELTS General Training scores (same CLB level).
- A student with no English test is assumed to be at CLB 5 (approx. IELTS 5.0) for the current CRS.
- A worker with no English test scores 0 points for language.

## Assumptions that apply to this profile
{policy}
Copy each of these into "assumptions" and add any others you make.

## Output
Return STRICT JSON ONLY with double quotes, matching this shape:
{OUTPUT_SCHEMA}
"strategic_advice" must be an ARRAY of short, actionable strings.
Do not include any extra text outside JSON."""
