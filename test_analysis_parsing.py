"""Agent output recovery, prompt policy and LLM configuration."""

import json

import pytest

from app.ai.analysis_agent import parse_analysis_output
from app.ai.analysis_prompts import (
    IELTS_ACADEMIC_ASSUMPTION,
    STUDENT_NO_TEST_ASSUMPTION,
    WORKER_NO_TEST_ASSUMPTION,
    build_analysis_prompt,
    policy_assumptions,
)
from app.ai.llm import build_llm, extract_json
from app.ai.resume_agent import parse_resume_output
from models.analysis import AnalysisRequest
from models.profile import ApplicantProfile, ApplicantType, LanguageScores

RESULT = {
    "overall_success_probability": 64,
    "crs_score_prediction": 455,
    "risk_factors": ["No job offer"],
    "strengths": ["CLB 9"],
    "assumptions": [],
    "recommended_pathways": [{"name": "FSWP", "eligibility_score": 70, "type": "Federal"}],
    "other_pathways": [],
    "strategic_advice": ["Learn French"],
}


def test_extract_json_direct_fenced_and_embedded():
    payload = json.dumps(RESULT)
    assert extract_json(payload) == RESULT
    assert extract_json(f"Here you go:\n```json\n{payload}\n```") == RESULT
    assert extract_json(f"Final answer: {payload} Thanks!") == RESULT


def test_extract_json_ignores_braces_inside_strings():
    raw = 'Result: {"note": "use {curly} braces", "n": 1} done'
    assert extract_json(raw) == {"note": "use {curly} braces", "n": 1}


def test_extract_json_returns_none_for_text():
    assert extract_json("I could not assess this profile.") is None
    assert extract_json("") is None
    assert extract_json("[1, 2, 3]") is None


def test_parse_analysis_output():
    result = parse_analysis_output("```json\n" + json.dumps(RESULT) + "\n```")
    assert result.crs_score_prediction == 455
    assert result.recommended_pathways[0].name == "FSWP"

    with pytest.raises(ValueError):
        parse_analysis_output("not json")
    with pytest.raises(ValueError):
        parse_analysis_output(json.dumps({"strengths": []}))


def test_parse_resume_output_normalizes_fields():
    raw = json.dumps({"fields": {
        "name": "  Li Wei ",
        "country": "China",
        "education_level": "Master",
        "field_of_study": "Civil Engineering",
        "work_experience_years": "6",
        "english_score": None,
    }})
    assert parse_resume_output(raw) == {
        "name": "Li Wei",
        "country": "China",
        "education_level": "Master",
        "field_of_study": "Civil Engineering",
        "work_experience_years": 6.0,
    }
    assert parse_resume_output("no json here") == {}


def test_policy_assumptions_per_persona():
    no_test = ApplicantProfile()
    academic = ApplicantProfile(language_details=LanguageScores(test_type="IELTS Academic", speaking=7))
    assert policy_assumptions(no_test, ApplicantType.STUDENT) == [STUDENT_NO_TEST_ASSUMPTION]
    assert policy_assumptions(no_test, ApplicantType.WORKER) == [WORKER_NO_TEST_ASSUMPTION]
    assert policy_assumptions(academic, ApplicantType.STUDENT) == [IELTS_ACADEMIC_ASSUMPTION]


def test_prompt_mentions_persona_and_assumptions():
    profile = ApplicantProfile(name="Asha")
    request = AnalysisRequest(
        profile=profile,
        applicant_type=ApplicantType.STUDENT,
        assumptions=policy_assumptions(profile, ApplicantType.STUDENT),
    )
    prompt = build_analysis_prompt(request)
    assert "INTERNATIONAL STUDENT" in prompt
    assert STUDENT_NO_TEST_ASSUMPTION in prompt
    assert "two_year_study_plus_work" in prompt
    assert "Asha" in prompt


def test_build_llm_requires_api_key(monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    with pytest.raises(RuntimeError, match="OPENROUTER_API_KEY"):
        build_llm()
