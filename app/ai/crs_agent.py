"""
CRS (Comprehensive Ranking System) estimator for Express Entry.

Grids follow the official IRCC criteria:
https://www.canada.ca/en/immigration-refugees-citizenship/services/immigrate-canada/express-entry/eligibility/criteria-comprehensive-ranking-system/grid.html

As of March 25, 2025, job offer points are no longer awarded. Job offers
still affect eligibility for some programs but not CRS score.

Experience bands from the wizard are scored at their lower bound ("2-3"
years counts as 2), so the estimate never overstates a profile.

Legal disclaimer: This tool is for general guidance only. Official IRCC
system results govern.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from models.profile import (
    ApplicantProfile,
    CanadianExperience,
    EducationLevel,
    ForeignExperience,
    LanguageScores,
    LanguageTestType,
    spouse_accompanying,
)

Clb = tuple[int, int, int, int]  # speaking, listening, reading, writing

NO_LANGUAGE: Clb = (0, 0, 0, 0)

# --- Language test → CLB conversion ---
# IELTS General Training band per skill → CLB (listening and reading differ from speaking/writing)
_IELTS_THRESHOLDS = {
    "speaking": [(7.5, 10), (7.0, 9), (6.5, 8), (6.0, 7), (5.5, 6), (5.0, 5), (4.0, 4)],
    "listening": [(8.5, 10), (8.0, 9), (7.5, 8), (6.0, 7), (5.5, 6), (5.0, 5), (4.5, 4)],
    "reading": [(8.0, 10), (7.0, 9), (6.5, 8), (6.0, 7), (5.0, 6), (4.0, 5), (3.5, 4)],
    "writing": [(7.5, 10), (7.0, 9), (6.5, 8), (6.0, 7), (5.5, 6), (5.0, 5), (4.0, 4)],
}

# PTE Core score per skill → CLB
_PTE_THRESHOLDS = {
    "speaking": [(89, 10), (84, 9), (76, 8), (68, 7), (59, 6), (51, 5), (42, 4)],
    "listening": [(82, 10), (71, 9), (60, 8), (50, 7), (39, 6), (28, 5), (18, 4)],
    "reading": [(88, 10), (78, 9), (69, 8), (60, 7), (51, 6), (42, 5), (33, 4)],
    "writing": [(90, 10), (88, 9), (79, 8), (69, 7), (60, 6), (51, 5), (41, 4)],
}

_SKILLS = ("speaking", "listening", "reading", "writing")


def _from_thresholds(score: float, thresholds: list[tuple[float, int]]) -> int:
    for minimum, clb in thresholds:
        if score >= minimum:
            return clb
    return 0


def _direct_level(score: float) -> int:
    # CELPIP-G and NCLC-reported French results are already on the 1-12 scale
    level = int(score)
    return level if 1 <= level <= 12 else 0


def clb_levels(scores: LanguageScores | None) -> Clb:
    """Convert one language result to CLB per skill. Unsupported tests give zeros."""
    if scores is None or not scores.has_test:
        return NO_LANGUAGE
    test = scores.test_type
    values = [getattr(scores, skill) for skill in _SKILLS]
    if test in (LanguageTestType.IELTS, LanguageTestType.IELTS_ACADEMIC):
        # IELTS Academic is scored like General Training
        return tuple(_from_thresholds(v, _IELTS_THRESHOLDS[s]) for s, v in zip(_SKILLS, values))
    if test == LanguageTestType.PTE_CORE:
        return tuple(_from_thresholds(v, _PTE_THRESHOLDS[s]) for s, v in zip(_SKILLS, values))
    if test in (LanguageTestType.CELPIP, LanguageTestType.TEF, LanguageTestType.TCF):
        return tuple(_direct_level(v) for v in values)
    # TOEFL / Duolingo are not designated tests for Express Entry
    return NO_LANGUAGE


def _is_french(scores: LanguageScores | None) -> bool:
    return scores is not None and scores.test_type in (LanguageTestType.TEF, LanguageTestType.TCF)


# --- Grids: (single, with_spouse) ---

_AGE_GRID = {
    18: (99, 90), 19: (105, 95), 30: (105, 95), 31: (99, 94), 32: (94, 89), 33: (88, 84),
    34: (83, 79), 35: (77, 74), 36: (72, 68), 37: (66, 63), 38: (61, 58), 39: (55, 53),
    40: (50, 47), 41: (39, 37), 42: (28, 26), 43: (17, 16), 44: (6, 5),
}

EDUCATION_TIERS = ("none", "secondary", "one_year", "two_year", "bachelors", "two_or_more", "masters", "phd")

_EDUCATION_GRID = {
    "none": (0, 0), "secondary": (30, 28), "one_year": (90, 84), "two_year": (98, 91),
    "bachelors": (120, 112), "two_or_more": (128, 119), "masters": (135, 126), "phd": (150, 140),
}

_SPOUSE_EDUCATION_POINTS = {
    "none": 0, "secondary": 2, "one_year": 6, "two_year": 7,
    "bachelors": 8, "two_or_more": 9, "masters": 10, "phd": 10,
}

_EDUCATION_TIER_BY_LEVEL = {
    EducationLevel.HIGH_SCHOOL: "secondary",
    EducationLevel.DIPLOMA: "two_year",
    EducationLevel.BACHELOR: "bachelors",
    EducationLevel.MASTER: "masters",
    EducationLevel.MEDICAL_PROFESSIONAL: "masters",  # entry-to-practice professional degree
    EducationLevel.PHD: "phd",
}

_CANADIAN_WORK_GRID = [(0, 0), (40, 35), (53, 46), (64, 56), (72, 63), (80, 70)]
_SPOUSE_CANADIAN_WORK = [0, 5, 7, 8, 9, 10]

_CANADIAN_YEARS = {
    CanadianExperience.NONE: 0,
    CanadianExperience.ONE: 1,
    CanadianExperience.TWO_THREE: 2,
    CanadianExperience.FOUR_PLUS: 4,
}
_FOREIGN_YEARS = {
    ForeignExperience.NONE: 0,
    ForeignExperience.ONE: 1,
    ForeignExperience.TWO_THREE: 2,
    ForeignExperience.THREE_PLUS: 3,
}


def _pick(pair: tuple[int, int], with_spouse: bool) -> int:
    return pair[1] if with_spouse else pair[0]


def _age_points(age: int, with_spouse: bool) -> int:
    if age < 18 or age >= 45:
        return 0
    if 20 <= age <= 29:
        return _pick((110, 100), with_spouse)
    return _pick(_AGE_GRID[age], with_spouse)


def _first_language_points(clb: int, with_spouse: bool) -> int:
    if clb >= 10:
        return _pick((34, 32), with_spouse)
    grid = {4: (6, 6), 5: (6, 6), 6: (9, 8), 7: (17, 16), 8: (23, 22), 9: (31, 29)}
    return _pick(grid.get(clb, (0, 0)), with_spouse)


def _second_language_points(clbs: Clb, with_spouse: bool) -> int:
    total = 0
    for clb in clbs:
        if clb >= 9:
            total += 6
        elif clb >= 7:
            total += 3
        elif clb >= 5:
            total += 1
    return min(total, 22 if with_spouse else 24)


def _spouse_language_points(clbs: Clb) -> int:
    total = 0
    for clb in clbs:
        if clb >= 9:
            total += 5
        elif clb >= 7:
            total += 3
        elif clb >= 5:
            total += 1
    return total


def _canadian_work_points(years: int, with_spouse: bool) -> int:
    return _pick(_CANADIAN_WORK_GRID[min(max(0, years), 5)], with_spouse)


# --- Skill transferability (max 100) ---

def _education_transfer_level(tier: str) -> int:
    """0: no post-secondary, 1: one credential, 2: two or more / master's / PhD."""
    if tier in ("two_or_more", "masters", "phd"):
        return 2
    if tier in ("one_year", "two_year", "bachelors"):
        return 1
    return 0


def _transferability(inp: "CRSInput", clb_min: int) -> dict[str, int]:
    edu = _education_transfer_level(inp.education)
    lang_band = 2 if clb_min >= 9 else 1 if clb_min >= 7 else 0
    cdn_band = 2 if inp.canadian_work_years >= 2 else 1 if inp.canadian_work_years >= 1 else 0
    foreign_band = 2 if inp.foreign_work_years >= 3 else 1 if inp.foreign_work_years >= 1 else 0

    grid = {(1, 1): 13, (1, 2): 25, (2, 1): 25, (2, 2): 50}

    education = min(50, grid.get((edu, lang_band), 0) + grid.get((edu, cdn_band), 0))
    foreign = min(50, grid.get((foreign_band, lang_band), 0) + grid.get((foreign_band, cdn_band), 0))
    certificate = 0
    if inp.certificate_of_qualification:
        certificate = 50 if clb_min >= 7 else 25 if clb_min >= 5 else 0
    return {"education": education, "foreign_work": foreign, "certificate": certificate}


def _canadian_study_points(years: int) -> int:
    if years >= 3:
        return 30
    if years >= 1:
        return 15
    return 0


def _french_bonus(french: Clb, english: Clb) -> int:
    if not french or min(french) < 7:
        return 0
    return 50 if min(english) >= 5 else 25


@dataclass
class CRSInput:
    """Normalized input for CRS computation (built from an ApplicantProfile)."""

    age: int = 0
    with_spouse: bool = False
    education: str = "secondary"
    canadian_study_years: int = 0
    first_language: Clb = NO_LANGUAGE
    first_language_is_french: bool = False
    second_language: Optional[Clb] = None
    canadian_work_years: int = 0
    foreign_work_years: int = 0
    certificate_of_qualification: bool = False
    provincial_nomination: bool = False
    sibling_in_canada: bool = False
    spouse_education: str = "none"
    spouse_canadian_work_years: int = 0
    spouse_language: Clb = NO_LANGUAGE


@dataclass
class CRSResult:
    """CRS computation result with breakdown."""

    total: int = 0
    core_human_capital: int = 0
    spouse_factors: int = 0
    skill_transferability: int = 0
    additional_points: int = 0
    breakdown: dict[str, Any] = field(default_factory=dict)
    missing_or_defaulted: list[str] = field(default_factory=list)
    disclaimer: str = (
        "This tool is for general guidance only. Official IRCC system results govern. "
        "See Canada.ca Express Entry CRS calculator. Not legal advice."
    )


def compute_crs(inp: CRSInput) -> CRSResult:
    """Score a normalized input. Totals are capped at 1200."""
    with_spouse = inp.with_spouse
    clb_min = min(inp.first_language)

    age_pts = _age_points(inp.age, with_spouse)
    edu_pts = _pick(_EDUCATION_GRID[inp.education], with_spouse)
    lang_pts = sum(_first_language_points(clb, with_spouse) for clb in inp.first_language)
    second_pts = _second_language_points(inp.second_language, with_spouse) if inp.second_language else 0
    cdn_work_pts = _canadian_work_points(inp.canadian_work_years, with_spouse)
    core = age_pts + edu_pts + lang_pts + second_pts + cdn_work_pts

    spouse_pts = 0
    if with_spouse:
        spouse_pts = (
            _SPOUSE_EDUCATION_POINTS[inp.spouse_education]
            + _SPOUSE_CANADIAN_WORK[min(max(0, inp.spouse_canadian_work_years), 5)]
            + _spouse_language_points(inp.spouse_language)
        )

    transfer = _transferability(inp, clb_min)
    transferability = min(100, sum(transfer.values()))

    if inp.first_language_is_french:
        french_bonus = _french_bonus(inp.first_language, inp.second_language or NO_LANGUAGE)
    else:
        french_bonus = _french_bonus(inp.second_language or (), inp.first_language)

    nomination = 600 if inp.provincial_nomination else 0
    study = _canadian_study_points(inp.canadian_study_years)
    sibling = 15 if inp.sibling_in_canada else 0
    additional = min(600, nomination + study + sibling + french_bonus)

    total = min(1200, core + spouse_pts + transferability + additional)

    breakdown = {
        "age": age_pts,
        "education": edu_pts,
        "first_official_language": lang_pts,
        "second_official_language": second_pts,
        "canadian_work_experience": cdn_work_pts,
        "spouse_factors": spouse_pts,
        "transferability_education": transfer["education"],
        "transferability_foreign_work": transfer["foreign_work"],
        "transferability_certificate": transfer["certificate"],
        "provincial_nomination": nomination,
        "canadian_study_bonus": study,
        "sibling_in_canada": sibling,
        "french_bonus": french_bonus,
    }

    return CRSResult(
        total=total,
        core_human_capital=core,
        spouse_factors=spouse_pts,
        skill_transferability=transferability,
        additional_points=additional,
        breakdown=breakdown,
    )


def profile_to_crs_input(profile: ApplicantProfile, assumed_clb: int | None = None) -> tuple[CRSInput, list[str]]:
    """
    Map an ApplicantProfile to CRSInput.

    ``assumed_clb`` fills the first language when no test is on file (the
    student policy assumes CLB 5). Returns the input and the names of fields
    that were assumed or could not be scored.
    """
    defaulted: list[str] = []
    primary = profile.language_details

    if primary.has_test:
        first = clb_levels(primary)
        if first == NO_LANGUAGE:
            defaulted.append("language_details")
    elif assumed_clb:
        first = (assumed_clb,) * 4
        defaulted.append("language_details")
    else:
        first = NO_LANGUAGE
        defaulted.append("language_details")

    second: Optional[Clb] = None
    if profile.has_french and profile.french_details is not None and not _is_french(primary):
        second = clb_levels(profile.french_details)

    education = _EDUCATION_TIER_BY_LEVEL[profile.education_level]
    canadian_study = 0
    if profile.has_canadian_education:
        canadian_study = 3 if education in ("bachelors", "masters", "phd") else 1 if education != "secondary" else 0

    with_spouse = spouse_accompanying(profile)
    spouse = profile.spouse

    inp = CRSInput(
        age=profile.age,
        with_spouse=with_spouse,
        education=education,
        canadian_study_years=canadian_study,
        first_language=first,
        first_language_is_french=_is_french(primary),
        second_language=second,
        canadian_work_years=_CANADIAN_YEARS[profile.canadian_work_experience],
        foreign_work_years=_FOREIGN_YEARS[profile.foreign_work_experience],
        certificate_of_qualification=profile.certificate_of_qualification,
        provincial_nomination=profile.has_nomination_certificate,
        sibling_in_canada=profile.has_sibling_in_canada,
        spouse_education=_EDUCATION_TIER_BY_LEVEL[spouse.education_level] if with_spouse else "none",
        spouse_canadian_work_years=_CANADIAN_YEARS[spouse.canadian_work_experience_years] if with_spouse else 0,
        spouse_language=clb_levels(spouse.language_scores) if with_spouse else NO_LANGUAGE,
    )
    return inp, defaulted


def estimate_crs(profile: ApplicantProfile, assumed_clb: int | None = None) -> CRSResult:
    inp, defaulted = profile_to_crs_input(profile, assumed_clb)
    result = compute_crs(inp)
    result.missing_or_defaulted = defaulted
    return result


def _after_study(inp: CRSInput, years: int) -> CRSInput:
    """Education tier after completing a Canadian program of ``years`` years."""
    tier = inp.education
    if years == 1:
        upgraded = {"none": "one_year", "secondary": "one_year", "bachelors": "two_or_more"}.get(tier, tier)
    else:
        upgraded = {"none": "two_year", "secondary": "two_year", "one_year": "two_or_more",
                    "two_year": "two_or_more", "bachelors": "masters", "two_or_more": "masters"}.get(tier, tier)
    return replace(inp, education=upgraded, canadian_study_years=max(inp.canadian_study_years, years))


def project_student_crs(profile: ApplicantProfile, assumed_clb: int | None = 5) -> dict[str, int]:
    """
    Four CRS scenarios for a prospective student: now, after one or two years
    of Canadian study, and after two years of study plus one year of work.
    Age is advanced by the time each scenario takes.
    """
    inp, _ = profile_to_crs_input(profile, assumed_clb)

    one_year = _after_study(replace(inp, age=inp.age + 1), 1)
    two_year = _after_study(replace(inp, age=inp.age + 2), 2)
    plus_work = replace(
        _after_study(replace(inp, age=inp.age + 3), 2),
        canadian_work_years=max(inp.canadian_work_years, 1),
    )
    return {
        "current": compute_crs(inp).total,
        "one_year_study": compute_crs(one_year).total,
        "two_year_study": compute_crs(two_year).total,
        "two_year_study_plus_work": compute_crs(plus_work).total,
    }
