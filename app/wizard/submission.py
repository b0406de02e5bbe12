"""
Submission gate: hand the completed profile to the analyzer exactly once.

The analyzer is any callable taking an AnalysisRequest and returning an
AnalysisResult (or a dict in that shape). It is blocking, so it runs in the
default executor.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Union

from app.ai.analysis_prompts import policy_assumptions
from app.wizard.session import InvalidTransition, WizardSession
from models.analysis import AnalysisRequest, AnalysisResult
from models.wizard import ViewState

logger = logging.getLogger(__name__)

ASSESSMENT_FAILED_MESSAGE = "Something went wrong with the AI assessment. Please try again."

Analyzer = Callable[[AnalysisRequest], Union[AnalysisResult, dict]]


class SubmissionInProgress(Exception):
    """A submission for this session is already waiting on the analyzer."""


def _merge_assumptions(result: AnalysisResult, declared: list[str]) -> AnalysisResult:
    missing = [a for a in declared if a not in result.assumptions]
    if not missing:
        return result
    return result.model_copy(update={"assumptions": [*result.assumptions, *missing]})


async def submit(session: WizardSession, analyzer: Analyzer) -> bool:
    """
    Run the analysis for the session's current profile.

    Returns True when a result was stored and the session moved to the user
    dashboard, False when nothing happened (no persona chosen) or the
    analyzer failed. On failure the session keeps its profile and step and
    carries a user-facing error message.
    """
    if session.applicant_type is None:
        logger.debug("Session %s: submit ignored, no applicant type", session.session_id)
        return False
    if session.loading:
        raise SubmissionInProgress("An assessment is already running for this session")
    if session.parsing:
        raise InvalidTransition("Please wait for the resume to finish parsing")
    if session.view != ViewState.ASSESSMENT:
        raise InvalidTransition(f"Cannot submit from '{session.view.value}'")

    profile = session.profile.model_copy(deep=True)
    declared = policy_assumptions(profile, session.applicant_type)
    request = AnalysisRequest(profile=profile, applicant_type=session.applicant_type, assumptions=declared)

    session.loading = True
    session.error = None
    loop = asyncio.get_running_loop()
    try:
        raw = await loop.run_in_executor(None, analyzer, request)
        result = raw if isinstance(raw, AnalysisResult) else AnalysisResult.model_validate(raw)
    except Exception:
        logger.exception("Session %s: analysis failed", session.session_id)
        session.error = ASSESSMENT_FAILED_MESSAGE
        return False
    finally:
        session.loading = False

    session.result = _merge_assumptions(result, declared)
    session.submitted_profile = profile
    session.view = ViewState.USER_DASHBOARD
    logger.info(
        "Session %s: assessment complete (probability=%.0f, crs=%.0f)",
        session.session_id,
        session.result.overall_success_probability,
        session.result.crs_score_prediction,
    )
    return True
