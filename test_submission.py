"""Submission gate and view transitions of a wizard session."""

import asyncio

import pytest

from app.ai.analysis_prompts import STUDENT_NO_TEST_ASSUMPTION
from app.wizard.session import InvalidTransition, WizardSession
from app.wizard.submission import ASSESSMENT_FAILED_MESSAGE, SubmissionInProgress, submit
from models.analysis import AnalysisResult
from models.profile import ApplicantType
from models.wizard import FieldUpdate, NestedUpdate, ViewState


class RecordingAnalyzer:
    def __init__(self, result=None, error=None):
        self.result = result or AnalysisResult(overall_success_probability=70, crs_score_prediction=410)
        self.error = error
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.result


def _assessment(applicant_type=ApplicantType.STUDENT) -> WizardSession:
    session = WizardSession()
    session.select_destination("canada")
    session.start(applicant_type)
    return session


def test_destination_flow():
    session = WizardSession()
    assert session.select_destination("Australia") is False
    assert session.view == ViewState.COUNTRY_SELECTION
    assert "coming soon" in session.notice

    assert session.select_destination("Canada") is True
    assert session.view == ViewState.LANDING
    session.back_to_destinations()
    assert session.view == ViewState.COUNTRY_SELECTION


def test_wizard_actions_need_assessment_view():
    session = WizardSession()
    with pytest.raises(InvalidTransition):
        session.next_step()
    with pytest.raises(InvalidTransition):
        session.start(ApplicantType.WORKER)


def test_dashboards_reachable_from_any_view():
    session = WizardSession()
    session.start(ApplicantType.SUPER_ADMIN)
    assert session.view == ViewState.SUPER_ADMIN_DASHBOARD
    session.start(ApplicantType.PARTNER)
    assert session.view == ViewState.PARTNER_DASHBOARD
    session.logout()
    assert session.view == ViewState.COUNTRY_SELECTION
    assert session.applicant_type is None


def test_spouse_branch_resizes_worker_wizard():
    session = _assessment(ApplicantType.WORKER)
    session.update_profile([
        FieldUpdate(name="marital_status", value="Married"),
        NestedUpdate(container="spouse", field="coming_to_canada", value="true"),
    ])
    assert session.sequencer.total == 5
    for _ in range(4):
        session.next_step()
    assert session.sequencer.current == 5

    session.update_profile([NestedUpdate(container="spouse", field="is_canadian", value="true")])
    assert session.sequencer.total == 4
    assert session.sequencer.current == 4


def test_submit_without_persona_is_noop():
    session = WizardSession()
    analyzer = RecordingAnalyzer()
    assert asyncio.run(submit(session, analyzer)) is False
    assert analyzer.requests == []
    assert session.loading is False


def test_successful_submit_moves_to_dashboard():
    session = _assessment()
    analyzer = RecordingAnalyzer()

    assert asyncio.run(submit(session, analyzer)) is True
    assert session.view == ViewState.USER_DASHBOARD
    assert session.loading is False
    assert session.submitted_profile == session.profile
    assert session.result.crs_score_prediction == 410

    request = analyzer.requests[0]
    assert request.applicant_type == ApplicantType.STUDENT
    assert request.assumptions == [STUDENT_NO_TEST_ASSUMPTION]
    # declared assumptions are attached even when the analyzer omits them
    assert STUDENT_NO_TEST_ASSUMPTION in session.result.assumptions


def test_failed_submit_keeps_profile_and_step():
    session = _assessment(ApplicantType.WORKER)
    session.update_profile([FieldUpdate(name="name", value="Tomas")])
    session.next_step()
    analyzer = RecordingAnalyzer(error=RuntimeError("OPENROUTER_API_KEY is required."))

    assert asyncio.run(submit(session, analyzer)) is False
    assert session.error == ASSESSMENT_FAILED_MESSAGE
    assert session.view == ViewState.ASSESSMENT
    assert session.profile.name == "Tomas"
    assert session.sequencer.current == 2
    assert session.loading is False
    assert session.result is None


def test_invalid_analyzer_output_is_a_failure():
    session = _assessment()
    assert asyncio.run(submit(session, lambda request: {"strengths": ["x"]})) is False
    assert session.error == ASSESSMENT_FAILED_MESSAGE


def test_submit_while_loading_is_rejected():
    session = _assessment()
    session.loading = True
    analyzer = RecordingAnalyzer()
    with pytest.raises(SubmissionInProgress):
        asyncio.run(submit(session, analyzer))
    assert analyzer.requests == []


def test_submit_while_resume_is_parsing_is_rejected():
    session = _assessment()
    session.parsing = True
    analyzer = RecordingAnalyzer()
    with pytest.raises(InvalidTransition):
        asyncio.run(submit(session, analyzer))
    assert analyzer.requests == []
    assert session.view == ViewState.ASSESSMENT


def test_resume_cannot_land_during_assessment():
    session = _assessment()
    session.loading = True
    with pytest.raises(InvalidTransition):
        session.apply_resume({"name": "Mid Flight"})
    assert session.profile.name == ""


def test_switching_to_dashboard_drops_previous_result():
    session = _assessment()
    assert asyncio.run(submit(session, RecordingAnalyzer())) is True
    session.start(ApplicantType.PARTNER)
    assert session.view == ViewState.PARTNER_DASHBOARD
    assert session.result is None
    assert session.submitted_profile is None
