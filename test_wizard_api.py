"""End-to-end wizard API with stub collaborators."""

import pytest
from fastapi.testclient import TestClient

from app.main import app
from models.analysis import AnalysisResult

API = "/api/v1"


def stub_analyzer(request):
    return AnalysisResult(
        overall_success_probability=82,
        crs_score_prediction=468,
        recommended_pathways=[{"name": "Canadian Experience Class (CEC)", "eligibility_score": 82}],
        other_pathways=[{"name": "FSTP", "eligibility_score": 0}],
        strategic_advice="Apply for a PNP.",
    )


def failing_analyzer(request):
    raise RuntimeError("upstream timeout")


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path))
    monkeypatch.setenv("ANALYZER_BACKEND", "rules")
    with TestClient(app) as c:
        app.state.analyzer = stub_analyzer
        app.state.resume_parser = lambda path: {"name": "Li Wei", "country": "China", "work_experience_years": 3}
        yield c


def _worker_session(client) -> str:
    sid = client.post(f"{API}/sessions").json()["session_id"]
    client.post(f"{API}/sessions/{sid}/destination", json={"country": "canada"})
    r = client.post(f"{API}/sessions/{sid}/start", json={"applicant_type": "Worker"})
    assert r.status_code == 200
    return sid


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_destinations(client):
    data = client.get(f"{API}/destinations").json()
    assert [d["name"] for d in data if d["active"]] == ["Canada"]


def test_full_worker_flow(client):
    sid = _worker_session(client)
    state = client.get(f"{API}/sessions/{sid}").json()
    assert state["view"] == "assessment"
    assert state["step"]["total"] == 4

    r = client.patch(f"{API}/sessions/{sid}/profile", json={"updates": [
        {"kind": "field", "name": "name", "value": "Tomas"},
        {"kind": "field", "name": "marital_status", "value": "Married"},
        {"kind": "nested", "container": "spouse", "field": "coming_to_canada", "value": "true"},
        {"kind": "toggle", "field": "preferred_provinces", "value": "Alberta"},
    ]})
    assert r.status_code == 200
    assert r.json()["step"]["total"] == 5
    assert r.json()["profile"]["preferred_provinces"] == ["Alberta"]

    assert client.post(f"{API}/sessions/{sid}/next").json()["step"]["current"] == 2

    r = client.post(f"{API}/sessions/{sid}/submit")
    assert r.status_code == 200
    body = r.json()
    assert body["view"] == "user-dashboard"
    assert body["result"]["strategic_advice"] == ["Apply for a PNP."]
    assert body["submitted_profile"]["name"] == "Tomas"

    view = client.get(f"{API}/sessions/{sid}/result").json()
    assert view["pathways"][0]["status"] == "Recommended"
    assert view["pathways"][0]["competitiveness"] == "Highly Competitive"
    assert view["pathways"][-1]["eligibility"] == "Not Eligible"


def test_bad_numeric_input_is_422_and_atomic(client):
    sid = _worker_session(client)
    r = client.patch(f"{API}/sessions/{sid}/profile", json={"updates": [
        {"kind": "field", "name": "name", "value": "Nope"},
        {"kind": "field", "name": "age", "value": "twenty"},
    ]})
    assert r.status_code == 422
    assert client.get(f"{API}/sessions/{sid}").json()["profile"]["name"] == ""


def test_illegal_transition_is_409(client):
    sid = client.post(f"{API}/sessions").json()["session_id"]
    assert client.post(f"{API}/sessions/{sid}/next").status_code == 409
    assert client.post(f"{API}/sessions/{sid}/start", json={"applicant_type": "Student"}).status_code == 409


def test_failed_analysis_reports_error(client):
    app.state.analyzer = failing_analyzer
    sid = _worker_session(client)
    r = client.post(f"{API}/sessions/{sid}/submit")
    assert r.status_code == 502
    assert r.json()["detail"] == "Something went wrong with the AI assessment. Please try again."
    state = client.get(f"{API}/sessions/{sid}").json()
    assert state["view"] == "assessment"
    assert state["loading"] is False


def test_resume_upload_fills_profile(client):
    sid = _worker_session(client)
    r = client.post(
        f"{API}/sessions/{sid}/resume",
        files={"file": ("cv.pdf", b"%PDF-1.4 test", "application/pdf")},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["state"]["profile"]["name"] == "Li Wei"
    assert body["state"]["profile"]["country_of_residence"] == "China"
    assert body["state"]["profile"]["foreign_work_experience"] == "1"
    assert set(body["applied_fields"]) >= {"name", "country_of_residence", "work_experience_years"}


def test_resume_upload_failure_leaves_profile(client, tmp_path):
    def broken(path):
        raise RuntimeError("LANDINGAI_API_KEY or VISION_AGENT_API_KEY not set")

    app.state.resume_parser = broken
    sid = _worker_session(client)
    r = client.post(
        f"{API}/sessions/{sid}/resume",
        files={"file": ("cv.pdf", b"%PDF-1.4 test", "application/pdf")},
    )
    assert r.status_code == 502
    assert r.json()["detail"] == "Failed to parse resume. Please fill details manually."
    assert client.get(f"{API}/sessions/{sid}").json()["profile"]["name"] == ""
    assert list(tmp_path.iterdir()) == []


def test_resume_upload_rejects_non_pdf(client):
    sid = _worker_session(client)
    r = client.post(
        f"{API}/sessions/{sid}/resume",
        files={"file": ("cv.docx", b"PK", "application/vnd.openxmlformats-officedocument.wordprocessingml.document")},
    )
    assert r.status_code == 400


def test_form_options_follow_persona(client):
    sid = _worker_session(client)
    opts = client.get(f"{API}/sessions/{sid}/form-options").json()
    assert "CELPIP-G" in opts["language_tests"]
    assert opts["funds_note"] is None
    assert opts["step_titles"][0] == "Personal & Family"


def test_unknown_session_is_404(client):
    assert client.get(f"{API}/sessions/does-not-exist").status_code == 404
    assert client.delete(f"{API}/sessions/does-not-exist").status_code == 404


def test_dashboards_and_consultants(client):
    admin = client.get(f"{API}/dashboards/admin").json()
    assert admin["active_partners"] == 2
    assert admin["partner_clients"] == 219
    partner = client.get(f"{API}/dashboards/partner").json()
    assert partner["total_leads"] == len(partner["leads"])
    consultants = client.get(f"{API}/consultants").json()
    assert len(consultants["days"]) == 3
    assert consultants["time_slots"][0] == "10:00 AM"
    assert {c["type"] for c in consultants["consultants"]} == {"RCIC", "Immigration Lawyer"}


def test_resume_upload_refused_while_assessment_runs(client):
    sid = _worker_session(client)
    app.state.store.get(sid).loading = True
    r = client.post(
        f"{API}/sessions/{sid}/resume",
        files={"file": ("cv.pdf", b"%PDF-1.4 test", "application/pdf")},
    )
    assert r.status_code == 409
    app.state.store.get(sid).loading = False
    assert client.get(f"{API}/sessions/{sid}").json()["profile"]["name"] == ""


def test_submit_refused_while_resume_parses(client):
    sid = _worker_session(client)
    app.state.store.get(sid).parsing = True
    assert client.post(f"{API}/sessions/{sid}/submit").status_code == 409
    app.state.store.get(sid).parsing = False
    assert client.get(f"{API}/sessions/{sid}").json()["view"] == "assessment"


def test_partner_view_has_no_stale_result(client):
    sid = _worker_session(client)
    assert client.post(f"{API}/sessions/{sid}/submit").status_code == 200
    r = client.post(f"{API}/sessions/{sid}/start", json={"applicant_type": "Partner"})
    assert r.json()["view"] == "partner-dashboard"
    assert client.get(f"{API}/sessions/{sid}/result").status_code == 404
