"""
Assessment wizard API.

One session per visitor, held in memory. Every endpoint returns the session
snapshot so the front end can render whichever view the session is in.
"""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from contextlib import contextmanager

from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile

from app.sessions import SessionStore, get_session, get_store
from app.utils.result_presenter import build_result_view
from app.wizard.binders import ProfileUpdateError
from app.wizard.sequencer import step_titles
from app.wizard.session import DESTINATIONS, InvalidTransition, WizardSession
from app.wizard.submission import SubmissionInProgress, submit
from app.ai.analysis_prompts import STUDENT_FUNDS_NOTE
from models.analysis import ResultView
from models.profile import (
    COUNTRIES,
    ApplicantType,
    CanadianExperience,
    EducationLevel,
    ForeignExperience,
    ImmigrationCategory,
    MaritalStatus,
    Province,
    TeerTier,
    WorkLocation,
    spouse_accompanying,
)
from models.wizard import (
    Destination,
    DestinationSelect,
    FormOptions,
    ProfileUpdateBatch,
    ResumeParseOut,
    StartAssessment,
    ViewState,
    WizardStateOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["wizard"])

RESUME_FAILED_MESSAGE = "Failed to parse resume. Please fill details manually."

STUDENT_LANGUAGE_TESTS = ["None", "IELTS Academic", "PTE Core", "TOEFL", "Duolingo"]
WORKER_LANGUAGE_TESTS = ["IELTS", "CELPIP-G", "PTE Core", "TEF Canada", "TCF Canada"]


@contextmanager
def wizard_errors():
    """Map domain errors to HTTP status codes."""
    try:
        yield
    except ProfileUpdateError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except (InvalidTransition, SubmissionInProgress) as e:
        raise HTTPException(status_code=409, detail=str(e))


def upload_dir() -> str:
    path = os.getenv("UPLOAD_DIR", "uploads")
    os.makedirs(path, exist_ok=True)
    return path


@router.get("/destinations", response_model=list[Destination])
async def list_destinations():
    return DESTINATIONS


@router.post("/sessions", response_model=WizardStateOut, status_code=201)
async def create_session(store: SessionStore = Depends(get_store)):
    return store.create().snapshot()


@router.get("/sessions/{session_id}", response_model=WizardStateOut)
async def get_state(session: WizardSession = Depends(get_session)):
    return session.snapshot(include_result=True)


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str, store: SessionStore = Depends(get_store)):
    if not store.delete(session_id):
        raise HTTPException(status_code=404, detail="Session not found or expired")
    return Response(status_code=204)


@router.post("/sessions/{session_id}/destination", response_model=WizardStateOut)
async def select_destination(body: DestinationSelect, session: WizardSession = Depends(get_session)):
    """Pick a destination. Inactive ones leave the view unchanged and set a 'coming soon' notice."""
    with wizard_errors():
        session.select_destination(body.country)
    return session.snapshot()


@router.post("/sessions/{session_id}/destination/back", response_model=WizardStateOut)
async def back_to_destinations(session: WizardSession = Depends(get_session)):
    with wizard_errors():
        session.back_to_destinations()
    return session.snapshot()


@router.post("/sessions/{session_id}/start", response_model=WizardStateOut)
async def start(body: StartAssessment, session: WizardSession = Depends(get_session)):
    with wizard_errors():
        session.start(body.applicant_type)
    return session.snapshot()


@router.post("/sessions/{session_id}/logout", response_model=WizardStateOut)
async def logout(session: WizardSession = Depends(get_session)):
    with wizard_errors():
        session.logout()
    return session.snapshot()


@router.patch("/sessions/{session_id}/profile", response_model=WizardStateOut)
async def update_profile(body: ProfileUpdateBatch, session: WizardSession = Depends(get_session)):
    """
    Apply a batch of field / toggle / nested updates in order.
    The batch is atomic: if any update is rejected the profile is unchanged.
    """
    with wizard_errors():
        session.update_profile(body.updates)
    return session.snapshot()


@router.post("/sessions/{session_id}/next", response_model=WizardStateOut)
async def next_step(session: WizardSession = Depends(get_session)):
    with wizard_errors():
        session.next_step()
    return session.snapshot()


@router.post("/sessions/{session_id}/back", response_model=WizardStateOut)
async def previous_step(session: WizardSession = Depends(get_session)):
    with wizard_errors():
        session.previous_step()
    return session.snapshot()


@router.post("/sessions/{session_id}/resume", response_model=ResumeParseOut)
async def upload_resume(
    request: Request,
    file: UploadFile = File(...),
    session: WizardSession = Depends(get_session),
):
    """Auto-fill the profile from a PDF resume."""
    if session.view != ViewState.ASSESSMENT:
        raise HTTPException(status_code=409, detail="Start an assessment before uploading a resume")
    if session.parsing:
        raise HTTPException(status_code=409, detail="A resume is already being parsed")
    if session.loading:
        raise HTTPException(status_code=409, detail="Please wait for the assessment to finish")
    if file.content_type != "application/pdf":
        raise HTTPException(status_code=400, detail="Upload a PDF resume")

    parser = request.app.state.resume_parser
    file_path = os.path.join(upload_dir(), f"{uuid.uuid4().hex}.pdf")
    with open(file_path, "wb") as f:
        f.write(await file.read())

    session.parsing = True
    loop = asyncio.get_running_loop()
    try:
        extracted = await loop.run_in_executor(None, parser, file_path)
        with wizard_errors():
            applied = session.apply_resume(extracted or {})
    except HTTPException:
        raise
    except Exception:
        logger.exception("Session %s: resume parsing failed", session.session_id)
        raise HTTPException(status_code=502, detail=RESUME_FAILED_MESSAGE)
    finally:
        session.parsing = False
        try:
            os.remove(file_path)
        except OSError:
            logger.warning("Could not remove uploaded resume %s", file_path)

    session.notice = "Resume parsed successfully! Please review the auto-filled fields."
    return ResumeParseOut(extracted=extracted or {}, applied_fields=applied, state=session.snapshot())


@router.post("/sessions/{session_id}/submit", response_model=WizardStateOut)
async def submit_assessment(request: Request, session: WizardSession = Depends(get_session)):
    with wizard_errors():
        ok = await submit(session, request.app.state.analyzer)
    if not ok and session.error:
        raise HTTPException(status_code=502, detail=session.error)
    return session.snapshot(include_result=True)


@router.get("/sessions/{session_id}/result", response_model=ResultView)
async def get_result(session: WizardSession = Depends(get_session)):
    if session.result is None:
        raise HTTPException(status_code=404, detail="No assessment result yet")
    return build_result_view(session.result, session.submitted_profile, session.applicant_type)


@router.get("/sessions/{session_id}/form-options", response_model=FormOptions)
async def form_options(session: WizardSession = Depends(get_session)):
    if session.view != ViewState.ASSESSMENT:
        raise HTTPException(status_code=409, detail="No assessment in progress")

    student = session.applicant_type == ApplicantType.STUDENT
    return FormOptions(
        applicant_type=session.applicant_type,
        step_titles=step_titles(session.applicant_type, spouse_accompanying(session.profile)),
        countries=COUNTRIES,
        marital_statuses=[m.value for m in MaritalStatus],
        education_levels=[e.value for e in EducationLevel],
        language_tests=STUDENT_LANGUAGE_TESTS if student else WORKER_LANGUAGE_TESTS,
        canadian_experience=[c.value for c in CanadianExperience],
        foreign_experience=[f.value for f in ForeignExperience],
        work_locations=[w.value for w in WorkLocation],
        teer_tiers=[t.value for t in TeerTier],
        provinces=[p.value for p in Province],
        immigration_categories=[c.value for c in ImmigrationCategory],
        funds_note=STUDENT_FUNDS_NOTE if student else None,
    )
