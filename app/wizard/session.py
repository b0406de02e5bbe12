"""
One visitor's pass through the product: destination, persona, wizard and result.

The view is a small state machine. Each user action is one method; actions
that make no sense in the current view raise InvalidTransition instead of
silently changing state.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional

from app.wizard.binders import apply_resume_fields, apply_updates
from app.wizard.sequencer import StepSequencer, step_title, total_steps
from models.analysis import AnalysisResult
from models.profile import ApplicantProfile, ApplicantType, spouse_accompanying
from models.wizard import Destination, StepInfo, ViewState, WizardStateOut

logger = logging.getLogger(__name__)

DESTINATIONS: list[Destination] = [
    Destination(id="canada", name="Canada", flag="🇨🇦", active=True, description="Express Entry, PNP, & Study Pathways"),
    Destination(id="australia", name="Australia", flag="🇦🇺", active=False, description="SkillSelect & Subclass Visas"),
    Destination(id="uk", name="UK", flag="🇬🇧", active=False, description="Skilled Worker & Graduate Routes"),
    Destination(id="finland", name="Finland", flag="🇫🇮", active=False, description="Specialist & Startup Permits"),
    Destination(id="usa", name="USA", flag="🇺🇸", active=False, description="H-1B, Green Cards & O-1"),
]

_DASHBOARD_VIEWS = {
    ApplicantType.PARTNER: ViewState.PARTNER_DASHBOARD,
    ApplicantType.SUPER_ADMIN: ViewState.SUPER_ADMIN_DASHBOARD,
}


class InvalidTransition(Exception):
    """The requested action is not available from the current view."""


def find_destination(country: str) -> Optional[Destination]:
    key = country.strip().lower()
    for destination in DESTINATIONS:
        if key in (destination.id, destination.name.lower()):
            return destination
    return None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class WizardSession:
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    view: ViewState = ViewState.COUNTRY_SELECTION
    destination: Optional[str] = None
    applicant_type: Optional[ApplicantType] = None
    profile: ApplicantProfile = field(default_factory=ApplicantProfile)
    sequencer: Optional[StepSequencer] = None
    loading: bool = False
    parsing: bool = False
    result: Optional[AnalysisResult] = None
    submitted_profile: Optional[ApplicantProfile] = None
    error: Optional[str] = None
    notice: Optional[str] = None
    touched_at: datetime = field(default_factory=_utcnow)

    def touch(self) -> None:
        self.touched_at = _utcnow()

    def _require_view(self, *views: ViewState) -> None:
        if self.view not in views:
            allowed = ", ".join(v.value for v in views)
            raise InvalidTransition(f"Action not available from '{self.view.value}' (expected {allowed})")

    def _require_idle(self) -> None:
        if self.loading or self.parsing:
            raise InvalidTransition("Please wait for the current request to finish")

    # Destination & persona

    def select_destination(self, country: str) -> bool:
        """Returns False (with a notice) for destinations that are not open yet."""
        self._require_view(ViewState.COUNTRY_SELECTION)
        destination = find_destination(country)
        if destination is None:
            raise InvalidTransition(f"Unknown destination: {country}")
        if not destination.active:
            self.notice = f"{destination.name} module is coming soon!"
            return False
        self.destination = destination.id
        self.notice = None
        self.view = ViewState.LANDING
        return True

    def back_to_destinations(self) -> None:
        self._require_view(ViewState.LANDING)
        self.destination = None
        self.view = ViewState.COUNTRY_SELECTION

    def start(self, applicant_type: ApplicantType) -> None:
        applicant_type = ApplicantType(applicant_type)
        self._require_idle()
        # Partner / admin dashboards are reachable from the navbar in any view
        if applicant_type in _DASHBOARD_VIEWS:
            self.applicant_type = applicant_type
            self.sequencer = None
            self.result = None
            self.submitted_profile = None
            self.view = _DASHBOARD_VIEWS[applicant_type]
            return

        self._require_view(ViewState.LANDING)
        self.applicant_type = applicant_type
        self.profile = ApplicantProfile()
        self.sequencer = StepSequencer(total_steps(applicant_type, spouse_accompanying(self.profile)))
        self.result = None
        self.submitted_profile = None
        self.error = None
        self.notice = None
        self.view = ViewState.ASSESSMENT

    def logout(self) -> None:
        self._require_idle()
        self.view = ViewState.COUNTRY_SELECTION
        self.destination = None
        self.applicant_type = None
        self.profile = ApplicantProfile()
        self.sequencer = None
        self.result = None
        self.submitted_profile = None
        self.error = None
        self.notice = None

    # Wizard

    def _sync_steps(self) -> None:
        total = total_steps(self.applicant_type, spouse_accompanying(self.profile))
        before = self.sequencer.current
        after = self.sequencer.resize(total)
        if after != before:
            logger.info("Session %s: step clamped from %d to %d", self.session_id, before, after)

    def next_step(self) -> int:
        self._require_view(ViewState.ASSESSMENT)
        return self.sequencer.advance()

    def previous_step(self) -> int:
        self._require_view(ViewState.ASSESSMENT)
        return self.sequencer.retreat()

    def update_profile(self, updates: Iterable) -> ApplicantProfile:
        self._require_view(ViewState.ASSESSMENT)
        self._require_idle()
        self.profile = apply_updates(self.profile, updates)
        self._sync_steps()
        return self.profile

    def apply_resume(self, extracted: dict) -> list[str]:
        self._require_view(ViewState.ASSESSMENT)
        if self.loading:
            raise InvalidTransition("Please wait for the assessment to finish")
        self.profile, applied = apply_resume_fields(self.profile, extracted)
        self._sync_steps()
        return applied

    # Output

    def step_info(self) -> Optional[StepInfo]:
        if self.sequencer is None or self.applicant_type is None:
            return None
        seq = self.sequencer
        return StepInfo(
            current=seq.current,
            total=seq.total,
            title=step_title(self.applicant_type, seq.current, spouse_accompanying(self.profile)),
            can_advance=seq.can_advance,
            can_retreat=seq.can_retreat,
            is_final=seq.is_final,
        )

    def snapshot(self, include_result: bool = False) -> WizardStateOut:
        return WizardStateOut(
            session_id=self.session_id,
            view=self.view,
            destination=self.destination,
            applicant_type=self.applicant_type,
            step=self.step_info() if self.view == ViewState.ASSESSMENT else None,
            profile=self.profile,
            submitted_profile=self.submitted_profile,
            loading=self.loading,
            parsing=self.parsing,
            has_result=self.result is not None,
            result=self.result if include_result else None,
            error=self.error,
            notice=self.notice,
        )
