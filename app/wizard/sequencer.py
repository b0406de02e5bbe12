"""
Step sequencing for the assessment wizard.

The number of steps is a pure function of the persona and of whether a
foreign spouse is accompanying the applicant (worker flow only). The
sequencer keeps the current step inside [1, total] at all times; moving past
either end is a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass

from models.profile import ApplicantType

STUDENT_STEP_TITLES = [
    "Personal & Origin",
    "Academic Profile",
    "Language Proficiency",
    "Study Goals",
    "Background Check",
]

WORKER_STEP_TITLES = [
    "Personal & Family",
    "Education & Work",
    "Language Skills",
    "Additional Points",
]

SPOUSE_STEP_TITLE = "Spouse Factors"


def total_steps(applicant_type: ApplicantType, spouse_accompanying: bool = False) -> int:
    applicant_type = ApplicantType(applicant_type)
    if applicant_type == ApplicantType.STUDENT:
        return len(STUDENT_STEP_TITLES)
    if applicant_type == ApplicantType.WORKER:
        return len(WORKER_STEP_TITLES) + (1 if spouse_accompanying else 0)
    raise ValueError(f"{applicant_type.value} has no assessment wizard")


def step_titles(applicant_type: ApplicantType, spouse_accompanying: bool = False) -> list[str]:
    applicant_type = ApplicantType(applicant_type)
    if applicant_type == ApplicantType.STUDENT:
        return list(STUDENT_STEP_TITLES)
    if applicant_type != ApplicantType.WORKER:
        raise ValueError(f"{applicant_type.value} has no assessment wizard")
    titles = list(WORKER_STEP_TITLES)
    if spouse_accompanying:
        titles.append(SPOUSE_STEP_TITLE)
    return titles


@dataclass
class StepSequencer:
    total: int
    current: int = 1

    def __post_init__(self) -> None:
        if self.total < 1:
            raise ValueError("A wizard needs at least one step")
        self.current = min(max(1, self.current), self.total)

    @property
    def can_advance(self) -> bool:
        return self.current < self.total

    @property
    def can_retreat(self) -> bool:
        return self.current > 1

    @property
    def is_final(self) -> bool:
        return self.current == self.total

    def advance(self) -> int:
        if self.can_advance:
            self.current += 1
        return self.current

    def retreat(self) -> int:
        if self.can_retreat:
            self.current -= 1
        return self.current

    def resize(self, total: int) -> int:
        """Apply a new step count (branch answers changed) and clamp the current step."""
        if total < 1:
            raise ValueError("A wizard needs at least one step")
        self.total = total
        self.current = min(self.current, total)
        return self.current


def step_title(applicant_type: ApplicantType, step: int, spouse_accompanying: bool = False) -> str:
    titles = step_titles(applicant_type, spouse_accompanying)
    if not 1 <= step <= len(titles):
        raise ValueError(f"Step {step} is outside 1..{len(titles)}")
    return titles[step - 1]
