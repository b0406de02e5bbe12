"""Step counts, bounds and clamping for the assessment wizard."""

import pytest

from app.wizard.sequencer import StepSequencer, step_title, step_titles, total_steps
from models.profile import ApplicantType


def test_total_steps_per_persona():
    assert total_steps(ApplicantType.STUDENT) == 5
    assert total_steps(ApplicantType.STUDENT, spouse_accompanying=True) == 5
    assert total_steps(ApplicantType.WORKER) == 4
    assert total_steps(ApplicantType.WORKER, spouse_accompanying=True) == 5


@pytest.mark.parametrize("persona", [ApplicantType.PARTNER, ApplicantType.SUPER_ADMIN])
def test_dashboard_personas_have_no_wizard(persona):
    with pytest.raises(ValueError):
        total_steps(persona)


def test_advance_stops_at_last_step():
    seq = StepSequencer(total=4)
    for _ in range(10):
        seq.advance()
    assert seq.current == 4
    assert seq.is_final
    assert not seq.can_advance


def test_retreat_stops_at_first_step():
    seq = StepSequencer(total=5, current=2)
    assert seq.retreat() == 1
    assert seq.retreat() == 1
    assert not seq.can_retreat


def test_resize_clamps_current_step():
    seq = StepSequencer(total=5, current=5)
    assert seq.resize(4) == 4
    assert seq.total == 4
    assert seq.is_final

    # growing keeps the position
    assert seq.resize(5) == 4
    assert seq.can_advance


def test_constructor_clamps_out_of_range_start():
    assert StepSequencer(total=3, current=9).current == 3
    assert StepSequencer(total=3, current=0).current == 1
    with pytest.raises(ValueError):
        StepSequencer(total=0)


def test_step_titles_follow_the_flow():
    assert step_titles(ApplicantType.STUDENT)[0] == "Personal & Origin"
    assert len(step_titles(ApplicantType.WORKER)) == 4
    assert step_titles(ApplicantType.WORKER, spouse_accompanying=True)[-1] == "Spouse Factors"
    assert step_title(ApplicantType.WORKER, 2) == "Education & Work"
    with pytest.raises(ValueError):
        step_title(ApplicantType.WORKER, 5)
    with pytest.raises(ValueError):
        step_titles(ApplicantType.PARTNER)
