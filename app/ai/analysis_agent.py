from __future__ import annotations

import logging

from crewai import Agent, Task, Crew, Process
from pydantic import ValidationError

from app.ai.analysis_prompts import AGENT_BACKSTORY, AGENT_GOAL, AGENT_ROLE, build_analysis_prompt
from app.ai.llm import build_llm, extract_json
from models.analysis import AnalysisRequest, AnalysisResult

logger = logging.getLogger(__name__)


def parse_analysis_output(raw: str | None) -> AnalysisResult:
    """Validate agent output into an AnalysisResult; ValueError when it is unusable."""
    data = extract_json(raw)
    if data is None:
        raise ValueError("Analysis agent returned non-JSON output")
    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Analysis agent returned an invalid result: {e}") from e


def run_profile_analysis_crew(request: AnalysisRequest) -> AnalysisResult:
    """
    Assess one applicant profile with a single crewAI agent.

    Blocking; call it from an executor. Raises RuntimeError when the LLM is
    not configured and ValueError when the output cannot be validated.
    """
    llm = build_llm("the analysis agent")

    agent = Agent(
        role=AGENT_ROLE,
        goal=AGENT_GOAL,
        backstory=AGENT_BACKSTORY,
        llm=llm,
        verbose=False,
    )

    task = Task(
        description=build_analysis_prompt(request),
        expected_output="A strict JSON object with the assessment fields described in the task.",
        agent=agent,
    )

    crew = Crew(process=Process.sequential, agents=[agent], tasks=[task])
    result = crew.kickoff()
    raw = result.raw if hasattr(result, "raw") else str(result)
    logger.debug("Analysis agent returned %d characters", len(raw or ""))
    return parse_analysis_output(raw)
