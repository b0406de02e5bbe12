import logging
from typing import Any, Dict

from crewai import Agent, Task, Crew, Process

from app.ai.llm import build_llm, extract_json
from app.ai.ocr_tool import landingai_ocr_extract_resume_fields, normalize_resume_fields

logger = logging.getLogger(__name__)


def parse_resume_output(raw: str | None) -> Dict[str, Any]:
    """Normalized resume fields from agent output; {} when the output is not JSON."""
    data = extract_json(raw)
    if data is None:
        logger.warning("Resume agent returned non-JSON output")
        return {}
    fields = data.get("fields") if isinstance(data.get("fields"), dict) else data
    return {k: v for k, v in normalize_resume_fields(fields).items() if v is not None}


def run_resume_extraction_crew(file_path: str) -> Dict[str, Any]:
    """
    Extract wizard fields from a resume using a CrewAI agent.
    Returns a partial profile: any of name, country, education_level,
    field_of_study, work_experience_years, english_score.
    """
    llm = build_llm("the resume parser")

    agent = Agent(
        role="Resume Parser for Immigration Intake",
        goal="Extract the applicant details an immigration assessment needs from a resume.",
        backstory=(
            "You are an intelligent resume parser for an immigration platform. "
            "You always call the extraction tool first, then check its output against the resume text. "
            "You infer the country of residence from the address or phone country code when it is not stated. "
            "You map the highest degree strictly to one of: High School, Diploma, Bachelor, Master, PhD. "
            "You add up the years of professional experience across all jobs. You never guess missing data."
        ),
        tools=[landingai_ocr_extract_resume_fields],
        llm=llm,
        verbose=False,
    )

    task = Task(
        description=(
            f"Extract applicant details from this resume: {file_path}\n\n"
            f"CRITICAL: You MUST use this exact file_path: {file_path}\n\n"
            "Steps:\n"
            "1) Call the tool landingai_ocr_extract_resume_fields with the file_path.\n"
            "2) Read tool_output.fields and tool_output.raw.markdown.\n"
            "3) Fix anything the tool missed:\n"
            "   - country: current country of residence, null if unknown\n"
            "   - education_level: High School | Diploma | Bachelor | Master | PhD\n"
            "   - work_experience_years: total years as a number\n"
            "   - english_score: overall IELTS/CELPIP band if the resume lists one, else null\n"
            "4) Output STRICT JSON ONLY with double quotes:\n"
            "{\n"
            '  "fields": {\n'
            '    "name": string or null,\n'
            '    "country": string or null,\n'
            '    "education_level": string or null,\n'
            '    "field_of_study": string or null,\n'
            '    "work_experience_years": number or null,\n'
            '    "english_score": number or null\n'
            "  }\n"
            "}\n"
            "Do not include any extra text outside JSON."
        ),
        expected_output="A strict JSON object with a fields object holding the resume details.",
        agent=agent,
    )

    crew = Crew(process=Process.sequential, agents=[agent], tasks=[task])
    result = crew.kickoff(inputs={"file_path": file_path})

    raw = result.raw if hasattr(result, "raw") else str(result)
    return parse_resume_output(raw)
