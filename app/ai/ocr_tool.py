import os
import json
from typing import Any, Optional

from landingai_ade import LandingAIADE
from crewai.tools import tool
from pydantic import BaseModel, Field

from models.profile import COUNTRIES, EducationLevel


class ResumeSchema(BaseModel):
    name: str = Field(description="Full name of the candidate")
    country: Optional[str] = Field(
        None,
        description="Current country of residence. Infer from address or phone country code if not stated.",
    )
    education_level: str = Field(
        description="Highest degree, one of: High School, Diploma, Bachelor, Master, PhD",
    )
    field_of_study: str = Field(description="Major or field of study of the highest degree, e.g. 'Nursing'")
    work_experience_years: float = Field(description="Total years of professional work experience")
    english_score: Optional[float] = Field(None, description="Overall IELTS/CELPIP band score if listed")


def _flatten_nullable(schema_dict: dict) -> dict:
    # LandingAI extract rejects anyOf with null; keep the non-null branch
    properties = {}
    for prop_name, prop_def in schema_dict.get("properties", {}).items():
        if "anyOf" in prop_def:
            found = next((o for o in prop_def["anyOf"] if isinstance(o, dict) and o.get("type") != "null"), None)
            if found:
                found = {**found, "description": prop_def.get("description", "")}
            properties[prop_name] = found or prop_def
        else:
            properties[prop_name] = prop_def
    schema_dict["properties"] = properties
    schema_dict.pop("definitions", None)
    return schema_dict


def _clean_text(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


def _clean_number(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


def normalize_resume_fields(extracted: dict) -> dict:
    """Keep only values the wizard can use; unknown countries and degrees become None."""
    country = _clean_text(extracted.get("country"))
    education = _clean_text(extracted.get("education_level"))
    return {
        "name": _clean_text(extracted.get("name")),
        "country": country if country in COUNTRIES else None,
        "education_level": education if education in {e.value for e in EducationLevel} else None,
        "field_of_study": _clean_text(extracted.get("field_of_study")),
        "work_experience_years": _clean_number(extracted.get("work_experience_years")),
        "english_score": _clean_number(extracted.get("english_score")),
    }


def _extract_resume_fields_impl(file_path: str) -> dict:
    """
    Parse a resume PDF with LandingAI ADE and extract the wizard's resume fields.

    Returns {"fields": {...normalized...}, "raw": {"markdown": ..., "extracted": {...}}}
    """
    api_key = os.getenv("LANDINGAI_API_KEY") or os.getenv("VISION_AGENT_API_KEY")

    if not api_key:
        raise RuntimeError("LANDINGAI_API_KEY or VISION_AGENT_API_KEY not set")

    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    ade = LandingAIADE(apikey=api_key)

    with open(file_path, "rb") as f:
        parse_result = ade.parse(document=f)

    markdown_content = parse_result.markdown if parse_result.markdown else ""
    if not markdown_content:
        raise RuntimeError("No markdown extracted from document")

    schema_dict = _flatten_nullable(ResumeSchema.model_json_schema())
    extract_resp = ade.extract(
        schema=json.dumps(schema_dict),
        markdown=markdown_content,
    )

    extracted_data: Any = {}
    if hasattr(extract_resp, "extraction"):
        extracted_data = extract_resp.extraction
    elif hasattr(extract_resp, "data"):
        extracted_data = extract_resp.data
    elif isinstance(extract_resp, dict):
        extracted_data = extract_resp
    if isinstance(extracted_data, str):
        extracted_data = json.loads(extracted_data)

    return {
        "fields": normalize_resume_fields(extracted_data or {}),
        "raw": {
            "markdown": markdown_content,
            "extracted": extracted_data,
        },
    }


@tool("landingai_ocr_extract_resume_fields")
def landingai_ocr_extract_resume_fields(file_path: str) -> dict:
    """
    Extract name, country, education, field of study, years of experience and
    English score from a resume PDF at file_path.
    """
    return _extract_resume_fields_impl(file_path)
