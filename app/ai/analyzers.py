"""Analyzer backend selection (ANALYZER_BACKEND=crewai|rules)."""

from __future__ import annotations

import logging
import os

from app.ai.analysis_agent import run_profile_analysis_crew
from app.ai.rules_analyzer import run_rules_analysis

logger = logging.getLogger(__name__)

ANALYZERS = {
    "crewai": run_profile_analysis_crew,
    "rules": run_rules_analysis,
}


def get_analyzer(backend: str | None = None):
    name = (backend or os.getenv("ANALYZER_BACKEND", "crewai")).strip().lower()
    if name not in ANALYZERS:
        raise ValueError(f"Unknown ANALYZER_BACKEND {name!r}; expected one of {', '.join(ANALYZERS)}")
    logger.info("Using %s analyzer", name)
    return ANALYZERS[name]
