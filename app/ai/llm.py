"""Shared crewAI LLM construction and JSON recovery for agent output."""

from __future__ import annotations

import json
import os
import re
from typing import Any

from crewai import LLM

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "google/gemini-2.0-flash-001"

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)


def build_llm(purpose: str = "the analysis agent") -> LLM:
    openrouter_api_key = os.getenv("OPENROUTER_API_KEY")
    if not openrouter_api_key:
        raise RuntimeError(f"OPENROUTER_API_KEY is required for {purpose}.")

    model = os.getenv("OPENROUTER_MODEL", DEFAULT_MODEL)
    return LLM(model=model, api_key=openrouter_api_key, base_url=OPENROUTER_BASE_URL)


def _balanced_object(raw: str) -> str | None:
    start_idx = raw.find("{")
    if start_idx == -1:
        return None
    depth = 0
    in_string = False
    escaped = False
    for i in range(start_idx, len(raw)):
        ch = raw[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return raw[start_idx:i + 1]
    return None


def extract_json(raw: str | None) -> dict[str, Any] | None:
    """
    Recover a JSON object from agent output.

    Tries a direct parse, then a ```json fenced block, then the first
    balanced {...} in the text. Returns None when nothing parses to a dict.
    """
    if not raw:
        return None
    candidates = [raw.strip()]
    fenced = _FENCED_JSON.search(raw)
    if fenced:
        candidates.append(fenced.group(1))
    balanced = _balanced_object(raw)
    if balanced:
        candidates.append(balanced)

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    return None
