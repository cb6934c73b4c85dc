"""Turn a free-form model reply into an analysis result that always has the guaranteed fields.

The model is asked for JSON but nothing enforces it. A reply is cleaned of
markdown fences, scanned for the first well-formed JSON object, and parsed;
if that fails the raw text is wrapped in a generic fallback result so nothing
is lost and the caller still gets the documented shape.
"""

import json
import logging
import re
from typing import Any, Optional

from schemas.insurance_policy import AnalysisResult, ExecutiveSummary, SavingsOpportunities
from services.errors import ParseError

logger = logging.getLogger(__name__)

DEFAULT_SAVINGS_POTENTIAL = "15-25%"
DEFAULT_CONFIDENCE_SCORE = 85
DEFAULT_ACTIONS = [
    "Review classification codes for accuracy",
    "Verify payroll calculations",
    "Check experience modification factor",
]
ASSESSMENT_PREVIEW_CHARS = 300

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)


def strip_code_fences(response_text: str) -> str:
    """Remove ```json / ``` markers wherever they appear."""
    return _FENCE_RE.sub("", response_text).strip()


def _matching_brace(text: str, start: int) -> Optional[int]:
    """Index of the brace closing the one at `start`, or None if it never closes."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
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
                return i
    return None


def _reject_constant(name: str):
    # NaN / Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def _opens_object(text: str, start: int) -> bool:
    """True when the brace at `start` reads like the start of a JSON object."""
    rest = text[start + 1:].lstrip()
    return rest[:1] in ('"', "}")


def find_json_object(text: str) -> dict:
    """Parse the first balanced {...} span that is valid JSON.

    A brace that doesn't open a JSON object (stray braces in prose) is stepped
    over. One that does but never closes or doesn't parse is skipped as a
    whole, so an object nested inside a broken one is never picked up.
    """
    start = text.find("{")
    while start != -1:
        looks_like_object = _opens_object(text, start)
        end = _matching_brace(text, start)
        if end is None:
            if looks_like_object:
                # Unclosed: truncated reply
                break
            start = text.find("{", start + 1)
            continue
        try:
            value = json.loads(text[start:end + 1], parse_constant=_reject_constant)
        except ValueError:
            value = None
        if isinstance(value, dict):
            return value
        start = text.find("{", end + 1 if looks_like_object else start + 1)
    raise ParseError("No JSON object found in response")


def fallback_result(response_text: str) -> dict[str, Any]:
    result = AnalysisResult(
        executive_summary=ExecutiveSummary(
            current_premium="Analysis completed",
            overall_assessment=response_text[:ASSESSMENT_PREVIEW_CHARS],
            savings_potential=DEFAULT_SAVINGS_POTENTIAL,
            confidence_score=DEFAULT_CONFIDENCE_SCORE,
        ),
        savings_opportunities=SavingsOpportunities(
            immediate_actions=list(DEFAULT_ACTIONS),
            estimated_savings_range=DEFAULT_SAVINGS_POTENTIAL,
        ),
        full_analysis_text=response_text,
    )
    return result.model_dump(exclude_none=True)


def _section(result: dict, key: str, wrap_as: str) -> dict:
    section = result.get(key)
    if isinstance(section, dict):
        return section
    repaired = {} if section is None else {wrap_as: section}
    result[key] = repaired
    return repaired


def _fill(section: dict, key: str, default: Any) -> None:
    if section.get(key) is None:
        section[key] = default


def ensure_required_fields(result: dict) -> dict:
    """Fill in guaranteed fields the model left out. Values it did give are kept."""
    summary = _section(result, "executive_summary", "overall_assessment")
    _fill(summary, "savings_potential", DEFAULT_SAVINGS_POTENTIAL)
    _fill(summary, "confidence_score", DEFAULT_CONFIDENCE_SCORE)

    savings = _section(result, "savings_opportunities", "immediate_actions")
    if isinstance(savings.get("immediate_actions"), str):
        savings["immediate_actions"] = [savings["immediate_actions"]]
    _fill(savings, "immediate_actions", list(DEFAULT_ACTIONS))
    return result


def normalize_analysis(response_text: str) -> dict[str, Any]:
    """Never raises."""
    try:
        parsed = find_json_object(strip_code_fences(response_text))
    except ParseError as e:
        logger.warning("Failed to parse AI response as JSON: %s", e)
        return fallback_result(response_text)
    return ensure_required_fields(parsed)
