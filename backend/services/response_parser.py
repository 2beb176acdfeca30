"""Turn a raw Gemini generateContent response into an AnalysisResult.

The model answers in free text that usually, but not always, contains the
requested JSON object. Extraction is a greedy brace match; anything that
cannot be parsed degrades to FALLBACK_ANALYSIS instead of failing the request.
"""

import json
import logging
import math
import numbers
import re

from models.responses import Alignment, AnalysisResult
from services.errors import MalformedModelOutputError

logger = logging.getLogger(__name__)

# First "{" to last "}", across newlines
_JSON_SPAN_RE = re.compile(r"\{[\s\S]*\}")

NO_EXPLANATION = "No alignment explanation provided"

FALLBACK_ANALYSIS = AnalysisResult(
    strengths=["Unable to parse detailed analysis"],
    weaknesses=["Analysis parsing failed"],
    alignment=Alignment(
        score=0,
        explanation="Could not determine alignment due to parsing error",
    ),
    recommendations=["Please try again or contact support"],
)


def _first_text(response: dict) -> str:
    candidates = response.get("candidates")
    if not candidates:
        raise MalformedModelOutputError("No candidates in response")

    content = candidates[0].get("content") or {}
    for part in content.get("parts") or []:
        text = part.get("text")
        if text:
            return text
    raise MalformedModelOutputError("No text content in response")


def _string_list(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item if isinstance(item, str) else json.dumps(item) for item in value]


def _score(value) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return 0
    if isinstance(value, float) and math.isnan(value):
        return 0
    # Clamp before rounding; ints beyond float range overflow float()
    return round(max(0, min(100, value)))


def _coerce(data: dict) -> AnalysisResult:
    alignment = data.get("alignment")
    if not isinstance(alignment, dict):
        alignment = {}
    explanation = alignment.get("explanation")

    return AnalysisResult(
        strengths=_string_list(data.get("strengths")),
        weaknesses=_string_list(data.get("weaknesses")),
        alignment=Alignment(
            score=_score(alignment.get("score")),
            explanation=str(explanation) if explanation else NO_EXPLANATION,
        ),
        recommendations=_string_list(data.get("recommendations")),
    )


def parse_analysis_response(response: dict) -> AnalysisResult:
    """Extract and repair the analysis JSON. Never raises."""
    try:
        text = _first_text(response)
        match = _JSON_SPAN_RE.search(text)
        if not match:
            raise MalformedModelOutputError("No JSON found in response")
        data = json.loads(match.group(0))
        if not isinstance(data, dict):
            raise MalformedModelOutputError("Model JSON is not an object")
        return _coerce(data)
    except Exception as e:
        logger.error("Error parsing analysis response: %s", e)
        return FALLBACK_ANALYSIS.model_copy(deep=True)
