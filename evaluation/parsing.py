"""Lenient parsing of provider output into evaluation results."""
from __future__ import annotations

import json
import math
import re
from typing import Any, Dict, Optional

from evaluation.types import DIMENSIONS, NEUTRAL_SCORE, RECOMMENDATIONS, DimensionScores, EvaluationResult


_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)

# Provider spellings seen for the snake_case fields.
_ALIASES = {
    "technical_fit": ("technical_fit", "technicalFit"),
    "score_justification": ("scoreJustification", "score_justification"),
}


def clamp_score(raw: Any) -> float:
    """Coerce ``raw`` to a 0-5 score rounded to one decimal; unusable input maps to 3."""

    if isinstance(raw, bool) or raw is None:
        return NEUTRAL_SCORE
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return NEUTRAL_SCORE
    if math.isnan(value):
        return NEUTRAL_SCORE
    bounded = max(0.0, min(5.0, value))
    return math.floor(bounded * 10 + 0.5) / 10


def _loads_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def _balanced_objects(text: str):
    """Yield every brace-balanced ``{...}`` substring, honoring JSON strings."""

    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for idx in range(start, len(text)):
            ch = text[idx]
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
                    yield text[start : idx + 1]
                    break
        start = text.find("{", start + 1)


def parse_evaluation_json(text: str) -> Optional[Dict[str, Any]]:
    """Extract a JSON object from provider output.

    Tries a strict parse, then the first fenced code block, then the first
    brace-balanced substring that decodes. Returns ``None`` when nothing
    usable is found; it never raises.
    """

    if not isinstance(text, str) or not text.strip():
        return None
    parsed = _loads_object(text.strip())
    if parsed is not None:
        return parsed
    for match in _FENCE_RE.finditer(text):
        parsed = _loads_object(match.group(1).strip())
        if parsed is not None:
            return parsed
    for candidate in _balanced_objects(text):
        parsed = _loads_object(candidate)
        if parsed is not None:
            return parsed
    return None


def _pick(data: Dict[str, Any], field: str) -> Any:
    for key in _ALIASES.get(field, (field,)):
        if key in data:
            return data[key]
    return None


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None and str(item).strip()]


def _recommendation(value: Any) -> str:
    text = str(value or "").strip().lower().replace(" ", "_").replace("-", "_")
    return text if text in RECOMMENDATIONS else "maybe"


def evaluation_from_payload(
    payload: Optional[Dict[str, Any]],
    *,
    transcript: str,
    provider: str,
    model: str,
    latency_ms: int,
) -> Optional[EvaluationResult]:
    """Build an EvaluationResult from parsed provider JSON.

    Returns ``None`` unless the payload carries a non-empty score object and
    a non-empty summary.
    """

    if not payload:
        return None
    raw_scores = payload.get("score") or payload.get("scores")
    summary = str(payload.get("summary") or "").strip()
    if not isinstance(raw_scores, dict) or not raw_scores or not summary:
        return None
    scores = DimensionScores(**{dim: clamp_score(_pick(raw_scores, dim)) for dim in DIMENSIONS})
    justification_raw = _pick(payload, "score_justification")
    justification: Dict[str, str] = {}
    if isinstance(justification_raw, dict):
        justification = {
            ("technical_fit" if key == "technicalFit" else str(key)): str(value)
            for key, value in justification_raw.items()
        }
    return EvaluationResult(
        transcript=transcript,
        score=scores,
        score_justification=justification,
        summary=summary,
        strengths=_string_list(payload.get("strengths")),
        risks=_string_list(payload.get("risks")),
        recommendation=_recommendation(payload.get("recommendation")),
        provider=provider,
        model=model,
        latency_ms=latency_ms,
    )


__all__ = ["clamp_score", "parse_evaluation_json", "evaluation_from_payload"]
