"""Score normalization and session aggregate helpers."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Mapping, Optional

from pydantic import BaseModel

from evaluation.parsing import clamp_score
from evaluation.types import DIMENSIONS
from storage.answers import mean_average_score
from storage.sessions import write_aggregate
from storage.sqlite import get_conn

# Lower bound (inclusive) of each tier on the 0-100 scale, highest first.
TIER_THRESHOLDS = (
    (80.0, "strong_hire"),
    (65.0, "hire"),
    (45.0, "maybe"),
    (25.0, "no_hire"),
)
BOTTOM_TIER = "strong_no_hire"


class SessionAggregate(BaseModel):
    session_id: str
    total_score: Optional[float] = None
    ai_recommendation: Optional[str] = None


def _round_half_up(value: float, places: int = 0) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def normalize_score(raw: float) -> int:
    """Rescale a 0-5 dimension score to 0-100."""
    return int(_round_half_up(raw / 5 * 100))


def normalize_scores(raw_scores: Mapping[str, object]) -> Dict[str, int]:
    """Normalize all five dimensions; missing or malformed ones count as neutral."""

    return {dim: normalize_score(clamp_score(raw_scores.get(dim))) for dim in DIMENSIONS}


def average_score(normalized: Mapping[str, int]) -> int:
    values = [normalized.get(dim, normalize_score(3.0)) for dim in DIMENSIONS]
    return int(_round_half_up(sum(values) / len(values)))


def recommendation_tier(total_score: float) -> str:
    for threshold, tier in TIER_THRESHOLDS:
        if total_score >= threshold:
            return tier
    return BOTTOM_TIER


def recompute_session_aggregate(session_id: str, *, summary: Optional[str] = None) -> SessionAggregate:
    """Recompute total_score and tier from every evaluated answer of the session.

    Runs in one immediate transaction so a concurrent submission cannot write
    between this read and this write.
    """

    with get_conn(immediate=True) as conn:
        mean = mean_average_score(conn, session_id)
        if mean is None:
            total, tier = None, None
        else:
            total = _round_half_up(mean, 1)
            tier = recommendation_tier(total)
        write_aggregate(conn, session_id, total_score=total, ai_recommendation=tier, ai_summary=summary)
    return SessionAggregate(session_id=session_id, total_score=total, ai_recommendation=tier)


__all__ = [
    "TIER_THRESHOLDS",
    "SessionAggregate",
    "normalize_score",
    "normalize_scores",
    "average_score",
    "recommendation_tier",
    "recompute_session_aggregate",
]
