"""Terminal fallback results used when every provider fails."""
from __future__ import annotations

from evaluation.types import DIMENSIONS, DimensionScores, EvaluationResult, TranscriptionResult

TRANSCRIPTION_SENTINEL = "[Transcription unavailable — pending manual review]"
NO_SPEECH_TRANSCRIPT = "[No clear speech detected]"
FALLBACK_PROVIDER = "fallback"


def get_default_evaluation(reason: str) -> EvaluationResult:
    """Neutral evaluation flagged for manual review. Never raises."""

    reason = str(reason)
    return EvaluationResult(
        transcript="",
        score=DimensionScores(),
        score_justification={dim: reason for dim in DIMENSIONS},
        summary=f"Evaluation pending manual review. Reason: {reason}",
        strengths=["Unable to evaluate automatically"],
        risks=["Requires manual review"],
        recommendation="maybe",
        provider=FALLBACK_PROVIDER,
        model="none",
        latency_ms=0,
    )


def get_default_transcription() -> TranscriptionResult:
    return TranscriptionResult(
        transcript=TRANSCRIPTION_SENTINEL,
        language="en",
        duration_seconds=0.0,
        provider=FALLBACK_PROVIDER,
        model="none",
        latency_ms=0,
    )


def is_unusable_transcript(transcript: str | None) -> bool:
    """True for empty transcripts or ones carrying the transcription sentinel."""

    if not transcript or not transcript.strip():
        return True
    return TRANSCRIPTION_SENTINEL in transcript


__all__ = [
    "TRANSCRIPTION_SENTINEL",
    "NO_SPEECH_TRANSCRIPT",
    "FALLBACK_PROVIDER",
    "get_default_evaluation",
    "get_default_transcription",
    "is_unusable_transcript",
]
