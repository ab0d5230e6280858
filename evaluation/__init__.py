from __future__ import annotations  # Re-export evaluation public API

from .defaults import (
    FALLBACK_PROVIDER,
    NO_SPEECH_TRANSCRIPT,
    TRANSCRIPTION_SENTINEL,
    get_default_evaluation,
    get_default_transcription,
    is_unusable_transcript,
)
from .parsing import clamp_score, evaluation_from_payload, parse_evaluation_json
from .prompts import EVALUATOR_SYSTEM_PROMPT, build_evaluation_prompt
from .types import (
    DIMENSIONS,
    DimensionScores,
    EvaluationResult,
    PipelineResult,
    Question,
    RawAnswerSubmission,
    Recommendation,
    TranscriptionResult,
)

__all__ = [
    "FALLBACK_PROVIDER",
    "NO_SPEECH_TRANSCRIPT",
    "TRANSCRIPTION_SENTINEL",
    "get_default_evaluation",
    "get_default_transcription",
    "is_unusable_transcript",
    "clamp_score",
    "evaluation_from_payload",
    "parse_evaluation_json",
    "EVALUATOR_SYSTEM_PROMPT",
    "build_evaluation_prompt",
    "DIMENSIONS",
    "DimensionScores",
    "EvaluationResult",
    "PipelineResult",
    "Question",
    "RawAnswerSubmission",
    "Recommendation",
    "TranscriptionResult",
]
