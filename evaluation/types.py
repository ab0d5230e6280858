"""Shared type definitions for transcription and evaluation results."""
from typing import Dict, List, Literal

from pydantic import BaseModel, Field

Recommendation = Literal["strong_hire", "hire", "maybe", "no_hire", "strong_no_hire"]

RECOMMENDATIONS = ("strong_hire", "hire", "maybe", "no_hire", "strong_no_hire")
DIMENSIONS = ("clarity", "relevance", "confidence", "technical_fit", "communication")

NEUTRAL_SCORE = 3.0


class DimensionScores(BaseModel):
    clarity: float = Field(default=NEUTRAL_SCORE, ge=0.0, le=5.0)
    relevance: float = Field(default=NEUTRAL_SCORE, ge=0.0, le=5.0)
    confidence: float = Field(default=NEUTRAL_SCORE, ge=0.0, le=5.0)
    technical_fit: float = Field(default=NEUTRAL_SCORE, ge=0.0, le=5.0)
    communication: float = Field(default=NEUTRAL_SCORE, ge=0.0, le=5.0)


class TranscriptionResult(BaseModel):
    transcript: str
    language: str = "en"
    duration_seconds: float = 0.0
    provider: str
    model: str
    latency_ms: int = 0


class EvaluationResult(BaseModel):
    transcript: str = ""
    score: DimensionScores
    score_justification: Dict[str, str] = Field(default_factory=dict)
    summary: str
    strengths: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)
    recommendation: Recommendation = "maybe"
    provider: str
    model: str
    latency_ms: int = 0

    @property
    def is_fallback(self) -> bool:
        return self.provider == "fallback"


class PipelineResult(BaseModel):
    transcription: TranscriptionResult
    evaluation: EvaluationResult


class Question(BaseModel):
    id: str
    question_text: str
    category: str = "behavioral"
    difficulty: str = "medium"
    time_limit_seconds: int = 120
    rubric: Dict[str, str] = Field(default_factory=dict)


class RawAnswerSubmission(BaseModel):
    session_id: str
    question_id: str
    question_index: int = Field(ge=0)
    audio: bytes = b""
    mime_type: str = "audio/webm"
    tab_switches: int = Field(default=0, ge=0)
