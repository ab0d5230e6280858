import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.registry import clear_providers
from config.settings import settings
from evaluation.types import DimensionScores, EvaluationResult, TranscriptionResult
from services.rate_limit import limiter
from storage.migrate import migrate


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    monkeypatch.setattr(settings, "AUDIO_DIR", os.path.join(td.name, "audio"), raising=False)
    migrate(db_path)
    try:
        yield db_path
    finally:
        td.cleanup()


@pytest.fixture(autouse=True)
def clean_state():
    clear_providers()
    limiter.reset()
    yield
    clear_providers()
    limiter.reset()


def make_transcription(text="I led the migration to a queue-based design.", provider="fake", duration=4.5):
    return TranscriptionResult(
        transcript=text,
        language="en",
        duration_seconds=duration,
        provider=provider,
        model=f"{provider}-stt",
        latency_ms=12,
    )


def make_evaluation(scores=(4, 4, 4, 4, 4), provider="fake", summary="Solid, specific answer."):
    clarity, relevance, confidence, technical_fit, communication = scores
    return EvaluationResult(
        transcript="echo from evaluator",
        score=DimensionScores(
            clarity=clarity,
            relevance=relevance,
            confidence=confidence,
            technical_fit=technical_fit,
            communication=communication,
        ),
        score_justification={"clarity": "clear structure"},
        summary=summary,
        strengths=["concrete example"],
        risks=["limited scale discussion"],
        recommendation="hire",
        provider=provider,
        model=f"{provider}-llm",
        latency_ms=30,
    )


class FakeProvider:
    """Scripted provider: each call pops the next outcome; exceptions are raised."""

    def __init__(self, name, transcriptions=(), evaluations=()):
        self.name = name
        self._transcriptions = list(transcriptions)
        self._evaluations = list(evaluations)
        self.transcribe_calls = 0
        self.evaluate_calls = 0

    @staticmethod
    def _next(outcomes):
        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def transcribe(self, audio, mime_type):
        self.transcribe_calls += 1
        return self._next(self._transcriptions)

    def evaluate(self, transcript, question_text, rubric):
        self.evaluate_calls += 1
        return self._next(self._evaluations)


@pytest.fixture
def fakes():
    return FakeProvider, make_transcription, make_evaluation
