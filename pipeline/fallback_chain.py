from __future__ import annotations  # Provider failover for transcription and evaluation

import logging
import time
from typing import Mapping, Optional, Sequence

from evaluation.defaults import get_default_evaluation, get_default_transcription, is_unusable_transcript
from evaluation.types import EvaluationResult, PipelineResult, TranscriptionResult
from observability import log_event
from pipeline.retry import RetryPolicy, run_chain
from providers.base import Evaluator, Transcriber


logger = logging.getLogger(__name__)

NO_TRANSCRIPT_REASON = "No transcript available"
ALL_FAILED_REASON = "All AI providers failed — requires manual review"


def _has_transcript(result: TranscriptionResult) -> bool:
    return bool(result.transcript and result.transcript.strip())


def _has_evaluation(result: EvaluationResult) -> bool:
    return bool(result.summary.strip())


class FallbackChain:
    """Transcribe then evaluate one answer, failing over across providers.

    No public method raises: every path ends in a populated result, using the
    fallback transcription or neutral evaluation when providers are exhausted.
    """

    def __init__(
        self,
        transcribers: Sequence[Transcriber],
        evaluators: Sequence[Evaluator],
        *,
        policy: Optional[RetryPolicy] = None,
        min_audio_bytes: int = 100,
    ) -> None:
        self.transcribers = list(transcribers)
        self.evaluators = list(evaluators)
        self.policy = policy or RetryPolicy()
        self.min_audio_bytes = min_audio_bytes

    def transcribe(self, audio: bytes, mime_type: str, *, session_id: str = "-") -> TranscriptionResult:
        start = time.perf_counter()
        if len(audio or b"") < self.min_audio_bytes:
            logger.warning("Audio below %d bytes (%d); skipping transcription", self.min_audio_bytes, len(audio or b""))
            result = get_default_transcription()
        else:
            calls = [
                (provider.name, lambda provider=provider: provider.transcribe(audio, mime_type))
                for provider in self.transcribers
            ]
            result = run_chain(calls, policy=self.policy, accept=_has_transcript, stage="transcription")
            if result is None:
                result = get_default_transcription()
        log_event(
            "pipeline.transcription",
            session_id,
            outcome=result.provider,
            model=result.model,
            ms=int((time.perf_counter() - start) * 1000),
        )
        return result

    def evaluate(
        self,
        transcript: str,
        question_text: str,
        rubric: Optional[Mapping[str, str]] = None,
        *,
        session_id: str = "-",
    ) -> EvaluationResult:
        start = time.perf_counter()
        rubric = dict(rubric or {})
        if is_unusable_transcript(transcript):
            result = get_default_evaluation(NO_TRANSCRIPT_REASON)
        else:
            calls = [
                (provider.name, lambda provider=provider: provider.evaluate(transcript, question_text, rubric))
                for provider in self.evaluators
            ]
            result = run_chain(calls, policy=self.policy, accept=_has_evaluation, stage="evaluation")
            if result is None:
                result = get_default_evaluation(ALL_FAILED_REASON)
        log_event(
            "pipeline.evaluation",
            session_id,
            outcome=result.provider,
            model=result.model,
            ms=int((time.perf_counter() - start) * 1000),
        )
        return result

    def process_answer(
        self,
        audio: bytes,
        mime_type: str,
        question_text: str,
        rubric: Optional[Mapping[str, str]] = None,
        *,
        session_id: str = "-",
    ) -> PipelineResult:
        """Run transcription to completion, then evaluation on its transcript."""

        try:
            transcription = self.transcribe(audio, mime_type, session_id=session_id)
            evaluation = self.evaluate(transcription.transcript, question_text, rubric, session_id=session_id)
        except Exception:  # noqa: BLE001
            logger.exception("Evaluation pipeline failed unexpectedly")
            transcription = get_default_transcription()
            evaluation = get_default_evaluation(ALL_FAILED_REASON)
        evaluation = evaluation.model_copy(update={"transcript": transcription.transcript})
        log_event(
            "pipeline.done",
            session_id,
            outcome=evaluation.provider,
            decision=evaluation.recommendation,
        )
        return PipelineResult(transcription=transcription, evaluation=evaluation)


__all__ = ["FallbackChain", "NO_TRANSCRIPT_REASON", "ALL_FAILED_REASON"]
