"""Answer ingestion: persist, evaluate, normalize, and aggregate one submission."""
from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional, Protocol

from pydantic import BaseModel

from evaluation.types import PipelineResult, Question, RawAnswerSubmission
from observability import log_event
from services.scoring import SessionAggregate, average_score, normalize_scores, recompute_session_aggregate
from storage.answers import STATUS_EVALUATED, STATUS_PENDING_REVIEW, STATUS_SUBMITTED, record_evaluation, upsert_answer
from storage.audio import AudioStore, audio_key

logger = logging.getLogger(__name__)

UNKNOWN_QUESTION = "Unknown question"
# Rough duration estimate until a provider reports the real one.
BYTES_PER_SECOND_ESTIMATE = 16000


class AnswerPipeline(Protocol):
    def process_answer(
        self,
        audio: bytes,
        mime_type: str,
        question_text: str,
        rubric: Optional[Mapping[str, str]] = None,
        *,
        session_id: str = "-",
    ) -> PipelineResult: ...


class SubmissionOutcome(BaseModel):
    success: bool = True
    answer_id: str
    status: str
    transcript: Optional[str] = None
    scores: Optional[Dict[str, int]] = None
    average_score: Optional[int] = None
    ai_error: Optional[str] = None
    aggregate: Optional[SessionAggregate] = None


def _refresh_aggregate(session_id: str, summary: Optional[str] = None) -> SessionAggregate:
    aggregate = recompute_session_aggregate(session_id, summary=summary)
    log_event(
        "session.aggregate",
        session_id,
        score=aggregate.total_score,
        decision=aggregate.ai_recommendation,
    )
    return aggregate


def submit_answer(
    submission: RawAnswerSubmission,
    question: Optional[Question],
    *,
    pipeline: AnswerPipeline,
    org_id: str,
    audio_store: Optional[AudioStore] = None,
) -> SubmissionOutcome:
    """Persist a submission, run the evaluation pipeline, and refresh the session.

    Storage errors propagate. A failure inside the pipeline call leaves the
    answer stored unevaluated and is reported through ``ai_error``.
    """

    audio_url: Optional[str] = None
    duration = 0.0
    if submission.audio and audio_store is not None:
        key = audio_key(org_id, submission.session_id, submission.question_index, submission.mime_type)
        audio_url = audio_store.save(key, submission.audio, submission.mime_type)
        duration = len(submission.audio) / BYTES_PER_SECOND_ESTIMATE

    answer_id = upsert_answer(
        session_id=submission.session_id,
        question_id=submission.question_id,
        question_index=submission.question_index,
        audio_url=audio_url,
        audio_duration_seconds=duration,
        tab_switches_during=submission.tab_switches,
    )
    log_event(
        "answer.submitted",
        submission.session_id,
        answer_id=answer_id,
        question_index=submission.question_index,
    )
    if not submission.audio:
        # The upsert cleared any earlier score for this index.
        aggregate = _refresh_aggregate(submission.session_id)
        return SubmissionOutcome(answer_id=answer_id, status=STATUS_SUBMITTED, aggregate=aggregate)

    question_text = question.question_text if question else UNKNOWN_QUESTION
    rubric = question.rubric if question else {}
    try:
        result = pipeline.process_answer(
            submission.audio,
            submission.mime_type,
            question_text,
            rubric,
            session_id=submission.session_id,
        )
    except Exception as exc:  # noqa: BLE001
        logger.exception("AI evaluation error for answer %s", answer_id)
        log_event("answer.eval_error", submission.session_id, level=logging.ERROR, answer_id=answer_id, error=str(exc))
        aggregate = _refresh_aggregate(submission.session_id)
        return SubmissionOutcome(answer_id=answer_id, status=STATUS_SUBMITTED, ai_error=str(exc), aggregate=aggregate)

    evaluation = result.evaluation
    raw_scores = evaluation.score.model_dump()
    normalized = normalize_scores(raw_scores)
    pending = evaluation.is_fallback
    avg = None if pending else average_score(normalized)
    status = STATUS_PENDING_REVIEW if pending else STATUS_EVALUATED
    record_evaluation(
        answer_id,
        transcript=result.transcription.transcript,
        ai_evaluation=evaluation.model_dump(),
        raw_scores=raw_scores,
        scores=normalized,
        average_score=avg,
        strengths=evaluation.strengths,
        risks=evaluation.risks,
        ai_recommendation=evaluation.recommendation,
        status=status,
        audio_duration_seconds=result.transcription.duration_seconds or None,
    )
    log_event(
        "answer.evaluated",
        submission.session_id,
        answer_id=answer_id,
        question_index=submission.question_index,
        outcome=evaluation.provider,
        status=status,
        score=avg,
    )

    aggregate = _refresh_aggregate(submission.session_id, summary=None if pending else evaluation.summary)
    return SubmissionOutcome(
        answer_id=answer_id,
        status=status,
        transcript=result.transcription.transcript,
        scores=normalized,
        average_score=avg,
        aggregate=aggregate,
    )


__all__ = ["AnswerPipeline", "SubmissionOutcome", "submit_answer", "UNKNOWN_QUESTION"]
