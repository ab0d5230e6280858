"""FastAPI routes for answer submission and review."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from api.schemas import AnswerResp, AnswerView, SessionAnswersResp
from config.pipeline import PipelineConfig
from config.settings import settings
from evaluation.types import RawAnswerSubmission
from pipeline.factory import build_chain, load_pipeline_config
from services.answers import AnswerPipeline, submit_answer
from services.rate_limit import limiter
from storage.answers import list_answers
from storage.audio import AudioStore, LocalAudioStore
from storage.questions import get_question
from storage.sessions import get_active_session, get_session


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")

ANSWERS_BUCKET = "answers"


@lru_cache(maxsize=1)
def pipeline_config() -> PipelineConfig:
    return load_pipeline_config(settings)


def get_pipeline() -> AnswerPipeline:
    return build_chain(pipeline_config())


def get_audio_store() -> AudioStore:
    return LocalAudioStore(settings.AUDIO_DIR)


def _client_key(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _parse_index(raw: str) -> Optional[int]:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value >= 0 else None


@router.post("/answers", response_model=AnswerResp)
def submit(
    request: Request,
    session_id: str = Form(""),
    question_id: str = Form(""),
    question_index: str = Form(""),
    tab_switches: str = Form("0"),
    audio: Optional[UploadFile] = File(None),
    pipeline: AnswerPipeline = Depends(get_pipeline),
    audio_store: AudioStore = Depends(get_audio_store),
) -> AnswerResp:
    client_key = _client_key(request)
    if client_key:
        verdict = limiter.check(ANSWERS_BUCKET, client_key, settings.ANSWER_RATE_LIMIT, settings.ANSWER_RATE_WINDOW_S)
        if verdict.limited:
            raise HTTPException(
                status_code=429,
                detail="Too many requests",
                headers={"Retry-After": str(max(1, int(verdict.retry_after_s + 0.999)))},
            )

    index = _parse_index(question_index)
    if not session_id or not question_id or index is None:
        raise HTTPException(status_code=400, detail="Missing required fields")

    session = get_active_session(session_id)
    if session is None:
        raise HTTPException(status_code=400, detail="Invalid or inactive session")

    data = audio.file.read() if audio is not None else b""
    submission = RawAnswerSubmission(
        session_id=session_id,
        question_id=question_id,
        question_index=index,
        audio=data,
        mime_type=(audio.content_type if audio is not None and audio.content_type else settings.DEFAULT_MIME_TYPE),
        tab_switches=max(0, _parse_index(tab_switches) or 0),
    )
    logger.info("Answer submitted session=%s index=%d audio=%d bytes", session_id, index, len(data))
    try:
        outcome = submit_answer(
            submission,
            get_question(question_id),
            pipeline=pipeline,
            org_id=session["org_id"],
            audio_store=audio_store,
        )
    except Exception as exc:  # noqa: BLE001
        logger.exception("Answer submission failed for session %s", session_id)
        raise HTTPException(status_code=500, detail="Internal Server Error") from exc

    return AnswerResp(
        answer_id=outcome.answer_id,
        status=outcome.status,
        transcript=outcome.transcript,
        scores=outcome.scores,
        average_score=outcome.average_score,
        ai_error=outcome.ai_error,
    )


@router.get("/sessions/{session_id}/answers", response_model=SessionAnswersResp)
def session_answers(session_id: str) -> SessionAnswersResp:
    session = get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="session not found")
    answers = [
        AnswerView(
            question_id=row["question_id"],
            question_index=row["question_index"],
            status=row["status"],
            transcript=row["transcript"],
            scores=row["scores"],
            average_score=row["average_score"],
            strengths=row["strengths"] or [],
            risks=row["risks"] or [],
            ai_recommendation=row["ai_recommendation"],
            submitted_at=row["submitted_at"],
            evaluated_at=row["evaluated_at"],
        )
        for row in list_answers(session_id)
    ]
    return SessionAnswersResp(
        session_id=session_id,
        status=session["status"],
        total_score=session["total_score"],
        ai_recommendation=session["ai_recommendation"],
        ai_summary=session["ai_summary"],
        answers=answers,
    )
