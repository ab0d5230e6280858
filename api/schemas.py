"""Pydantic schemas for the answer submission API."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class AnswerResp(BaseModel):
    success: bool = True
    answer_id: str
    status: str
    transcript: Optional[str] = None
    scores: Optional[Dict[str, int]] = None
    average_score: Optional[int] = None
    ai_error: Optional[str] = None


class AnswerView(BaseModel):
    question_id: str
    question_index: int
    status: str
    transcript: Optional[str] = None
    scores: Optional[Dict[str, int]] = None
    average_score: Optional[int] = None
    strengths: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)
    ai_recommendation: Optional[str] = None
    submitted_at: Optional[str] = None
    evaluated_at: Optional[str] = None


class SessionAnswersResp(BaseModel):
    session_id: str
    status: str
    total_score: Optional[float] = None
    ai_recommendation: Optional[str] = None
    ai_summary: Optional[str] = None
    answers: List[AnswerView] = Field(default_factory=list)
