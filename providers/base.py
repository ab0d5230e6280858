from __future__ import annotations  # Provider capability contracts and error taxonomy

from typing import Mapping, Optional, Protocol, runtime_checkable

from evaluation.types import EvaluationResult, TranscriptionResult


class ProviderError(RuntimeError):  # Base adapter failure (transport, auth, quota)
    def __init__(self, message: str, *, provider: str = "", status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class ProviderTimeout(ProviderError):  # Call exceeded its per-request timeout
    pass


class EmptyResultError(ProviderError):  # Provider answered but the output is unusable
    pass


class EmptyAudioError(ProviderError):  # Recording too small to be worth a provider call
    pass


@runtime_checkable
class Transcriber(Protocol):  # Speech-to-text capability
    name: str

    def transcribe(self, audio: bytes, mime_type: str) -> TranscriptionResult: ...


@runtime_checkable
class Evaluator(Protocol):  # Answer scoring capability
    name: str

    def evaluate(self, transcript: str, question_text: str, rubric: Mapping[str, str]) -> EvaluationResult: ...


def failure_label(exc: BaseException) -> str:  # Log marker distinguishing failure kinds
    if isinstance(exc, ProviderTimeout):
        return "TIMEOUT"
    if isinstance(exc, EmptyResultError):
        return "EMPTY"
    return "ERROR"


def audio_extension(mime_type: str) -> str:
    mime = (mime_type or "").lower()
    if "wav" in mime:
        return "wav"
    if "mp3" in mime or "mpeg" in mime:
        return "mp3"
    if "ogg" in mime:
        return "ogg"
    if "mp4" in mime or "m4a" in mime:
        return "m4a"
    return "webm"


__all__ = [
    "ProviderError",
    "ProviderTimeout",
    "EmptyResultError",
    "EmptyAudioError",
    "Transcriber",
    "Evaluator",
    "failure_label",
    "audio_extension",
]
