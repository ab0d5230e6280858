from __future__ import annotations  # Groq adapter: Whisper transcription and Llama evaluation

import logging
import time
from typing import Any, Mapping, Optional

import httpx

from config.pipeline import ProviderRoute
from evaluation.parsing import evaluation_from_payload, parse_evaluation_json
from evaluation.prompts import EVALUATOR_SYSTEM_PROMPT, build_evaluation_prompt
from evaluation.types import EvaluationResult, TranscriptionResult
from providers import http
from providers.base import EmptyAudioError, EmptyResultError, ProviderError, audio_extension, failure_label


logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _message_content(data: Any) -> str:  # Pull the assistant text out of a chat completion
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            message = choices[0].get("message")
            if isinstance(message, dict) and isinstance(message.get("content"), str):
                return message["content"]
    return ""


class GroqProvider:
    """OpenAI-compatible Groq endpoints for speech-to-text and scoring."""

    name = "groq"

    def __init__(
        self,
        api_key: str,
        route: ProviderRoute,
        *,
        client: Optional[httpx.Client] = None,
        min_audio_bytes: int = 100,
    ) -> None:
        self._api_key = api_key
        self._route = route
        self._client = client or http.default_client()
        self._min_audio_bytes = min_audio_bytes

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise ProviderError("GROQ_API_KEY not configured", provider=self.name, status_code=401)
        return {"Authorization": f"Bearer {self._api_key}"}

    def transcribe(self, audio: bytes, mime_type: str) -> TranscriptionResult:
        if len(audio) < self._min_audio_bytes:
            raise EmptyAudioError(f"audio too small ({len(audio)} bytes)", provider=self.name)
        if not self._route.transcription_models:
            raise ProviderError("no transcription model configured", provider=self.name)
        headers = self._headers()
        model = self._route.transcription_models[0]
        start = time.perf_counter()
        data = http.post(
            self._client,
            f"{self._route.base_url}/audio/transcriptions",
            provider=self.name,
            timeout=self._route.timeout_s,
            headers=headers,
            data={"model": model, "response_format": "verbose_json", "language": self._route.language},
            files={"file": (f"audio.{audio_extension(mime_type)}", audio, mime_type)},
        )
        if not isinstance(data, dict):
            raise EmptyResultError("transcription payload was not an object", provider=self.name)
        return TranscriptionResult(
            transcript=str(data.get("text") or "").strip(),
            language=str(data.get("language") or self._route.language),
            duration_seconds=float(data.get("duration") or 0.0),
            provider=self.name,
            model=model,
            latency_ms=_elapsed_ms(start),
        )

    def evaluate(self, transcript: str, question_text: str, rubric: Mapping[str, str]) -> EvaluationResult:
        headers = self._headers()
        prompt = build_evaluation_prompt(question_text, transcript, rubric)
        start = time.perf_counter()
        last_error: Optional[ProviderError] = None
        for model in self._route.evaluation_models:
            payload = {
                "model": model,
                "messages": [
                    {"role": "system", "content": EVALUATOR_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                "temperature": self._route.temperature,
                "max_tokens": self._route.max_tokens,
                "response_format": {"type": "json_object"},
            }
            try:
                data = http.post(
                    self._client,
                    f"{self._route.base_url}/chat/completions",
                    provider=self.name,
                    timeout=self._route.timeout_s,
                    headers=headers,
                    json=payload,
                )
            except ProviderError as exc:
                logger.warning(
                    "[AI][%s] groq %s failed (%dms): %s", failure_label(exc), model, _elapsed_ms(start), exc
                )
                last_error = exc
                continue
            result = evaluation_from_payload(
                parse_evaluation_json(_message_content(data)),
                transcript=transcript,
                provider=self.name,
                model=model,
                latency_ms=_elapsed_ms(start),
            )
            if result is not None:
                return result
            logger.warning("[AI][EMPTY] groq %s returned no usable evaluation", model)
            last_error = EmptyResultError(f"{model} returned no usable evaluation", provider=self.name)
        raise last_error or EmptyResultError("no evaluation model configured", provider=self.name)


__all__ = ["GroqProvider"]
