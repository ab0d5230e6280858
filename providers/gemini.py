from __future__ import annotations  # Gemini adapter: multimodal transcription and evaluation

import base64
import logging
import time
from typing import Any, Dict, List, Mapping, Optional

import httpx

from config.pipeline import ProviderRoute
from evaluation.defaults import NO_SPEECH_TRANSCRIPT
from evaluation.parsing import evaluation_from_payload, parse_evaluation_json
from evaluation.prompts import build_evaluation_prompt
from evaluation.types import EvaluationResult, TranscriptionResult
from providers import http
from providers.base import EmptyAudioError, EmptyResultError, ProviderError, failure_label


logger = logging.getLogger(__name__)

TRANSCRIBE_INSTRUCTION = (
    "Transcribe this audio recording exactly as spoken. Return ONLY the transcription text, "
    f'nothing else. If the audio is silent or unclear, return "{NO_SPEECH_TRANSCRIPT}".'
)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _candidate_text(data: Any) -> str:  # First text part of the first candidate
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return ""
    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if isinstance(parts, list) and parts and isinstance(parts[0], dict):
        text = parts[0].get("text")
        if isinstance(text, str):
            return text
    return ""


class GeminiProvider:
    """Gemini generateContent endpoint used for audio understanding and scoring."""

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        route: ProviderRoute,
        *,
        client: Optional[httpx.Client] = None,
        min_audio_bytes: int = 100,
    ) -> None:
        self._api_key = api_key.strip()
        self._route = route
        self._client = client or http.default_client()
        self._min_audio_bytes = min_audio_bytes

    def _generate(self, model: str, contents: List[Dict[str, Any]], **generation: Any) -> str:
        if not self._api_key:
            raise ProviderError("GEMINI_API_KEY not configured", provider=self.name, status_code=401)
        config = {"temperature": self._route.temperature, "maxOutputTokens": self._route.max_tokens}
        config.update(generation)
        data = http.post(
            self._client,
            f"{self._route.base_url}/{model}:generateContent",
            provider=self.name,
            timeout=self._route.timeout_s,
            headers={"Content-Type": "application/json"},
            params={"key": self._api_key},
            json={"contents": contents, "generationConfig": config},
        )
        return _candidate_text(data)

    def transcribe(self, audio: bytes, mime_type: str) -> TranscriptionResult:
        if len(audio) < self._min_audio_bytes:
            raise EmptyAudioError(f"audio too small ({len(audio)} bytes)", provider=self.name)
        start = time.perf_counter()
        contents = [
            {
                "parts": [
                    {"inlineData": {"mimeType": mime_type or "audio/webm", "data": base64.b64encode(audio).decode("ascii")}},
                    {"text": TRANSCRIBE_INSTRUCTION},
                ]
            }
        ]
        last_error: Optional[ProviderError] = None
        models = self._route.transcription_models
        for model in models:
            try:
                text = self._generate(model, contents)
            except ProviderError as exc:
                logger.warning("[AI][%s] gemini %s transcription failed: %s", failure_label(exc), model, exc)
                last_error = exc
                continue
            return TranscriptionResult(
                transcript=text.strip(),
                language=self._route.language,
                duration_seconds=0.0,
                provider=self.name,
                model=model,
                latency_ms=_elapsed_ms(start),
            )
        raise last_error or ProviderError("no transcription model configured", provider=self.name)

    def evaluate(self, transcript: str, question_text: str, rubric: Mapping[str, str]) -> EvaluationResult:
        prompt = build_evaluation_prompt(question_text, transcript, rubric)
        start = time.perf_counter()
        last_error: Optional[ProviderError] = None
        for model in self._route.evaluation_models:
            try:
                text = self._generate(
                    model,
                    [{"role": "user", "parts": [{"text": prompt}]}],
                    responseMimeType="application/json",
                )
            except ProviderError as exc:
                logger.warning(
                    "[AI][%s] gemini %s eval failed (%dms): %s", failure_label(exc), model, _elapsed_ms(start), exc
                )
                last_error = exc
                continue
            result = evaluation_from_payload(
                parse_evaluation_json(text),
                transcript=transcript,
                provider=self.name,
                model=model,
                latency_ms=_elapsed_ms(start),
            )
            if result is not None:
                return result
            logger.warning("[AI][EMPTY] gemini %s returned no usable evaluation", model)
            last_error = EmptyResultError(f"{model} returned no usable evaluation", provider=self.name)
        raise last_error or EmptyResultError("no evaluation model configured", provider=self.name)


__all__ = ["GeminiProvider", "TRANSCRIBE_INSTRUCTION"]
