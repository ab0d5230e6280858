import base64
import json

import httpx
import pytest

from config.pipeline import PipelineConfig
from providers.base import EmptyAudioError, EmptyResultError, ProviderError, ProviderTimeout
from providers.gemini import GeminiProvider
from providers.groq import GroqProvider

AUDIO = b"RIFF" + b"\x01" * 400
EVAL_JSON = {
    "score": {"clarity": 4, "relevance": 5, "confidence": 3.5, "technical_fit": 4, "communication": 4},
    "scoreJustification": {"clarity": "structured"},
    "summary": "Specific and relevant.",
    "strengths": ["metrics"],
    "risks": ["brief"],
    "recommendation": "hire",
}
ROUTES = PipelineConfig().providers


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def _chat(content):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def _gemini(text):
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def test_groq_transcribe_posts_multipart_audio():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["auth"] = request.headers["authorization"]
        seen["body"] = request.content
        return httpx.Response(200, json={"text": " I shipped it. ", "language": "english", "duration": 3.2})

    provider = GroqProvider("gsk-test", ROUTES["groq"], client=_client(handler))
    result = provider.transcribe(AUDIO, "audio/wav")
    assert seen["path"].endswith("/audio/transcriptions")
    assert seen["auth"] == "Bearer gsk-test"
    assert b"whisper-large-v3-turbo" in seen["body"]
    assert b'filename="audio.wav"' in seen["body"]
    assert result.transcript == "I shipped it."
    assert result.duration_seconds == 3.2
    assert result.provider == "groq"


def test_groq_rejects_tiny_audio_without_calling():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"text": "x"})

    provider = GroqProvider("gsk-test", ROUTES["groq"], client=_client(handler))
    with pytest.raises(EmptyAudioError):
        provider.transcribe(b"\x00" * 99, "audio/webm")
    assert calls == []


def test_groq_rate_limit_raises_with_status():
    provider = GroqProvider(
        "gsk-test",
        ROUTES["groq"],
        client=_client(lambda request: httpx.Response(429, text="rate limit reached")),
    )
    with pytest.raises(ProviderError) as info:
        provider.transcribe(AUDIO, "audio/webm")
    assert info.value.status_code == 429


def test_groq_missing_key_is_an_auth_failure():
    provider = GroqProvider("", ROUTES["groq"], client=_client(lambda request: httpx.Response(200, json={})))
    with pytest.raises(ProviderError):
        provider.evaluate("answer", "Q", {})


def test_groq_evaluate_falls_back_to_smaller_model_on_bad_output():
    models = []

    def handler(request):
        model = json.loads(request.content)["model"]
        models.append(model)
        if model == "llama-3.3-70b-versatile":
            return _chat("Sorry, I cannot help with that.")
        return _chat(json.dumps(EVAL_JSON))

    provider = GroqProvider("gsk-test", ROUTES["groq"], client=_client(handler))
    result = provider.evaluate("I cut latency by 40%.", "Describe an optimization.", {})
    assert models == ["llama-3.3-70b-versatile", "llama-3.1-8b-instant"]
    assert result.model == "llama-3.1-8b-instant"
    assert result.score.relevance == 5.0
    assert result.transcript == "I cut latency by 40%."


def test_groq_evaluate_timeout_then_fallback_model():
    def handler(request):
        if json.loads(request.content)["model"] == "llama-3.3-70b-versatile":
            raise httpx.ReadTimeout("timed out", request=request)
        return _chat(json.dumps(EVAL_JSON))

    provider = GroqProvider("gsk-test", ROUTES["groq"], client=_client(handler))
    assert provider.evaluate("answer", "Q", {}).model == "llama-3.1-8b-instant"


def test_groq_evaluate_surfaces_timeout_when_all_models_time_out():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    provider = GroqProvider("gsk-test", ROUTES["groq"], client=_client(handler))
    with pytest.raises(ProviderTimeout):
        provider.evaluate("answer", "Q", {})


def test_groq_evaluate_raises_when_output_is_never_usable():
    provider = GroqProvider("gsk-test", ROUTES["groq"], client=_client(lambda request: _chat('{"score": {}}')))
    with pytest.raises(EmptyResultError):
        provider.evaluate("answer", "Q", {})


def test_gemini_transcribe_preserves_no_speech_marker():
    seen = {}

    def handler(request):
        seen["key"] = request.url.params["key"]
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return _gemini("[No clear speech detected]\n")

    provider = GeminiProvider("gem-key", ROUTES["gemini"], client=_client(handler))
    result = provider.transcribe(AUDIO, "audio/webm")
    assert result.transcript == "[No clear speech detected]"
    assert seen["key"] == "gem-key"
    assert seen["path"].endswith("/gemini-2.0-flash:generateContent")
    inline = seen["body"]["contents"][0]["parts"][0]["inlineData"]
    assert base64.b64decode(inline["data"]) == AUDIO
    assert inline["mimeType"] == "audio/webm"


def test_gemini_transcribe_tries_next_model_then_raises():
    paths = []

    def handler(request):
        paths.append(request.url.path)
        return httpx.Response(503, text="overloaded")

    provider = GeminiProvider("gem-key", ROUTES["gemini"], client=_client(handler))
    with pytest.raises(ProviderError):
        provider.transcribe(AUDIO, "audio/webm")
    assert len(paths) == 2


def test_gemini_evaluate_parses_fenced_json():
    def handler(request):
        body = json.loads(request.content)
        assert body["generationConfig"]["responseMimeType"] == "application/json"
        return _gemini("```json\n" + json.dumps(EVAL_JSON) + "\n```")

    provider = GeminiProvider("gem-key", ROUTES["gemini"], client=_client(handler))
    result = provider.evaluate("answer", "Q", {"clarity": "custom hint"})
    assert result.provider == "gemini"
    assert result.recommendation == "hire"
    assert result.score.confidence == 3.5
