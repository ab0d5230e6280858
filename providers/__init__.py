from __future__ import annotations  # Re-export provider adapters

from .base import (
    EmptyAudioError,
    EmptyResultError,
    Evaluator,
    ProviderError,
    ProviderTimeout,
    Transcriber,
    failure_label,
)
from .gemini import GeminiProvider
from .groq import GroqProvider

__all__ = [
    "EmptyAudioError",
    "EmptyResultError",
    "Evaluator",
    "ProviderError",
    "ProviderTimeout",
    "Transcriber",
    "failure_label",
    "GeminiProvider",
    "GroqProvider",
]
