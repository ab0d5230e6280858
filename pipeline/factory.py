from __future__ import annotations  # Assemble the fallback chain from configuration

import logging
import time
from pathlib import Path
from typing import Callable, List, Optional

import httpx

from config.pipeline import PipelineConfig, load_config
from config.registry import GEMINI_KEY, GROQ_KEY, bind_provider, get_provider
from config.settings import Settings
from pipeline.fallback_chain import FallbackChain
from pipeline.retry import RetryPolicy
from providers.base import Evaluator, Transcriber
from providers.gemini import GeminiProvider
from providers.groq import GroqProvider


logger = logging.getLogger(__name__)


def register_default_providers(
    cfg: PipelineConfig,
    app_settings: Settings,
    *,
    client: Optional[httpx.Client] = None,
) -> None:  # Bind Groq and Gemini adapters with injected credentials
    bind_provider(
        GROQ_KEY,
        GroqProvider(
            app_settings.GROQ_API_KEY,
            cfg.route(GROQ_KEY),
            client=client,
            min_audio_bytes=cfg.min_audio_bytes,
        ),
    )
    bind_provider(
        GEMINI_KEY,
        GeminiProvider(
            app_settings.GEMINI_API_KEY,
            cfg.route(GEMINI_KEY),
            client=client,
            min_audio_bytes=cfg.min_audio_bytes,
        ),
    )
    if not app_settings.GROQ_API_KEY:
        logger.warning("GROQ_API_KEY is empty; groq calls will fail over")
    if not app_settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is empty; gemini calls will fail over")


def build_chain(cfg: PipelineConfig, *, sleep: Callable[[float], None] = time.sleep) -> FallbackChain:
    """Resolve the configured provider order through the registry."""

    transcribers: List[Transcriber] = []
    for name in cfg.transcription_chain:
        provider = get_provider(name)
        if not isinstance(provider, Transcriber):
            raise TypeError(f"Provider '{name}' cannot transcribe")
        transcribers.append(provider)
    evaluators: List[Evaluator] = []
    for name in cfg.evaluation_chain:
        provider = get_provider(name)
        if not isinstance(provider, Evaluator):
            raise TypeError(f"Provider '{name}' cannot evaluate")
        evaluators.append(provider)
    policy = RetryPolicy(max_attempts=cfg.max_retries, delay_s=cfg.retry_delay_s, sleep=sleep)
    return FallbackChain(transcribers, evaluators, policy=policy, min_audio_bytes=cfg.min_audio_bytes)


def load_pipeline_config(app_settings: Settings) -> PipelineConfig:
    return load_config(Path(app_settings.PIPELINE_CONFIG))


__all__ = ["register_default_providers", "build_chain", "load_pipeline_config"]
