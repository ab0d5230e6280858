from __future__ import annotations  # Configuration schema for the provider fallback chain

import json
import logging
from pathlib import Path
from typing import Dict, List

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


class ProviderRoute(BaseModel):  # Endpoint and model list for one AI provider
    name: str
    base_url: str
    transcription_models: List[str] = Field(default_factory=list)
    evaluation_models: List[str] = Field(default_factory=list)
    timeout_s: float = Field(default=30.0, ge=0.1)
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1024, ge=1)
    language: str = "en"


def _default_routes() -> Dict[str, ProviderRoute]:
    return {
        "groq": ProviderRoute(
            name="groq",
            base_url="https://api.groq.com/openai/v1",
            transcription_models=["whisper-large-v3-turbo"],
            evaluation_models=["llama-3.3-70b-versatile", "llama-3.1-8b-instant"],
            timeout_s=15.0,
            temperature=0.15,
        ),
        "gemini": ProviderRoute(
            name="gemini",
            base_url="https://generativelanguage.googleapis.com/v1beta/models",
            transcription_models=["gemini-2.0-flash", "gemini-1.5-flash"],
            evaluation_models=["gemini-2.0-flash", "gemini-1.5-flash"],
            timeout_s=30.0,
            max_tokens=2048,
        ),
    }


class PipelineConfig(BaseModel):  # Retry policy and provider ordering
    max_retries: int = Field(default=2, ge=1)
    retry_delay_s: float = Field(default=1.0, ge=0.0)
    min_audio_bytes: int = Field(default=100, ge=0)
    transcription_chain: List[str] = Field(default_factory=lambda: ["groq", "gemini"])
    evaluation_chain: List[str] = Field(default_factory=lambda: ["groq", "gemini"])
    providers: Dict[str, ProviderRoute] = Field(default_factory=_default_routes)

    def route(self, name: str) -> ProviderRoute:
        if name not in self.providers:
            raise KeyError(f"Provider route missing for '{name}'")
        return self.providers[name]


def load_config(path: Path) -> PipelineConfig:  # Load YAML or JSON pipeline configuration
    if not path.exists():
        logger.info("Pipeline config %s not found; using defaults", path)
        return PipelineConfig()
    text = path.read_text(encoding="utf-8")
    if path.suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    return PipelineConfig.model_validate(data)
