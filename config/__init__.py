"""Configuration package for the answer evaluation services."""
from .pipeline import PipelineConfig, ProviderRoute, load_config
from .registry import GEMINI_KEY, GROQ_KEY, bind_provider, clear_providers, get_provider
from .settings import Settings, settings

__all__ = [
    "PipelineConfig",
    "ProviderRoute",
    "load_config",
    "GEMINI_KEY",
    "GROQ_KEY",
    "bind_provider",
    "clear_providers",
    "get_provider",
    "Settings",
    "settings",
]
