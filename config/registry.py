"""In-memory provider registry for the evaluation pipeline."""
from typing import Any, Dict

_REGISTRY: Dict[str, Any] = {}


def bind_provider(name: str, provider: Any) -> None:
    """Bind a provider instance to a registry name."""
    _REGISTRY[name] = provider


def get_provider(name: str) -> Any:
    """Retrieve a provider from the registry.

    Raises:
        KeyError: If no provider has been bound for ``name``.
    """

    if name not in _REGISTRY:
        raise KeyError(f"Provider not bound in registry: {name}")
    return _REGISTRY[name]


def clear_providers() -> None:
    _REGISTRY.clear()


GROQ_KEY = "groq"
GEMINI_KEY = "gemini"
