from __future__ import annotations  # Re-export pipeline public API

from .factory import build_chain, load_pipeline_config, register_default_providers
from .fallback_chain import ALL_FAILED_REASON, NO_TRANSCRIPT_REASON, FallbackChain
from .retry import RetryPolicy, run_chain, run_with_retry

__all__ = [
    "build_chain",
    "load_pipeline_config",
    "register_default_providers",
    "ALL_FAILED_REASON",
    "NO_TRANSCRIPT_REASON",
    "FallbackChain",
    "RetryPolicy",
    "run_chain",
    "run_with_retry",
]
