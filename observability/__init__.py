"""Observability utilities for the answer evaluation pipeline."""
from .logger import log_event

__all__ = ["log_event"]
