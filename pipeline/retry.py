"""Retry-with-policy helpers shared by the transcription and evaluation stages."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Tuple, TypeVar

from providers.base import failure_label

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Attempts per provider and linear backoff between failed attempts."""

    max_attempts: int = 2
    delay_s: float = 1.0
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False, repr=False)

    def delay_for(self, attempt: int) -> float:
        return self.delay_s * attempt


def run_with_retry(
    call: Callable[[], T],
    *,
    policy: RetryPolicy,
    accept: Callable[[T], bool],
    label: str,
) -> Optional[T]:
    """Call ``call`` up to ``policy.max_attempts`` times.

    Returns the first result ``accept`` approves, or ``None`` once attempts
    run out. Exceptions are logged and consumed; only a raised attempt that
    is not the last one sleeps before retrying.
    """

    attempts = policy.max_attempts
    for attempt in range(1, attempts + 1):
        try:
            result = call()
        except Exception as exc:  # noqa: BLE001
            logger.warning("[AI][%s] %s attempt=%d/%d failed: %s", failure_label(exc), label, attempt, attempts, exc)
            if attempt < attempts:
                policy.sleep(policy.delay_for(attempt))
            continue
        if accept(result):
            return result
        logger.warning("[AI][EMPTY] %s attempt=%d/%d returned an empty result", label, attempt, attempts)
    return None


def run_chain(
    calls: Sequence[Tuple[str, Callable[[], T]]],
    *,
    policy: RetryPolicy,
    accept: Callable[[T], bool],
    stage: str,
) -> Optional[T]:
    """Try each named call in order with retries; ``None`` when all are exhausted."""

    for name, call in calls:
        result = run_with_retry(call, policy=policy, accept=accept, label=f"{name} {stage}")
        if result is not None:
            return result
        logger.warning("%s exhausted for provider %s; failing over", stage, name)
    return None


__all__ = ["RetryPolicy", "run_with_retry", "run_chain"]
