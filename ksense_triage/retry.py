"""
Exponential backoff around a single external call.

delay = base_delay * 2**attempt, attempts numbered from 0. There is no jitter
and no ceiling on the delay, so a server that keeps answering 429 stalls the
pipeline for base_delay * (2**max_retries - 1) seconds in total before the
call is abandoned.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from .errors import RetryExhaustedError, is_retryable

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    base_delay: float = 1.0
    is_retryable: Callable[[BaseException], bool] = field(default=is_retryable)
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False)

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * (2**attempt)

    def call(self, fn: Callable[[], T], description: str = "request") -> T:
        """
        Run `fn` until it succeeds, fails permanently, or runs out of attempts.

        Non-retryable exceptions propagate unchanged. When the last allowed
        attempt fails with a retryable exception, RetryExhaustedError is raised
        from it.
        """
        last_exc: Optional[Exception] = None
        for attempt in range(self.max_retries + 1):
            try:
                return fn()
            except Exception as e:
                if not self.is_retryable(e):
                    raise
                last_exc = e
                if attempt == self.max_retries:
                    break
                wait = self.delay_for(attempt)
                LOGGER.warning(
                    "%s: %s. Retrying in %.2fs (attempt %d/%d)",
                    description,
                    e,
                    wait,
                    attempt + 1,
                    self.max_retries,
                )
                self.sleep(wait)
        raise RetryExhaustedError(
            description, self.max_retries + 1, last_exc
        ) from last_exc
