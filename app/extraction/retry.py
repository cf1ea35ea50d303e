"""
Bounded exponential-backoff retry for render + extract attempts.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from app.errors import NonRetryableError
from app.extraction.logging_utils import log_event

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_retry(
    operation: Callable[[], T],
    *,
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
    target: str | None = None,
) -> T:
    """
    Run `operation` up to `max_attempts` times.

    Attempt `n` (zero-based) that fails is followed by a wait of
    `initial_delay * 2**n` seconds. NonRetryableError is raised immediately;
    any other failure is re-raised once the attempt budget is spent.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1.")

    last_error: Exception | None = None
    for attempt in range(max_attempts):
        try:
            return operation()
        except NonRetryableError:
            raise
        except Exception as exc:
            last_error = exc

        if attempt >= max_attempts - 1:
            break

        delay = initial_delay * (2**attempt)
        log_event(
            logger,
            logging.WARNING,
            "render_retry",
            target=target,
            attempt=attempt + 1,
            delay_seconds=delay,
            error=f"{type(last_error).__name__}: {last_error}",
        )
        sleep(delay)

    if last_error is None:
        raise RuntimeError("Retry loop finished without an attempt.")
    raise last_error
