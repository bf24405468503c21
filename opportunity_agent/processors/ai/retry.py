from __future__ import annotations

import os
import time
from typing import Callable, TypeVar

import requests

from ...utils.logging import get_logger

T = TypeVar("T")
N = TypeVar("N", int, float)
logger = get_logger("oa.ai.retry")


def _env_override(name: str, cast: Callable[[str], N], default: N) -> N:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r", name, raw)
        return default


def _is_retryable(exc: BaseException) -> bool:
    # 4xx other than 429 means the request itself is wrong
    response = getattr(exc, "response", None)
    if isinstance(exc, requests.HTTPError) and response is not None:
        return response.status_code == 429 or response.status_code >= 500
    return True


def with_retries(fn: Callable[[], T], *, retries: int = 2, backoff: float = 1.5) -> T:
    """Run ``fn``, retrying up to ``retries`` times with ``backoff ** n`` second pauses.

    ``AI_RETRIES`` / ``AI_BACKOFF`` in the environment take precedence over the
    arguments. When attempts run out the last error propagates.
    """
    retries = _env_override("AI_RETRIES", int, retries)
    backoff = _env_override("AI_BACKOFF", float, backoff)

    attempt = 0
    while True:
        try:
            return fn()
        except Exception as exc:  # noqa: BLE001 - re-raised when not retried
            if attempt >= retries or not _is_retryable(exc):
                raise
            pause = backoff ** attempt
            attempt += 1
            logger.warning("Generation call failed (%s/%s): %s; next try in %.1fs", attempt, retries + 1, exc, pause)
            time.sleep(pause)
