"""Minimal helpers for opt-in debug/instrumentation hooks."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def debug_enabled() -> bool:
    """Return True when lightweight instrumentation should run."""
    return os.getenv("NEURODETECT_DEBUG", "").lower() in _TRUTHY


@contextmanager
def time_block(label: str, *, budget_ms: float | None = None) -> Iterator[None]:
    """
    Log elapsed time for the wrapped block when debugging is enabled.

    With ``budget_ms`` set, overruns are logged at warning level so a slow
    classification cycle shows up against the acquisition tick period.
    """
    if not debug_enabled():
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        if budget_ms is not None and elapsed_ms > budget_ms:
            logger.warning("%s took %.3f ms (budget %.1f ms)", label, elapsed_ms, budget_ms)
        else:
            logger.debug("%s took %.3f ms", label, elapsed_ms)
