"""Ordered source selection: try each candidate once per scan start."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from ..session import ScanSession
from .base import SampleSource, SourceUnavailableError

logger = logging.getLogger(__name__)

SourceFactory = Callable[[], SampleSource]


def start_with_fallback(
    session: ScanSession,
    factories: Sequence[SourceFactory],
) -> SampleSource:
    """
    Start the first source in ``factories`` that comes up.

    A candidate is skipped when building it or starting it raises
    :class:`SourceUnavailableError`. Any other exception propagates.
    """
    if not factories:
        raise ValueError("at least one source factory is required")

    reasons: list[str] = []
    for factory in factories:
        try:
            source = factory()
            session.start(source)
        except SourceUnavailableError as exc:
            logger.warning("Source unavailable, trying next: %s", exc)
            reasons.append(str(exc))
            continue
        logger.info("Using acquisition source %s", source.name)
        return source

    raise SourceUnavailableError("no acquisition source available: " + "; ".join(reasons))
