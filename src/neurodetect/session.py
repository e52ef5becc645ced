"""Scan session: one window, one active producer, one latest prediction."""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

from .analysis.classifier import DEFAULT_THRESHOLDS, Thresholds, classify
from .analysis.features import extract_window_features
from .core.models import Prediction, Sample
from .core.window import DEFAULT_WINDOW_SIZE, SampleWindow
from .tools.debug import time_block

if TYPE_CHECKING:
    from .acquisition.base import SampleSource

logger = logging.getLogger(__name__)

MIN_NARRATIVE_SAMPLES = 10

PredictionCallback = Callable[[Prediction], None]


@dataclass(frozen=True)
class ProducerToken:
    """Write permission for the window; only the newest token is honoured."""

    generation: int
    source_name: str


@dataclass(frozen=True)
class CaptureSnapshot:
    """Frozen view handed to the narrative service."""

    prediction: Prediction
    readings: Tuple[float, ...]


class ScanSession:
    """
    Owns the sample window and runs extract -> classify on every full push.

    Exactly one producer may write at a time. Installing a new producer
    revokes the previous token (and stops its source) before the window is
    reset, so samples from two acquisition regimes never share a window.
    Late samples carrying a revoked token are dropped.
    """

    def __init__(
        self,
        window_size: int = DEFAULT_WINDOW_SIZE,
        thresholds: Thresholds = DEFAULT_THRESHOLDS,
        *,
        tick_budget_ms: float | None = None,
    ) -> None:
        self._window = SampleWindow(window_size)
        self._thresholds = thresholds
        self._tick_budget_ms = tick_budget_ms
        self._lock = threading.RLock()
        self._generations = itertools.count(1)
        self._token: Optional[ProducerToken] = None
        self._source: Optional[SampleSource] = None
        self._last_prediction = Prediction.neutral()
        self._subscribers: List[PredictionCallback] = []
        self._cycles = 0

    # ------------------------------------------------------------------
    # Producer ownership
    # ------------------------------------------------------------------
    def attach(self, source_name: str = "manual") -> ProducerToken:
        """
        Revoke the current producer and hand out a fresh token.

        Used directly by callers that push samples themselves; sources go
        through :meth:`start`.
        """
        self._detach_source()
        with self._lock:
            self._window.reset()
            token = ProducerToken(next(self._generations), source_name)
            self._token = token
        logger.debug("Producer %s attached (generation %d)", source_name, token.generation)
        return token

    def start(self, source: SampleSource) -> ProducerToken:
        """Stop whatever is running, reset the window and start ``source``."""
        token = self.attach(source.name)
        with self._lock:
            self._source = source
        try:
            source.start(lambda sample: self.submit(token, sample))
        except Exception:
            with self._lock:
                if self._token is token:
                    self._token = None
                    self._source = None
            raise
        logger.info("Scan started with source %s", source.name)
        return token

    def stop(self) -> None:
        """Stop the active source and revoke its token. Safe to call repeatedly."""
        stopped = self._detach_source()
        if stopped is not None:
            logger.info("Scan stopped (source %s)", stopped)

    def _detach_source(self) -> Optional[str]:
        with self._lock:
            source = self._source
            token = self._token
            self._source = None
            self._token = None
        if source is not None:
            source.stop()
        return token.source_name if token is not None else None

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._source is not None

    @property
    def active_source_name(self) -> Optional[str]:
        with self._lock:
            return self._token.source_name if self._token is not None else None

    # ------------------------------------------------------------------
    # Sample path
    # ------------------------------------------------------------------
    def submit(self, token: ProducerToken, sample: Sample) -> Optional[Prediction]:
        """
        Push ``sample`` on behalf of ``token``.

        Returns the fresh prediction once the window is full, ``None`` while
        it is still filling or when the token has been revoked.
        """
        with self._lock:
            if token is not self._token:
                logger.debug(
                    "Dropping sample from revoked producer %s (generation %d)",
                    token.source_name,
                    token.generation,
                )
                return None

            self._window.push(sample)
            with time_block("extract+classify", budget_ms=self._tick_budget_ms):
                features = extract_window_features(self._window)
                if features is None:
                    return None
                prediction = classify(features, self._thresholds)

            self._last_prediction = prediction
            self._cycles += 1
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(prediction)
            except Exception:
                logger.exception("Prediction subscriber %r failed", callback)
        return prediction

    def subscribe(self, callback: PredictionCallback) -> Callable[[], None]:
        """Register ``callback`` for every new prediction; returns an unsubscribe hook."""
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    @property
    def last_prediction(self) -> Prediction:
        with self._lock:
            return self._last_prediction

    @property
    def cycles(self) -> int:
        with self._lock:
            return self._cycles

    def size(self) -> int:
        with self._lock:
            return self._window.size()

    def readings(self) -> Tuple[float, ...]:
        with self._lock:
            return tuple(float(v) for v in self._window.magnitudes())

    def narrative_snapshot(
        self, min_samples: int = MIN_NARRATIVE_SAMPLES
    ) -> Optional[CaptureSnapshot]:
        """Snapshot the latest prediction and readings, or ``None`` if too few samples."""
        with self._lock:
            if self._window.size() < min_samples:
                return None
            return CaptureSnapshot(
                prediction=self._last_prediction,
                readings=tuple(float(v) for v in self._window.magnitudes()),
            )
