"""Synthetic magnetometer used when no real sensor stream is available."""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

import numpy as np

from ..core.models import Sample
from .base import EmitFn

logger = logging.getLogger(__name__)

DEFAULT_SIM_BASE = 45.0
DEFAULT_SIM_NOISE = 2.0
SPIKE_BASE_CUTOFF = 80.0
SPIKE_AMPLITUDE = 50.0
SPIKE_EXTRA_NOISE = 15.0
SPIKE_PERIOD_MS = 200.0


@dataclass(frozen=True)
class SimulationConfig:
    """
    Knobs for the synthetic field.

    ``base`` is the resting magnitude in µT, ``noise`` the width of the
    uniform jitter added on top. Spikes emulate sweeping past metal and are
    only injected while ``base`` stays below 80 µT.
    """

    base: float = DEFAULT_SIM_BASE
    noise: float = DEFAULT_SIM_NOISE
    rate_hz: float = 60.0
    spike_probability: float = 0.04
    seed: Optional[int] = None

    def sanitized(self) -> SimulationConfig:
        return replace(
            self,
            base=float(self.base),
            noise=max(0.0, float(self.noise)),
            rate_hz=max(1.0, float(self.rate_hz)),
            spike_probability=min(1.0, max(0.0, float(self.spike_probability))),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> SimulationConfig:
        if not data:
            return cls()
        payload = {
            key: data[key]
            for key in ("base", "noise", "rate_hz", "spike_probability", "seed")
            if key in data
        }
        return cls(**payload).sanitized()


def simulate_sample(
    time_ms: float,
    config: SimulationConfig,
    rng: np.random.Generator,
) -> Sample:
    """
    Produce one synthetic reading as a function of time and ``config``.

    All randomness comes from ``rng``; with a seeded generator the output
    sequence is reproducible.
    """
    base = float(config.base)
    noise = float(rng.random()) * float(config.noise)

    if base < SPIKE_BASE_CUTOFF and rng.random() > 1.0 - config.spike_probability:
        base += math.sin(time_ms / SPIKE_PERIOD_MS) * SPIKE_AMPLITUDE
        noise += float(rng.random()) * SPIKE_EXTRA_NOISE

    value = base + noise
    return Sample(
        x=value * 0.5,
        y=value * 0.3,
        z=value * 0.2,
        total=value,
        timestamp_ms=float(time_ms),
    )


class SimulatedSource:
    """Emit :func:`simulate_sample` readings from a background timer thread."""

    name = "simulation"

    def __init__(self, config: SimulationConfig | None = None) -> None:
        self._config = (config or SimulationConfig()).sanitized()
        self._config_lock = threading.Lock()
        self._rng = np.random.default_rng(self._config.seed)
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def config(self) -> SimulationConfig:
        with self._config_lock:
            return self._config

    def update_config(self, config: SimulationConfig) -> None:
        """Swap in a new configuration; the next tick reads it."""
        with self._config_lock:
            self._config = config.sanitized()
        logger.debug("Simulation config updated: %s", self._config)

    def reset_config(self) -> None:
        self.update_config(SimulationConfig(seed=self.config.seed))

    def start(self, emit: EmitFn) -> None:
        if self._thread is not None:
            raise RuntimeError("SimulatedSource is already running")
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(emit, self._stop_event),
            name="neurodetect-simulator",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        thread = self._thread
        if thread is None:
            return
        self._stop_event.set()
        if thread is not threading.current_thread():
            thread.join(timeout=1.0)
        self._thread = None

    def _run(self, emit: EmitFn, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            cfg = self.config
            sample = simulate_sample(time.time() * 1000.0, cfg, self._rng)
            try:
                emit(sample)
            except Exception:
                logger.exception("Simulation emit callback failed")
            stop_event.wait(1.0 / cfg.rate_hz)
