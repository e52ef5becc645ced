"""
Line-oriented magnetometer streams (serial bridge, replayed capture, stdin).

Each line is either a JSON object with (at least):

  - x, y, z       : float  field components in µT
  - timestamp_ms  : float  optional capture time in milliseconds

or the comma-separated form "x,y,z[,timestamp_ms]". ``total`` is always
recomputed as the Euclidean magnitude of the axes. A reading whose ``x`` is
null is skipped, the same way a hardware sensor reports "no reading yet".
"""

from __future__ import annotations

import inspect
import json
import logging
import sys
import threading
import time
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Sequence

from ..core.models import Sample
from .base import EmitFn, SourceUnavailableError

logger = logging.getLogger(__name__)

LineFactory = Callable[[], Iterable[str]]


def _now_ms() -> float:
    return time.time() * 1000.0


def _parse_json_line(text: str) -> Sample | None:
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Bad JSON from magnetometer stream: %r (%s)", text, exc)
        return None

    if not isinstance(obj, dict):
        logger.warning("Expected JSON object in magnetometer stream, got %r", obj)
        return None

    if obj.get("x") is None:
        return None

    try:
        x = float(obj["x"])
        y = float(obj["y"])
        z = float(obj["z"])
        ts_raw = obj.get("timestamp_ms")
        timestamp_ms = _now_ms() if ts_raw is None else float(ts_raw)
    except KeyError as exc:
        logger.warning("Missing field %s in magnetometer line: %r", exc, obj)
        return None
    except (TypeError, ValueError) as exc:
        logger.warning("Bad field value in magnetometer line %r (%s)", obj, exc)
        return None

    return Sample.from_axes(x, y, z, timestamp_ms)


def _parse_csv_line(text: str) -> Sample | None:
    parts: Sequence[str] = [p.strip() for p in text.split(",")]
    if len(parts) < 3:
        logger.warning(
            "Expected at least 3 comma-separated values for magnetometer CSV, got %d: %r",
            len(parts),
            text,
        )
        return None
    try:
        x, y, z = map(float, parts[:3])
        timestamp_ms = float(parts[3]) if len(parts) > 3 and parts[3] else _now_ms()
    except ValueError as exc:
        logger.warning("Bad CSV field in magnetometer line %r (%s)", text, exc)
        return None
    return Sample.from_axes(x, y, z, timestamp_ms)


def parse_line(line: str) -> Sample | None:
    """
    Parse one text line into a :class:`Sample`.

    Invalid or empty lines return ``None`` so callers can skip them without
    raising exceptions.
    """
    text = line.strip()
    if not text or text.startswith("#"):
        return None
    if text[0] == "{":
        return _parse_json_line(text)
    return _parse_csv_line(text)


def iter_samples(lines: Iterable[str]) -> Iterator[Sample]:
    """Yield the parseable samples from ``lines`` in order."""
    for line in lines:
        sample = parse_line(line)
        if sample is not None:
            yield sample


def file_lines(path: str | Path) -> LineFactory:
    """
    Return a factory reading ``path`` line by line (``"-"`` means stdin).

    Calling the factory only checks that the capture exists, so a missing
    file surfaces as :class:`SourceUnavailableError` when the source starts.
    The handle itself is opened on first iteration and closed when the
    generator finishes or is closed.
    """

    def _open() -> Iterable[str]:
        if str(path) == "-":
            return sys.stdin
        capture = Path(path)
        if not capture.is_file():
            raise FileNotFoundError(f"capture not found: {capture}")

        def _lines() -> Iterator[str]:
            with capture.open("r", encoding="utf-8") as fh:
                yield from fh

        return _lines()

    return _open


class StreamSource:
    """Read a line stream on a background thread and emit parsed samples."""

    def __init__(
        self,
        open_lines: LineFactory,
        *,
        name: str = "stream",
        rate_hz: float | None = None,
    ) -> None:
        if rate_hz is not None and rate_hz <= 0:
            raise ValueError(f"rate_hz must be > 0, got {rate_hz}")
        self.name = name
        self._open_lines = open_lines
        self._interval_s = None if rate_hz is None else 1.0 / float(rate_hz)
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._finished = threading.Event()

    @property
    def finished(self) -> threading.Event:
        """Set once the underlying stream is exhausted or the source stopped."""
        return self._finished

    def start(self, emit: EmitFn) -> None:
        if self._thread is not None:
            raise RuntimeError(f"{self.name} source is already running")
        try:
            lines = self._open_lines()
        except OSError as exc:
            raise SourceUnavailableError(f"{self.name}: {exc}") from exc

        self._stop_event = threading.Event()
        self._finished = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(lines, emit, self._stop_event, self._finished),
            name=f"neurodetect-{self.name}",
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

    def _run(
        self,
        lines: Iterable[str],
        emit: EmitFn,
        stop_event: threading.Event,
        finished: threading.Event,
    ) -> None:
        try:
            if stop_event.is_set():
                return
            for sample in iter_samples(lines):
                if stop_event.is_set():
                    break
                try:
                    emit(sample)
                except Exception:
                    logger.exception("Stream emit callback failed for %r", sample)
                if self._interval_s is not None and stop_event.wait(self._interval_s):
                    break
        except Exception:
            logger.exception("Magnetometer stream %s failed", self.name)
        finally:
            # Closes the capture handle even when iteration stopped early
            if inspect.isgenerator(lines):
                lines.close()
            finished.set()
