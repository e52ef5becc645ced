"""Common interface for sample producers."""

from __future__ import annotations

from typing import Callable, Protocol

from ..core.models import Sample

EmitFn = Callable[[Sample], None]


class SourceUnavailableError(RuntimeError):
    """Raised by :meth:`SampleSource.start` when the source cannot run."""


class SampleSource(Protocol):
    """Anything that pushes :class:`Sample` objects at its own rate."""

    name: str

    def start(self, emit: EmitFn) -> None:  # pragma: no cover - protocol
        ...

    def stop(self) -> None:  # pragma: no cover - protocol
        ...
