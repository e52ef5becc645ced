"""Sample producers feeding a :class:`~neurodetect.session.ScanSession`.

Sources are external to the classification core: each one only pushes
:class:`~neurodetect.core.models.Sample` objects through the callback it is
started with. :mod:`fallback` picks one per scan start.
"""

from .base import SampleSource, SourceUnavailableError
from .fallback import start_with_fallback
from .simulator import SimulatedSource, SimulationConfig, simulate_sample
from .stream import StreamSource, file_lines, iter_samples, parse_line

__all__ = [
    "SampleSource",
    "SourceUnavailableError",
    "start_with_fallback",
    "SimulatedSource",
    "SimulationConfig",
    "simulate_sample",
    "StreamSource",
    "file_lines",
    "iter_samples",
    "parse_line",
]
