"""Core data structures: samples, feature vectors, predictions, and the window.

Everything here is free of threads and I/O; :mod:`neurodetect.session`
wires the window to the analysis functions and to whichever acquisition
source is active.
"""

from .models import FeatureVector, MetalType, Prediction, Sample
from .window import DEFAULT_WINDOW_SIZE, SampleWindow

__all__ = [
    "FeatureVector",
    "MetalType",
    "Prediction",
    "Sample",
    "DEFAULT_WINDOW_SIZE",
    "SampleWindow",
]
