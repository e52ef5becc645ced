"""NeuroDetect: magnetometer-based metal classification.

Samples from any acquisition source flow into a fixed-size window; every
full window is reduced to a handful of statistics and spectral features and
mapped to a material label by an ordered threshold table.
"""

from .analysis.classifier import classify
from .analysis.features import extract_features
from .core.models import FeatureVector, MetalType, Prediction, Sample
from .core.window import SampleWindow
from .session import ScanSession

__version__ = "0.1.0"

__all__ = [
    "classify",
    "extract_features",
    "FeatureVector",
    "MetalType",
    "Prediction",
    "Sample",
    "SampleWindow",
    "ScanSession",
]
