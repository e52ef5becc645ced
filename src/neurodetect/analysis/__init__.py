"""Signal analysis: spectrum, feature extraction, and threshold classification.

Modules here operate on NumPy arrays of magnitudes and stay free of threads
and I/O so they can be reused from the CLI, the scan session, or tests.
"""

from .classifier import DEFAULT_THRESHOLDS, Thresholds, classify
from .features import extract_features, extract_window_features

__all__ = [
    "DEFAULT_THRESHOLDS",
    "Thresholds",
    "classify",
    "extract_features",
    "extract_window_features",
]
