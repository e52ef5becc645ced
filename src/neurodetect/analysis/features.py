"""Feature extraction helpers."""

from __future__ import annotations

from typing import Optional

import numpy as np
from numpy.typing import ArrayLike

from ..core.models import FeatureVector
from ..core.window import SampleWindow
from .fft import half_spectrum


def extract_features(magnitudes: ArrayLike) -> FeatureVector:
    """
    Compute time- and frequency-domain statistics of a magnitude series.

    Parameters
    ----------
    magnitudes:
        1-D array-like of ``total`` values in arrival order.

    Returns
    -------
    FeatureVector
        ``mean``, population ``std``, ``max`` and the mean/max of the
        half spectrum of the mean-centred series. Non-finite input is not
        rejected and propagates into the result.
    """
    arr = np.asarray(magnitudes, dtype=float)
    if arr.size == 0:
        raise ValueError("magnitudes must contain at least one sample")
    if arr.ndim != 1:
        raise ValueError(f"magnitudes must be 1-D, got shape {arr.shape}")

    mean = float(np.mean(arr))
    std = float(np.sqrt(np.mean(np.square(arr - mean))))
    peak = float(np.max(arr))

    spectrum = half_spectrum(arr - mean)
    if spectrum.size == 0:
        fft_mean = 0.0
        fft_max = 0.0
    else:
        fft_mean = float(np.mean(spectrum))
        fft_max = float(np.max(spectrum))

    return FeatureVector(
        mean=mean,
        std=std,
        max=peak,
        fft_mean=fft_mean,
        fft_max=fft_max,
    )


def extract_window_features(
    window: SampleWindow,
    window_size: int | None = None,
) -> Optional[FeatureVector]:
    """Return features for a full window, or ``None`` while it is still filling."""
    required = window.capacity if window_size is None else int(window_size)
    if len(window) < required:
        return None
    return extract_features(window.magnitudes())
