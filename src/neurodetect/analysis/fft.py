"""FFT helpers."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike


def _to_1d_array(signal: ArrayLike) -> np.ndarray:
    arr = np.asarray(signal, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"signal must be 1-D, got shape {arr.shape}")
    return arr


def half_spectrum(signal: ArrayLike) -> np.ndarray:
    """
    Magnitudes of the first ``floor(N / 2)`` DFT bins of ``signal``.

    Parameters
    ----------
    signal:
        1-D array-like input. Callers centre it first; no windowing or
        normalisation is applied here.

    Returns
    -------
    np.ndarray
        ``|X[k]|`` for ``k = 0 .. N//2 - 1``. Empty for fewer than two
        samples. The Nyquist bin of even-length input is not included.
    """
    arr = _to_1d_array(signal)
    n_bins = arr.size // 2
    if n_bins == 0:
        return np.empty(0, dtype=np.float64)
    return np.abs(np.fft.fft(arr)[:n_bins])


def direct_dft_spectrum(signal: ArrayLike) -> np.ndarray:
    """
    O(N^2) reference for :func:`half_spectrum`.

    Evaluates ``sum(c[n] * exp(-2j*pi*k*n/N))`` term by term, which is what
    the classifier thresholds were tuned against.
    """
    arr = _to_1d_array(signal)
    n = arr.size
    n_bins = n // 2
    out = np.empty(n_bins, dtype=np.float64)
    idx = np.arange(n)
    for k in range(n_bins):
        theta = -2.0 * np.pi * k * idx / n
        real = float(np.sum(arr * np.cos(theta)))
        imag = float(np.sum(arr * np.sin(theta)))
        out[k] = np.sqrt(real * real + imag * imag)
    return out
