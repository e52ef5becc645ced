"""Shared dataclasses for NeuroDetect samples, features, and predictions."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict


class MetalType(str, Enum):
    IRON = "Iron"
    STAINLESS_STEEL = "Stainless Steel"
    ALUMINUM = "Aluminum"
    NO_METAL = "No Metal"


@dataclass(frozen=True)
class Sample:
    """
    One magnetometer observation.

    Only ``total`` feeds the classifier; the axis components are kept for
    display and debugging.
    """

    x: float
    y: float
    z: float
    total: float
    timestamp_ms: float

    @classmethod
    def from_axes(cls, x: float, y: float, z: float, timestamp_ms: float) -> Sample:
        """Build a sample whose ``total`` is the Euclidean magnitude of the axes."""
        x, y, z = float(x), float(y), float(z)
        return cls(
            x=x,
            y=y,
            z=z,
            total=math.sqrt(x * x + y * y + z * z),
            timestamp_ms=float(timestamp_ms),
        )


@dataclass(frozen=True)
class FeatureVector:
    mean: float
    std: float
    max: float
    fft_mean: float
    fft_max: float

    @classmethod
    def zeros(cls) -> FeatureVector:
        return cls(mean=0.0, std=0.0, max=0.0, fft_mean=0.0, fft_max=0.0)

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class Prediction:
    metal_type: MetalType
    confidence: float
    features: FeatureVector

    @classmethod
    def neutral(cls) -> Prediction:
        """Default shown before the first full window has been classified."""
        return cls(
            metal_type=MetalType.NO_METAL,
            confidence=0.0,
            features=FeatureVector.zeros(),
        )
