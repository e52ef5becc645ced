from __future__ import annotations

import math
from typing import Iterable, List

from neurodetect.core.models import Sample


def samples_from(values: Iterable[float]) -> List[Sample]:
    return [
        Sample(x=v, y=0.0, z=0.0, total=float(v), timestamp_ms=float(i) * 16.0)
        for i, v in enumerate(values)
    ]


def square_wave(n: int = 50, low: float = 40.0, high: float = 140.0, half_period: int = 5) -> List[float]:
    return [low if (i // half_period) % 2 == 0 else high for i in range(n)]


def sine_wave(n: int = 50, offset: float = 45.0, amplitude: float = 10.0, cycles: int = 5) -> List[float]:
    return [offset + amplitude * math.sin(2.0 * math.pi * cycles * i / n) for i in range(n)]
