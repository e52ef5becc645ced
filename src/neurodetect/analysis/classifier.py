"""Threshold-based material classifier.

The rules form a priority list rather than a tree: they are evaluated in
order and the first match wins, so ``fft_max=200, std=25`` is Iron even
though the Stainless Steel condition also holds. Comparisons use plain
float semantics, which means a NaN feature fails every condition and lands
in the unconditional No Metal rule.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Callable, List, Mapping, Tuple

from ..core.models import FeatureVector, MetalType, Prediction


@dataclass(frozen=True)
class Thresholds:
    fft_high: float = 150.0
    std_high: float = 20.0
    std_mid: float = 10.0
    fft_mid: float = 80.0
    mean_mid: float = 60.0

    iron_strong_confidence: float = 0.94
    stainless_confidence: float = 0.89
    iron_confidence: float = 0.88
    aluminum_confidence: float = 0.78
    no_metal_cap: float = 0.99
    no_metal_std_scale: float = 50.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> Thresholds:
        """Build from a mapping, ignoring unknown keys."""
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{key: float(data[key]) for key in data.keys() & known})


DEFAULT_THRESHOLDS = Thresholds()

Predicate = Callable[[FeatureVector], bool]
ConfidenceFn = Callable[[FeatureVector], float]


@dataclass(frozen=True)
class DecisionRule:
    name: str
    metal_type: MetalType
    matches: Predicate
    confidence: ConfidenceFn


def build_rules(t: Thresholds = DEFAULT_THRESHOLDS) -> Tuple[DecisionRule, ...]:
    """Return the ordered decision table for ``t``."""
    rules: List[DecisionRule] = [
        DecisionRule(
            name="strong-periodic-high-variance",
            metal_type=MetalType.IRON,
            matches=lambda f: f.fft_max > t.fft_high and f.std > t.std_high,
            confidence=lambda f: t.iron_strong_confidence,
        ),
        DecisionRule(
            name="strong-periodic",
            metal_type=MetalType.STAINLESS_STEEL,
            matches=lambda f: f.fft_max > t.fft_high,
            confidence=lambda f: t.stainless_confidence,
        ),
        DecisionRule(
            name="high-variance",
            metal_type=MetalType.IRON,
            matches=lambda f: f.std > t.std_mid,
            confidence=lambda f: t.iron_confidence,
        ),
        DecisionRule(
            name="periodic-elevated-field",
            metal_type=MetalType.ALUMINUM,
            matches=lambda f: f.fft_max > t.fft_mid and f.mean > t.mean_mid,
            confidence=lambda f: t.aluminum_confidence,
        ),
        # No lower clamp: std above ~50 yields a negative score.
        DecisionRule(
            name="background",
            metal_type=MetalType.NO_METAL,
            matches=lambda f: True,
            confidence=lambda f: min(t.no_metal_cap, 1.0 - f.std / t.no_metal_std_scale),
        ),
    ]
    return tuple(rules)


_DEFAULT_RULES = build_rules(DEFAULT_THRESHOLDS)


def match_rule(
    features: FeatureVector,
    rules: Tuple[DecisionRule, ...] = _DEFAULT_RULES,
) -> DecisionRule:
    for rule in rules:
        if rule.matches(features):
            return rule
    raise ValueError("decision table has no unconditional fallback rule")


def classify(
    features: FeatureVector,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> Prediction:
    """Map ``features`` to a :class:`Prediction` using the first matching rule."""
    rules = _DEFAULT_RULES if thresholds == DEFAULT_THRESHOLDS else build_rules(thresholds)
    rule = match_rule(features, rules)
    return Prediction(
        metal_type=rule.metal_type,
        confidence=float(rule.confidence(features)),
        features=features,
    )


__all__ = [
    "Thresholds",
    "DEFAULT_THRESHOLDS",
    "DecisionRule",
    "build_rules",
    "match_rule",
    "classify",
]
