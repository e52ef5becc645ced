import math

import pytest

from neurodetect.analysis.classifier import Thresholds, build_rules, classify, match_rule
from neurodetect.analysis.features import extract_features
from neurodetect.core.models import FeatureVector, MetalType

from helpers import sine_wave, square_wave


def _features(**overrides: float) -> FeatureVector:
    values = dict(mean=45.0, std=1.0, max=47.0, fft_mean=5.0, fft_max=20.0)
    values.update(overrides)
    return FeatureVector(**values)


def test_strong_periodic_high_variance_is_iron() -> None:
    prediction = classify(_features(fft_max=200.0, std=25.0))
    assert prediction.metal_type is MetalType.IRON
    assert prediction.confidence == 0.94


def test_rule_order_beats_stainless_condition() -> None:
    features = _features(fft_max=200.0, std=25.0)
    assert match_rule(features).name == "strong-periodic-high-variance"
    assert classify(features).metal_type is not MetalType.STAINLESS_STEEL


def test_strong_periodic_low_variance_is_stainless() -> None:
    prediction = classify(_features(fft_max=151.0, std=20.0))
    assert prediction.metal_type is MetalType.STAINLESS_STEEL
    assert prediction.confidence == 0.89


def test_high_variance_without_strong_peak_is_iron() -> None:
    prediction = classify(_features(fft_max=150.0, std=10.5))
    assert prediction.metal_type is MetalType.IRON
    assert prediction.confidence == 0.88


def test_elevated_periodic_field_is_aluminum() -> None:
    prediction = classify(_features(fft_max=81.0, mean=61.0, std=3.0))
    assert prediction.metal_type is MetalType.ALUMINUM
    assert prediction.confidence == 0.78


@pytest.mark.parametrize(
    "overrides",
    [
        dict(fft_max=80.0, mean=61.0),
        dict(fft_max=81.0, mean=60.0),
        dict(fft_max=0.0, mean=0.0),
    ],
)
def test_thresholds_are_strict(overrides: dict) -> None:
    assert classify(_features(**overrides)).metal_type is MetalType.NO_METAL


def test_no_metal_confidence_formula() -> None:
    prediction = classify(_features(std=5.0))
    assert prediction.metal_type is MetalType.NO_METAL
    assert prediction.confidence == pytest.approx(0.9)

    assert classify(_features(std=0.0)).confidence == 0.99


def test_increasing_std_flips_no_metal_to_iron() -> None:
    labels = {}
    for std in (5.0, 8.0, 10.0, 10.01, 15.0, 20.0, 25.0):
        labels[std] = classify(_features(std=std, fft_max=120.0)).metal_type
    assert labels[5.0] is MetalType.NO_METAL
    assert labels[10.0] is MetalType.NO_METAL
    assert all(labels[s] is MetalType.IRON for s in (10.01, 15.0, 20.0, 25.0))


def test_nan_features_fall_through_to_no_metal() -> None:
    nan = float("nan")
    prediction = classify(FeatureVector(mean=nan, std=nan, max=nan, fft_mean=nan, fft_max=nan))
    assert prediction.metal_type is MetalType.NO_METAL


def test_no_metal_confidence_is_not_clamped_below_zero() -> None:
    relaxed = Thresholds(std_mid=1000.0, std_high=1000.0)
    prediction = classify(_features(std=60.0), relaxed)
    assert prediction.metal_type is MetalType.NO_METAL
    assert prediction.confidence == pytest.approx(1.0 - 60.0 / 50.0)


def test_prediction_keeps_its_features() -> None:
    features = _features()
    assert classify(features).features is features


def test_last_rule_is_unconditional() -> None:
    rules = build_rules()
    assert len(rules) == 5
    assert rules[-1].metal_type is MetalType.NO_METAL
    assert rules[-1].matches(_features(fft_max=math.inf, std=math.inf, mean=math.inf))


def test_thresholds_from_mapping_ignores_unknown_keys() -> None:
    t = Thresholds.from_mapping({"fft_high": 120, "bogus": 1})
    assert t.fft_high == 120.0
    assert t.std_high == 20.0


# End-to-end: raw magnitudes -> features -> label


def test_constant_field_is_confident_no_metal() -> None:
    prediction = classify(extract_features([33.0] * 50))
    assert prediction.metal_type is MetalType.NO_METAL
    assert prediction.confidence == 0.99


def test_smooth_low_amplitude_series_is_no_metal() -> None:
    values = [45.0 + 2.0 * math.sin(i) for i in range(50)]
    features = extract_features(values)
    assert features.std < 10.0
    assert features.fft_max < 80.0
    assert classify(features).metal_type is MetalType.NO_METAL


def test_large_square_wave_is_iron_with_top_confidence() -> None:
    prediction = classify(extract_features(square_wave()))
    assert prediction.metal_type is MetalType.IRON
    assert prediction.confidence == 0.94


def test_per_sample_alternation_is_iron_via_variance_rule() -> None:
    # All energy sits in the Nyquist bin, which the half spectrum omits.
    prediction = classify(extract_features([40.0 if i % 2 == 0 else 140.0 for i in range(50)]))
    assert prediction.metal_type is MetalType.IRON
    assert prediction.confidence == 0.88


def test_moderate_sine_is_stainless() -> None:
    prediction = classify(extract_features(sine_wave(amplitude=10.0)))
    assert prediction.metal_type is MetalType.STAINLESS_STEEL


def test_weak_sine_on_strong_field_is_aluminum() -> None:
    prediction = classify(extract_features(sine_wave(offset=70.0, amplitude=4.0)))
    assert prediction.features.fft_max == pytest.approx(100.0, rel=1e-9)
    assert prediction.metal_type is MetalType.ALUMINUM
