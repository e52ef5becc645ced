import pytest

from neurodetect.analysis.features import extract_window_features
from neurodetect.core.window import SampleWindow

from helpers import samples_from


def test_window_rejects_non_positive_capacity() -> None:
    with pytest.raises(ValueError):
        SampleWindow(0)


def test_push_returns_current_contents_in_arrival_order() -> None:
    window = SampleWindow(3)
    a, b = samples_from([1.0, 2.0])
    assert window.push(a) == (a,)
    assert window.push(b) == (a, b)
    assert not window.is_full


def test_push_past_capacity_evicts_oldest() -> None:
    window = SampleWindow(50)
    samples = samples_from(float(i) for i in range(51))
    for sample in samples:
        window.push(sample)

    assert window.size() == 50
    assert window.is_full
    assert window.snapshot() == tuple(samples[1:])
    assert window.magnitudes().tolist() == [float(i) for i in range(1, 51)]


def test_long_stream_never_exceeds_capacity() -> None:
    window = SampleWindow(7)
    for sample in samples_from(float(i) for i in range(100)):
        window.push(sample)
        assert len(window) <= 7
    assert window.magnitudes().tolist() == [float(i) for i in range(93, 100)]


def test_reset_then_partial_fill_is_not_ready() -> None:
    window = SampleWindow(50)
    for sample in samples_from([5.0] * 50):
        window.push(sample)
    window.reset()
    for sample in samples_from([5.0] * 10):
        window.push(sample)

    assert window.size() == 10
    assert extract_window_features(window) is None
