from __future__ import annotations

import time
from typing import List, Optional

import pytest

from neurodetect.acquisition.base import EmitFn, SourceUnavailableError
from neurodetect.acquisition.simulator import SimulatedSource, SimulationConfig
from neurodetect.core.models import MetalType, Prediction
from neurodetect.session import ScanSession

from helpers import samples_from, square_wave


class FakeSource:
    """Source that hands its emit callback back to the test."""

    def __init__(self, name: str = "fake", fail: bool = False) -> None:
        self.name = name
        self.fail = fail
        self.emit: Optional[EmitFn] = None
        self.stop_calls = 0

    def start(self, emit: EmitFn) -> None:
        if self.fail:
            raise SourceUnavailableError(f"{self.name} missing")
        self.emit = emit

    def stop(self) -> None:
        self.stop_calls += 1


def test_no_prediction_until_window_full() -> None:
    session = ScanSession(window_size=50)
    token = session.attach()
    results = [session.submit(token, s) for s in samples_from([45.0] * 49)]

    assert results == [None] * 49
    assert session.cycles == 0
    assert session.last_prediction == Prediction.neutral()


def test_every_push_after_warm_up_classifies() -> None:
    session = ScanSession(window_size=50)
    token = session.attach()
    seen: List[Prediction] = []
    session.subscribe(seen.append)

    for sample in samples_from([45.0] * 50 + square_wave()):
        session.submit(token, sample)

    assert session.cycles == 51
    assert len(seen) == 51
    assert seen[0].metal_type is MetalType.NO_METAL
    assert session.last_prediction.metal_type is MetalType.IRON
    assert session.last_prediction.confidence == 0.94


def test_revoked_token_cannot_write() -> None:
    session = ScanSession(window_size=5)
    old = session.attach("old")
    session.submit(old, samples_from([1.0])[0])
    new = session.attach("new")

    assert session.size() == 0
    assert session.submit(old, samples_from([2.0])[0]) is None
    assert session.size() == 0
    session.submit(new, samples_from([3.0])[0])
    assert session.readings() == (3.0,)
    assert session.active_source_name == "new"


def test_start_stops_previous_source_and_resets_window() -> None:
    session = ScanSession(window_size=50)
    first = FakeSource("first")
    session.start(first)
    for sample in samples_from([45.0] * 20):
        first.emit(sample)
    assert session.size() == 20

    second = FakeSource("second")
    session.start(second)

    assert first.stop_calls == 1
    assert session.size() == 0
    first.emit(samples_from([99.0])[0])
    assert session.size() == 0
    second.emit(samples_from([10.0])[0])
    assert session.readings() == (10.0,)


def test_stop_is_idempotent() -> None:
    session = ScanSession()
    source = FakeSource()
    session.start(source)
    assert session.is_running

    session.stop()
    session.stop()

    assert source.stop_calls == 1
    assert not session.is_running
    assert session.active_source_name is None


def test_failed_start_leaves_session_idle() -> None:
    session = ScanSession()
    with pytest.raises(SourceUnavailableError):
        session.start(FakeSource(fail=True))
    assert not session.is_running
    assert session.active_source_name is None


def test_subscriber_errors_do_not_reach_producer() -> None:
    session = ScanSession(window_size=2)
    token = session.attach()

    def _boom(_: Prediction) -> None:
        raise RuntimeError("render failed")

    seen: List[Prediction] = []
    session.subscribe(_boom)
    session.subscribe(seen.append)
    for sample in samples_from([1.0, 1.0]):
        session.submit(token, sample)

    assert len(seen) == 1


def test_unsubscribe() -> None:
    session = ScanSession(window_size=1)
    token = session.attach()
    seen: List[Prediction] = []
    unsubscribe = session.subscribe(seen.append)
    session.submit(token, samples_from([1.0])[0])
    unsubscribe()
    unsubscribe()
    session.submit(token, samples_from([1.0])[0])
    assert len(seen) == 1


def test_narrative_snapshot_needs_ten_samples() -> None:
    session = ScanSession(window_size=50)
    token = session.attach()
    for sample in samples_from([45.0] * 9):
        session.submit(token, sample)
    assert session.narrative_snapshot() is None

    session.submit(token, samples_from([46.0])[0])
    snapshot = session.narrative_snapshot()
    assert snapshot is not None
    assert len(snapshot.readings) == 10
    assert snapshot.readings[-1] == 46.0
    assert snapshot.prediction == Prediction.neutral()


def test_simulated_source_drives_session() -> None:
    session = ScanSession(window_size=50)
    source = SimulatedSource(SimulationConfig(rate_hz=1000.0, spike_probability=0.0, seed=3))
    session.start(source)

    deadline = time.time() + 5.0
    while time.time() < deadline and session.cycles == 0:
        time.sleep(0.01)
    session.stop()

    assert session.cycles > 0
    assert session.last_prediction.metal_type is MetalType.NO_METAL
    cycles = session.cycles
    time.sleep(0.05)
    assert session.cycles == cycles


def test_module_docstrings_point_at_the_session() -> None:
    import importlib

    import neurodetect.acquisition as acquisition
    import neurodetect.session as session_module

    assert session_module.__doc__.startswith("Scan session")
    assert "~neurodetect.session.ScanSession" in acquisition.__doc__
    assert importlib.import_module("neurodetect.session").ScanSession is ScanSession
