"""Command-line entry point: live scans and offline classification of captures."""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from dataclasses import replace
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .acquisition import (
    SampleSource,
    SimulatedSource,
    SourceUnavailableError,
    StreamSource,
    file_lines,
    iter_samples,
    start_with_fallback,
)
from .config import NeuroDetectConfig, load_config
from .core.models import Prediction
from .narrative import NarrativeService, api_key_from_env
from .session import ScanSession

logger = logging.getLogger(__name__)


def format_prediction(prediction: Prediction) -> str:
    stats = " ".join(f"{name}={value:.2f}" for name, value in prediction.features.as_dict().items())
    return f"{prediction.metal_type.value:<16} conf={prediction.confidence * 100:5.1f}% {stats}"


def _build_config(args: argparse.Namespace) -> NeuroDetectConfig:
    cfg = load_config(args.config)
    sim = cfg.simulation
    overrides = {
        key: getattr(args, key)
        for key in ("base", "noise", "seed")
        if getattr(args, key, None) is not None
    }
    if overrides:
        cfg.simulation = replace(sim, **overrides).sanitized()
    return cfg


def _source_factories(
    args: argparse.Namespace, cfg: NeuroDetectConfig
) -> List[Callable[[], SampleSource]]:
    factories: List[Callable[[], SampleSource]] = []
    if args.source in {"auto", "stream"} and args.input:
        factories.append(
            lambda: StreamSource(file_lines(args.input), name=f"stream:{args.input}", rate_hz=args.rate)
        )
    if args.source in {"auto", "simulate"}:
        factories.append(lambda: SimulatedSource(cfg.simulation))
    return factories


def _print_narrative(session: ScanSession, cfg: NeuroDetectConfig) -> None:
    snapshot = session.narrative_snapshot()
    if snapshot is None:
        print("Not enough samples for analysis.")
        return
    service = NarrativeService(
        api_key_from_env(cfg.api_key_env),
        model=cfg.narrative_model,
        timeout_s=cfg.narrative_timeout_s,
    )
    try:
        report = service.report(snapshot)
    finally:
        service.close()
    print("\nSignal analysis:\n" + report.analysis)
    print("\nHandling tips:\n" + report.tips)


def cmd_scan(args: argparse.Namespace) -> int:
    cfg = _build_config(args)
    factories = _source_factories(args, cfg)
    if not factories:
        logger.error("--source stream requires --input")
        return 2

    session = ScanSession(cfg.window_size, cfg.thresholds, tick_budget_ms=cfg.tick_budget_ms)
    last_label: list[Optional[str]] = [None]

    def _on_prediction(prediction: Prediction) -> None:
        label = prediction.metal_type.value
        if args.verbose or label != last_label[0]:
            print(format_prediction(prediction), flush=True)
            last_label[0] = label

    session.subscribe(_on_prediction)

    try:
        source = start_with_fallback(session, factories)
    except SourceUnavailableError as exc:
        logger.error("%s", exc)
        return 1

    done = source.finished if isinstance(source, StreamSource) else threading.Event()
    try:
        done.wait(timeout=args.duration)
    except KeyboardInterrupt:
        pass
    finally:
        session.stop()

    print(f"\n{session.cycles} classification cycles, {session.size()} samples buffered.")
    print("Last: " + format_prediction(session.last_prediction))
    if args.analyze:
        _print_narrative(session, cfg)
    return 0


def cmd_classify(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    path = Path(args.input)
    if not path.exists():
        logger.error("Capture not found: %s", path)
        return 1

    session = ScanSession(cfg.window_size, cfg.thresholds)
    token = session.attach(f"file:{path.name}")
    with path.open("r", encoding="utf-8") as fh:
        for sample in iter_samples(fh):
            session.submit(token, sample)

    if session.cycles == 0:
        print(f"Only {session.size()} samples; need {cfg.window_size} for a prediction.")
        return 1
    print(format_prediction(session.last_prediction))
    if args.analyze:
        _print_narrative(session, cfg)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="neurodetect",
        description="Classify nearby metal from magnetometer magnitude readings.",
    )
    parser.add_argument("--config", type=Path, default=None, help="YAML config file")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Run a live scan and print predictions")
    scan.add_argument("--source", choices=["auto", "stream", "simulate"], default="auto")
    scan.add_argument("--input", default=None, help="Magnetometer line stream (path or '-')")
    scan.add_argument("--rate", type=float, default=None, help="Replay rate in Hz for --input")
    scan.add_argument("--duration", type=float, default=10.0, help="Seconds to scan")
    scan.add_argument("--base", type=float, default=None, help="Simulated base field (µT)")
    scan.add_argument("--noise", type=float, default=None, help="Simulated noise level")
    scan.add_argument("--seed", type=int, default=None, help="Simulator RNG seed")
    scan.add_argument("--analyze", action="store_true", help="Request AI commentary at the end")
    scan.add_argument("-v", "--verbose", action="store_true", help="Print every prediction")
    scan.set_defaults(func=cmd_scan)

    classify = sub.add_parser("classify", help="Classify the last full window of a capture file")
    classify.add_argument("input", help="Capture file (JSON lines or x,y,z CSV)")
    classify.add_argument("--analyze", action="store_true", help="Request AI commentary")
    classify.set_defaults(func=cmd_classify)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return int(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
