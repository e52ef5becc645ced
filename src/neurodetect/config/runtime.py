"""Runtime configuration for the scan session, simulator, and narrative client."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from ..acquisition.simulator import SimulationConfig
from ..analysis.classifier import Thresholds
from ..core.window import DEFAULT_WINDOW_SIZE
from ..narrative.gemini import DEFAULT_API_KEY_ENV, DEFAULT_MODEL


@dataclass(slots=True)
class NeuroDetectConfig:
    """
    Tuning knobs for a scan.

    The window size and the classifier thresholds are the only values that
    change what gets predicted; the rest controls acquisition and the
    optional narrative service.
    """

    window_size: int = DEFAULT_WINDOW_SIZE
    thresholds: Thresholds = field(default_factory=Thresholds)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)

    # Soft per-cycle budget, matching a 60 Hz source
    tick_budget_ms: float = 16.0

    narrative_model: str = DEFAULT_MODEL
    narrative_timeout_s: float = 30.0
    api_key_env: str = DEFAULT_API_KEY_ENV

    def sanitized(self) -> NeuroDetectConfig:
        """Return a copy with derived limits applied."""
        return NeuroDetectConfig(
            window_size=max(2, int(self.window_size)),
            thresholds=self.thresholds,
            simulation=self.simulation.sanitized(),
            tick_budget_ms=max(0.1, float(self.tick_budget_ms)),
            narrative_model=str(self.narrative_model or DEFAULT_MODEL),
            narrative_timeout_s=max(1.0, float(self.narrative_timeout_s)),
            api_key_env=str(self.api_key_env or DEFAULT_API_KEY_ENV),
        )


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`NeuroDetectConfig`."""
    return {f.name for f in fields(NeuroDetectConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten a top-level ``neurodetect`` block into the root mapping."""
    if "neurodetect" in data and isinstance(data["neurodetect"], Mapping):
        merged: MutableMapping[str, Any] = {}
        for key, value in data.items():
            if key == "neurodetect":
                merged.update(value)
            else:
                merged[key] = value
        return merged
    return dict(data)


def config_from_mapping(data: Mapping[str, Any] | None) -> NeuroDetectConfig:
    """Build :class:`NeuroDetectConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return NeuroDetectConfig()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}

    thresholds = payload.get("thresholds")
    if thresholds is not None and not isinstance(thresholds, Thresholds):
        if not isinstance(thresholds, Mapping):
            raise ValueError(f"'thresholds' must be a mapping, got {type(thresholds).__name__}")
        payload["thresholds"] = Thresholds.from_mapping(thresholds)

    simulation = payload.get("simulation")
    if simulation is not None and not isinstance(simulation, SimulationConfig):
        if not isinstance(simulation, Mapping):
            raise ValueError(f"'simulation' must be a mapping, got {type(simulation).__name__}")
        payload["simulation"] = SimulationConfig.from_mapping(simulation)

    return NeuroDetectConfig(**payload).sanitized()


def load_config(path: str | Path | None) -> NeuroDetectConfig:
    """
    Load configuration from ``path``.

    Missing files fall back to default :class:`NeuroDetectConfig`.
    """
    if path is None:
        return NeuroDetectConfig()
    cfg_path = Path(path)
    if not cfg_path.exists():
        return NeuroDetectConfig()
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


def dump_config(cfg: NeuroDetectConfig, path: str | Path) -> None:
    """Write ``cfg`` as YAML so it can be edited and loaded back."""
    data = asdict(cfg)
    cfg_path = Path(path)
    if cfg_path.parent and not cfg_path.parent.exists():
        cfg_path.parent.mkdir(parents=True, exist_ok=True)
    with cfg_path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(
            {"neurodetect": data},
            fh,
            default_flow_style=False,
            sort_keys=False,
        )


__all__ = ["NeuroDetectConfig", "config_from_mapping", "load_config", "dump_config"]
