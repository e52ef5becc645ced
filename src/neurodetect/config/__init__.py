"""Configuration objects and helpers for NeuroDetect.

Settings are read from an optional YAML file (``neurodetect.yaml``) into the
typed :class:`~neurodetect.config.runtime.NeuroDetectConfig` dataclass, which
the CLI uses to build the scan session, the simulator, and the narrative
client consistently.
"""

from .runtime import NeuroDetectConfig, config_from_mapping, dump_config, load_config

__all__ = ["NeuroDetectConfig", "config_from_mapping", "dump_config", "load_config"]
