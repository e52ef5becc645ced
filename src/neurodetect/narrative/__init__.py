"""Optional narrative commentary on a capture (Gemini text generation)."""

from .gemini import (
    DEFAULT_MODEL,
    NarrativeReport,
    NarrativeService,
    api_key_from_env,
)

__all__ = ["DEFAULT_MODEL", "NarrativeReport", "NarrativeService", "api_key_from_env"]
