"""
Narrative commentary from the Gemini text-generation API.

The service is an optional collaborator: every public call returns text and
never raises. Missing credentials, network failures and empty responses all
degrade to a fixed fallback string so the scan loop and CLI keep working.

Environment Variables:
    GEMINI_API_KEY: API key for the Generative Language API
    API_KEY: accepted when GEMINI_API_KEY is unset
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import requests

from ..core.models import MetalType, Prediction
from ..session import CaptureSnapshot

logger = logging.getLogger(__name__)

API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_API_KEY_ENV = "GEMINI_API_KEY"
MAX_PROMPT_READINGS = 20

# Transport failures plus anything a malformed 200 response can trigger
_SERVICE_ERRORS = (
    requests.RequestException,
    ValueError,
    KeyError,
    TypeError,
    IndexError,
    AttributeError,
)

NO_KEY_ANALYSIS = "Gemini API key not configured. Please check your settings."
FAILED_ANALYSIS = "Unable to connect to AI analysis service at this time."
EMPTY_ANALYSIS = "Analysis complete. No text returned."
NO_KEY_TIPS = "Configure API Key for safety tips."
FAILED_TIPS = "Error fetching safety tips."
EMPTY_TIPS = "No tips available."


def api_key_from_env(env_var: str = DEFAULT_API_KEY_ENV) -> Optional[str]:
    """Return the configured API key, or ``None`` when none is set."""
    return os.environ.get(env_var) or os.environ.get("API_KEY") or None


def build_analysis_prompt(prediction: Prediction, readings: Sequence[float]) -> str:
    features = prediction.features
    sample = ", ".join(f"{float(v):g}" for v in list(readings)[-MAX_PROMPT_READINGS:])
    return (
        "You are an expert metallurgist and data scientist assisting a user with a "
        "Smart Metal Detector app.\n\n"
        "The app's classifier has analyzed magnetic sensor data.\n\n"
        f"Current Prediction: {prediction.metal_type.value}\n"
        f"Confidence: {prediction.confidence * 100:.1f}%\n\n"
        "Statistical Features Extracted:\n"
        f"- Mean Magnitude: {features.mean:.2f} µT\n"
        f"- Standard Deviation: {features.std:.2f}\n"
        f"- Max Peak: {features.max:.2f} µT\n"
        f"- Frequency Domain Peak (FFT Max): {features.fft_max:.2f} "
        "(Signal Strength/Periodicity)\n\n"
        f"Recent raw magnitude readings (sample): [{sample}]\n\n"
        "Please provide a brief, technical, but easy-to-understand analysis of this detection.\n"
        "1. Mention how the Frequency Peak (FFT) or Variance (Std) influenced the classification.\n"
        '2. If it is "No Metal", explain what the background field usually looks like.\n'
        "3. Keep it under 3 sentences."
    )


def build_tips_prompt(metal_type: MetalType) -> str:
    return (
        "Give me 2 bullet points on safety or handling precautions for "
        f"{metal_type.value} in an industrial context."
    )


def _extract_text(payload: Any) -> str:
    """
    Concatenate the text parts of the first candidate in a response.

    Raises ``ValueError`` when the payload does not have the documented
    ``candidates[0].content.parts[*].text`` shape.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"expected JSON object, got {type(payload).__name__}")
    candidates = payload.get("candidates") or []
    if not isinstance(candidates, list):
        raise ValueError("'candidates' is not a list")
    if not candidates:
        return ""
    first = candidates[0]
    content = first.get("content") if isinstance(first, dict) else None
    if content is None:
        return ""
    if not isinstance(content, dict):
        raise ValueError("'content' is not an object")
    parts = content.get("parts") or []
    if not isinstance(parts, list):
        raise ValueError("'parts' is not a list")
    return "".join(
        str(part.get("text", "")) for part in parts if isinstance(part, dict)
    ).strip()


@dataclass(frozen=True)
class NarrativeReport:
    analysis: str
    tips: str


class NarrativeService:
    """Thin ``requests`` client for ``models/{model}:generateContent``."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        model: str = DEFAULT_MODEL,
        timeout_s: float = 30.0,
        http: Optional[requests.Session] = None,
        max_workers: int = 2,
    ) -> None:
        self._api_key = api_key
        self.model = model
        self.timeout_s = float(timeout_s)
        self._http = http or requests.Session()
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, int(max_workers)),
            thread_name_prefix="neurodetect-narrative",
        )

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _generate(self, prompt: str) -> str:
        url = f"{API_BASE_URL}/models/{self.model}:generateContent"
        headers = {
            "x-goog-api-key": str(self._api_key),
            "Content-Type": "application/json",
        }
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        response = self._http.post(url, headers=headers, json=payload, timeout=self.timeout_s)
        response.raise_for_status()
        return _extract_text(response.json())

    def describe(self, prediction: Prediction, readings: Sequence[float]) -> str:
        """Short commentary on a prediction and the readings behind it."""
        if not self.configured:
            return NO_KEY_ANALYSIS
        try:
            text = self._generate(build_analysis_prompt(prediction, readings))
        except _SERVICE_ERRORS as exc:
            logger.warning("Gemini analysis request failed: %s", exc)
            return FAILED_ANALYSIS
        return text or EMPTY_ANALYSIS

    def handling_tips(self, metal_type: MetalType) -> str:
        """Safety/handling bullet points for ``metal_type``."""
        if not self.configured:
            return NO_KEY_TIPS
        try:
            text = self._generate(build_tips_prompt(metal_type))
        except _SERVICE_ERRORS as exc:
            logger.warning("Gemini tips request failed: %s", exc)
            return FAILED_TIPS
        return text or EMPTY_TIPS

    def report(self, snapshot: CaptureSnapshot) -> NarrativeReport:
        """Run both requests concurrently and wait for them."""
        return self.submit(snapshot).result()

    def submit(self, snapshot: CaptureSnapshot) -> Future:
        """
        Request commentary out-of-band.

        Returns a future resolving to a :class:`NarrativeReport`; the caller's
        thread (and the scan loop) is never blocked.
        """
        outer: Future = Future()
        lock = threading.Lock()

        analysis = self._executor.submit(self.describe, snapshot.prediction, snapshot.readings)
        tips = self._executor.submit(self.handling_tips, snapshot.prediction.metal_type)

        def _maybe_finish(_: Future) -> None:
            with lock:
                if outer.done() or not (analysis.done() and tips.done()):
                    return
                try:
                    outer.set_result(
                        NarrativeReport(analysis=analysis.result(), tips=tips.result())
                    )
                except Exception as exc:
                    outer.set_exception(exc)

        analysis.add_done_callback(_maybe_finish)
        tips.add_done_callback(_maybe_finish)
        return outer

    def close(self) -> None:
        self._executor.shutdown(wait=False)
        self._http.close()
