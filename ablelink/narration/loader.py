"""
Synthesizer Loader - Pick the best available speech capability.
"""

from __future__ import annotations

import logging

from ablelink.narration.base import NullSynthesizer, SpeechSynthesizer

logger = logging.getLogger(__name__)


def load_synthesizer(backend: str = "auto") -> SpeechSynthesizer:
    """Load a speech synthesizer.

    Args:
        backend: Backend name or "auto" to auto-detect.
                 Options: "espeak", "mock", "none", "auto"

    Returns:
        A synthesizer. When nothing is available this is a NullSynthesizer,
        which turns all narration into silent no-ops.
    """
    if backend == "auto":
        return _auto_load()

    if backend == "espeak":
        from ablelink.narration.backends.espeak import EspeakSynthesizer
        return EspeakSynthesizer()

    if backend == "mock":
        from ablelink.narration.backends.mock import MockSynthesizer
        return MockSynthesizer(auto_complete=True)

    if backend == "none":
        return NullSynthesizer()

    raise ValueError(f"Unknown speech backend: {backend}")


def _auto_load() -> SpeechSynthesizer:
    from ablelink.narration.backends.espeak import EspeakSynthesizer, is_available

    if is_available():
        logger.info("Auto-detected espeak speech backend")
        return EspeakSynthesizer()

    logger.warning("No speech synthesizer available, narration is disabled")
    return NullSynthesizer()


def list_synthesizers() -> list[str]:
    """List backends usable on this host."""
    from ablelink.narration.backends.espeak import is_available

    available = ["mock", "none"]
    if is_available():
        available.append("espeak")
    return available
