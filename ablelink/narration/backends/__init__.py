"""
Speech synthesizer backends.
"""

from ablelink.narration.backends.mock import MockSynthesizer
from ablelink.narration.backends.espeak import (
    EspeakSynthesizer,
    is_available as espeak_available,
)

__all__ = [
    "MockSynthesizer",
    "EspeakSynthesizer",
    "espeak_available",
]
