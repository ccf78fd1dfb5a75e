"""
Narration for AbleLink - Spoken playback of dashboard content.

Architecture:
    NarrationQueue → SpeechSynthesizer → host speech capability

Public API:
    NarrationQueue      - speak_one(), speak_sequence(), cancel()
    NarrationState      - IDLE / SPEAKING
    NarrationStatus     - Snapshot with the current fragment index
    SpeechSynthesizer   - Backend contract
    load_synthesizer    - Auto-detect the host's speech capability

Example:
    from ablelink.narration import NarrationQueue, load_synthesizer

    queue = NarrationQueue(settings_store, load_synthesizer())
    queue.speak_sequence(["Good morning.", "You have 2 tasks today."])
"""

from ablelink.narration.base import (
    Utterance,
    SpeechSynthesizer,
    NullSynthesizer,
)
from ablelink.narration.queue import (
    NarrationQueue,
    NarrationState,
    NarrationStatus,
)
from ablelink.narration.loader import load_synthesizer, list_synthesizers
from ablelink.narration.backends import MockSynthesizer, EspeakSynthesizer

__all__ = [
    "Utterance",
    "SpeechSynthesizer",
    "NullSynthesizer",
    "NarrationQueue",
    "NarrationState",
    "NarrationStatus",
    "load_synthesizer",
    "list_synthesizers",
    "MockSynthesizer",
    "EspeakSynthesizer",
]
