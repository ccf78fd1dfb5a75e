"""
Narration Base - Speech synthesizer contract and common types.

A synthesizer accepts one utterance request (text, rate, pitch) and a
completion callback. It is the only piece that touches the host's
speech capability; everything above it is host-independent.

SYNTHESIZER CONTRACT:
    Synthesizers MUST:
        - Return from `speak` without waiting for the audio to finish
        - Call `on_done(True)` when an utterance ends naturally
        - Call `on_done(False)` when an utterance is stopped
        - Call `on_done` at most once per utterance, from any thread
        - Make `stop` safe to call when nothing is playing

    Synthesizers MUST NOT:
        - Queue utterances (the NarrationQueue owns ordering)
        - Consult accessibility settings (the NarrationQueue gates audibility)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

DoneCallback = Callable[[bool], None]


@dataclass(frozen=True)
class Utterance:
    """A single speech request.

    Attributes:
        text: Text to speak
        rate: Rate multiplier (1.0 = normal)
        pitch: Pitch multiplier (1.0 = normal)
        language: BCP-47 language tag
    """
    text: str
    rate: float = 1.0
    pitch: float = 1.0
    language: str = "en"


class SpeechSynthesizer(ABC):
    """Abstract base class for speech synthesizers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Synthesizer identifier (e.g., 'espeak')."""
        ...

    @property
    def available(self) -> bool:
        """Whether speech can actually be produced on this host."""
        return True

    @abstractmethod
    def speak(self, utterance: Utterance, on_done: DoneCallback) -> None:
        """Start speaking; return immediately.

        Args:
            utterance: What to say and how
            on_done: Called with True on natural completion, False if stopped
        """
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop the current utterance, if any."""
        ...


class NullSynthesizer(SpeechSynthesizer):
    """No-op synthesizer used when the host has no speech capability.

    Used as a fallback to avoid null checks throughout the code.
    """

    @property
    def name(self) -> str:
        return "none"

    @property
    def available(self) -> bool:
        return False

    def speak(self, utterance: Utterance, on_done: DoneCallback) -> None:
        pass  # No-op

    def stop(self) -> None:
        pass  # No-op
