"""
Mock Synthesizer - For testing without an audio device.

Records every request. Utterances either finish on their own after a
simulated duration, or stay "playing" until `finish()` is called, which
lets tests step a narration sequence fragment by fragment.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Optional

from ablelink.narration.base import DoneCallback, SpeechSynthesizer, Utterance


@dataclass
class CallRecord:
    """Record of a mock synthesizer call."""

    method: str
    utterance: Optional[Utterance] = None
    timestamp: float = field(default_factory=time.time)

    @property
    def text(self) -> str:
        return self.utterance.text if self.utterance else ""


class MockSynthesizer(SpeechSynthesizer):
    """Mock speech synthesizer.

    Example:
        # Manual stepping
        synth = MockSynthesizer()
        queue = NarrationQueue(store, synth)
        queue.speak_sequence(["a", "b"])
        await asyncio.sleep(0)
        synth.finish()              # "a" completes, "b" starts after the pause

        # Self-completing
        synth = MockSynthesizer(auto_complete=True, seconds_per_char=0.001)
    """

    def __init__(
        self,
        *,
        auto_complete: bool = False,
        seconds_per_char: float = 0.0,
        available: bool = True,
    ) -> None:
        self.auto_complete = auto_complete
        self.seconds_per_char = seconds_per_char
        self._available = available

        self.calls: list[CallRecord] = []
        self.spoken: list[str] = []
        self.completed: list[str] = []
        self.stopped: list[str] = []

        self._current: Optional[Utterance] = None
        self._on_done: Optional[DoneCallback] = None
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def name(self) -> str:
        return "mock"

    @property
    def available(self) -> bool:
        return self._available

    @property
    def current(self) -> Optional[str]:
        """Text currently being spoken."""
        return self._current.text if self._current else None

    @property
    def is_speaking(self) -> bool:
        return self._current is not None

    def speak(self, utterance: Utterance, on_done: DoneCallback) -> None:
        self.calls.append(CallRecord("speak", utterance))
        self.spoken.append(utterance.text)
        self._current = utterance
        self._on_done = on_done

        if self.auto_complete:
            delay = len(utterance.text) * self.seconds_per_char
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                self.finish()
                return
            self._timer = loop.call_later(delay, self.finish)

    def finish(self) -> None:
        """Complete the current utterance naturally."""
        self._end(completed=True)

    def stop(self) -> None:
        self.calls.append(CallRecord("stop"))
        self._end(completed=False)

    def _end(self, completed: bool) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        utterance, on_done = self._current, self._on_done
        self._current = None
        self._on_done = None
        if utterance is None or on_done is None:
            return

        if completed:
            self.completed.append(utterance.text)
        else:
            self.stopped.append(utterance.text)
        on_done(completed)

    def reset(self) -> None:
        """Forget recorded calls."""
        self.calls.clear()
        self.spoken.clear()
        self.completed.clear()
        self.stopped.clear()
