"""
eSpeak Synthesizer - Speech through the espeak / espeak-ng command.

Each utterance runs one espeak process; a watcher thread reports
completion when the process exits. Stopping terminates the process.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import threading
from typing import Optional

from ablelink.narration.base import DoneCallback, SpeechSynthesizer, Utterance

logger = logging.getLogger(__name__)

# espeak defaults: 175 words per minute, pitch 50 on a 0-99 scale
_BASE_WPM = 175
_BASE_PITCH = 50


def find_executable() -> Optional[str]:
    """Locate espeak-ng or espeak on PATH."""
    return shutil.which("espeak-ng") or shutil.which("espeak")


def is_available() -> bool:
    """Check if an espeak executable is installed."""
    return find_executable() is not None


class EspeakSynthesizer(SpeechSynthesizer):
    """Synthesizer backed by the espeak command line tool.

    Example:
        synth = EspeakSynthesizer()
        synth.speak(Utterance("Hello", rate=0.8), lambda done: print(done))
    """

    def __init__(self, executable: Optional[str] = None) -> None:
        self._executable = executable or find_executable()
        self._process: Optional[subprocess.Popen] = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "espeak"

    @property
    def available(self) -> bool:
        return self._executable is not None

    def speak(self, utterance: Utterance, on_done: DoneCallback) -> None:
        if self._executable is None:
            return

        command = [
            self._executable,
            "-s", str(self._lower_rate(utterance.rate)),
            "-p", str(self._lower_pitch(utterance.pitch)),
            "-v", utterance.language,
            utterance.text,
        ]

        with self._lock:
            try:
                process = subprocess.Popen(
                    command,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )
            except OSError as e:
                logger.warning(f"espeak failed to start: {e}")
                on_done(False)
                return
            self._process = process

        watcher = threading.Thread(
            target=self._watch,
            args=(process, on_done),
            daemon=True,
            name="espeak-watcher",
        )
        watcher.start()

    def _watch(self, process: subprocess.Popen, on_done: DoneCallback) -> None:
        returncode = process.wait()
        with self._lock:
            if self._process is process:
                self._process = None
        on_done(returncode == 0)

    def stop(self) -> None:
        with self._lock:
            process, self._process = self._process, None
        if process is not None and process.poll() is None:
            process.terminate()

    @staticmethod
    def _lower_rate(rate: float) -> int:
        return max(80, min(450, int(_BASE_WPM * rate)))

    @staticmethod
    def _lower_pitch(pitch: float) -> int:
        return max(0, min(99, int(_BASE_PITCH * pitch)))
