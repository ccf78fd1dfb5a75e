"""
Configuration for AbleLink.

Defines scoring policy, narration parameters and the dashboard-wide
configuration object. Every option has a default; a few can be
overridden from the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


SETTINGS_KEY = "accessibility-settings"


def _default_storage_dir() -> Path:
    override = os.environ.get("ABLELINK_HOME")
    if override:
        return Path(override)
    return Path.home() / ".ablelink"


@dataclass
class ScoringPolicy:
    """How progress scores are computed.

    Args:
        mood_window_days: Length of the trailing mood window, counting the
            reference date itself.
        mood_scale_max: Highest mood value; a mood at this value scores 100.
        task_weight: Relative weight of the task completion rate.
        mood_weight: Relative weight of the mood score.

    Example:
        policy = ScoringPolicy(task_weight=0.7, mood_weight=0.3)
    """

    mood_window_days: int = 7
    """Trailing days of logs considered, inclusive of the reference date."""

    mood_scale_max: int = 5
    """Upper bound of the mood scale."""

    task_weight: float = 0.5
    mood_weight: float = 0.5

    def __post_init__(self):
        if self.mood_window_days < 1:
            raise ValueError(f"mood_window_days must be >= 1, got {self.mood_window_days}")
        if self.mood_scale_max < 1:
            raise ValueError(f"mood_scale_max must be >= 1, got {self.mood_scale_max}")
        if self.task_weight < 0 or self.mood_weight < 0:
            raise ValueError("Score weights must be non-negative")
        if self.task_weight + self.mood_weight <= 0:
            raise ValueError("Score weights must not both be zero")

    @property
    def normalized_weights(self) -> tuple[float, float]:
        """(task, mood) weights scaled to sum to 1."""
        total = self.task_weight + self.mood_weight
        return self.task_weight / total, self.mood_weight / total


@dataclass
class NarrationConfig:
    """Speech parameters for the narration queue."""

    rate: float = 0.8
    pitch: float = 1.0
    fragment_pause_s: float = 0.3
    """Silence inserted between fragments of a sequence."""

    language: str = "en"

    def __post_init__(self):
        if self.rate <= 0:
            raise ValueError(f"rate must be positive, got {self.rate}")
        if self.fragment_pause_s < 0:
            raise ValueError(f"fragment_pause_s must be >= 0, got {self.fragment_pause_s}")


@dataclass
class DashboardConfig:
    """AbleLink configuration.

    Example:
        config = DashboardConfig(
            synthesizer="mock",
            scoring=ScoringPolicy(mood_window_days=14),
        )
    """
    storage_dir: Path = field(default_factory=_default_storage_dir)
    """Directory backing the local key-value store."""

    synthesizer: str = field(
        default_factory=lambda: os.environ.get("ABLELINK_SPEECH_BACKEND", "auto")
    )
    max_concurrent_fetches: int = 8
    activity_feed_limit: int = 20
    banner_seconds: float = 3.0

    scoring: ScoringPolicy = field(default_factory=ScoringPolicy)
    narration: NarrationConfig = field(default_factory=NarrationConfig)

    def __post_init__(self):
        self.storage_dir = Path(self.storage_dir)
        if self.max_concurrent_fetches < 1:
            raise ValueError("max_concurrent_fetches must be >= 1")
