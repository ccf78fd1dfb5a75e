"""
Progress aggregation for caregiver and therapist views.

Example:
    from ablelink.progress import ProgressAggregator, score_user

    score = score_user("u1", tasks, logs, date.today())
    print(score.composite_score, score.no_mood_data)
"""

from ablelink.progress.aggregator import (
    ProgressAggregator,
    AggregationResult,
    UserProgress,
    score_user,
    task_completion_rate,
    average_recent_mood,
    mood_score,
    composite_score,
    mood_window,
    last_active,
)

__all__ = [
    "ProgressAggregator",
    "AggregationResult",
    "UserProgress",
    "score_user",
    "task_completion_rate",
    "average_recent_mood",
    "mood_score",
    "composite_score",
    "mood_window",
    "last_active",
]
