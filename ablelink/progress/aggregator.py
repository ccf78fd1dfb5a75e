"""
Progress Aggregation - Per-user completion and mood scores.

Scoring (defaults from ScoringPolicy):

    completion_rate = completed / total            (0 when total == 0)
    average_mood    = mean(logged moods in window) (0 when none, flagged)
    mood_score      = average_mood / 5 * 100
    composite       = round(0.5 * completion_rate * 100 + 0.5 * mood_score)

The composite is rounded half-up and clamped to [0, 100]; no input
combination produces NaN.

Batches fan out per user. Each user's fetches are captured
independently, so one user's failure flags that user's result and
never aborts or contaminates the rest of the batch.

Usage:
    aggregator = ProgressAggregator(DashboardRepository(service))
    result = await aggregator.aggregate(users, date.today())

    for item in result:
        print(item.user.name, item.score.composite_score)
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Iterator, Optional, Sequence

import numpy as np

from ablelink.config import ScoringPolicy
from ablelink.data.service import DashboardRepository
from ablelink.errors import RemoteFetchFailure
from ablelink.models import Alert, Log, ProgressScore, Task, User
from ablelink.monitoring.logging import StructuredLogger, get_logger

logger = logging.getLogger(__name__)


def mood_window(reference: date, policy: ScoringPolicy) -> tuple[date, date]:
    """First and last day (inclusive) of the trailing mood window."""
    return reference - timedelta(days=policy.mood_window_days - 1), reference


def task_completion_rate(tasks: Sequence[Task]) -> float:
    """Fraction of tasks completed; 0.0 for an empty list."""
    if not tasks:
        return 0.0
    return sum(1 for t in tasks if t.completed) / len(tasks)


def average_recent_mood(
    logs: Iterable[Log],
    reference: date,
    policy: ScoringPolicy,
) -> tuple[float, bool]:
    """Mean logged mood inside the window.

    Returns:
        (average, no_mood_data). The average is 0.0 when no log in the
        window carries a mood.
    """
    start, end = mood_window(reference, policy)
    moods = [log.mood for log in logs if start <= log.date <= end and log.has_mood]
    if not moods:
        return 0.0, True
    return float(np.mean(moods)), False


def mood_score(average_mood: float, policy: ScoringPolicy) -> float:
    """Average mood on a 0-100 scale."""
    return float(np.clip(average_mood / policy.mood_scale_max * 100.0, 0.0, 100.0))


def composite_score(completion_rate: float, mood: float, policy: ScoringPolicy) -> int:
    """Weighted blend of completion (0-1) and mood score (0-100), 0-100."""
    task_w, mood_w = policy.normalized_weights
    raw = task_w * completion_rate * 100.0 + mood_w * mood
    if not np.isfinite(raw):
        return 0
    # Half-up rounding: 62.5 -> 63
    return int(np.clip(np.floor(raw + 0.5), 0, 100))


def score_user(
    user_id: str,
    tasks: Sequence[Task],
    logs: Sequence[Log],
    reference: date,
    policy: Optional[ScoringPolicy] = None,
) -> ProgressScore:
    """Compute one user's ProgressScore from already-fetched records.

    Records belonging to other users, tasks on other dates and logs
    outside the window are ignored.
    """
    policy = policy or ScoringPolicy()
    todays = [t for t in tasks if t.user_id == user_id and t.date == reference]
    own_logs = [log for log in logs if log.user_id == user_id]

    rate = task_completion_rate(todays)
    average, no_mood = average_recent_mood(own_logs, reference, policy)

    return ProgressScore(
        user_id=user_id,
        tasks_completed=sum(1 for t in todays if t.completed),
        tasks_total=len(todays),
        average_recent_mood=average,
        composite_score=composite_score(rate, mood_score(average, policy), policy),
        no_mood_data=no_mood,
    )


def last_active(user: User, logs: Sequence[Log]) -> Optional[datetime]:
    """Later of the user's newest log timestamp and account creation."""
    candidates = [log.created_at for log in logs if log.created_at is not None]
    if user.created_at is not None:
        candidates.append(user.created_at)
    if not candidates:
        return None
    return max(candidates, key=_comparable)


def _comparable(value: datetime) -> datetime:
    # Naive timestamps are taken as UTC so mixed inputs still compare
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


@dataclass
class UserProgress:
    """One user's slice of an aggregation pass."""
    user: User
    score: ProgressScore
    tasks: list[Task] = field(default_factory=list)
    logs: list[Log] = field(default_factory=list)
    alerts: list[Alert] = field(default_factory=list)
    errors: list[RemoteFetchFailure] = field(default_factory=list)
    last_active: Optional[datetime] = None

    @property
    def success(self) -> bool:
        return not self.errors


@dataclass
class AggregationResult:
    """Result of scoring a population."""
    reference_date: date
    items: list[UserProgress]
    duration_ms: float = 0.0

    def __iter__(self) -> Iterator[UserProgress]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def success_count(self) -> int:
        return sum(1 for item in self.items if item.success)

    @property
    def failure_count(self) -> int:
        return len(self.items) - self.success_count

    def failures(self) -> list[UserProgress]:
        return [item for item in self.items if not item.success]

    def for_user(self, user_id: str) -> Optional[UserProgress]:
        for item in self.items:
            if item.user.id == user_id:
                return item
        return None

    @property
    def total_active_alerts(self) -> int:
        return sum(1 for item in self.items for a in item.alerts if a.is_active)

    @property
    def tasks_completed(self) -> int:
        return sum(item.score.tasks_completed for item in self.items)

    @property
    def tasks_total(self) -> int:
        return sum(item.score.tasks_total for item in self.items)

    @property
    def average_composite(self) -> Optional[float]:
        """Mean composite over users that were fully fetched, None if none."""
        scores = [item.score.composite_score for item in self.items if item.success]
        if not scores:
            return None
        return float(np.mean(scores))


class ProgressAggregator:
    """Scores users from independently fetched tasks, logs and alerts.

    Example:
        aggregator = ProgressAggregator(repo, ScoringPolicy(), max_concurrency=4)

        result = await aggregator.aggregate(users, date.today())
        print(result.total_active_alerts, result.tasks_completed, result.tasks_total)

        for failed in result.failures():
            print(failed.user.name, failed.errors)
    """

    def __init__(
        self,
        repository: DashboardRepository,
        policy: Optional[ScoringPolicy] = None,
        *,
        max_concurrency: int = 8,
        events: Optional[StructuredLogger] = None,
    ) -> None:
        self.repository = repository
        self.policy = policy or ScoringPolicy()
        self.max_concurrency = max_concurrency
        self._events = events or get_logger()

    async def score(self, user: User, reference: date) -> UserProgress:
        """Fetch and score one user. Fetch failures are captured, not raised."""
        return await self._score(user, reference, asyncio.Semaphore(self.max_concurrency))

    async def aggregate(self, users: Sequence[User], reference: date) -> AggregationResult:
        """Score every user concurrently, tolerating per-user failures."""
        start = time.perf_counter()
        limit = asyncio.Semaphore(self.max_concurrency)

        outcomes = await asyncio.gather(
            *(self._score(user, reference, limit) for user in users),
            return_exceptions=True,
        )

        items = []
        for user, outcome in zip(users, outcomes):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                logger.warning(f"Scoring failed for user {user.id}: {outcome}")
                outcome = self._failed(user, [
                    RemoteFetchFailure("progress", "score", user.id, outcome),
                ])
            items.append(outcome)

        duration_ms = (time.perf_counter() - start) * 1000
        result = AggregationResult(reference_date=reference, items=items, duration_ms=duration_ms)
        self._events.aggregation_complete(
            users=len(items),
            failures=result.failure_count,
            duration_ms=duration_ms,
        )
        return result

    async def _score(
        self,
        user: User,
        reference: date,
        limit: asyncio.Semaphore,
    ) -> UserProgress:
        since, _ = mood_window(reference, self.policy)

        async def fetch(coro):
            async with limit:
                try:
                    return await coro, None
                except RemoteFetchFailure as e:
                    self._events.fetch_failed(e, user_id=user.id)
                    return [], e

        results = await asyncio.gather(
            fetch(self.repository.tasks_for(user.id, reference)),
            fetch(self.repository.logs_since(user.id, since)),
            fetch(self.repository.active_alerts(user.id)),
            fetch(self.repository.latest_log(user.id)),
        )
        (tasks, task_err), (logs, log_err), (alerts, alert_err), (latest, latest_err) = results
        errors = [e for e in (task_err, log_err, alert_err, latest_err) if e is not None]
        # The newest log may predate the mood window
        seen = [*logs, latest] if latest else logs

        score = score_user(user.id, tasks, logs, reference, self.policy)
        if errors:
            score.failed = True
            score.errors = [e.message for e in errors]

        return UserProgress(
            user=user,
            score=score,
            tasks=tasks,
            logs=logs,
            alerts=[a for a in alerts if a.is_active],
            errors=errors,
            last_active=last_active(user, seen),
        )

    def _failed(self, user: User, errors: list[RemoteFetchFailure]) -> UserProgress:
        score = ProgressScore(user_id=user.id, failed=True, errors=[e.message for e in errors])
        return UserProgress(user=user, score=score, errors=errors, last_active=user.created_at)
