"""
Dashboard View Model - Role-specific read models.

End users see their own day: today's tasks, today's log and their
unresolved alerts. Caregivers and therapists see every end user's
progress, a feed of tasks completed today and the population's
unresolved alerts.

Every view is a point-in-time snapshot. Nothing subscribes to pushes;
`refresh` simply builds the view again. Fetch failures never raise out
of this module: the affected collection is empty and a FeedbackNotice
explains what is missing.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable, Optional, Union

import numpy as np

from ablelink.config import DashboardConfig
from ablelink.data.service import DashboardRepository
from ablelink.errors import RemoteFetchFailure
from ablelink.feedback import FeedbackNotice
from ablelink.models import (
    Alert,
    Log,
    ProgressScore,
    Task,
    User,
    UserRole,
    by_time_of_day,
    mood_label,
)
from ablelink.progress.aggregator import AggregationResult, ProgressAggregator, UserProgress

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def humanize_since(moment: Optional[datetime], now: datetime) -> str:
    """Relative time such as '5 minutes ago'."""
    if moment is None:
        return "Never"

    seconds = (_aware(now) - _aware(moment)).total_seconds()
    if seconds < 60:
        return "just now"

    for size, unit in ((86400, "day"), (3600, "hour"), (60, "minute")):
        if seconds >= size:
            count = int(seconds // size)
            return f"{count} {unit}{'' if count == 1 else 's'} ago"
    return "just now"


def status_line(score: ProgressScore) -> str:
    """One-line task status for a care recipient."""
    if score.tasks_total == 0:
        return "No tasks today"
    if score.tasks_pending == 0:
        return "All tasks completed"
    noun = "task" if score.tasks_pending == 1 else "tasks"
    return f"{score.tasks_pending} {noun} pending"


def _dedupe(notices: list[FeedbackNotice]) -> list[FeedbackNotice]:
    seen = set()
    unique = []
    for notice in notices:
        if notice.message not in seen:
            seen.add(notice.message)
            unique.append(notice)
    return unique


@dataclass
class EndUserView:
    """What an end user sees for one day."""
    user: User
    reference_date: date
    tasks: list[Task] = field(default_factory=list)
    log: Optional[Log] = None
    alerts: list[Alert] = field(default_factory=list)
    notices: list[FeedbackNotice] = field(default_factory=list)

    @property
    def tasks_completed(self) -> int:
        return sum(1 for t in self.tasks if t.completed)

    @property
    def mood_label(self) -> str:
        return mood_label(self.log.mood if self.log else None)


@dataclass
class RecipientSummary:
    """One care recipient's row on a caregiver or therapist dashboard.

    Attributes:
        user: The end user
        score: Their ProgressScore for the reference date
        status: Task status line ("2 tasks pending", ...)
        mood: Mood label; "Not logged" when the window had no mood
        last_active: Latest log or account timestamp
        last_active_text: `last_active` relative to now
        progress: Composite score, None when their data could not be fetched
    """
    user: User
    score: ProgressScore
    status: str
    mood: str
    last_active: Optional[datetime]
    last_active_text: str
    progress: Optional[int]

    @property
    def failed(self) -> bool:
        return self.score.failed

    @classmethod
    def from_progress(cls, item: UserProgress, now: datetime) -> "RecipientSummary":
        score = item.score
        return cls(
            user=item.user,
            score=score,
            status=status_line(score),
            mood="Not logged" if score.no_mood_data else mood_label(score.average_recent_mood),
            last_active=item.last_active,
            last_active_text=humanize_since(item.last_active, now),
            progress=None if score.failed else score.composite_score,
        )


@dataclass(frozen=True)
class ActivityEntry:
    """A task some care recipient completed today."""
    user: User
    task: Task

    @property
    def action(self) -> str:
        return f"Completed: {self.task.description}"

    @property
    def time(self) -> str:
        return self.task.time


@dataclass(frozen=True)
class AlertEntry:
    """An unresolved alert with the recipient it belongs to."""
    user: User
    alert: Alert


@dataclass
class CareTeamView:
    """Population read model for caregivers and therapists."""
    viewer: User
    reference_date: date
    result: AggregationResult
    recipients: list[RecipientSummary] = field(default_factory=list)
    activity: list[ActivityEntry] = field(default_factory=list)
    alerts: list[AlertEntry] = field(default_factory=list)
    notices: list[FeedbackNotice] = field(default_factory=list)

    @property
    def recipient_count(self) -> int:
        return len(self.recipients)

    @property
    def active_alerts(self) -> int:
        return self.result.total_active_alerts

    @property
    def tasks_completed(self) -> int:
        return self.result.tasks_completed

    @property
    def tasks_total(self) -> int:
        return self.result.tasks_total

    @property
    def average_progress(self) -> Optional[int]:
        """Mean composite over recipients with complete data, rounded."""
        average = self.result.average_composite
        if average is None:
            return None
        return int(np.floor(average + 0.5))


class DashboardViewModel:
    """Builds read models and applies the two writes the UI needs.

    Example:
        vm = DashboardViewModel(repo, ProgressAggregator(repo))

        mine = await vm.end_user_view(user)
        team = await vm.care_team_view(caregiver)

        task, notice = await vm.toggle_task(mine.tasks[0])
    """

    def __init__(
        self,
        repository: DashboardRepository,
        aggregator: Optional[ProgressAggregator] = None,
        config: Optional[DashboardConfig] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.repository = repository
        self.config = config or DashboardConfig()
        self.aggregator = aggregator or ProgressAggregator(
            repository,
            self.config.scoring,
            max_concurrency=self.config.max_concurrent_fetches,
        )
        self._clock = clock or _local_now

    def now(self) -> datetime:
        return self._clock()

    def today(self) -> date:
        return self.now().date()

    async def end_user_view(self, user: User, reference: Optional[date] = None) -> EndUserView:
        """Today's tasks, today's log and unresolved alerts for one user."""
        reference = reference or self.today()

        (tasks, task_err), (log, log_err), (alerts, alert_err) = await asyncio.gather(
            _capture(self.repository.tasks_for(user.id, reference), []),
            _capture(self.repository.log_for(user.id, reference), None),
            _capture(self.repository.active_alerts(user.id), []),
        )
        notices = [
            FeedbackNotice.from_failure(e)
            for e in (task_err, log_err, alert_err)
            if e is not None
        ]

        return EndUserView(
            user=user,
            reference_date=reference,
            tasks=tasks,
            log=log,
            alerts=[a for a in alerts if a.is_active],
            notices=notices,
        )

    async def care_team_view(self, viewer: User, reference: Optional[date] = None) -> CareTeamView:
        """Progress of every end user, activity feed and alert list."""
        reference = reference or self.today()
        notices: list[FeedbackNotice] = []

        try:
            users = await self.repository.users_by_role(UserRole.END_USER)
        except RemoteFetchFailure as e:
            logger.warning(f"Could not list care recipients: {e}")
            notices.append(FeedbackNotice.from_failure(e))
            users = []

        result = await self.aggregator.aggregate(users, reference)
        now = self.now()

        for item in result.failures():
            notices.extend(FeedbackNotice.from_failure(e) for e in item.errors)

        return CareTeamView(
            viewer=viewer,
            reference_date=reference,
            result=result,
            recipients=[RecipientSummary.from_progress(item, now) for item in result],
            activity=self._activity(result, reference),
            alerts=self._alerts(result),
            notices=_dedupe(notices),
        )

    async def refresh(
        self,
        viewer: User,
        reference: Optional[date] = None,
    ) -> Union[EndUserView, CareTeamView]:
        """Rebuild the view for the viewer's role."""
        if viewer.is_end_user:
            return await self.end_user_view(viewer, reference)
        return await self.care_team_view(viewer, reference)

    async def toggle_task(self, task: Task) -> tuple[Task, Optional[FeedbackNotice]]:
        """Flip a task's completion.

        Returns:
            (task, notice). On success the task is the updated record and
            notice is None; on failure the original task comes back
            unchanged with a notice.
        """
        try:
            updated = await self.repository.set_task_completed(task.id, not task.completed)
        except RemoteFetchFailure as e:
            logger.warning(f"Could not toggle task {task.id}: {e}")
            return task, FeedbackNotice.from_failure(e)
        return updated, None

    async def resolve_alert(self, alert_id: str) -> Optional[FeedbackNotice]:
        """Mark an alert resolved. Returns a notice if the write failed."""
        try:
            await self.repository.resolve_alert(alert_id)
        except RemoteFetchFailure as e:
            logger.warning(f"Could not resolve alert {alert_id}: {e}")
            return FeedbackNotice.from_failure(e)
        return None

    def _activity(self, result: AggregationResult, reference: date) -> list[ActivityEntry]:
        owners = {}
        done = []
        for item in result:
            for task in item.tasks:
                if task.completed and task.date == reference:
                    owners[id(task)] = item.user
                    done.append(task)

        # Latest time of day first; ties keep the newest creation first
        done.sort(key=lambda t: _aware(t.created_at or datetime.min), reverse=True)
        ordered = by_time_of_day(done, descending=True)

        limit = self.config.activity_feed_limit
        return [ActivityEntry(owners[id(t)], t) for t in ordered[:limit]]

    def _alerts(self, result: AggregationResult) -> list[AlertEntry]:
        entries = [
            AlertEntry(item.user, alert)
            for item in result
            for alert in item.alerts
            if alert.is_active
        ]
        timed = [e for e in entries if e.alert.triggered_at is not None]
        untimed = [e for e in entries if e.alert.triggered_at is None]
        timed.sort(key=lambda e: _aware(e.alert.triggered_at), reverse=True)
        return timed + untimed


async def _capture(coro, empty):
    try:
        return await coro, None
    except RemoteFetchFailure as e:
        logger.warning(f"Showing empty collection: {e}")
        return empty, e
