"""
Interaction Surfaces - Base contract and shared view types.

A surface turns one end user's tasks, log and alerts into a view for a
specific disability profile. Every surface offers the same two
capabilities:

    render()    - build a SurfaceView the UI shell draws
    announce()  - speak whatever the surface narrates on load (may be nothing)

Surfaces never branch on the profile themselves; the ModeRouter picks
one implementation per session.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Callable, ClassVar, Optional

from ablelink.accessibility.styling import LayoutSpec, StyleFlags, layout_for
from ablelink.feedback import FeedbackNotice
from ablelink.models import Alert, DisabilityProfile, Task, User

if TYPE_CHECKING:
    from ablelink.accessibility.settings import SettingsStore
    from ablelink.dashboard.viewmodel import DashboardViewModel, EndUserView
    from ablelink.narration.queue import NarrationQueue, NarrationStatus


@dataclass
class ViewItem:
    """One row, card or control in a rendered surface."""
    key: str
    label: str
    detail: str = ""
    icon: str = ""
    color: str = ""
    glyph: str = ""
    state: str = ""
    urgent: bool = False
    animated: bool = False
    hit_target_px: int = 44
    speak_text: str = ""


@dataclass
class ViewSection:
    """A titled group of items."""
    title: str
    items: list[ViewItem] = field(default_factory=list)
    empty_text: str = ""


@dataclass
class SurfaceView:
    """Everything the UI shell needs to draw one surface."""
    profile: Optional[DisabilityProfile]
    title: str
    subtitle: str
    layout: LayoutSpec
    sections: list[ViewSection] = field(default_factory=list)
    notices: list[FeedbackNotice] = field(default_factory=list)
    banner: Optional[str] = None
    reading: Optional["NarrationStatus"] = None

    def section(self, title: str) -> Optional[ViewSection]:
        for s in self.sections:
            if s.title == title:
                return s
        return None


@dataclass
class SurfaceContext:
    """Collaborators shared by every surface of one session.

    Attributes:
        user: Signed-in end user
        dashboard: Read model source for the user's records
        settings: Process-wide accessibility settings
        narration: Shared narration queue
        reference_date: Day the surface shows (today by default)
        clock: Monotonic clock in seconds, for transient banners
    """
    user: User
    dashboard: "DashboardViewModel"
    settings: "SettingsStore"
    narration: "NarrationQueue"
    reference_date: Optional[date] = None
    clock: Optional[Callable[[], float]] = None
    banner_seconds: float = 3.0

    def announce_focus(self, label: str) -> None:
        """Speak a control's label when it gains focus."""
        self.narration.speak_one(label)


class InteractionSurface(ABC):
    """Abstract base class for profile-specific surfaces.

    Subclasses set `profile` and implement `render`. Loading, task
    toggling and alert resolution are shared.
    """

    profile: ClassVar[Optional[DisabilityProfile]] = None
    title: ClassVar[str] = ""
    subtitle: ClassVar[str] = ""

    def __init__(self, context: SurfaceContext) -> None:
        self.context = context
        self.tasks: list[Task] = []
        self.alerts: list[Alert] = []
        self.view: Optional["EndUserView"] = None
        self.notices: list[FeedbackNotice] = []

    @property
    def user(self) -> User:
        return self.context.user

    @property
    def style_flags(self) -> StyleFlags:
        return StyleFlags.from_settings(self.context.settings.settings)

    @property
    def layout(self) -> LayoutSpec:
        return layout_for(self.profile, self.style_flags)

    @property
    def tasks_completed(self) -> int:
        return sum(1 for t in self.tasks if t.completed)

    async def load(self) -> None:
        """Fetch today's tasks, log and active alerts for the user."""
        self.view = await self.context.dashboard.end_user_view(
            self.user, self.context.reference_date
        )
        self.tasks = list(self.view.tasks)
        self.alerts = list(self.view.alerts)
        self.notices = list(self.view.notices)
        self.on_loaded()

    def on_loaded(self) -> None:
        """Hook run after every load."""

    @abstractmethod
    def render(self) -> SurfaceView:
        """Build the view for the current data."""
        ...

    def announce(self) -> Optional[asyncio.Task]:
        """Narrate the surface. Silent by default."""
        return None

    async def toggle_task(self, task_id: str) -> Optional[Task]:
        """Flip a task's completion flag remotely and locally.

        Returns the updated task, or None if the write failed (a notice
        is recorded instead).
        """
        task = self._task(task_id)
        updated, notice = await self.context.dashboard.toggle_task(task)
        if notice is not None:
            self.notices.append(notice)
            return None

        self.tasks = [updated if t.id == updated.id else t for t in self.tasks]
        self.on_task_changed(updated)
        return updated

    def on_task_changed(self, task: Task) -> None:
        """Hook run after a task's completion changed."""

    async def resolve_alert(self, alert_id: str) -> bool:
        """Mark an alert resolved; it disappears from the surface."""
        notice = await self.context.dashboard.resolve_alert(alert_id)
        if notice is not None:
            self.notices.append(notice)
            return False
        self.alerts = [a for a in self.alerts if a.id != alert_id]
        return True

    def _task(self, task_id: str) -> Task:
        for task in self.tasks:
            if task.id == task_id:
                return task
        raise KeyError(f"No task {task_id} on this surface")

    def _view(self, sections: list[ViewSection], **extra) -> SurfaceView:
        return SurfaceView(
            profile=self.profile,
            title=self.title,
            subtitle=self.subtitle,
            layout=self.layout,
            sections=sections,
            notices=list(self.notices),
            **extra,
        )
