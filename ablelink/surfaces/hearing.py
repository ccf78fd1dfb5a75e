"""
Hearing surface - every signal has a visual equivalent.

Alerts carry a colour, an icon and a symbolic-gesture glyph for their
kind; warning and error alerts are flagged urgent. State changes
(dismissing an alert, toggling a task) raise a transient banner
instead of a sound. Nothing here depends on narration being audible.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from ablelink.models import AlertKind, DisabilityProfile, Task, mood_label
from ablelink.surfaces.base import InteractionSurface, SurfaceView, ViewItem, ViewSection


@dataclass(frozen=True)
class KindStyle:
    """Non-auditory presentation of an alert kind."""
    color: str
    icon: str
    glyph: str
    urgent: bool = False


KIND_STYLES: dict[AlertKind, KindStyle] = {
    AlertKind.INFO: KindStyle("blue", "bell", "👉"),
    AlertKind.WARNING: KindStyle("yellow", "alert-triangle", "✋", urgent=True),
    AlertKind.ERROR: KindStyle("red", "alert-octagon", "🙅", urgent=True),
    AlertKind.SUCCESS: KindStyle("green", "check-circle", "👍"),
}


@dataclass
class Banner:
    """Transient feedback message."""
    message: str
    expires_at: float

    def visible(self, now: float) -> bool:
        return now < self.expires_at


class HearingSurface(InteractionSurface):
    """Visual-only dashboard with banners and gesture glyphs."""

    profile = DisabilityProfile.HEARING
    title = "Visual Dashboard"
    subtitle = "All information displayed visually"

    def __init__(self, context) -> None:
        super().__init__(context)
        self._banner: Optional[Banner] = None

    def _now(self) -> float:
        clock = self.context.clock or time.monotonic
        return clock()

    @property
    def banner(self) -> Optional[str]:
        """Current banner text, or None once it has expired."""
        if self._banner is None:
            return None
        if not self._banner.visible(self._now()):
            self._banner = None
            return None
        return self._banner.message

    def show_banner(self, message: str) -> None:
        self._banner = Banner(message, self._now() + self.context.banner_seconds)

    async def dismiss(self, alert_id: str) -> bool:
        """Resolve an alert and confirm with a banner."""
        resolved = await self.resolve_alert(alert_id)
        if resolved:
            self.show_banner("Notification dismissed")
        return resolved

    def on_task_changed(self, task: Task) -> None:
        if task.completed:
            self.show_banner(f"Completed: {task.description}")
        else:
            self.show_banner(f"Marked not done: {task.description}")

    def render(self) -> SurfaceView:
        animated = not self.style_flags.reduce_motion

        notifications = ViewSection("Active Notifications", empty_text="All caught up!")
        for alert in self.alerts:
            style = KIND_STYLES[alert.kind]
            notifications.items.append(ViewItem(
                key=alert.id,
                label=alert.message,
                detail=alert.triggered_at.strftime("%I:%M %p").lstrip("0") if alert.triggered_at else "",
                icon=style.icon,
                color=style.color,
                glyph=style.glyph,
                state="URGENT" if style.urgent else alert.kind.value,
                urgent=style.urgent,
                animated=animated,
            ))

        tasks = ViewSection("Daily Tasks", empty_text="No tasks for today")
        for task in self.tasks:
            tasks.items.append(ViewItem(
                key=task.id,
                label=task.description,
                detail=task.time,
                icon="check-circle" if task.completed else (task.icon or "clock"),
                color="green" if task.completed else "gray",
                glyph="👍" if task.completed else "⏰",
                state="completed" if task.completed else "pending",
            ))

        log = self.view.log if self.view is not None else None
        status = ViewSection("Status", items=[
            ViewItem(
                key="medications",
                label="Medications",
                glyph="💊",
                state="✓ Taken" if log and log.medications else "⏰ Pending",
                color="green" if log and log.medications else "yellow",
            ),
            ViewItem(
                key="meals",
                label="Meals",
                glyph="🍎",
                state="✓ Eaten" if log and log.food else "⏰ Pending",
                color="green" if log and log.food else "yellow",
            ),
            ViewItem(
                key="mood",
                label="Mood",
                glyph="😊",
                state=mood_label(log.mood if log else None),
                color="blue",
            ),
            ViewItem(
                key="tasks",
                label="Tasks",
                glyph="📋",
                state=f"{self.tasks_completed} of {len(self.tasks)} done",
                color="gray",
            ),
        ])

        return self._view([notifications, tasks, status], banner=self.banner)
