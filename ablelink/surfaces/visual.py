"""
Visual surface - everything readable aloud.

On load the page summary is narrated as one sequence, in a fixed order:

    1. task count and completion
    2. one fragment per task
    3. one fragment per unresolved alert

A global read/pause control starts or cancels that sequence. Contrast
and font size toggles speak a confirmation. Announcements are also
kept in a polite live region for screen readers.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from ablelink.models import DisabilityProfile
from ablelink.surfaces.base import InteractionSurface, SurfaceView, ViewItem, ViewSection


@dataclass(frozen=True)
class QuickAction:
    """A navigation shortcut on the visual dashboard."""
    name: str
    description: str
    icon: str


QUICK_ACTIONS = (
    QuickAction("Daily Schedule", "View and manage your daily tasks", "calendar"),
    QuickAction("Health Log", "Record mood, medications, and meals", "user"),
    QuickAction("Accessibility Settings", "Adjust interface preferences", "settings"),
)


def summary_fragments(tasks, alerts) -> list[str]:
    """Ordered narration for the page summary."""
    done = sum(1 for t in tasks if t.completed)
    noun = "task" if len(tasks) == 1 else "tasks"
    fragments = [f"You have {len(tasks)} {noun} today, {done} completed."]

    for i, task in enumerate(tasks, start=1):
        when = f" at {task.time}" if task.time else ""
        status = "completed" if task.completed else "not completed"
        fragments.append(f"Task {i}: {task.description}{when}, {status}.")

    for alert in alerts:
        if alert.is_active:
            fragments.append(f"{alert.kind.value.capitalize()} alert: {alert.message}")
    return fragments


class VisualSurface(InteractionSurface):
    """Screen-reader-first dashboard."""

    profile = DisabilityProfile.VISUAL
    title = "Visual Interface Dashboard"
    subtitle = "Navigate using keyboard or screen reader"

    def __init__(self, context) -> None:
        super().__init__(context)
        self.announcements: list[str] = []

    @property
    def live_region(self) -> Optional[str]:
        """Latest announcement, as a polite live region shows it."""
        return self.announcements[-1] if self.announcements else None

    def on_loaded(self) -> None:
        self.announcements.append("Page loaded. Dashboard ready.")

    def summary(self) -> list[str]:
        return summary_fragments(self.tasks, self.alerts)

    def announce(self) -> Optional[asyncio.Task]:
        """Narrate the page summary from the top."""
        return self.context.narration.speak_sequence(self.summary())

    def toggle_reading(self) -> Optional[asyncio.Task]:
        """Read/pause control: cancel while reading, restart when idle."""
        return self.context.narration.toggle(self.summary())

    def toggle_high_contrast(self) -> bool:
        enabled = not self.context.settings.settings.high_contrast
        self.context.settings.update(high_contrast=enabled)
        self._say("High contrast mode enabled" if enabled else "High contrast mode disabled")
        return enabled

    def toggle_large_fonts(self) -> bool:
        enabled = not self.context.settings.settings.large_fonts
        self.context.settings.update(large_fonts=enabled)
        self._say("Large fonts enabled" if enabled else "Large fonts disabled")
        return enabled

    def activate(self, name: str) -> QuickAction:
        """Follow a quick action.

        Raises:
            KeyError: If no quick action has that name
        """
        for action in QUICK_ACTIONS:
            if action.name == name:
                self.context.narration.speak_one(f"Navigating to {action.name}")
                self.announcements.append(f"Activated: {action.name}")
                return action
        raise KeyError(f"Unknown quick action: {name}")

    def _say(self, text: str) -> None:
        self.context.narration.speak_one(text)
        self.announcements.append(text)

    def render(self) -> SurfaceView:
        settings = self.context.settings.settings
        controls = ViewSection("Accessibility Options", items=[
            ViewItem(
                key="high-contrast",
                label="High Contrast",
                state="on" if settings.high_contrast else "off",
                speak_text=(
                    "High contrast mode is on" if settings.high_contrast
                    else "High contrast mode is off"
                ),
            ),
            ViewItem(
                key="large-fonts",
                label="Large Fonts",
                state="on" if settings.large_fonts else "off",
                speak_text="Large fonts are on" if settings.large_fonts else "Large fonts are off",
            ),
            ViewItem(
                key="read-aloud",
                label="Pause reading" if self.context.narration.is_reading else "Read page aloud",
                state="reading" if self.context.narration.is_reading else "idle",
            ),
        ])

        actions = ViewSection("Quick Actions", items=[
            ViewItem(
                key=a.name,
                label=a.name,
                detail=a.description,
                icon=a.icon,
                speak_text=f"{a.name}. {a.description}",
            )
            for a in QUICK_ACTIONS
        ])

        tasks = ViewSection("Today's Tasks", empty_text="No tasks for today")
        for task in self.tasks:
            tasks.items.append(ViewItem(
                key=task.id,
                label=task.description,
                detail=task.time,
                icon=task.icon,
                state="completed" if task.completed else "pending",
                speak_text=f"{task.description}, {'completed' if task.completed else 'not completed'}",
            ))

        alerts = ViewSection("Alerts", empty_text="No active alerts")
        for alert in self.alerts:
            alerts.items.append(ViewItem(
                key=alert.id,
                label=alert.message,
                state=alert.kind.value,
                speak_text=f"{alert.kind.value.capitalize()} alert: {alert.message}",
            ))

        return self._view(
            [controls, actions, tasks, alerts],
            reading=self.context.narration.status,
        )
