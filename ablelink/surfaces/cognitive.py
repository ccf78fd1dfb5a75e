"""
Cognitive surface - one task at a time.

Today's tasks are ordered by time of day and shown singly. The user
steps with next/previous, asks for the current task to be read aloud,
and marks it done. Every step is announced through `speak_one`.
"""

from __future__ import annotations

from typing import Optional

from ablelink.models import DisabilityProfile, Task, by_time_of_day
from ablelink.surfaces.base import InteractionSurface, SurfaceView, ViewItem, ViewSection


class CognitiveSurface(InteractionSurface):
    """Single-task focus with explicit stepping."""

    profile = DisabilityProfile.COGNITIVE
    title = "Today's Tasks"
    subtitle = "One step at a time"

    def __init__(self, context) -> None:
        super().__init__(context)
        self.index = 0

    def on_loaded(self) -> None:
        self.tasks = by_time_of_day(self.tasks)
        self.index = min(self.index, max(len(self.tasks) - 1, 0))

    @property
    def current(self) -> Optional[Task]:
        if not self.tasks:
            return None
        return self.tasks[self.index]

    def next(self) -> Optional[Task]:
        """Step forward; stays on the last task at the end."""
        if self.index < len(self.tasks) - 1:
            self.index += 1
            self.context.narration.speak_one(f"Next task: {self.tasks[self.index].description}")
        return self.current

    def previous(self) -> Optional[Task]:
        """Step back; stays on the first task at the start."""
        if self.index > 0:
            self.index -= 1
            self.context.narration.speak_one(f"Previous task: {self.tasks[self.index].description}")
        return self.current

    def read_current(self) -> None:
        task = self.current
        if task is None:
            return
        text = f"Current task: {task.description}"
        if task.time:
            text += f" at {task.time}"
        self.context.narration.speak_one(text)

    async def toggle_current(self) -> Optional[Task]:
        """Mark the current task done (or not done) and say so."""
        task = self.current
        if task is None:
            return None
        return await self.toggle_task(task.id)

    def on_task_changed(self, task: Task) -> None:
        self.context.narration.speak_one("Task completed" if task.completed else "Task unmarked")

    def progress_strip(self) -> list[str]:
        """State of each task: 'completed', 'current' or 'pending'."""
        states = []
        for i, task in enumerate(self.tasks):
            if task.completed:
                states.append("completed")
            elif i == self.index:
                states.append("current")
            else:
                states.append("pending")
        return states

    def render(self) -> SurfaceView:
        focus = ViewSection("Current task", empty_text="No tasks for today")
        task = self.current
        if task is not None:
            focus.items.append(ViewItem(
                key=task.id,
                label=task.description,
                detail=task.time,
                icon=task.icon,
                state="completed" if task.completed else "pending",
                hit_target_px=64,
                speak_text=f"Current task: {task.description}",
            ))

        strip = ViewSection("Progress")
        for i, (t, state) in enumerate(zip(self.tasks, self.progress_strip())):
            strip.items.append(ViewItem(key=t.id, label=f"Task {i + 1}", state=state))

        alerts = ViewSection("Reminders")
        for alert in self.alerts:
            alerts.items.append(ViewItem(
                key=alert.id,
                label=alert.message,
                state=alert.kind.value,
            ))

        subtitle = f"Task {self.index + 1} of {len(self.tasks)}" if self.tasks else self.subtitle
        view = self._view([focus, strip, alerts])
        view.subtitle = subtitle
        return view
