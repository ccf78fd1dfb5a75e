"""
Physical surface - large hit targets.

Same data as every other surface; only the affordances change. Tiles
and buttons are sized well above the usual touch minimum, and the
selected tile opens a detail panel with a single back control.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ablelink.models import DisabilityProfile
from ablelink.surfaces.base import InteractionSurface, SurfaceView, ViewItem, ViewSection

TILE_MIN_PX = 160
BUTTON_MIN_PX = 80


@dataclass(frozen=True)
class ActionTile:
    """A large navigation tile."""
    id: str
    name: str
    icon: str
    color: str


ACTION_TILES = (
    ActionTile("schedule", "Daily Schedule", "calendar", "blue"),
    ActionTile("health", "Health & Wellness", "heart", "red"),
    ActionTile("meals", "Meal Planning", "utensils", "green"),
    ActionTile("settings", "Settings", "settings", "gray"),
)

QUICK_BUTTONS = (
    ("notifications", "Check Notifications", "bell"),
    ("profile", "Update Profile", "user"),
    ("emergency", "Emergency Contact", "home"),
    ("mood", "Log Mood", "heart"),
)


class PhysicalSurface(InteractionSurface):
    """Large-target dashboard for limited dexterity."""

    profile = DisabilityProfile.PHYSICAL
    title = "AbleLink Dashboard"
    subtitle = "Large buttons for easy access"

    def __init__(self, context) -> None:
        super().__init__(context)
        self.selected: Optional[ActionTile] = None

    def select(self, action_id: str) -> ActionTile:
        """Open a tile's panel.

        Raises:
            KeyError: If no tile has that id
        """
        for tile in ACTION_TILES:
            if tile.id == action_id:
                self.selected = tile
                return tile
        raise KeyError(f"Unknown action: {action_id}")

    def back(self) -> None:
        self.selected = None

    def render(self) -> SurfaceView:
        tiles = ViewSection("Main Actions", items=[
            ViewItem(
                key=tile.id,
                label=tile.name,
                icon=tile.icon,
                color=tile.color,
                state="selected" if self.selected is tile else "",
                hit_target_px=TILE_MIN_PX,
                speak_text=f"Open {tile.name}",
            )
            for tile in ACTION_TILES
        ])

        log = self.view.log if self.view is not None else None
        total = len(self.tasks)
        status = ViewSection("Status", items=[
            ViewItem(
                key="tasks",
                label="Today's Tasks",
                glyph="✅",
                detail=f"{self.tasks_completed} of {total} completed" if total else "No tasks today",
            ),
            ViewItem(
                key="medications",
                label="Medications",
                glyph="💊",
                detail=log.medications if log and log.medications else "Not logged yet",
            ),
            ViewItem(
                key="alerts",
                label="Notifications",
                glyph="🔔",
                detail=f"{len(self.alerts)} active" if self.alerts else "None",
            ),
        ])

        quick = ViewSection("Quick Actions", items=[
            ViewItem(key=key, label=label, icon=icon, hit_target_px=BUTTON_MIN_PX)
            for key, label, icon in QUICK_BUTTONS
        ])

        tasks = ViewSection("Daily Schedule", empty_text="No tasks for today")
        for task in self.tasks:
            tasks.items.append(ViewItem(
                key=task.id,
                label=task.description,
                detail=task.time,
                icon=task.icon,
                state="completed" if task.completed else "pending",
                hit_target_px=BUTTON_MIN_PX,
            ))

        sections = [tiles, status, quick]
        if self.selected is not None:
            sections.append(ViewSection(self.selected.name, items=[
                ViewItem(key="back", label="← Back to Dashboard", hit_target_px=BUTTON_MIN_PX),
            ]))
            if self.selected.id == "schedule":
                sections.append(tasks)
        return self._view(sections)
