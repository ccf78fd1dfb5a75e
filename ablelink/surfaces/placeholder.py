"""
Needs-configuration placeholder.

Shown to an end user who has not picked a disability profile yet. It
reads no records and narrates nothing; it only points at the profile
screen.
"""

from __future__ import annotations

from ablelink.surfaces.base import InteractionSurface, SurfaceView, ViewItem, ViewSection


class NeedsConfigurationSurface(InteractionSurface):
    """Prompt to choose a profile. Never one of the profile surfaces."""

    profile = None
    title = "Welcome to AbleLink!"
    subtitle = (
        "Please update your profile to select a disability type "
        "for a customized experience."
    )

    async def load(self) -> None:
        self.on_loaded()

    def render(self) -> SurfaceView:
        prompt = ViewSection("Profile", items=[
            ViewItem(key="update-profile", label="Update Profile", icon="user"),
        ])
        return self._view([prompt])
