"""
Interaction surfaces for end users.

One surface per disability profile, all reading the same tasks, log
and alerts:

    CognitiveSurface   - one task at a time, stepped and read aloud
    VisualSurface      - page summary narrated in order, read/pause control
    HearingSurface     - colours, icons, gesture glyphs and banners only
    PhysicalSurface    - large hit targets

ModeRouter picks the surface; users without a profile get
NeedsConfigurationSurface.

Example:
    from ablelink.surfaces import ModeRouter, SurfaceContext

    context = SurfaceContext(user, dashboard, settings, narration)
    surface = ModeRouter().select(user, context)
    await surface.load()
    surface.announce()
"""

from ablelink.surfaces.base import (
    InteractionSurface,
    SurfaceContext,
    SurfaceView,
    ViewItem,
    ViewSection,
)
from ablelink.surfaces.cognitive import CognitiveSurface
from ablelink.surfaces.hearing import KIND_STYLES, Banner, HearingSurface
from ablelink.surfaces.physical import ACTION_TILES, BUTTON_MIN_PX, TILE_MIN_PX, PhysicalSurface
from ablelink.surfaces.placeholder import NeedsConfigurationSurface
from ablelink.surfaces.router import ModeRouter, default_surfaces
from ablelink.surfaces.visual import QUICK_ACTIONS, VisualSurface, summary_fragments

__all__ = [
    "InteractionSurface",
    "SurfaceContext",
    "SurfaceView",
    "ViewItem",
    "ViewSection",
    "CognitiveSurface",
    "VisualSurface",
    "HearingSurface",
    "PhysicalSurface",
    "NeedsConfigurationSurface",
    "ModeRouter",
    "default_surfaces",
    "KIND_STYLES",
    "Banner",
    "ACTION_TILES",
    "TILE_MIN_PX",
    "BUTTON_MIN_PX",
    "QUICK_ACTIONS",
    "summary_fragments",
]
