"""
Mode Router - Pick one interaction surface per session.

The router is a lookup table from disability profile to surface class.
A user without a profile always gets the needs-configuration
placeholder; there is no default profile.
"""

from __future__ import annotations

import logging
from typing import Optional, Type

from ablelink.models import DisabilityProfile, User
from ablelink.surfaces.base import InteractionSurface, SurfaceContext
from ablelink.surfaces.cognitive import CognitiveSurface
from ablelink.surfaces.hearing import HearingSurface
from ablelink.surfaces.physical import PhysicalSurface
from ablelink.surfaces.placeholder import NeedsConfigurationSurface
from ablelink.surfaces.visual import VisualSurface

logger = logging.getLogger(__name__)


def default_surfaces() -> dict[DisabilityProfile, Type[InteractionSurface]]:
    """The four built-in profile surfaces."""
    return {
        DisabilityProfile.COGNITIVE: CognitiveSurface,
        DisabilityProfile.VISUAL: VisualSurface,
        DisabilityProfile.HEARING: HearingSurface,
        DisabilityProfile.PHYSICAL: PhysicalSurface,
    }


class ModeRouter:
    """Maps a user's disability profile to a surface.

    Example:
        router = ModeRouter()
        surface = router.select(user, context)
        await surface.load()
        view = surface.render()

        # A new profile is one more entry, not a new branch
        router.register(DisabilityProfile.VISUAL, LargePrintSurface)
    """

    def __init__(
        self,
        surfaces: Optional[dict[DisabilityProfile, Type[InteractionSurface]]] = None,
    ) -> None:
        self._surfaces = dict(surfaces) if surfaces is not None else default_surfaces()

    def register(
        self,
        profile: DisabilityProfile,
        surface_class: Type[InteractionSurface],
    ) -> None:
        """Use `surface_class` for users with `profile`."""
        self._surfaces[profile] = surface_class

    def surface_class(self, profile: Optional[DisabilityProfile]) -> Type[InteractionSurface]:
        if profile is None:
            return NeedsConfigurationSurface
        try:
            return self._surfaces[profile]
        except KeyError:
            raise KeyError(f"No surface registered for profile {profile.value}") from None

    def select(self, user: User, context: SurfaceContext) -> InteractionSurface:
        """Instantiate the surface for `user`."""
        surface_class = self.surface_class(user.disability_profile)
        logger.debug(f"Routing user {user.id} to {surface_class.__name__}")
        return surface_class(context)

    @property
    def profiles(self) -> list[DisabilityProfile]:
        return list(self._surfaces)
