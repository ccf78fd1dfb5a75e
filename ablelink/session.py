"""
Dashboard Session - Wires the core together for one signed-in client.

A session owns exactly one SettingsStore, one NarrationQueue and one
active surface. Everything else (repository, aggregator, view model,
router) is stateless between calls.

Example:
    session = DashboardSession(service, DashboardConfig())
    session.start()

    surface = await session.open_surface(user)
    view = surface.render()

    session.close()
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional, Union

from ablelink.accessibility.ambient import AmbientSignals
from ablelink.accessibility.settings import FileKeyValueStore, KeyValueStore, SettingsStore
from ablelink.accessibility.styling import RootStyles
from ablelink.config import DashboardConfig
from ablelink.dashboard.viewmodel import CareTeamView, DashboardViewModel, EndUserView
from ablelink.data.service import DashboardRepository, RemoteDataService
from ablelink.models import User
from ablelink.narration.base import SpeechSynthesizer
from ablelink.narration.loader import load_synthesizer
from ablelink.narration.queue import NarrationQueue
from ablelink.progress.aggregator import ProgressAggregator
from ablelink.surfaces.base import InteractionSurface, SurfaceContext
from ablelink.surfaces.router import ModeRouter

logger = logging.getLogger(__name__)


class DashboardSession:
    """Process-wide state and collaborators for one client.

    Args:
        service: Remote data service
        config: Dashboard configuration
        store: Key-value store for settings (file store under
            `config.storage_dir` if None)
        synthesizer: Speech backend (loaded from `config.synthesizer` if None)
        router: Surface router (the four built-in surfaces if None)
        clock: Monotonic clock for transient banners
    """

    def __init__(
        self,
        service: RemoteDataService,
        config: Optional[DashboardConfig] = None,
        *,
        store: Optional[KeyValueStore] = None,
        synthesizer: Optional[SpeechSynthesizer] = None,
        router: Optional[ModeRouter] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.config = config or DashboardConfig()
        self.root_styles = RootStyles()
        self.settings = SettingsStore(
            store or FileKeyValueStore(self.config.storage_dir),
            style_sink=self.root_styles,
        )
        self.synthesizer = synthesizer or load_synthesizer(self.config.synthesizer)
        self.narration = NarrationQueue(self.settings, self.synthesizer, self.config.narration)

        self.repository = DashboardRepository(service)
        self.aggregator = ProgressAggregator(
            self.repository,
            self.config.scoring,
            max_concurrency=self.config.max_concurrent_fetches,
        )
        self.dashboard = DashboardViewModel(self.repository, self.aggregator, self.config)
        self.router = router or ModeRouter()
        self.clock = clock

        self.surface: Optional[InteractionSurface] = None
        self._started = False

    def start(self, ambient: Optional[AmbientSignals] = None) -> None:
        """Load persisted settings, then seed from OS preferences once."""
        if self._started:
            return
        self.settings.load()
        self.settings.detect_ambient(ambient)
        self._started = True
        logger.info(f"Session started with {self.synthesizer.name} speech backend")

    async def open_surface(
        self,
        user: User,
        reference: Optional[date] = None,
    ) -> InteractionSurface:
        """Route an end user to their surface, load it and narrate it.

        Any narration from a previous surface is cancelled first.

        Raises:
            ValueError: If the user is not an end user
        """
        if not user.is_end_user:
            raise ValueError(f"User {user.id} is a {user.role.value}, not an end user")

        self.narration.cancel()
        context = SurfaceContext(
            user=user,
            dashboard=self.dashboard,
            settings=self.settings,
            narration=self.narration,
            reference_date=reference,
            clock=self.clock,
            banner_seconds=self.config.banner_seconds,
        )
        surface = self.router.select(user, context)
        await surface.load()
        surface.announce()
        self.surface = surface
        return surface

    async def refresh(
        self,
        viewer: User,
        reference: Optional[date] = None,
    ) -> Union[EndUserView, CareTeamView]:
        """Rebuild the viewer's read model; reloads the open surface too.

        An open surface for the viewer is reloaded once and its snapshot
        returned, so the surface and the caller see the same data.
        """
        surface = self.surface
        if surface is not None and surface.user.id == viewer.id:
            if reference is not None:
                surface.context.reference_date = reference
            await surface.load()
            if surface.view is not None:
                return surface.view
        return await self.dashboard.refresh(viewer, reference)

    def close(self) -> None:
        self.narration.close()
        self.surface = None
