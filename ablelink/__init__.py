"""
AbleLink - Adaptive narration and progress engine for a support dashboard.

End users get an interaction surface chosen by their disability
profile; caregivers and therapists get aggregated progress for the
people they support.

Example:
    from ablelink import DashboardSession, InMemoryDataService

    session = DashboardSession(InMemoryDataService())
    session.start()
    surface = await session.open_surface(user)
"""

from ablelink.config import DashboardConfig, NarrationConfig, ScoringPolicy
from ablelink.errors import AbleLinkError, RemoteFetchFailure, SettingsPersistFailure
from ablelink.models import (
    Alert,
    AlertKind,
    DisabilityProfile,
    Log,
    ProgressScore,
    Task,
    User,
    UserRole,
)
from ablelink.accessibility import AccessibilitySettings, SettingsStore
from ablelink.narration import NarrationQueue, load_synthesizer
from ablelink.data import DashboardRepository, InMemoryDataService
from ablelink.progress import ProgressAggregator
from ablelink.dashboard import DashboardViewModel
from ablelink.surfaces import ModeRouter
from ablelink.session import DashboardSession

__version__ = "0.1.0"

__all__ = [
    "DashboardConfig",
    "NarrationConfig",
    "ScoringPolicy",
    "AbleLinkError",
    "RemoteFetchFailure",
    "SettingsPersistFailure",
    "User",
    "UserRole",
    "DisabilityProfile",
    "Task",
    "Log",
    "Alert",
    "AlertKind",
    "ProgressScore",
    "AccessibilitySettings",
    "SettingsStore",
    "NarrationQueue",
    "load_synthesizer",
    "DashboardRepository",
    "InMemoryDataService",
    "ProgressAggregator",
    "DashboardViewModel",
    "ModeRouter",
    "DashboardSession",
]
