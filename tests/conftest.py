"""
Shared fixtures for AbleLink tests.

Provides:
    - Settings stores backed by memory
    - A manually stepped mock synthesizer and a narration queue using it
    - An in-memory data service seeded with three end users
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timezone

import pytest

from ablelink.accessibility import MemoryKeyValueStore, RootStyles, SettingsStore
from ablelink.config import DashboardConfig, NarrationConfig
from ablelink.data import ALERTS, LOGS, TASKS, USERS, DashboardRepository, InMemoryDataService
from ablelink.models import (
    Alert,
    AlertKind,
    DisabilityProfile,
    Log,
    Task,
    User,
    UserRole,
)
from ablelink.narration import MockSynthesizer, NarrationQueue

TODAY = date(2024, 5, 10)
NOW = datetime(2024, 5, 10, 15, 0, tzinfo=timezone.utc)


async def settle(rounds: int = 10) -> None:
    """Let pending callbacks and tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def root_styles():
    return RootStyles()


@pytest.fixture
def settings(kv, root_styles):
    store = SettingsStore(kv, style_sink=root_styles)
    store.load()
    store.update(screen_reader_narration=True)
    return store


@pytest.fixture
def synth():
    return MockSynthesizer()


@pytest.fixture
def narration_config():
    return NarrationConfig(fragment_pause_s=0.0)


@pytest.fixture
def queue(settings, synth, narration_config):
    q = NarrationQueue(settings, synth, narration_config)
    yield q
    q.close()


@pytest.fixture
def config(tmp_path):
    return DashboardConfig(
        storage_dir=tmp_path,
        synthesizer="mock",
        narration=NarrationConfig(fragment_pause_s=0.0),
    )


def make_users() -> list[User]:
    return [
        User(
            id="u1",
            name="Ada",
            disability_profile=DisabilityProfile.COGNITIVE,
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        ),
        User(
            id="u2",
            name="Ben",
            disability_profile=DisabilityProfile.VISUAL,
            created_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
        ),
        User(
            id="u3",
            name="Cy",
            disability_profile=None,
            created_at=datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc),
        ),
        User(id="cg", name="Carol", role=UserRole.CAREGIVER),
        User(id="th", name="Theo", role=UserRole.THERAPIST),
    ]


def seed(service: InMemoryDataService) -> InMemoryDataService:
    for user in make_users():
        service.add(USERS, user)

    # u1: 3 of 5 done today, moods [4, 4] in the window
    u1_tasks = [
        ("t1", "Take medication", "9:00 AM", True),
        ("t2", "Eat breakfast", "8:00 AM", True),
        ("t3", "Go for a walk", "2:30 PM", True),
        ("t4", "Call family", "6:00 PM", False),
        ("t5", "Read a book", "", False),
    ]
    for tid, desc, when, done in u1_tasks:
        service.add(TASKS, Task(
            id=tid, user_id="u1", date=TODAY, description=desc, time=when, completed=done,
            created_at=datetime(2024, 5, 9, 20, 0, tzinfo=timezone.utc),
        ))
    service.add(TASKS, Task(id="t-old", user_id="u1", date=date(2024, 5, 9), description="Yesterday"))
    service.add(LOGS, Log(
        id="l1", user_id="u1", date=TODAY, mood=4, medications="Vitamin D", food="Toast",
        created_at=datetime(2024, 5, 10, 13, 0, tzinfo=timezone.utc),
    ))
    service.add(LOGS, Log(
        id="l2", user_id="u1", date=date(2024, 5, 8), mood=4,
        created_at=datetime(2024, 5, 8, 9, 0, tzinfo=timezone.utc),
    ))
    # Outside the 7-day window
    service.add(LOGS, Log(id="l3", user_id="u1", date=date(2024, 5, 1), mood=1))

    # u2: one pending task, no logs
    service.add(TASKS, Task(id="t6", user_id="u2", date=TODAY, description="Water plants", time="10:00 AM"))

    service.add(ALERTS, Alert(
        id="a1", user_id="u1", message="Missed lunch", kind=AlertKind.WARNING,
        triggered_at=datetime(2024, 5, 10, 12, 30, tzinfo=timezone.utc),
    ))
    service.add(ALERTS, Alert(
        id="a2", user_id="u2", message="Appointment at 3", kind=AlertKind.INFO,
        triggered_at=datetime(2024, 5, 10, 14, 0, tzinfo=timezone.utc),
    ))
    service.add(ALERTS, Alert(
        id="a3", user_id="u1", message="Old alert", resolved=True,
        triggered_at=datetime(2024, 5, 9, 8, 0, tzinfo=timezone.utc),
    ))
    return service


@pytest.fixture
def users():
    return make_users()


@pytest.fixture
def service():
    return seed(InMemoryDataService())


@pytest.fixture
def repository(service):
    return DashboardRepository(service)
