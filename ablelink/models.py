"""
Core records - Users, Tasks, Logs, Alerts and derived progress.

Records are plain dataclasses mirroring the rows served by the remote
data service. `from_dict` accepts the service's JSON shape (ISO date
and timestamp strings, snake_case keys); `to_dict` produces it.

Mutability rules:
    Task    - only `completed` changes after creation
    Log     - one per (user, date); updated in place, never deleted
    Alert   - only `resolved` changes; resolved alerts are kept
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import date, datetime, time
from enum import Enum
from typing import Any


class UserRole(Enum):
    """Role of a signed-in account."""
    END_USER = "user"
    CAREGIVER = "caregiver"
    THERAPIST = "therapist"


class DisabilityProfile(Enum):
    """Declared interaction-mode category for an end user."""
    COGNITIVE = "cognitive"
    VISUAL = "visual"
    HEARING = "hearing"
    PHYSICAL = "physical"


class AlertKind(Enum):
    """Severity of an alert."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


def parse_date(value: date | str) -> date:
    """Parse an ISO date (or the date part of an ISO timestamp)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def parse_timestamp(value: datetime | str | None) -> datetime | None:
    """Parse an ISO timestamp, accepting a trailing 'Z' for UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass
class User:
    """An account on the dashboard.

    Attributes:
        id: Stable identifier
        name: Display name
        role: Account role
        disability_profile: Interaction profile, None until the user picks one
        email: Contact address
        created_at: Account creation time
    """
    id: str
    name: str
    role: UserRole = UserRole.END_USER
    disability_profile: DisabilityProfile | None = None
    email: str = ""
    created_at: datetime | None = None

    @property
    def is_end_user(self) -> bool:
        return self.role == UserRole.END_USER

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "disability_type": self.disability_profile.value if self.disability_profile else None,
            "created_at": _iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        profile = data.get("disability_type") or data.get("disability_profile")
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            role=UserRole(data.get("role", UserRole.END_USER.value)),
            disability_profile=DisabilityProfile(profile) if profile else None,
            email=data.get("email", ""),
            created_at=parse_timestamp(data.get("created_at")),
        )


@dataclass
class Task:
    """A scheduled activity for one user on one calendar date."""
    id: str
    user_id: str
    date: date
    description: str
    time: str = ""
    icon: str = ""
    completed: bool = False
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": self.date.isoformat(),
            "time": self.time,
            "description": self.description,
            "icon": self.icon,
            "completed": self.completed,
            "created_at": _iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            date=parse_date(data["date"]),
            description=data.get("description", ""),
            time=data.get("time", "") or "",
            icon=data.get("icon", "") or "",
            completed=bool(data.get("completed", False)),
            created_at=parse_timestamp(data.get("created_at")),
        )


@dataclass
class Log:
    """Daily health log for one user.

    A mood of 0 or None means the mood was not logged that day.
    """
    id: str
    user_id: str
    date: date
    mood: int | None = None
    medications: str = ""
    food: str = ""
    notes: str = ""
    created_at: datetime | None = None

    def __post_init__(self):
        if self.mood is not None and not 0 <= self.mood <= 5:
            raise ValueError(f"Mood must be 0-5, got {self.mood}")

    @property
    def has_mood(self) -> bool:
        return self.mood is not None and self.mood > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": self.date.isoformat(),
            "mood": self.mood,
            "medications": self.medications,
            "food": self.food,
            "notes": self.notes,
            "created_at": _iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Log":
        mood = data.get("mood")
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            date=parse_date(data["date"]),
            mood=int(mood) if mood is not None else None,
            medications=data.get("medications", "") or "",
            food=data.get("food", "") or "",
            notes=data.get("notes", "") or "",
            created_at=parse_timestamp(data.get("created_at")),
        )


@dataclass
class Alert:
    """A notification raised for one user."""
    id: str
    user_id: str
    message: str
    kind: AlertKind = AlertKind.INFO
    triggered_at: datetime | None = None
    resolved: bool = False

    @property
    def is_active(self) -> bool:
        return not self.resolved

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "message": self.message,
            "type": self.kind.value,
            "triggered_at": _iso(self.triggered_at),
            "resolved": self.resolved,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Alert":
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            message=data.get("message", ""),
            kind=AlertKind(data.get("type", data.get("kind", AlertKind.INFO.value))),
            triggered_at=parse_timestamp(data.get("triggered_at")),
            resolved=bool(data.get("resolved", False)),
        )


@dataclass
class ProgressScore:
    """Derived per-user progress. Rebuilt on every aggregation pass.

    Attributes:
        user_id: User the score belongs to
        tasks_completed: Completed tasks on the reference date
        tasks_total: All tasks on the reference date
        average_recent_mood: Mean logged mood over the trailing window (0 if none)
        composite_score: Blend of completion rate and mood, 0-100
        no_mood_data: True when no log in the window carried a mood
        failed: True when one of the user's collections could not be fetched
        errors: Descriptions of the fetch failures, if any
    """
    user_id: str
    tasks_completed: int = 0
    tasks_total: int = 0
    average_recent_mood: float = 0.0
    composite_score: int = 0
    no_mood_data: bool = True
    failed: bool = False
    errors: list[str] = field(default_factory=list)

    @property
    def task_completion_rate(self) -> float:
        """Completion as a fraction, 0 when there are no tasks."""
        if self.tasks_total <= 0:
            return 0.0
        return self.tasks_completed / self.tasks_total

    @property
    def tasks_pending(self) -> int:
        return max(self.tasks_total - self.tasks_completed, 0)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


_TIME_FORMATS = ("%I:%M %p", "%I %p", "%I:%M%p", "%I%p", "%H:%M", "%H:%M:%S")


def parse_time_of_day(text: str) -> time | None:
    """Parse a task time such as '9:00 AM', '2 pm' or '14:30'."""
    cleaned = " ".join(text.strip().upper().split())
    if not cleaned:
        return None
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).time()
        except ValueError:
            continue
    return None


def by_time_of_day(tasks: list[Task], descending: bool = False) -> list[Task]:
    """Tasks ordered by time of day; unparseable times go last, stable."""
    timed = [t for t in tasks if parse_time_of_day(t.time) is not None]
    untimed = [t for t in tasks if parse_time_of_day(t.time) is None]
    timed.sort(key=lambda t: parse_time_of_day(t.time), reverse=descending)
    return timed + untimed


MOOD_LABELS = ("Not logged", "Very low", "Low", "Okay", "Good", "Great")


def mood_label(mood: float | None) -> str:
    """Word for a mood value; averages are rounded half-up first."""
    if mood is None or mood <= 0:
        return MOOD_LABELS[0]
    index = int(mood + 0.5)
    return MOOD_LABELS[min(index, len(MOOD_LABELS) - 1)]
