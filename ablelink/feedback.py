"""
Feedback - Non-modal notices shown to the user.

Recoverable failures (a collection that could not be fetched, a write
that was rejected) surface as notices instead of exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ablelink.errors import RemoteFetchFailure


class NoticeLevel(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_ENTITY_LABELS = {
    "tasks": "tasks",
    "logs": "health log",
    "alerts": "alerts",
    "users": "care recipients",
}


@dataclass(frozen=True)
class FeedbackNotice:
    """A user-visible, non-blocking message."""
    level: NoticeLevel
    message: str
    source: str = ""
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_failure(cls, failure: RemoteFetchFailure) -> "FeedbackNotice":
        label = _ENTITY_LABELS.get(failure.entity, failure.entity)
        if failure.operation == "update":
            message = f"Could not save changes to {label}. Please try again."
        else:
            message = f"Could not load {label}. Refresh to try again."
        return cls(NoticeLevel.WARNING, message, source=failure.entity)
