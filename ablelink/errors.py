"""
AbleLink Errors - Domain-specific error types.

Error hierarchy:
    AbleLinkError (base)
    ├── RemoteFetchFailure
    └── SettingsPersistFailure

Neither error is fatal. A RemoteFetchFailure degrades the affected
collection to empty and surfaces a FeedbackNotice; a
SettingsPersistFailure leaves the in-memory settings authoritative.
A missing speech capability or disability profile is not an error.
"""

from __future__ import annotations

from typing import Any


class AbleLinkError(Exception):
    """Base error for all AbleLink errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RemoteFetchFailure(AbleLinkError):
    """
    Raised when a read or write against the remote data service fails.

    Examples:
    - Listing a user's tasks times out
    - Marking an alert resolved is rejected
    """

    def __init__(
        self,
        entity: str,
        operation: str,
        user_id: str | None = None,
        cause: BaseException | None = None,
    ):
        target = f" for user {user_id}" if user_id else ""
        reason = f": {cause}" if cause else ""
        super().__init__(
            f"Failed to {operation} {entity}{target}{reason}",
            details={"entity": entity, "operation": operation, "user_id": user_id},
        )
        self.entity = entity
        self.operation = operation
        self.user_id = user_id
        self.cause = cause


class SettingsPersistFailure(AbleLinkError):
    """Raised by a key-value store when a write cannot be completed."""

    def __init__(self, key: str, cause: BaseException | None = None):
        super().__init__(
            f"Failed to persist '{key}'" + (f": {cause}" if cause else ""),
            details={"key": key},
        )
        self.key = key
        self.cause = cause
