"""
Observability for AbleLink.

Components:
    StructuredLogger - JSON structured event logging

Example:
    from ablelink.monitoring import configure_logging

    events = configure_logging(level="debug", json_format=False)
    events.info("dashboard_refreshed", "Caregiver view rebuilt", users=3)
"""

from ablelink.monitoring.logging import (
    StructuredLogger,
    LogLevel,
    configure_logging,
    get_logger,
)

__all__ = [
    "StructuredLogger",
    "LogLevel",
    "configure_logging",
    "get_logger",
]
