"""
Data access for AbleLink.

Modules:
    service     - RemoteDataService protocol, Query builder, DashboardRepository
    memory      - InMemoryDataService with latency and failure injection
"""

from ablelink.data.service import (
    RemoteDataService,
    DashboardRepository,
    Query,
    Filter,
    FilterOp,
    OrderBy,
    USERS,
    TASKS,
    LOGS,
    ALERTS,
)
from ablelink.data.memory import InMemoryDataService, FailureRule

__all__ = [
    "RemoteDataService",
    "DashboardRepository",
    "Query",
    "Filter",
    "FilterOp",
    "OrderBy",
    "USERS",
    "TASKS",
    "LOGS",
    "ALERTS",
    "InMemoryDataService",
    "FailureRule",
]
