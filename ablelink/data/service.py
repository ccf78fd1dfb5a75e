"""
Remote Data Service - Interface to the authoritative record store.

The remote service is external; this module fixes the shape of the
calls the core makes (`list`, `get`, `update` per entity) and wraps
them in a typed repository. The repository converts any service error
into a RemoteFetchFailure so callers handle one error type. Rows that
cannot be parsed into records fail the same way, with operation "parse".

Queries used by the core:
    tasks   by (user_id, date)
    logs    by (user_id, date), single result
    logs    by (user_id, date >= X), date descending
    logs    by (user_id), created_at descending, single result
    alerts  by (user_id, resolved = false), triggered_at descending
    users   by (role), name ascending
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Protocol, runtime_checkable

from ablelink.errors import RemoteFetchFailure
from ablelink.models import Alert, Log, Task, User, UserRole

logger = logging.getLogger(__name__)

USERS = "users"
TASKS = "tasks"
LOGS = "logs"
ALERTS = "alerts"


class FilterOp(Enum):
    """Comparison applied by a filter."""
    EQ = "eq"
    GTE = "gte"
    LTE = "lte"


@dataclass(frozen=True)
class Filter:
    """One field comparison."""
    field: str
    op: FilterOp
    value: Any


@dataclass(frozen=True)
class OrderBy:
    """Sort order for a listing."""
    field: str
    descending: bool = False


@dataclass(frozen=True)
class Query:
    """Filter, order and limit for a `list` call.

    Queries are immutable; builder methods return a new query.

    Example:
        query = (
            Query()
            .where("user_id", "u1")
            .where_gte("date", date(2024, 5, 1))
            .order("date", descending=True)
        )
    """
    filters: tuple[Filter, ...] = ()
    order_by: Optional[OrderBy] = None
    limit: Optional[int] = None

    def where(self, field_name: str, value: Any) -> "Query":
        return self._add(Filter(field_name, FilterOp.EQ, _wire(value)))

    def where_gte(self, field_name: str, value: Any) -> "Query":
        return self._add(Filter(field_name, FilterOp.GTE, _wire(value)))

    def where_lte(self, field_name: str, value: Any) -> "Query":
        return self._add(Filter(field_name, FilterOp.LTE, _wire(value)))

    def order(self, field_name: str, descending: bool = False) -> "Query":
        return replace(self, order_by=OrderBy(field_name, descending))

    def take(self, limit: int) -> "Query":
        return replace(self, limit=limit)

    def value_of(self, field_name: str) -> Any:
        """Value of the first equality filter on a field, if any."""
        for f in self.filters:
            if f.field == field_name and f.op == FilterOp.EQ:
                return f.value
        return None

    def _add(self, f: Filter) -> "Query":
        return replace(self, filters=self.filters + (f,))


def _wire(value: Any) -> Any:
    """Convert a Python value to its JSON wire form."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


@runtime_checkable
class RemoteDataService(Protocol):
    """Async access to remote records, one collection per entity name."""

    async def list(self, entity: str, query: Query) -> list[dict[str, Any]]:
        ...

    async def get(self, entity: str, record_id: str) -> Optional[dict[str, Any]]:
        ...

    async def update(
        self,
        entity: str,
        record_id: str,
        fields: dict[str, Any],
    ) -> dict[str, Any]:
        ...


class DashboardRepository:
    """Typed reads and writes used by the aggregator and view models.

    Every method raises RemoteFetchFailure when the service call fails.

    Example:
        repo = DashboardRepository(service)
        tasks = await repo.tasks_for("u1", date.today())
    """

    def __init__(self, service: RemoteDataService) -> None:
        self.service = service

    async def tasks_for(self, user_id: str, day: date) -> list[Task]:
        query = Query().where("user_id", user_id).where("date", day)
        rows = await self._list(TASKS, query, user_id)
        return _parse(TASKS, user_id, Task.from_dict, rows)

    async def log_for(self, user_id: str, day: date) -> Optional[Log]:
        query = Query().where("user_id", user_id).where("date", day).take(1)
        rows = await self._list(LOGS, query, user_id)
        return _parse(LOGS, user_id, Log.from_dict, rows)[0] if rows else None

    async def logs_since(self, user_id: str, since: date) -> list[Log]:
        query = (
            Query()
            .where("user_id", user_id)
            .where_gte("date", since)
            .order("date", descending=True)
        )
        rows = await self._list(LOGS, query, user_id)
        return _parse(LOGS, user_id, Log.from_dict, rows)

    async def latest_log(self, user_id: str) -> Optional[Log]:
        """Most recently created log, however old."""
        query = (
            Query()
            .where("user_id", user_id)
            .order("created_at", descending=True)
            .take(1)
        )
        rows = await self._list(LOGS, query, user_id)
        return _parse(LOGS, user_id, Log.from_dict, rows)[0] if rows else None

    async def active_alerts(self, user_id: str) -> list[Alert]:
        query = (
            Query()
            .where("user_id", user_id)
            .where("resolved", False)
            .order("triggered_at", descending=True)
        )
        rows = await self._list(ALERTS, query, user_id)
        return _parse(ALERTS, user_id, Alert.from_dict, rows)

    async def users_by_role(self, role: UserRole) -> list[User]:
        query = Query().where("role", role).order("name")
        rows = await self._list(USERS, query, None)
        return _parse(USERS, None, User.from_dict, rows)

    async def get_user(self, user_id: str) -> Optional[User]:
        try:
            row = await self.service.get(USERS, user_id)
        except Exception as e:
            raise RemoteFetchFailure(USERS, "get", user_id, e) from e
        return _parse(USERS, user_id, User.from_dict, [row])[0] if row else None

    async def set_task_completed(self, task_id: str, completed: bool) -> Task:
        row = await self._update(TASKS, task_id, {"completed": completed})
        return _parse(TASKS, None, Task.from_dict, [row])[0]

    async def resolve_alert(self, alert_id: str) -> Alert:
        row = await self._update(ALERTS, alert_id, {"resolved": True})
        return _parse(ALERTS, None, Alert.from_dict, [row])[0]

    async def _list(
        self,
        entity: str,
        query: Query,
        user_id: Optional[str],
    ) -> list[dict[str, Any]]:
        try:
            return await self.service.list(entity, query)
        except Exception as e:
            raise RemoteFetchFailure(entity, "list", user_id, e) from e

    async def _update(
        self,
        entity: str,
        record_id: str,
        fields: dict[str, Any],
    ) -> dict[str, Any]:
        try:
            return await self.service.update(entity, record_id, fields)
        except Exception as e:
            raise RemoteFetchFailure(entity, "update", None, e) from e


def _parse(entity: str, user_id: Optional[str], parse, rows: list[dict[str, Any]]) -> list:
    # A malformed row fails the whole read, like a transport error
    try:
        return [parse(row) for row in rows]
    except (KeyError, TypeError, ValueError) as e:
        raise RemoteFetchFailure(entity, "parse", user_id, e) from e
