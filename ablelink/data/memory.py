"""
In-Memory Data Service - Local stand-in for the remote record store.

Implements the RemoteDataService calls over plain dicts, with optional
simulated latency and failure injection for exercising the
partial-failure paths of the aggregator and view models.

Example:
    service = InMemoryDataService()
    service.add(USERS, User(id="u1", name="Ada"))
    service.add(TASKS, Task(id="t1", user_id="u1", date=today, description="Walk"))

    # Make every task listing for u1 fail
    service.fail_on(TASKS, user_id="u1")
"""

from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass
from typing import Any, Optional

from ablelink.data.service import FilterOp, Query


@dataclass
class FailureRule:
    """Injected failure for matching calls."""
    entity: str
    operation: str = "list"
    user_id: Optional[str] = None
    record_id: Optional[str] = None
    error: Optional[Exception] = None

    def matches(
        self,
        entity: str,
        operation: str,
        user_id: Optional[str] = None,
        record_id: Optional[str] = None,
    ) -> bool:
        if self.entity != entity or self.operation != operation:
            return False
        if self.user_id is not None and self.user_id != user_id:
            return False
        if self.record_id is not None and self.record_id != record_id:
            return False
        return True


class InMemoryDataService:
    """Dict-backed implementation of RemoteDataService."""

    def __init__(self, latency_s: float = 0.0) -> None:
        self.latency_s = latency_s
        self._tables: dict[str, dict[str, dict[str, Any]]] = {}
        self._failures: list[FailureRule] = []
        self.calls: list[tuple[str, str]] = []

    def add(self, entity: str, record: Any) -> None:
        """Insert or replace a record (a dict or an object with to_dict)."""
        row = record.to_dict() if hasattr(record, "to_dict") else dict(record)
        self._tables.setdefault(entity, {})[str(row["id"])] = row

    def rows(self, entity: str) -> list[dict[str, Any]]:
        return [copy.deepcopy(r) for r in self._tables.get(entity, {}).values()]

    def fail_on(
        self,
        entity: str,
        operation: str = "list",
        *,
        user_id: Optional[str] = None,
        record_id: Optional[str] = None,
        error: Optional[Exception] = None,
    ) -> FailureRule:
        """Make matching calls raise (ConnectionError by default)."""
        rule = FailureRule(entity, operation, user_id, record_id, error)
        self._failures.append(rule)
        return rule

    def clear_failures(self) -> None:
        self._failures.clear()

    async def list(self, entity: str, query: Query) -> list[dict[str, Any]]:
        await self._suspend(entity, "list")
        self._check(entity, "list", user_id=query.value_of("user_id"))

        rows = [r for r in self._tables.get(entity, {}).values() if _matches(r, query)]
        if query.order_by is not None:
            key = query.order_by.field
            present = [r for r in rows if r.get(key) is not None]
            missing = [r for r in rows if r.get(key) is None]
            present.sort(key=lambda r: r[key], reverse=query.order_by.descending)
            rows = present + missing
        if query.limit is not None:
            rows = rows[:query.limit]
        return [copy.deepcopy(r) for r in rows]

    async def get(self, entity: str, record_id: str) -> Optional[dict[str, Any]]:
        await self._suspend(entity, "get")
        self._check(entity, "get", record_id=record_id)
        row = self._tables.get(entity, {}).get(record_id)
        return copy.deepcopy(row) if row is not None else None

    async def update(
        self,
        entity: str,
        record_id: str,
        fields: dict[str, Any],
    ) -> dict[str, Any]:
        await self._suspend(entity, "update")
        row = self._tables.get(entity, {}).get(record_id)
        self._check(
            entity,
            "update",
            user_id=row.get("user_id") if row else None,
            record_id=record_id,
        )
        if row is None:
            raise KeyError(f"No {entity} record with id {record_id}")
        row.update(fields)
        return copy.deepcopy(row)

    async def _suspend(self, entity: str, operation: str) -> None:
        self.calls.append((entity, operation))
        await asyncio.sleep(self.latency_s)

    def _check(
        self,
        entity: str,
        operation: str,
        user_id: Optional[str] = None,
        record_id: Optional[str] = None,
    ) -> None:
        for rule in self._failures:
            if rule.matches(entity, operation, user_id, record_id):
                raise rule.error or ConnectionError(
                    f"Simulated {operation} failure on {entity}"
                )


def _matches(row: dict[str, Any], query: Query) -> bool:
    for f in query.filters:
        value = row.get(f.field)
        if f.op == FilterOp.EQ:
            if value != f.value:
                return False
        elif value is None:
            return False
        elif f.op == FilterOp.GTE and not value >= f.value:
            return False
        elif f.op == FilterOp.LTE and not value <= f.value:
            return False
    return True
