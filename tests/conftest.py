"""Shared fixtures: in-memory Supabase query builder and recording collaborators."""

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import pytest

from studyhub.services.study_timer import ManualScheduler, StudyTimer


BASE_TIME = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


# ---- Fake Supabase ----

def _parse(value):
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value


class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]], count: Optional[int] = None):
        self.data = data
        self.count = count


class FakeTable:
    def __init__(self):
        self.rows: List[Dict[str, Any]] = []
        self.next_id = 1
        self.error: Optional[Exception] = None


class FakeQuery:
    """Subset of the postgrest builder used by the repositories."""

    def __init__(self, table: FakeTable):
        self._table = table
        self._op = "select"
        self._payload: Any = None
        self._filters: List[Callable[[Dict[str, Any]], bool]] = []
        self._order: Optional[tuple] = None
        self._limit: Optional[int] = None
        self._count: Optional[str] = None

    def select(self, columns: str = "*", count: Optional[str] = None):
        self._op = "select"
        self._count = count
        return self

    def insert(self, payload):
        self._op = "insert"
        self._payload = payload
        return self

    def update(self, payload):
        self._op = "update"
        self._payload = payload
        return self

    def delete(self):
        self._op = "delete"
        return self

    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def gte(self, column, value):
        self._filters.append(lambda row: row.get(column) is not None and _parse(row[column]) >= _parse(value))
        return self

    def lt(self, column, value):
        self._filters.append(lambda row: row.get(column) is not None and _parse(row[column]) < _parse(value))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def _matching(self) -> List[Dict[str, Any]]:
        return [row for row in self._table.rows if all(f(row) for f in self._filters)]

    def execute(self) -> FakeResponse:
        if self._table.error is not None:
            raise self._table.error

        if self._op == "insert":
            payloads = self._payload if isinstance(self._payload, list) else [self._payload]
            created = []
            for payload in payloads:
                row = dict(payload)
                row["id"] = self._table.next_id
                row.setdefault("created_at", BASE_TIME.isoformat())
                self._table.next_id += 1
                self._table.rows.append(row)
                created.append(dict(row))
            return FakeResponse(created)

        rows = self._matching()

        if self._op == "update":
            for row in rows:
                row.update(self._payload)
            return FakeResponse([dict(row) for row in rows])

        if self._op == "delete":
            for row in rows:
                self._table.rows.remove(row)
            return FakeResponse([dict(row) for row in rows])

        if self._order:
            column, desc = self._order
            rows = sorted(rows, key=lambda row: _parse(row.get(column)), reverse=desc)
        count = len(rows) if self._count else None
        if self._limit:
            rows = rows[: self._limit]
        return FakeResponse([dict(row) for row in rows], count=count)


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, FakeTable] = defaultdict(FakeTable)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self.tables[name])


@pytest.fixture
def supabase_client() -> FakeSupabase:
    return FakeSupabase()


# ---- Recording collaborators ----

class RecordingGateway:
    def __init__(self, error: Optional[Exception] = None):
        self.calls: List[Dict[str, Any]] = []
        self.error = error

    async def record_completed_session(self, user_id, duration_minutes, started_at, completed_at):
        self.calls.append({
            "user_id": user_id,
            "duration_minutes": duration_minutes,
            "started_at": started_at,
            "completed_at": completed_at,
        })
        if self.error is not None:
            raise self.error


class RecordingDispatcher:
    def __init__(self):
        self.phases = []

    async def notify_phase_complete(self, phase):
        self.phases.append(phase)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def timer(scheduler, gateway, dispatcher) -> StudyTimer:
    """Timer on a virtual clock: wall time follows the scheduler's clock."""
    t = StudyTimer(
        "user-1",
        scheduler,
        gateway=gateway,
        dispatcher=dispatcher,
        clock=lambda: BASE_TIME + timedelta(milliseconds=scheduler.now_ms),
    )
    yield t
    t.dispose()
