"""Shared fixtures: environment defaults and an in-memory Supabase stand-in."""
import os
import copy
import re
import pytest
from datetime import datetime, timezone
from uuid import uuid4

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-jwt-tokens-minimum-64-chars-long-1234567890abcdef")

from postgrest.exceptions import APIError


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """Mimics the postgrest request builder chain over in-memory rows.

    Every chained call is recorded in ``calls`` so tests can assert on the
    exact predicates a query was built with.
    """

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.operation = "select"
        self.payload = None
        self.count_mode = None
        self.single_mode = None
        self.predicates = []
        self.order_by = None
        self.row_range = None
        self.row_limit = None
        self.calls = []
        db.queries.append(self)

    def _record(self, *call):
        self.calls.append(call)
        return self

    def select(self, columns="*", count=None):
        self.operation = "select"
        self.count_mode = count
        return self._record("select", columns, count)

    def insert(self, payload):
        self.operation = "insert"
        self.payload = payload
        return self._record("insert")

    def update(self, payload):
        self.operation = "update"
        self.payload = payload
        return self._record("update")

    def eq(self, column, value):
        self.predicates.append(lambda row: row.get(column) == value)
        return self._record("eq", column, value)

    def in_(self, column, values):
        self.predicates.append(lambda row: row.get(column) in values)
        return self._record("in_", column, list(values))

    def is_(self, column, value):
        self.predicates.append(
            lambda row: row.get(column) is None if value == "null" else row.get(column) == value
        )
        return self._record("is_", column, value)

    def gte(self, column, value):
        self.predicates.append(lambda row: (row.get(column) or "") >= value)
        return self._record("gte", column, value)

    def lte(self, column, value):
        self.predicates.append(lambda row: (row.get(column) or "") <= value)
        return self._record("lte", column, value)

    def or_(self, expression):
        clauses = []
        for part in re.findall(r'(?:[^,"]|"[^"]*")+', expression):
            field, _, pattern = part.split(".", 2)
            clauses.append((field, pattern.strip('"').strip("%").lower()))
        self.predicates.append(
            lambda row: any(term in str(row.get(field) or "").lower() for field, term in clauses)
        )
        return self._record("or_", expression)

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self._record("order", column, desc)

    def range(self, start, end):
        self.row_range = (start, end)
        return self._record("range", start, end)

    def limit(self, n):
        self.row_limit = n
        return self._record("limit", n)

    def maybe_single(self):
        self.single_mode = "maybe"
        return self._record("maybe_single")

    def single(self):
        self.single_mode = "single"
        return self._record("single")

    def _matches(self, row):
        return all(p(row) for p in self.predicates)

    def execute(self):
        self.db.executed.append((self.table, self.operation))
        self.db.executed_queries.append(self)
        failure = self.db.failures.get((self.table, self.operation))
        if failure:
            raise failure

        rows = self.db.tables.setdefault(self.table, [])

        if self.operation == "insert":
            payloads = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for payload in payloads:
                row = {"id": str(uuid4()), "created_at": _now(), **payload}
                rows.append(row)
                inserted.append(copy.deepcopy(row))
            return FakeResponse(inserted)

        if self.operation == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    updated.append(copy.deepcopy(row))
            return FakeResponse(updated)

        matched = [copy.deepcopy(r) for r in rows if self._matches(r)]
        total = len(matched)
        if self.order_by:
            column, desc = self.order_by
            matched.sort(key=lambda r: r.get(column) or "", reverse=desc)
        if self.row_range:
            start, end = self.row_range
            matched = matched[start:end + 1]
        if self.row_limit is not None:
            matched = matched[: self.row_limit]

        if self.single_mode == "maybe":
            # Current postgrest returns None instead of a response when no row matches
            return FakeResponse(matched[0]) if matched else None
        if self.single_mode == "single":
            if len(matched) != 1:
                raise APIError({"message": "JSON object requested, multiple (or no) rows returned", "code": "PGRST116"})
            return FakeResponse(matched[0])

        return FakeResponse(matched, count=total if self.count_mode else None)


class FakeSupabase:
    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.queries: list[FakeQuery] = []
        self.executed: list[tuple[str, str]] = []
        self.executed_queries: list[FakeQuery] = []
        self.failures: dict[tuple[str, str], Exception] = {}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def seed(self, table: str, *rows: dict) -> list[dict]:
        self.tables.setdefault(table, []).extend(rows)
        return list(rows)

    def fail(self, table: str, operation: str, message: str = "boom"):
        self.failures[(table, operation)] = APIError({"message": message, "code": "XX000"})

    def writes(self, table: str) -> list[str]:
        return [op for t, op in self.executed if t == table and op in ("insert", "update")]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def strategy_call(fake_db):
    """A pending call with exactly two proposed slots."""
    call = {
        "id": str(uuid4()),
        "client_id": str(uuid4()),
        "client_name": "Jane Client",
        "client_email": "jane@example.com",
        "preferred_slots": [
            {"date": "2024-01-15", "time": "14:00"},
            {"date": "2024-01-16", "time": "10:00"},
        ],
        "message": "Looking forward to it",
        "status": "pending",
        "admin_status": "pending",
        "created_at": "2024-01-10T09:00:00+00:00",
    }
    fake_db.seed("strategy_calls", call)
    return call


@pytest.fixture
def client_record(fake_db):
    client = {
        "id": str(uuid4()),
        "email": "sam@example.com",
        "full_name": "Sam Seeker",
        "role": "client",
        "onboarding_completed": False,
        "is_active": False,
        "unlocked_at": None,
        "unlocked_by": None,
    }
    fake_db.seed("registered_users", client)
    return client
