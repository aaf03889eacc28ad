"""Shared fixtures: an in-memory stand-in for the Supabase client."""

import copy
import re
import sqlite3
import uuid
from dataclasses import dataclass

import pytest
from dateutil import parser as date_parser
from postgrest.exceptions import APIError

from koperasi.storage import SessionStorage

_JOIN = re.compile(r"(\w+):(\w+)\(\*\)")


@dataclass
class FakeResponse:
    data: list
    count: int | None = None


def _comparable(value):
    if isinstance(value, str) and len(value) >= 10 and value[4:5] == "-":
        try:
            return date_parser.isoparse(value)
        except ValueError:
            return value
    return value


class FakeQuery:
    """Records filters and applies them to the fake's table on execute()."""

    def __init__(self, fake, table):
        self._fake = fake
        self._table = table
        self._op = "select"
        self._columns = "*"
        self._count = None
        self._head = False
        self._payload = None
        self._filters = []
        self._order = []
        self._limit = None
        self._range = None

    def select(self, columns="*", count=None, head=None):
        self._columns = columns
        self._count = count
        self._head = bool(head)
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

    def in_(self, column, values):
        values = list(values)
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def gte(self, column, value):
        self._filters.append(
            lambda row: row.get(column) is not None and _comparable(row.get(column)) >= _comparable(value)
        )
        return self

    def order(self, column, desc=False):
        self._order.append((column, desc))
        return self

    def limit(self, n):
        self._limit = n
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def _matching(self):
        return [row for row in self._fake.tables.setdefault(self._table, []) if all(f(row) for f in self._filters)]

    def _project(self, row):
        out = copy.deepcopy(row)
        for alias, fk in _JOIN.findall(self._columns):
            target = next((r for r in self._fake.tables.get(alias, []) if r.get("id") == row.get(fk)), None)
            out[alias] = copy.deepcopy(target)
        return out

    def execute(self):
        self._fake.executed.append((self._table, self._op))
        self._fake.raise_if_failing(self._table)
        rows = self._fake.tables.setdefault(self._table, [])

        if self._op == "insert":
            payloads = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = []
            for payload in payloads:
                row = {"id": str(uuid.uuid4()), **payload}
                rows.append(row)
                inserted.append(copy.deepcopy(row))
            return FakeResponse(data=inserted)

        matching = self._matching()
        if self._op == "update":
            for row in matching:
                row.update(self._payload)
            return FakeResponse(data=copy.deepcopy(matching))
        if self._op == "delete":
            for row in matching:
                rows.remove(row)
            return FakeResponse(data=copy.deepcopy(matching))

        for column, desc in reversed(self._order):
            matching.sort(
                key=lambda r: (r.get(column) is None, _comparable(r.get(column)) if r.get(column) is not None else 0),
                reverse=desc,
            )
        total = len(matching)
        if self._range is not None:
            start, end = self._range
            matching = matching[start:end + 1]
        if self._limit is not None:
            matching = matching[: self._limit]
        data = [] if self._head else [self._project(row) for row in matching]
        return FakeResponse(data=data, count=total if self._count else None)


class FakeRpc:
    def __init__(self, fake, name, params):
        self._fake = fake
        self._name = name
        self._params = params

    def execute(self):
        self._fake.calls.append((self._name, self._params))
        self._fake.raise_if_failing("rpc:" + self._name)
        handler = self._fake.procedures.get(self._name)
        return FakeResponse(data=handler(self._params) if handler else None)


class FakeSupabase:
    """
    Minimal in-memory Supabase client.

    Tables are lists of dicts in ``tables``. Stored procedures are callables
    registered in ``procedures``. ``fail(target)`` makes every following
    execute on a table (or ``"rpc:<name>"``) raise APIError.
    """

    def __init__(self):
        self.tables = {}
        self.procedures = {}
        self.calls = []
        self.executed = []
        self._failing = {}

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params=None):
        return FakeRpc(self, name, params or {})

    def fail(self, target, message="backend unavailable", code="PGRST000"):
        self._failing[target] = {"message": message, "code": code}

    def recover(self, target):
        self._failing.pop(target, None)

    def raise_if_failing(self, target):
        if target in self._failing:
            raise APIError(dict(self._failing[target]))

    def rpc_names(self):
        return [name for name, _ in self.calls]


@pytest.fixture
def fake_client():
    """An empty in-memory Supabase client."""
    return FakeSupabase()


@pytest.fixture
def storage():
    """Session storage backed by an in-memory SQLite database."""
    conn = sqlite3.connect(":memory:")
    store = SessionStorage(conn)
    store.create_table()
    yield store
    conn.close()
