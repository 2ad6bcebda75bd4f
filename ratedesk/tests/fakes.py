"""In-memory stand-in for the parts of the Supabase query builder the app uses."""

from __future__ import annotations

import copy
import itertools

from postgrest.exceptions import APIError

UNIQUE_KEYS = {"property_snapshots": "property_id"}


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeTableQuery:
    def __init__(self, client: "FakeSupabaseClient", table_name: str):
        self.client = client
        self.table_name = table_name
        self.filters: list = []
        self.order_by: tuple[str, bool] | None = None
        self.limit_value: int | None = None
        self.operation = "select"
        self.payload = None

    @property
    def rows(self) -> list[dict]:
        return self.client.tables.setdefault(self.table_name, [])

    def select(self, *_args, **_kwargs):
        return self

    def eq(self, field, value):
        self.filters.append(lambda row: row.get(field) == value)
        return self

    def neq(self, field, value):
        self.filters.append(lambda row: row.get(field) != value)
        return self

    def in_(self, field, values):
        self.filters.append(lambda row: row.get(field) in values)
        return self

    def is_(self, field, value):
        expected = None if value == "null" else value
        self.filters.append(lambda row: row.get(field) is expected)
        return self

    def lt(self, field, value):
        self.filters.append(lambda row: row.get(field) < value)
        return self

    def gt(self, field, value):
        self.filters.append(lambda row: row.get(field) > value)
        return self

    def gte(self, field, value):
        self.filters.append(lambda row: row.get(field) >= value)
        return self

    def lte(self, field, value):
        self.filters.append(lambda row: row.get(field) <= value)
        return self

    def order(self, field, desc=False):
        self.order_by = (field, desc)
        return self

    def limit(self, value: int):
        self.limit_value = value
        return self

    def insert(self, payload):
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.operation = "update"
        self.payload = payload
        return self

    def _matching(self) -> list[dict]:
        return [row for row in self.rows if all(predicate(row) for predicate in self.filters)]

    def execute(self):
        if self.client.fail_tables and self.table_name in self.client.fail_tables:
            raise APIError({"message": f"{self.table_name} unavailable", "code": "500"})
        if self.operation == "insert":
            return FakeResponse(self._insert())
        if self.operation == "update":
            matched = self._matching()
            for row in matched:
                row.update(copy.deepcopy(self.payload))
            return FakeResponse(copy.deepcopy(matched))

        rows = self._matching()
        if self.order_by:
            field, desc = self.order_by
            rows = sorted(rows, key=lambda row: row[field], reverse=desc)
        if self.limit_value is not None:
            rows = rows[: self.limit_value]
        return FakeResponse(copy.deepcopy(rows))

    def _insert(self) -> list[dict]:
        payload = self.payload if isinstance(self.payload, list) else [self.payload]
        unique = UNIQUE_KEYS.get(self.table_name)
        inserted = []
        for item in payload:
            row = copy.deepcopy(item)
            if unique and any(existing.get(unique) == row.get(unique) for existing in self.rows):
                raise APIError({"message": "duplicate key value", "code": "23505"})
            row.setdefault("id", next(self.client.ids))
            self.rows.append(row)
            inserted.append(copy.deepcopy(row))
        return inserted


class FakeSupabaseClient:
    def __init__(self, tables: dict[str, list[dict]] | None = None, fail_tables=None):
        self.tables = tables if tables is not None else {}
        self.fail_tables = set(fail_tables or ())
        self.ids = itertools.count(1)

    def table(self, table_name: str):
        return FakeTableQuery(self, table_name)
