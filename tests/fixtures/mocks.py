"""
Fake driver adapter for database tests.

Provides an in-memory adapter that records every call and replays scripted
results, so criteria, pagination, materialization and transaction handling
can be tested without a real database.

Usage:
    def test_paginate(fake_adapter):
        fake_adapter.push_result(['cc'], [(3,)])
        fake_adapter.push_result(['user_id', 'first_name'], [(1, 'Jo')])
"""
import pytest
from dbquery.adapter import ResultSetAdapter
from dbquery.types import Field, ResultSet, field_type_for_value


def make_result(columns, rows):
    """Build a ResultSet from column names and row tuples."""
    fields = []
    for idx, name in enumerate(columns):
        sample = rows[0][idx] if rows else None
        fields.append(Field(name=name, type=field_type_for_value(sample)))
    return ResultSet(fields=fields, rows=[tuple(row) for row in rows], rowcount=len(rows))


class FakeAdapter(ResultSetAdapter):
    """Adapter double that records calls and replays queued results.

    Each `fetch` pops the next queued result; an exhausted queue returns an
    empty result. Failures can be scripted per method through `fail_on`.
    """

    def __init__(self, paramstyle='numeric', like_escape=''):
        self.paramstyle = paramstyle
        self.like_escape = like_escape
        self.calls = []
        self.fetches = []
        self.updates = []
        self.statements = []
        self.results = []
        self.fail_on = {}
        self.update_count = 1

    @property
    def dialect_name(self):
        return 'fake'

    def push_result(self, columns, rows):
        self.results.append(make_result(columns, rows))

    def push_count(self, count):
        self.push_result(['cc'], [(count,)])

    def count(self, name):
        return self.calls.count(name)

    def _record(self, name):
        self.calls.append(name)
        if name in self.fail_on:
            raise self.fail_on[name]

    async def begin(self):
        self._record('begin')

    async def commit(self):
        self._record('commit')

    async def rollback(self):
        self._record('rollback')

    async def close(self):
        self._record('close')

    async def fetch(self, sql, params=None):
        self.fetches.append((sql, tuple(params or ())))
        self._record('fetch')
        if self.results:
            return self.results.pop(0)
        return ResultSet()

    async def execute(self, sql):
        self.statements.append(sql)
        self._record('execute')
        fail = self.fail_on.get('execute_sql')
        if fail is not None and fail[0] in sql:
            raise fail[1]
        return 0

    async def execute_update(self, sql, params=None):
        self.updates.append((sql, tuple(params or ())))
        self._record('execute_update')
        return self.update_count


class FakeFactory:
    """Connection source handing out FakeAdapter instances."""

    def __init__(self, adapter=None, error=None):
        self.adapter = adapter or FakeAdapter()
        self.error = error
        self.acquired = 0

    async def acquire(self):
        self.acquired += 1
        if self.error is not None:
            raise self.error
        return self.adapter


@pytest.fixture
def fake_adapter():
    """Fresh FakeAdapter using $N placeholders."""
    return FakeAdapter()


@pytest.fixture
def fake_factory(fake_adapter):
    """FakeFactory always handing out the `fake_adapter` fixture."""
    return FakeFactory(fake_adapter)
