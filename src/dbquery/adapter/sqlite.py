"""
SQLite driver adapter.

Wraps one stdlib ``sqlite3`` connection and runs every call in a worker
thread through ``asyncio.to_thread`` so the event loop is never blocked.
The connection is opened with ``isolation_level=None`` (autocommit) and
transactions are started explicitly with ``BEGIN``.

SQLite has no default LIKE escape character, generated LIKE comparisons
therefore carry ``escape '\\'``.
"""
import asyncio
import logging
import sqlite3
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from dbquery.adapter.base import ResultSetAdapter, register_adapter
from dbquery.types import Field, ResultSet, field_type_for_value

if TYPE_CHECKING:
    from dbquery.options import DatabaseOptions

logger = logging.getLogger(__name__)


def fields_from_description(description: Sequence[tuple], rows: Sequence[tuple]) -> list[Field]:
    """Build Fields from a sqlite3 cursor description.

    sqlite3 reports no type codes, the type is guessed from the first
    non-null value of each column.
    """
    fields = []
    for idx, desc in enumerate(description):
        sample = next((row[idx] for row in rows if row[idx] is not None), None)
        fields.append(Field(name=desc[0], type=field_type_for_value(sample)))
    return fields


@register_adapter('sqlite')
class SQLiteAdapter(ResultSetAdapter):
    """SQLite adapter on top of the stdlib sqlite3 module.
    """

    paramstyle = 'qmark'
    like_escape = " escape '\\'"

    def __init__(self, connection: sqlite3.Connection) -> None:
        self.connection = connection

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for SQLite."""
        return 'sqlite'

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for SQLite connections."""
        return ['database']

    @classmethod
    def open(cls, database: str) -> 'SQLiteAdapter':
        """Open a sqlite3 connection usable from worker threads."""
        connection = sqlite3.connect(database, isolation_level=None,
                                     check_same_thread=False,
                                     detect_types=sqlite3.PARSE_DECLTYPES)
        logger.debug(f'Opened SQLite connection to {database}')
        return cls(connection)

    @classmethod
    async def connect(cls, options: 'DatabaseOptions') -> 'SQLiteAdapter':
        return await asyncio.to_thread(cls.open, options.database)

    async def _run(self, func, *args: Any) -> Any:
        return await asyncio.to_thread(func, *args)

    async def begin(self) -> None:
        await self._run(self.connection.execute, 'BEGIN')
        logger.debug(f'Started transaction for connection {id(self.connection)}')

    async def commit(self) -> None:
        await self._run(self.connection.commit)
        logger.debug(f'Committed transaction for connection {id(self.connection)}')

    async def rollback(self) -> None:
        await self._run(self.connection.rollback)

    async def close(self) -> None:
        await self._run(self.connection.close)
        logger.debug(f'Closed connection {id(self.connection)}')

    def _fetch(self, sql: str, params: Sequence[Any]) -> ResultSet:
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql, tuple(params))
            if cursor.description is None:
                return ResultSet(rowcount=cursor.rowcount)
            rows = cursor.fetchall()
            fields = fields_from_description(cursor.description, rows)
            return ResultSet(fields=fields, rows=rows, rowcount=cursor.rowcount)
        finally:
            cursor.close()

    def _execute(self, sql: str, params: Sequence[Any]) -> int:
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql, tuple(params))
            return cursor.rowcount
        finally:
            cursor.close()

    async def fetch(self, sql: str, params: Sequence[Any] | None = None) -> ResultSet:
        return await self._run(self._fetch, sql, params or ())

    async def execute(self, sql: str) -> int:
        return await self._run(self._execute, sql, ())

    async def execute_update(self, sql: str, params: Sequence[Any] | None = None) -> int:
        return await self._run(self._execute, sql, params or ())
