"""
PostgreSQL driver adapter.

Wraps one ``psycopg.AsyncConnection``. The connection runs in autocommit
mode outside explicit transactions; ``begin`` switches autocommit off and
``commit``/``rollback`` restore it, so a statement issued outside a
transaction is never left pending.

Placeholders use psycopg's ``%s`` style.
"""
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import psycopg
import sqlalchemy as sa
from dbquery.adapter.base import ResultSetAdapter, register_adapter
from dbquery.types import Field, FieldType, ResultSet
from psycopg.postgres import types

if TYPE_CHECKING:
    from dbquery.options import DatabaseOptions

logger = logging.getLogger(__name__)

oid = lambda x: types.get(x).oid

postgres_field_types: dict[int, FieldType] = {}
for v in [
    oid('int2'),
    oid('int4'),
    oid('int8'),
    oid('float4'),
    oid('float8'),
    oid('numeric'),
]:
    postgres_field_types[v] = FieldType.NUMBER
for v in [
    oid('date'),
    oid('time'),
    oid('timetz'),
    oid('timestamp'),
    oid('timestamptz'),
]:
    postgres_field_types[v] = FieldType.DATE


def create_url_from_options(options: 'DatabaseOptions') -> sa.URL:
    """Convert DatabaseOptions to a libpq compatible URL.
    """
    query = {'application_name': options.appname}
    if options.timeout:
        query['connect_timeout'] = str(options.timeout)

    return sa.URL.create(
        drivername='postgresql',
        username=options.username,
        password=options.password,
        host=options.hostname,
        port=options.port,
        database=options.database,
        query=query
    )


def field_from_column(column: Any) -> Field:
    """Build a Field from a psycopg column description."""
    length = column.display_size or column.internal_size
    if length is not None and length < 0:
        length = None
    return Field(
        name=column.name,
        type=postgres_field_types.get(column.type_code, FieldType.TEXT),
        length=length,
    )


@register_adapter('postgresql')
class PostgresAdapter(ResultSetAdapter):
    """PostgreSQL adapter on top of psycopg async connections.
    """

    paramstyle = 'format'
    like_escape = ''

    def __init__(self, connection: psycopg.AsyncConnection) -> None:
        self.connection = connection

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for PostgreSQL."""
        return 'postgresql'

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for PostgreSQL connections."""
        return ['hostname', 'username', 'password', 'database', 'port']

    @classmethod
    async def connect(cls, options: 'DatabaseOptions') -> 'PostgresAdapter':
        """Open a psycopg async connection in autocommit mode.
        """
        url = create_url_from_options(options)
        connection = await psycopg.AsyncConnection.connect(
            url.render_as_string(hide_password=False), autocommit=True)
        logger.debug(f'Opened PostgreSQL connection to {options.hostname}/{options.database}')
        return cls(connection)

    async def begin(self) -> None:
        await self.connection.set_autocommit(False)
        logger.debug(f'Started transaction for connection {id(self.connection)}')

    async def commit(self) -> None:
        try:
            await self.connection.commit()
            logger.debug(f'Committed transaction for connection {id(self.connection)}')
        finally:
            await self.connection.set_autocommit(True)

    async def rollback(self) -> None:
        try:
            await self.connection.rollback()
        finally:
            await self.connection.set_autocommit(True)

    async def close(self) -> None:
        await self.connection.close()
        logger.debug(f'Closed connection {id(self.connection)}')

    async def fetch(self, sql: str, params: Sequence[Any] | None = None) -> ResultSet:
        async with self.connection.cursor() as cursor:
            await cursor.execute(sql, params or None)
            if cursor.description is None:
                return ResultSet(rowcount=cursor.rowcount)
            fields = [field_from_column(c) for c in cursor.description]
            rows = await cursor.fetchall()
            return ResultSet(fields=fields, rows=rows, rowcount=cursor.rowcount)

    async def execute(self, sql: str) -> int:
        async with self.connection.cursor() as cursor:
            await cursor.execute(sql)
            return cursor.rowcount

    async def execute_update(self, sql: str, params: Sequence[Any] | None = None) -> int:
        async with self.connection.cursor() as cursor:
            await cursor.execute(sql, params or None)
            return cursor.rowcount
