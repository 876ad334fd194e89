"""
Query operations on a driver adapter.

This module provides the row-level helpers the pagination engine and DAOs
build on. Every function takes the adapter first, like the adapter methods
it wraps, and returns materialized objects rather than raw rows.
"""
import logging
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from dbquery.materialize import PostConstructor, first_row_to_object
from dbquery.materialize import result_to_list

if TYPE_CHECKING:
    from dbquery.adapter import DriverAdapter

logger = logging.getLogger(__name__)

COUNT_KEY = 'cc'


async def fetch(cn: 'DriverAdapter', sql: str, *args: Any) -> Any:
    """Run a query through the adapter, logging SQL, arguments and timing.

    Driver errors are logged and re-raised unchanged.
    """
    start = time.time()
    logger.debug(f'SQL:\n{sql}\nargs: {args}')
    try:
        return await cn.fetch(sql, args)
    except Exception:
        logger.error(f'Error with query:\nSQL:\n{sql}\nargs: {args}')
        raise
    finally:
        logger.debug(f'Query time: {time.time() - start:.4f}s')


async def list_query(cn: 'DriverAdapter', sql: str, *args: Any,
                     post_construct: PostConstructor | None = None,
                     mapping: Mapping[int | str, str] | None = None) -> list[Any]:
    """Execute a SELECT query and return every row as a nested object.

    Args:
        cn: Driver adapter
        sql: SQL query
        *args: Query parameters
        post_construct: Optional callback applied to each object
        mapping: Optional explicit column -> attribute path mapping

    Returns
        List of objects in row order
    """
    result = await fetch(cn, sql, *args)
    items = result_to_list(cn.get_fields(result), cn.get_rows(result),
                           mapping=mapping, post_construct=post_construct)
    logger.debug(f'Query returned {len(items)} rows')
    return items


async def find(cn: 'DriverAdapter', sql: str, *args: Any,
               post_construct: PostConstructor | None = None,
               mapping: Mapping[int | str, str] | None = None) -> Any | None:
    """Execute a query and return the first row as an object, or None.

    Additional rows are ignored.
    """
    result = await fetch(cn, sql, *args)
    return first_row_to_object(cn.get_fields(result), cn.get_rows(result),
                               mapping=mapping, post_construct=post_construct)


def get_count(data: Any, key: str = COUNT_KEY) -> int:
    """Read a count value from a row object; a missing row or NULL is 0.

    >>> get_count({'cc': '12'}), get_count(None), get_count({'cc': None})
    (12, 0, 0)
    """
    value = None if data is None else data.get(key)
    return 0 if value is None else int(value)


async def execute_count(cn: 'DriverAdapter', sql: str, *args: Any,
                        key: str = COUNT_KEY) -> int:
    """Execute a count query and return the count column as int.
    """
    return get_count(await find(cn, sql, *args), key)


async def execute_update(cn: 'DriverAdapter', sql: str, *args: Any) -> int:
    """Execute an insert/update/delete and return the affected row count.
    """
    logger.debug(f'SQL:\n{sql}\nargs: {args}')
    try:
        rowcount = await cn.execute_update(sql, args)
    except Exception:
        logger.error(f'Error with update:\nSQL:\n{sql}\nargs: {args}')
        raise
    logger.debug(f'Update affected {rowcount} rows')
    return rowcount


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
