"""
Driver-agnostic async query layer for PostgreSQL and SQLite.

- Search criteria build parameterized WHERE clauses from optional filters
- The pagination engine runs a count query, then fetches one page
- Rows are materialized into nested objects with camelCase keys
- The transaction coordinator scopes a connection to one unit of work
- SQL scripts are split and executed statement by statement

Query helpers can be called either as:
- Module functions: await db.list_query(cn, sql, *args)
- Engine methods: await PaginationEngine(cn).paginate(criteria)
"""
__version__ = '0.1.0'

from typing import Any

from dbquery.adapter import DriverAdapter, PostgresAdapter, SQLiteAdapter
from dbquery.adapter import register_adapter
from dbquery.batch import BatchRecord, failed_records, make_batch, run_batch
from dbquery.connection import ConnectionFactory, connect
from dbquery.criteria import SearchCriteria
from dbquery.dao import CommonDAO, CrudDAO, EntityDAO
from dbquery.exceptions import ConnectionFailure, DatabaseError, DbConnectionError
from dbquery.exceptions import IntegrityError, IntegrityViolationError
from dbquery.exceptions import OperationalError, OptimisticLockError
from dbquery.exceptions import ProgrammingError, QueryError, ValidationError
from dbquery.materialize import result_to_list, to_camel
from dbquery.options import DatabaseOptions
from dbquery.pagination import PaginationEngine, PaginationList
from dbquery.pagination import QuickSearchResult
from dbquery.query import execute_count, execute_update, find, list_query
from dbquery.script import execute_sql_file, execute_sql_script, split_sql
from dbquery.transaction import TransactionCoordinator
from dbquery.types import Field, FieldType, ResultSet


async def paginate(cn: DriverAdapter, criteria: SearchCriteria, page: Any = None,
                   rows: Any = None) -> PaginationList:
    """Execute a search criteria and return one page of results.
    """
    return await PaginationEngine(cn).paginate(criteria, page, rows)


async def query_by_criteria(cn: DriverAdapter, criteria: SearchCriteria) -> list[Any]:
    """Execute a search criteria and return all matching rows, ignoring paging.
    """
    return await PaginationEngine(cn).query(criteria)


async def quick_search(cn: DriverAdapter, sql: str, params: Any = (), page_no: int = 1,
                       row_count: int | None = None) -> QuickSearchResult:
    """Paginate a raw query without a criteria object.
    """
    return await PaginationEngine(cn).quick_search(sql, params, page_no, row_count)


__all__ = [
    'connect',
    'ConnectionFactory',
    'DatabaseOptions',
    'DriverAdapter',
    'PostgresAdapter',
    'SQLiteAdapter',
    'register_adapter',
    'SearchCriteria',
    'PaginationEngine',
    'PaginationList',
    'QuickSearchResult',
    'TransactionCoordinator',
    'CommonDAO',
    'EntityDAO',
    'CrudDAO',
    'BatchRecord',
    'make_batch',
    'run_batch',
    'failed_records',
    'paginate',
    'query_by_criteria',
    'quick_search',
    'list_query',
    'find',
    'execute_count',
    'execute_update',
    'execute_sql_script',
    'execute_sql_file',
    'split_sql',
    'result_to_list',
    'to_camel',
    'Field',
    'FieldType',
    'ResultSet',
    'DatabaseError',
    'ConnectionFailure',
    'QueryError',
    'ValidationError',
    'IntegrityViolationError',
    'OptimisticLockError',
    'DbConnectionError',
    'IntegrityError',
    'ProgrammingError',
    'OperationalError',
]
