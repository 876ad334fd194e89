"""
Two-phase paginated queries.

A paginated query first counts the matching rows with
``select count(*) as cc from (<sql>) as subquery`` and only then fetches the
requested window with ``<sql> <order by> <limit clause>``. Both statements
bind the same parameters. No fetch is issued when nothing matches or when
the requested page lies beyond the data.

Two flavours of "more rows" exist and are intentionally different:

- `PaginationEngine.paginate` reports ``offset + rows < count``
- `PaginationEngine.quick_search` reports ``len(items) < count``

The quick search flag only detects that the fetched window holds fewer
rows than the total; it is meant for callers without a page cursor.
"""
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pandas as pd
from dbquery.criteria import FIRST_PAGE, parse_number
from dbquery.options import DEFAULT_PAGE_SIZE
from dbquery.query import execute_count, list_query
from dbquery.sql import count_sql

if TYPE_CHECKING:
    from dbquery.adapter import DriverAdapter
    from dbquery.criteria import SearchCriteria
    from dbquery.options import DatabaseOptions

logger = logging.getLogger(__name__)


def page_count(count: int, rows: int) -> int:
    """Number of pages needed for count rows.

    >>> page_count(0, 25), page_count(1, 25), page_count(25, 25), page_count(26, 25)
    (0, 1, 1, 2)
    """
    if count <= 0:
        return 0
    return (count - 1) // rows + 1


def page_offset(page: int, rows: int) -> int:
    """Offset of the first row of a 1-based page, pages below 1 clamp to 1.

    >>> page_offset(1, 25), page_offset(3, 10), page_offset(0, 10)
    (0, 20, 0)
    """
    return (max(page, FIRST_PAGE) - 1) * rows


@dataclass(frozen=True)
class PaginationList:
    """Result of one paginated query."""
    count: int = 0
    has_more: bool = False
    items: list[Any] = field(default_factory=list)
    pages: int = 0

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def to_dict(self) -> dict[str, Any]:
        """Return the result keyed the way API responses expect it."""
        return {
            'count': self.count,
            'hasMore': self.has_more,
            'list': list(self.items),
            'pages': self.pages,
        }

    def to_frame(self) -> pd.DataFrame:
        """Flatten the items into a DataFrame, nested keys become dotted columns."""
        if not self.items:
            return pd.DataFrame()
        return pd.json_normalize([dict(item) for item in self.items])


@dataclass(frozen=True)
class QuickSearchResult:
    """Result of a quick search."""
    items: list[Any] = field(default_factory=list)
    has_more: bool = False
    count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {'list': list(self.items), 'hasMore': self.has_more}


class PaginationEngine:
    """Runs paginated queries against one driver adapter.

    Examples
        engine = PaginationEngine(cn)
        page = await engine.paginate(UserCriteria(name='jo*', page=2))
        rows = await engine.quick_search('select * from users where role = ?', ['admin'])  # sqlite
    """

    def __init__(self, cn: 'DriverAdapter', options: 'DatabaseOptions | None' = None) -> None:
        self.cn = cn
        self.page_size = options.page_size if options is not None else DEFAULT_PAGE_SIZE

    async def paginate(self, criteria: 'SearchCriteria', page: Any = None,
                       rows: Any = None) -> PaginationList:
        """Execute the criteria and return one page.

        Args:
            criteria: Search criteria, prepared once by this call
            page: Page number overriding criteria.page
            rows: Page size overriding criteria.rows

        Returns
            PaginationList with count, page items, has_more and pages
        """
        sql, params = criteria.prepare(self.cn)
        count = await execute_count(self.cn, count_sql(sql), *params)
        if count == 0:
            logger.debug('No matching rows, skipping fetch')
            return PaginationList()

        rows = parse_number(rows, criteria.rows) if rows is not None else criteria.rows
        page = parse_number(page, FIRST_PAGE) if page is not None else criteria.page
        offset = page_offset(page, rows)
        has_more = offset + rows < count
        pages = page_count(count, rows)
        logger.debug(f'Matched {count} rows, reading {rows} rows from offset {offset}')

        if offset >= count:
            logger.debug(f'Offset {offset} beyond {count} matching rows, returning empty page')
            return PaginationList(count=count, has_more=has_more, items=[], pages=pages)

        list_sql = f'{sql} {criteria.order_by} {self.cn.limit_clause(rows, offset)}'
        items = await list_query(self.cn, list_sql, *params,
                                 post_construct=criteria.get_post_constructor())
        return PaginationList(count=count, has_more=has_more, items=items, pages=pages)

    async def query(self, criteria: 'SearchCriteria') -> list[Any]:
        """Execute the criteria and return every matching row, ignoring paging.
        """
        sql, params = criteria.prepare(self.cn)
        return await list_query(self.cn, f'{sql} {criteria.order_by}', *params,
                                post_construct=criteria.get_post_constructor())

    async def quick_search(self, sql: str, params: Any = (), page_no: int = FIRST_PAGE,
                           row_count: int | None = None) -> QuickSearchResult:
        """Paginate a raw query without a criteria object.

        Args:
            sql: SQL query, including any ORDER BY
            params: Positional parameters for sql
            page_no: 1-based page number, values below 1 clamp to 1
            row_count: Page size, defaults to the configured page size

        Returns
            QuickSearchResult whose has_more is ``len(items) < count``
        """
        row_count = row_count if row_count is not None else self.page_size
        offset = page_offset(page_no, row_count)
        params = tuple(params or ())
        count = await execute_count(self.cn, count_sql(sql), *params)
        if count > 0 and offset < count:
            items = await list_query(self.cn, f'{sql} {self.cn.limit_clause(row_count, offset)}', *params)
            return QuickSearchResult(items=items, has_more=len(items) < count, count=count)
        return QuickSearchResult(count=count)


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
