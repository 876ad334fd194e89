"""
Search criteria: dynamic WHERE clause accumulation.

A search criteria owns a base SQL fragment, an ORDER BY fragment, the list
of bound parameters and the requested page. Builder methods append a
predicate and push its value together, so the Nth parameter always belongs
to the Nth placeholder. Blank criteria are skipped: no clause, no parameter.

Subclass it per query:

    class UserCriteria(SearchCriteria):
        def __init__(self, name=None, role=None, created_from=None,
                     created_to=None, page=None, rows=None):
            super().__init__(page, rows)
            self.sql = 'select u.user_id, u.first_name from users u where 1=1'
            self.order_by = 'order by u.first_name'
            self.name = name
            ...

        def build_dynamic_query(self):
            self.add_star_criteria(self.name, 'u.first_name')
            self.add_criteria(self.role, 'u.role')
            self.add_range_criteria(self.created_from, self.created_to, 'u.created')
"""
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from dbquery.exceptions import ValidationError
from dbquery.options import DEFAULT_PAGE_SIZE
from dbquery.sql import escape_percentage, has_wildcard, make_placeholder
from dbquery.sql import replace_wildcard, wrap_like_match

if TYPE_CHECKING:
    from dbquery.adapter import DriverAdapter
    from dbquery.pagination import PaginationList

logger = logging.getLogger(__name__)

DEFAULT_ROWS_PAGE = DEFAULT_PAGE_SIZE
FIRST_PAGE = 1
DEFAULT_PARAMSTYLE = 'numeric'


def is_empty(value: Any) -> bool:
    """Check for None or a blank string.

    >>> is_empty(None), is_empty('  '), is_empty(0), is_empty('a')
    (True, True, False, False)
    """
    return value is None or (isinstance(value, str) and not value.strip())


def is_not_empty(value: Any) -> bool:
    return not is_empty(value)


def parse_number(value: Any, default: int = 0) -> int:
    """Parse a page number or size, falling back to default.

    >>> parse_number(3, 1), parse_number('4', 1), parse_number('x', 1), parse_number(None, 25)
    (3, 4, 1, 25)
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip('-').isdigit():
        return int(value)
    return default


class SearchCriteria:
    """Base class for dynamic, paginated searches.

    Placeholders follow ``paramstyle``. When left as None the criteria
    adopts the adapter's paramstyle on `prepare()`; clauses added before
    that point are rendered as ``$N``. A paramstyle that does not match
    the adapter raises ValidationError.
    """

    def __init__(self, page: Any = None, rows: Any = None,
                 paramstyle: str | None = None, like_escape: str | None = None) -> None:
        self.sql: str = ''
        self.order_by: str = ''
        self.params: list[Any] = []
        self.page = parse_number(page, FIRST_PAGE)
        self.rows = parse_number(rows, DEFAULT_ROWS_PAGE)
        self.paramstyle = paramstyle
        self.like_escape = like_escape
        self._snapshot: tuple[str, list[Any]] | None = None

    @property
    def next_index(self) -> int:
        """Index of the next placeholder, always len(params) + 1."""
        return len(self.params) + 1

    def placeholder(self) -> str:
        """Placeholder for the next parameter."""
        return make_placeholder(self.paramstyle or DEFAULT_PARAMSTYLE, self.next_index)

    def _push(self, clause: str, value: Any) -> int:
        self.sql += clause
        self.params.append(value)
        return self.next_index

    def add_criteria(self, value: Any, field: str) -> int:
        """Append ``and field = ?`` when value is not empty.

        Returns
            The next free parameter index
        """
        if is_not_empty(value):
            self._push(f' and {field} = {self.placeholder()}', value)
        return self.next_index

    def add_star_criteria(self, text: str | None, field: str) -> int:
        """Append a LIKE clause when text has `*` markers, else equality.

        Literal percent signs in text are escaped before `*` becomes `%`.
        """
        if is_not_empty(text):
            if has_wildcard(text):
                escape = self.like_escape or ''
                self._push(f' and {field} like {self.placeholder()}{escape}', replace_wildcard(text))
            else:
                self._push(f' and {field} = {self.placeholder()}', text)
        return self.next_index

    def add_like_criteria(self, text: str | None, field: str) -> int:
        """Append a contains-match LIKE clause when text is not empty.
        """
        if is_not_empty(text):
            escape = self.like_escape or ''
            self._push(f' and {field} like {self.placeholder()}{escape}',
                       wrap_like_match(escape_percentage(text)))
        return self.next_index

    def add_range_criteria(self, from_value: Any, to_value: Any, field: str) -> int:
        """Append ``field >= from_value`` and/or ``field < to_value``.

        The upper bound is exclusive; pass the next day/value for an
        inclusive range. Each bound is optional.
        """
        if is_not_empty(from_value):
            self._push(f' and {field} >= {self.placeholder()}', from_value)
        if is_not_empty(to_value):
            self._push(f' and {field} < {self.placeholder()}', to_value)
        return self.next_index

    def build_dynamic_query(self) -> None:
        """Hook for subclasses to add their clauses.

        Invoked once per `prepare()`, i.e. once per pagination call.
        """

    def get_post_constructor(self) -> Callable[[Any], None] | None:
        """Return a callback applied to every materialized row, or None.
        """
        return None

    def _apply_dialect(self, cn: 'DriverAdapter') -> None:
        if self.paramstyle is None:
            if self.params and cn.paramstyle != DEFAULT_PARAMSTYLE:
                raise ValidationError(
                    f'Clauses were added with {DEFAULT_PARAMSTYLE} placeholders before preparation, '
                    f'but {cn.dialect_name} expects {cn.paramstyle}; pass paramstyle to the criteria '
                    'or add clauses in build_dynamic_query')
            self.paramstyle = cn.paramstyle
        elif self.paramstyle != cn.paramstyle:
            raise ValidationError(f'Criteria paramstyle {self.paramstyle} differs from '
                                  f'{cn.dialect_name} paramstyle {cn.paramstyle}')
        if self.like_escape is None:
            self.like_escape = cn.like_escape

    def prepare(self, cn: 'DriverAdapter | None' = None) -> tuple[str, tuple[Any, ...]]:
        """Build the final SQL and parameters.

        The state present before the first call is kept and restored on
        every later call, then `build_dynamic_query()` runs, so preparing
        the same criteria twice yields the same SQL and parameters. The
        adapter dialect is applied on every call that passes one, including
        after an earlier call without an adapter.

        Args:
            cn: Adapter whose paramstyle and LIKE escape should be used

        Returns
            Tuple of (sql, params)
        """
        if self._snapshot is None:
            self._snapshot = (self.sql, list(self.params))
        else:
            self.sql, self.params = self._snapshot[0], list(self._snapshot[1])
        if cn is not None:
            self._apply_dialect(cn)

        self.build_dynamic_query()
        logger.debug(f'Prepared criteria {type(self).__name__}:\nSQL:\n{self.sql}\nargs: {self.params}')
        return self.sql, tuple(self.params)

    async def pagination_query(self, cn: 'DriverAdapter', page: Any = None,
                               rows: Any = None) -> 'PaginationList':
        """Run this criteria as a paginated query on cn."""
        from dbquery.pagination import PaginationEngine
        return await PaginationEngine(cn).paginate(self, page, rows)

    async def query(self, cn: 'DriverAdapter') -> list[Any]:
        """Run this criteria without paging and return every row."""
        from dbquery.pagination import PaginationEngine
        return await PaginationEngine(cn).query(self)


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
