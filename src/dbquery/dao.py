"""
Base class for data access objects.
"""
import logging
from collections.abc import Iterable, MutableMapping
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from dbquery.exceptions import OptimisticLockError
from dbquery.pagination import PaginationEngine, QuickSearchResult
from dbquery.query import COUNT_KEY, execute_count, get_count

if TYPE_CHECKING:
    from dbquery.adapter import DriverAdapter
    from dbquery.options import DatabaseOptions

T = TypeVar('T')
K = TypeVar('K', contravariant=True)


@runtime_checkable
class EntityDAO(Protocol[T, K]):
    """DAO for one entity type T keyed by K.

    Write methods return the affected row count.
    """

    async def create_new(self, cn: 'DriverAdapter', item: T) -> int: ...

    async def update(self, cn: 'DriverAdapter', item: T) -> int: ...

    async def find(self, cn: 'DriverAdapter', key: K) -> T | None: ...


@runtime_checkable
class CrudDAO(EntityDAO[T, K], Protocol[T, K]):
    """EntityDAO that can also delete."""

    async def remove(self, cn: 'DriverAdapter', item: T) -> int: ...


class CommonDAO:
    """Shared helpers for DAOs.

    DAOs are stateless: every method receives the connection it should use,
    usually from `TransactionCoordinator.execute_in_tx`.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(type(self).__name__)
        self.logger.debug(f'Created DAO {type(self).__name__}')

    @staticmethod
    def get_count(data: Any, key: str = COUNT_KEY) -> int:
        return get_count(data, key)

    async def execute_count(self, cn: 'DriverAdapter', sql: str, *args: Any,
                            key: str = COUNT_KEY) -> int:
        """Run a count query, the count column defaults to `cc`."""
        return await execute_count(cn, sql, *args, key=key)

    async def quick_search(self, cn: 'DriverAdapter', sql: str, params: Any = (),
                           page_no: int = 1, row_count: int | None = None,
                           options: 'DatabaseOptions | None' = None) -> QuickSearchResult:
        """Paginated search on raw SQL, see `PaginationEngine.quick_search`.

        row_count defaults to options.page_size, or 25 without options.
        """
        return await PaginationEngine(cn, options).quick_search(sql, params, page_no, row_count)

    @staticmethod
    def boolean_value(value: Any) -> int:
        """Store a boolean as 1/0.

        >>> CommonDAO.boolean_value(True), CommonDAO.boolean_value(None)
        (1, 0)
        """
        return 1 if value is True else 0

    @staticmethod
    def boolean_flag(value: Any) -> str:
        """Store a boolean as 'T'/'F'."""
        return 'T' if value is True else 'F'

    @staticmethod
    def convert_boolean_fields(data: MutableMapping, fields: Iterable[str]) -> None:
        """Turn 'T'/1 flag columns into booleans, in place.

        >>> row = {'active': 'T', 'deleted': 0}
        >>> CommonDAO.convert_boolean_fields(row, ['active', 'deleted'])
        >>> row
        {'active': True, 'deleted': False}
        """
        for field in fields:
            data[field] = data.get(field) in {'T', 1}

    @staticmethod
    def check_update(count: int, entity: Any, expected: int = 1) -> int:
        """Raise OptimisticLockError when an update touched fewer rows than expected.

        Use with version or timestamp guarded updates, where zero affected
        rows means another writer got there first.
        """
        if count < expected:
            raise OptimisticLockError(
                f'Expected {expected} updated rows for {type(entity).__name__}, got {count}', entity)
        return count


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
