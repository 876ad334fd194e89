"""
Driver adapter interface.

Defines the abstract base class every database driver adapter must inherit
from. The core (criteria, pagination, materializer, transactions, script
loader) only talks to this interface: transaction control, raw fetch and
execute, result set extraction and the dialect LIMIT/OFFSET fragment.

All I/O methods are coroutines. An adapter instance wraps exactly one open
connection and is owned by one logical call at a time.
"""
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from dbquery.sql import limit_clause
from dbquery.types import Field, ResultSet

if TYPE_CHECKING:
    from dbquery.options import DatabaseOptions

# Registry of dialect name -> adapter class
# Defined here to avoid circular imports (concrete adapters import from base)
_ADAPTER_REGISTRY: dict[str, type['DriverAdapter']] = {}


def register_adapter(dialect: str):
    """Decorator to register an adapter class for a dialect.

    Usage:
        @register_adapter('postgresql')
        class PostgresAdapter(DriverAdapter):
            ...
    """
    def decorator(cls: type['DriverAdapter']) -> type['DriverAdapter']:
        _ADAPTER_REGISTRY[dialect] = cls
        return cls
    return decorator


class DriverAdapter(ABC):
    """Base class for database driver adapters.
    """

    #: Placeholder syntax used by SearchCriteria: 'numeric' ($N), 'format'
    #: (%s) or 'qmark' (?)
    paramstyle: str = 'numeric'

    #: Suffix appended to generated LIKE comparisons, e.g. " escape '\\'"
    like_escape: str = ''

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier (e.g., 'postgresql', 'sqlite')."""

    @abstractmethod
    async def begin(self) -> None:
        """Start a transaction on the wrapped connection."""

    @abstractmethod
    async def commit(self) -> None:
        """Commit the current transaction."""

    @abstractmethod
    async def rollback(self) -> None:
        """Roll back the current transaction."""

    @abstractmethod
    async def close(self) -> None:
        """Release the wrapped connection."""

    @abstractmethod
    async def fetch(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        """Run a query and return an opaque result.

        Args:
            sql: SQL text with positional placeholders in this adapter's
                paramstyle
            params: Positional parameter values

        Returns
            Result object understood by get_fields and get_rows
        """

    @abstractmethod
    def get_fields(self, result: Any) -> list[Field]:
        """Return ordered column descriptors of a fetch result."""

    @abstractmethod
    def get_rows(self, result: Any) -> list[tuple]:
        """Return ordered row tuples of a fetch result."""

    @abstractmethod
    async def execute(self, sql: str) -> Any:
        """Execute one raw statement without parameters.

        Used by the SQL script loader.
        """

    @abstractmethod
    async def execute_update(self, sql: str, params: Sequence[Any] | None = None) -> int:
        """Execute an insert/update/delete and return the affected row count."""

    def limit_clause(self, row_count: int, offset: int) -> str:
        """Return the trailing fragment restricting a query to one window.

        Default implementation is the LIMIT/OFFSET form shared by PostgreSQL
        and SQLite. Override for dialects with another syntax.
        """
        return limit_clause(row_count, offset)

    @classmethod
    async def connect(cls, options: 'DatabaseOptions') -> 'DriverAdapter':
        """Open a new connection described by options.

        Adapters that are constructed around an existing connection do not
        need to override this.
        """
        raise NotImplementedError(f'{cls.__name__} cannot open connections from options')

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return list of required option field names for this dialect.
        """
        return []

    @classmethod
    def validate_options(cls, options: 'DatabaseOptions') -> None:
        """Validate options for this dialect.

        Raises
            ValueError: If any required field is None or 0
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ValueError(f'field {field} cannot be None or 0')

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: BaseException | None,
                        exc_tb: Any | None) -> None:
        await self.close()


class ResultSetAdapter(DriverAdapter):
    """Partial adapter for drivers returning eager ResultSet objects.
    """

    def get_fields(self, result: ResultSet) -> list[Field]:
        return result.fields

    def get_rows(self, result: ResultSet) -> list[tuple]:
        return result.rows
