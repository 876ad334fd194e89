"""
Driver adapter factory for database-specific connections.
"""
from dbquery.adapter.base import _ADAPTER_REGISTRY
from dbquery.adapter.base import DriverAdapter as DriverAdapter
from dbquery.adapter.base import ResultSetAdapter as ResultSetAdapter
from dbquery.adapter.base import register_adapter as register_adapter
from dbquery.adapter.postgres import PostgresAdapter as PostgresAdapter
from dbquery.adapter.sqlite import SQLiteAdapter as SQLiteAdapter


def _validate_dialect(dialect: str) -> None:
    """Raise ValueError if dialect is not registered."""
    if dialect not in _ADAPTER_REGISTRY:
        available = list(_ADAPTER_REGISTRY.keys())
        raise ValueError(f'Unsupported dialect: {dialect}. Available: {available}')


def get_available_dialects() -> list[str]:
    """Return list of registered dialect names."""
    return list(_ADAPTER_REGISTRY.keys())


def is_supported_dialect(dialect: str) -> bool:
    """Check if a dialect is supported."""
    return dialect in _ADAPTER_REGISTRY


def get_adapter_class(dialect: str) -> type['DriverAdapter']:
    """Get the adapter class for a dialect without instantiating."""
    _validate_dialect(dialect)
    return _ADAPTER_REGISTRY[dialect]
