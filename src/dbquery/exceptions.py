"""
Database-specific exception classes.
"""
import sqlite3
from typing import Any

import psycopg


class DatabaseError(Exception):
    """Base class for all dbquery errors.
    """


class ConnectionFailure(DatabaseError):
    """Error establishing or maintaining database connection.
    """


class QueryError(DatabaseError):
    """Error in query syntax or execution.
    """


class IntegrityViolationError(DatabaseError):
    """Database constraint violation error.
    """


class ValidationError(DatabaseError):
    """Error in input validation.
    """


class OptimisticLockError(DatabaseError):
    """Concurrent update conflict.

    Raised by update operations when the expected row count check fails,
    i.e. another writer changed or removed the row first. The conflicting
    entity is kept on the exception so callers can reload or report it.
    """

    def __init__(self, message: str, entity: Any = None) -> None:
        super().__init__(message)
        self._entity = entity

    @property
    def entity(self) -> Any:
        """The entity whose update conflicted."""
        return self._entity


DbConnectionError = (
    psycopg.OperationalError,
    psycopg.InterfaceError,
    sqlite3.OperationalError,
    sqlite3.InterfaceError,
    ConnectionFailure,
    )

IntegrityError = (
    psycopg.IntegrityError,
    sqlite3.IntegrityError,
    IntegrityViolationError,
    )

ProgrammingError = (
    psycopg.ProgrammingError,
    psycopg.DatabaseError,
    sqlite3.ProgrammingError,
    sqlite3.DatabaseError,
    QueryError,
    )

OperationalError = (
    psycopg.OperationalError,
    sqlite3.OperationalError,
    )
