"""
Connection acquisition.

This module provides:
1. The `connect()` coroutine opening a driver adapter from options
2. The `ConnectionFactory` class handed to the transaction coordinator

There is no process-wide manager: callers build a factory from options and
pass it explicitly to whatever needs connections.
"""
import logging
from dataclasses import fields
from typing import Any

from dbquery.adapter import DriverAdapter, get_adapter_class
from dbquery.options import DatabaseOptions

from libb import load_options

__all__ = [
    'connect',
    'ConnectionFactory',
]

logger = logging.getLogger(__name__)


def _resolve_options(options: DatabaseOptions | dict[str, Any] | str,
                     config: Any | None = None, **kw: Any) -> DatabaseOptions:
    if isinstance(options, DatabaseOptions):
        for field in fields(options):
            kw.pop(field.name, None)
        return options
    options_func = load_options(cls=DatabaseOptions)(lambda o, c: o)
    return options_func(options, config, **kw)


async def connect(options: DatabaseOptions | dict[str, Any] | str,
                  config: Any | None = None, **kw: Any) -> DriverAdapter:
    """Open a connection and return the adapter wrapping it.

    Args:
        options: Can be:
                - DatabaseOptions object
                - String path to configuration
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        Connected DriverAdapter for the configured dialect
    """
    options = _resolve_options(options, config, **kw)
    adapter_cls = get_adapter_class(options.drivername)
    return await adapter_cls.connect(options)


class ConnectionFactory:
    """Opens a fresh adapter per acquisition.

    Each call to `acquire()` returns a new, independent connection; nothing
    is shared between acquisitions.
    """

    def __init__(self, options: DatabaseOptions | dict[str, Any] | str,
                 config: Any | None = None, **kw: Any) -> None:
        self.options = _resolve_options(options, config, **kw)

    async def acquire(self) -> DriverAdapter:
        logger.debug(f'Acquiring {self.options.drivername} connection')
        return await connect(self.options)
