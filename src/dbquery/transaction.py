"""
Transaction handling for units of work.

The coordinator acquires one connection per call from a factory, runs the
caller's coroutine with it and always releases it afterwards:

- transactional: begin, work, commit; any failure rolls back and the
  original error propagates
- non-transactional: work only, no begin/commit/rollback

Rollback and release failures are logged and never replace the error
raised by the work.
"""
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from dbquery.batch import BatchRecord, record_failure

if TYPE_CHECKING:
    from dbquery.adapter import DriverAdapter

logger = logging.getLogger(__name__)

T = TypeVar('T')

Work = Callable[..., Awaitable[T]]


class ConnectionSource(Protocol):
    """Anything that hands out a fresh adapter per call."""

    async def acquire(self) -> 'DriverAdapter': ...


async def _release(cn: 'DriverAdapter') -> None:
    try:
        await cn.close()
        logger.debug(f'Released connection {id(cn)}')
    except Exception:
        logger.exception(f'Error releasing connection {id(cn)}')


async def _rollback(cn: 'DriverAdapter') -> None:
    logger.warning('Rolling back the current transaction')
    try:
        await cn.rollback()
    except Exception:
        logger.exception(f'Rollback failed for connection {id(cn)}')


class TransactionCoordinator:
    """Runs units of work with a scoped connection.

    Examples
        coordinator = TransactionCoordinator(ConnectionFactory(options))

        async def transfer(cn, source, target, amount):
            await execute_update(cn, 'update account set balance = balance - %s where id = %s', amount, source)
            await execute_update(cn, 'update account set balance = balance + %s where id = %s', amount, target)

        await coordinator.execute_in_tx(transfer, 'a', 'b', 10)

        async with coordinator.transaction() as cn:
            await execute_update(cn, 'delete from ...')
    """

    def __init__(self, factory: ConnectionSource) -> None:
        self.factory = factory

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator['DriverAdapter']:
        """Yield a connection inside a transaction.

        Commits on normal exit, rolls back on any exception and re-raises
        it. The connection is released exactly once in every case.
        """
        cn = await self.factory.acquire()
        try:
            try:
                await cn.begin()
                logger.debug(f'Started transaction for connection {id(cn)}')
                yield cn
                await cn.commit()
                logger.debug(f'Committed transaction for connection {id(cn)}')
            except BaseException:
                await _rollback(cn)
                raise
        finally:
            await _release(cn)

    @asynccontextmanager
    async def connection(self) -> AsyncIterator['DriverAdapter']:
        """Yield a connection without a transaction, released on exit."""
        cn = await self.factory.acquire()
        try:
            yield cn
        finally:
            await _release(cn)

    async def execute_in_tx(self, work: Work[T], *args: Any, **kwargs: Any) -> T:
        """Run ``work(cn, *args, **kwargs)`` in a transaction and return its result.
        """
        async with self.transaction() as cn:
            return await work(cn, *args, **kwargs)

    async def execute_non_tx(self, work: Work[T], *args: Any, **kwargs: Any) -> T:
        """Run ``work(cn, *args, **kwargs)`` without a transaction.
        """
        async with self.connection() as cn:
            return await work(cn, *args, **kwargs)

    async def execute_batch(self, records: Iterable[BatchRecord],
                            work: Callable[['DriverAdapter', Any], Awaitable[Any]]) -> bool:
        """Run ``work(cn, record.data)`` for each record in its own transaction.

        A failing record is rolled back alone, its error stored on the
        record, and the batch continues.

        Returns
            True if at least one record failed
        """
        has_error = False
        for record in records:
            try:
                await self.execute_in_tx(work, record.data)
            except Exception as exc:
                record_failure(record, exc)
                has_error = True
        return has_error
