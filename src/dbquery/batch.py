"""
Batch records for partial-success processing.

A batch is a list of records, each wrapping one unit of input with its
record number (usually the source line number). Runners process every
record independently and store a failure on the record instead of
aborting the whole batch.
"""
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class BatchRecord(Generic[T]):
    """One unit of batch input."""
    rec_no: int
    data: T
    error: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None


BatchRecords = list[BatchRecord[T]]


def make_batch(items: Iterable[T], start: int = 1) -> BatchRecords:
    """Wrap items into records numbered from start.

    >>> [r.rec_no for r in make_batch('abc')]
    [1, 2, 3]
    """
    return [BatchRecord(rec_no=idx, data=item) for idx, item in enumerate(items, start)]


def record_failure(record: BatchRecord, exc: BaseException) -> None:
    """Store a processing failure on the record and log it."""
    record.error = exc
    logger.error(f'Record {record.rec_no} failed: {exc}')


def failed_records(records: Iterable[BatchRecord]) -> BatchRecords:
    """Return the records that carry an error."""
    return [record for record in records if not record.ok]


async def run_batch(records: Iterable[BatchRecord[T]],
                    func: Callable[[T], Awaitable[Any]]) -> bool:
    """Await ``func(record.data)`` for every record, in order.

    Returns
        True if at least one record failed
    """
    has_error = False
    for record in records:
        try:
            await func(record.data)
        except Exception as exc:
            record_failure(record, exc)
            has_error = True
    return has_error


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
