"""
Result metadata types shared by adapters and the materializer.

- FieldType / Field: column descriptors of a result set
- ResultSet: eager result returned by the bundled adapters
- field_type_for_value: best-effort type guess for drivers without type codes
"""
import datetime
from dataclasses import dataclass, field
from enum import Enum
from numbers import Number
from typing import Any


class FieldType(Enum):
    """Coarse data type of a result column."""
    TEXT = 'Text'
    NUMBER = 'Number'
    DATE = 'Date'


@dataclass(frozen=True, slots=True)
class Field:
    """Column descriptor of a result set."""
    name: str
    type: FieldType = FieldType.TEXT
    length: int | None = None


@dataclass(slots=True)
class ResultSet:
    """Fully fetched result of one statement.

    The core treats results as opaque and only touches them through
    ``DriverAdapter.get_fields`` and ``DriverAdapter.get_rows``.
    """
    fields: list[Field] = field(default_factory=list)
    rows: list[tuple] = field(default_factory=list)
    rowcount: int = -1

    def __len__(self) -> int:
        return len(self.rows)


def field_type_for_value(value: Any) -> FieldType:
    """Guess a FieldType from a Python value.

    >>> field_type_for_value(3)
    <FieldType.NUMBER: 'Number'>
    >>> field_type_for_value(datetime.date(2024, 1, 1))
    <FieldType.DATE: 'Date'>
    >>> field_type_for_value('abc')
    <FieldType.TEXT: 'Text'>
    """
    if isinstance(value, bool):
        return FieldType.TEXT
    if isinstance(value, Number):
        return FieldType.NUMBER
    if isinstance(value, datetime.date | datetime.time):
        return FieldType.DATE
    return FieldType.TEXT


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
