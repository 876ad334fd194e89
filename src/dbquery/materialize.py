"""
Conversion of flat result rows into nested objects.

Column names are rewritten from snake_case to camelCase and may carry a
dot-qualified path, so a column aliased ``customer.home_address.city``
becomes ``obj.customer.homeAddress.city``. Only non-null values are
assigned; a NULL column leaves the attribute absent.

Underscore edge cases follow the ``_(\\w)`` rewrite literally: a leading
underscore uppercases the first letter (``_id`` -> ``Id``), a trailing
underscore is kept (``name_`` -> ``name_``) and a doubled underscore
collapses to one (``a__b`` -> ``a_b``).
"""
import logging
import re
import threading
from collections.abc import Callable, Mapping, MutableMapping, Sequence
from typing import Any

import cachetools
from dbquery.types import Field

from libb import attrdict

logger = logging.getLogger(__name__)

PostConstructor = Callable[[Any], None]
FieldsMap = dict[int, str]

_CAMEL = re.compile(r'_(\w)')

_fields_map_cache: cachetools.LRUCache = cachetools.LRUCache(maxsize=256)
_fields_map_lock = threading.RLock()


def to_camel(name: str) -> str:
    """Convert an underscore separated name to camelCase.

    >>> to_camel('first_name')
    'firstName'
    >>> to_camel('customer.home_address')
    'customer.homeAddress'
    >>> to_camel('a__b')
    'a_b'
    """
    return _CAMEL.sub(lambda m: m.group(1).upper(), name)


def _shape_key(fields: Sequence[Field]) -> tuple[str, ...]:
    return tuple(f.name for f in fields)


@cachetools.cached(cache=_fields_map_cache, key=_shape_key, lock=_fields_map_lock)
def build_fields_map(fields: Sequence[Field]) -> FieldsMap:
    """Map column index to attribute path for one result set shape.

    The map is memoized by the tuple of column names and shared between
    callers, treat it as read-only.
    """
    fields_map = {idx: to_camel(f.name) for idx, f in enumerate(fields)}
    logger.debug(f'Built fields map for {len(fields_map)} columns')
    return fields_map


def clear_fields_map_cache() -> None:
    """Drop all memoized field maps."""
    with _fields_map_lock:
        _fields_map_cache.clear()


def resolve_mapping(fields: Sequence[Field],
                    mapping: Mapping[int | str, str]) -> FieldsMap:
    """Normalize an explicit mapping keyed by column index or column name.
    """
    positions = {f.name: idx for idx, f in enumerate(fields)}
    resolved: FieldsMap = {}
    for key, path in mapping.items():
        if isinstance(key, int):
            resolved[key] = path
        elif key in positions:
            resolved[positions[key]] = path
        else:
            logger.debug(f'Mapped column {key!r} not present in result, ignored')
    return resolved


def set_nested(obj: MutableMapping, path: str, value: Any,
               factory: Callable[[], MutableMapping] = attrdict) -> None:
    """Assign ``value`` at a dot-qualified path, creating intermediates.

    Segments are used as given, names are camelized once when the fields
    map is built. Nothing happens when value is None.
    """
    if value is None:
        return
    attrs = path.split('.')
    target = obj
    for key in attrs[:-1]:
        if target.get(key) is None:
            target[key] = factory()
        target = target[key]
    target[attrs[-1]] = value


def row_to_object(fields_map: FieldsMap, row: Sequence[Any],
                  factory: Callable[[], MutableMapping] = attrdict) -> MutableMapping:
    """Build one object from a row tuple."""
    obj = factory()
    for idx, path in fields_map.items():
        set_nested(obj, path, row[idx], factory)
    return obj


def _fields_map_for(fields: Sequence[Field],
                    mapping: Mapping[int | str, str] | None) -> FieldsMap:
    if mapping is None:
        return build_fields_map(fields)
    return resolve_mapping(fields, mapping)


def result_to_list(fields: Sequence[Field], rows: Sequence[Sequence[Any]],
                   mapping: Mapping[int | str, str] | None = None,
                   post_construct: PostConstructor | None = None,
                   factory: Callable[[], MutableMapping] = attrdict) -> list[MutableMapping]:
    """Convert row tuples to a list of nested objects.

    Args:
        fields: Ordered column descriptors of the result set
        rows: Row tuples, values in column order
        mapping: Optional explicit column -> attribute path mapping, keyed by
            column index or column name. Paths are used as given; derived
            from the camelized column names when omitted.
        post_construct: Optional callback invoked once per object, in row
            order, before the list is returned
        factory: Constructor for the produced objects and intermediates

    Returns
        List with one independent object per row
    """
    fields_map = _fields_map_for(fields, mapping)
    items = [row_to_object(fields_map, row, factory) for row in rows]
    if post_construct is not None:
        for item in items:
            post_construct(item)
    return items


def first_row_to_object(fields: Sequence[Field], rows: Sequence[Sequence[Any]],
                        mapping: Mapping[int | str, str] | None = None,
                        post_construct: PostConstructor | None = None,
                        factory: Callable[[], MutableMapping] = attrdict) -> MutableMapping | None:
    """Convert only the first row, or return None for an empty result.
    """
    if not rows:
        return None
    obj = row_to_object(_fields_map_for(fields, mapping), rows[0], factory)
    if post_construct is not None:
        post_construct(obj)
    return obj


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
