"""
SQL text helpers used when building dynamic queries.

- `make_placeholder()` - Positional placeholder for a paramstyle
- `escape_percentage()` / `replace_wildcard()` - LIKE value rewriting
- `count_sql()` - Wrap a query into a row count query
- `limit_clause()` - Default LIMIT/OFFSET fragment
"""
import re

WILDCARD = '*'
LIKE_WILDCARD = '%'

_PERCENT = re.compile(r'%')
_STAR = re.compile(r'\*')

PARAMSTYLES = {
    'numeric': lambda idx: f'${idx}',
    'format': lambda idx: '%s',
    'qmark': lambda idx: '?',
}


def make_placeholder(paramstyle: str, index: int) -> str:
    """Return the positional placeholder for the 1-based parameter index.

    >>> make_placeholder('numeric', 3)
    '$3'
    >>> make_placeholder('format', 3)
    '%s'
    >>> make_placeholder('qmark', 1)
    '?'
    """
    try:
        return PARAMSTYLES[paramstyle](index)
    except KeyError:
        raise ValueError(f'Unknown paramstyle: {paramstyle}. Available: {list(PARAMSTYLES)}') from None


def escape_percentage(s: str) -> str:
    r"""Escape literal percent signs for use inside a LIKE pattern.

    >>> escape_percentage('100%')
    '100\\%'
    """
    return _PERCENT.sub(r'\\%', s)


def has_wildcard(s: str) -> bool:
    """Check if the text carries the user wildcard marker."""
    return WILDCARD in s


def to_wild_sql(s: str) -> str:
    """Convert every wildcard marker to the LIKE wildcard.

    >>> to_wild_sql('ab*c*')
    'ab%c%'
    """
    return _STAR.sub(LIKE_WILDCARD, s)


def replace_wildcard(s: str) -> str:
    r"""Turn user text with `*` markers into a LIKE pattern.

    Existing percent signs are escaped first, then the markers are
    converted, so a literal `%` typed by the user stays literal.

    >>> replace_wildcard('50%*')
    '50\\%%'
    """
    return to_wild_sql(escape_percentage(s))


def wrap_like_match(s: str) -> str:
    """Wrap text into a contains-match LIKE pattern.

    >>> wrap_like_match('abc')
    '%abc%'
    """
    return f'{LIKE_WILDCARD}{s}{LIKE_WILDCARD}'


def count_sql(sql: str) -> str:
    """Wrap a query so it returns its row count in column `cc`.

    >>> count_sql('select id from users')
    'select count(*) as cc from (select id from users) as subquery'
    """
    return f'select count(*) as cc from ({sql}) as subquery'


def limit_clause(row_count: int, offset: int) -> str:
    """LIMIT/OFFSET fragment understood by PostgreSQL and SQLite.

    >>> limit_clause(25, 50)
    ' limit 25 offset 50'
    """
    return f' limit {row_count} offset {offset}'


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
