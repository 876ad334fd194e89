"""
SQL script loading and execution.

Scripts are split lexically: block comments are removed first, then ``--``
and ``//`` line comments, then the text is cut at every ``;`` that ends a
line or the script. String literals are not parsed, so a ``;`` followed by
a line break inside a quoted literal ends the statement early, and comment
markers inside literals are stripped. Keep such characters out of literals
in scripts fed to this loader.

Statements run one at a time; a failing statement is logged and recorded
and execution continues with the next one.
"""
import logging
import pathlib
import re
from typing import TYPE_CHECKING

from dbquery.batch import BatchRecord, make_batch, record_failure

if TYPE_CHECKING:
    from dbquery.adapter import DriverAdapter

logger = logging.getLogger(__name__)

_BLOCK_COMMENT = re.compile(r'/\*[\s\S]*?\*/')
_DASH_COMMENT = re.compile(r'--.*$', re.MULTILINE)
_SLASH_COMMENT = re.compile(r'//.*$', re.MULTILINE)
_TERMINATOR = re.compile(r';\s*[\r\n]+|;\s*\Z')


def strip_comments(sql: str) -> str:
    """Remove block and line comments.

    >>> strip_comments('select 1; -- one\\n/* two\\n */select 2 // three')
    'select 1; \\nselect 2 '
    """
    sql = _BLOCK_COMMENT.sub('', sql)
    sql = _DASH_COMMENT.sub('', sql)
    return _SLASH_COMMENT.sub('', sql)


def split_sql(sql: str) -> list[str]:
    """Split a script into trimmed, non-empty statements.

    >>> split_sql('-- c\\nSELECT 1;\\n/* block */\\nSELECT 2')
    ['SELECT 1', 'SELECT 2']
    """
    statements = _TERMINATOR.split(strip_comments(sql))
    return [stmt.strip() for stmt in statements if stmt.strip()]


def load_and_split_sql(path: str | pathlib.Path, encoding: str = 'utf-8') -> list[str]:
    """Read a script file and split it into statements."""
    return split_sql(pathlib.Path(path).read_text(encoding=encoding))


async def execute_statements(cn: 'DriverAdapter', statements: list[str]) -> list[BatchRecord[str]]:
    """Execute statements one by one, recording failures per statement.

    Returns
        One record per statement, failed ones carry the error
    """
    records = make_batch(statements)
    for record in records:
        logger.debug(f'Execute SQL statement {record.rec_no}:\n{record.data}')
        try:
            await cn.execute(record.data)
        except Exception as exc:
            record_failure(record, exc)
            logger.error(f'Error with statement {record.rec_no}:\nSQL:\n{record.data}')
    return records


async def execute_sql_script(cn: 'DriverAdapter', sql: str) -> bool:
    """Execute every statement of a script.

    Returns
        True if at least one statement failed
    """
    records = await execute_statements(cn, split_sql(sql))
    failed = [r for r in records if not r.ok]
    if failed:
        logger.warning(f'{len(failed)} of {len(records)} statements failed')
    return bool(failed)


async def execute_sql_file(cn: 'DriverAdapter', path: str | pathlib.Path) -> bool:
    """Execute every statement of a script file.

    Returns
        True if at least one statement failed
    """
    logger.debug(f'Executing SQL file {path}')
    return await execute_sql_script(cn, pathlib.Path(path).read_text(encoding='utf-8'))


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
