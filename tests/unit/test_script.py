"""
Tests for SQL script splitting and statement-by-statement execution.
"""
import pytest
from dbquery.exceptions import QueryError
from dbquery.script import execute_sql_file, execute_sql_script
from dbquery.script import execute_statements, load_and_split_sql, split_sql
from dbquery.script import strip_comments

SCRIPT = """
-- schema for users
CREATE TABLE users (
    user_id INTEGER PRIMARY KEY, -- surrogate key
    first_name TEXT
);
/* seed data,
   spans lines; with a semicolon */
INSERT INTO users (first_name) VALUES ('Jo');
// trailing comment
INSERT INTO users (first_name) VALUES ('Al')
"""


def test_strip_comments():
    """Test block, dash and slash comments are removed"""
    sql = strip_comments('select 1; -- one\n/* two */select 2 // three')
    assert '--' not in sql
    assert '/*' not in sql
    assert '//' not in sql
    assert 'select 1;' in sql
    assert 'select 2' in sql


def test_split_sql():
    """Test statements are split on line-ending semicolons"""
    statements = split_sql(SCRIPT)

    assert len(statements) == 3
    assert statements[0].startswith('CREATE TABLE users (')
    assert statements[0].endswith(')')
    assert 'surrogate' not in statements[0]
    assert statements[1] == "INSERT INTO users (first_name) VALUES ('Jo')"
    assert statements[2] == "INSERT INTO users (first_name) VALUES ('Al')"


def test_split_sql_keeps_inline_semicolons():
    """Test a semicolon followed by more text on the same line does not split"""
    assert split_sql('select 1; select 2;\nselect 3') == ['select 1; select 2', 'select 3']


def test_split_sql_crlf_and_blank():
    """Test CRLF terminators and empty scripts"""
    assert split_sql('select 1;\r\nselect 2;\r\n') == ['select 1', 'select 2']
    assert split_sql('') == []
    assert split_sql('-- only a comment\n/* and a block */') == []


def test_load_and_split_sql(tmp_path):
    """Test loading a script file"""
    path = tmp_path / 'schema.sql'
    path.write_text(SCRIPT, encoding='utf-8')
    assert load_and_split_sql(path) == split_sql(SCRIPT)


@pytest.mark.asyncio
async def test_execute_sql_script(fake_adapter):
    """Test every statement is executed in order"""
    has_error = await execute_sql_script(fake_adapter, SCRIPT)

    assert has_error is False
    assert fake_adapter.statements == split_sql(SCRIPT)


@pytest.mark.asyncio
async def test_execute_continues_after_failure(fake_adapter, caplog):
    """Test a failing statement is logged and the rest still run"""
    fake_adapter.fail_on['execute_sql'] = ("'Jo'", QueryError('duplicate key'))

    records = await execute_statements(fake_adapter, split_sql(SCRIPT))

    assert len(fake_adapter.statements) == 3
    assert [r.ok for r in records] == [True, False, True]
    assert [r.rec_no for r in records] == [1, 2, 3]
    assert isinstance(records[1].error, QueryError)
    assert 'Error with statement 2' in caplog.text


@pytest.mark.asyncio
async def test_execute_sql_file_reports_error(fake_adapter, tmp_path):
    """Test the file runner returns True when a statement failed"""
    path = tmp_path / 'seed.sql'
    path.write_text(SCRIPT, encoding='utf-8')
    fake_adapter.fail_on['execute_sql'] = ('CREATE', QueryError('exists'))

    assert await execute_sql_file(fake_adapter, path) is True
    assert len(fake_adapter.statements) == 3


if __name__ == '__main__':
    __import__('pytest').main([__file__])
