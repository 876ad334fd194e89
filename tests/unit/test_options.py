import config
import pytest
from dbquery.connection import _resolve_options
from dbquery.exceptions import ValidationError
from dbquery.options import DEFAULT_PAGE_SIZE, DatabaseOptions


def test_init_defaults():
    """Test default initialization"""
    options = DatabaseOptions(
        hostname='testhost',
        username='testuser',
        password='testpass',
        database='testdb',
        port=1234,
        timeout=30
    )

    assert options.drivername == 'postgresql'
    assert options.appname is not None
    assert options.page_size == DEFAULT_PAGE_SIZE == 25


def test_validation():
    """Test validation rules"""
    with pytest.raises(ValueError):
        DatabaseOptions(
            drivername='invalid',
            hostname='testhost',
            username='testuser',
            password='testpass',
            database='testdb',
            port=1234,
            timeout=30
        )

    with pytest.raises(ValueError):
        DatabaseOptions(drivername='postgresql', hostname='testhost')


def test_sqlite_options():
    """Test SQLite options validation"""
    options = DatabaseOptions(
        drivername='sqlite',
        database='test.db'
    )
    assert options.drivername == 'sqlite'
    assert options.database == 'test.db'

    with pytest.raises(ValueError):
        DatabaseOptions(drivername='sqlite')


def test_page_size_validation():
    """Test page size must be positive"""
    with pytest.raises(ValidationError):
        DatabaseOptions(drivername='sqlite', database='test.db', page_size=0)


def test_appname_is_kept():
    """Test an explicit application name is not overwritten"""
    options = DatabaseOptions(drivername='sqlite', database='test.db', appname='reports')
    assert options.appname == 'reports'


def test_resolve_options_from_config():
    """Test options load from a named config section"""
    options = _resolve_options('sqlite', config)
    assert options.drivername == 'sqlite'
    assert options.database == ':memory:'
    assert options.page_size == 10


def test_resolve_options_from_dict():
    """Test options load from a dict"""
    options = _resolve_options({'drivername': 'sqlite', 'database': 'x.db', 'page_size': 50})
    assert isinstance(options, DatabaseOptions)
    assert options.page_size == 50


def test_resolve_options_passthrough():
    """Test a DatabaseOptions instance is used as is"""
    options = DatabaseOptions(drivername='sqlite', database='x.db')
    assert _resolve_options(options, None, database='ignored.db') is options


if __name__ == '__main__':
    __import__('pytest').main([__file__])
