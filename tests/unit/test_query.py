import pytest
from dbquery.exceptions import QueryError
from dbquery.query import execute_count, execute_update, find, get_count
from dbquery.query import list_query


def test_get_count():
    """Test count extraction from a row object"""
    assert get_count({'cc': 7}) == 7
    assert get_count({'cc': '12'}) == 12
    assert get_count({'total': 3}, key='total') == 3
    assert get_count({'cc': None}) == 0
    assert get_count(None) == 0


@pytest.mark.asyncio
async def test_list_query(fake_adapter):
    """Test rows are materialized and params passed positionally"""
    fake_adapter.push_result(['user_id', 'address.zip_code'], [(1, '02110'), (2, None)])

    items = await list_query(fake_adapter, 'select * from users where role = $1', 'admin')

    assert items == [{'userId': 1, 'address': {'zipCode': '02110'}}, {'userId': 2}]
    assert fake_adapter.fetches == [('select * from users where role = $1', ('admin',))]


@pytest.mark.asyncio
async def test_list_query_with_mapping(fake_adapter):
    """Test an explicit mapping is honoured"""
    fake_adapter.push_result(['user_id'], [(5,)])

    items = await list_query(fake_adapter, 'select user_id from users', mapping={0: 'owner.id'})

    assert items == [{'owner': {'id': 5}}]


@pytest.mark.asyncio
async def test_find(fake_adapter):
    """Test find returns the first row or None"""
    fake_adapter.push_result(['user_id'], [(1,), (2,)])
    assert await find(fake_adapter, 'select user_id from users') == {'userId': 1}

    fake_adapter.push_result(['user_id'], [])
    assert await find(fake_adapter, 'select user_id from users') is None


@pytest.mark.asyncio
async def test_execute_count(fake_adapter):
    """Test count query result is an int"""
    fake_adapter.push_count(42)
    assert await execute_count(fake_adapter, 'select count(*) as cc from users') == 42

    fake_adapter.push_result(['cc'], [])
    assert await execute_count(fake_adapter, 'select count(*) as cc from users') == 0


@pytest.mark.asyncio
async def test_execute_update(fake_adapter):
    """Test affected row count is returned"""
    fake_adapter.update_count = 3
    assert await execute_update(fake_adapter, 'delete from users where role = $1', 'x') == 3
    assert fake_adapter.updates == [('delete from users where role = $1', ('x',))]


@pytest.mark.asyncio
async def test_fetch_error_is_logged_and_reraised(fake_adapter, caplog):
    """Test driver errors propagate unchanged"""
    fake_adapter.fail_on['fetch'] = QueryError('syntax error')

    with pytest.raises(QueryError, match='syntax error'):
        await list_query(fake_adapter, 'selec 1')

    assert 'Error with query' in caplog.text


if __name__ == '__main__':
    __import__('pytest').main([__file__])
