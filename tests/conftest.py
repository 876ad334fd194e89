import pathlib
import site

import pytest
from dbquery.materialize import clear_fields_map_cache

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def clear_caches():
    """Clear the field map cache before and after each test to ensure test isolation."""
    clear_fields_map_cache()
    yield
    clear_fields_map_cache()


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.sqlite',
]
