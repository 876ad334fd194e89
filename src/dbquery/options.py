from dataclasses import dataclass

from dbquery.adapter import get_adapter_class, get_available_dialects
from dbquery.adapter import is_supported_dialect
from dbquery.exceptions import ValidationError

from libb import ConfigOptions, scriptname

__all__ = [
    'DatabaseOptions',
    'DEFAULT_PAGE_SIZE',
]

DEFAULT_PAGE_SIZE = 25


@dataclass
class DatabaseOptions(ConfigOptions):
    """Options

    supported driver names: `postgresql`, `sqlite`

    Query options:
    - page_size: Default rows per page for quick searches (default: 25)
    """
    drivername: str = 'postgresql'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    port: int = 0
    timeout: int = 0
    appname: str = None
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self):
        if not is_supported_dialect(self.drivername):
            available = get_available_dialects()
            raise ValueError(f'drivername must be one of: {available}')
        self.appname = self.appname or scriptname() or 'python_console'
        adapter_cls = get_adapter_class(self.drivername)
        adapter_cls.validate_options(self)
        if self.page_size < 1:
            raise ValidationError(f'page_size must be positive, got {self.page_size}')
