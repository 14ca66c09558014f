from .enums import DBKind, IdSpace, ParamKind, PartitionStrategy, TableRole
from .exceptions import *
from .executor import EngineExecutor, QueryExecutor
from .settings import DBSettings, connect_with_retry, create_engine

__all__ = [
    # enums
    'DBKind',
    'IdSpace',
    'ParamKind',
    'PartitionStrategy',
    'TableRole',
    # exceptions
    'PartitionBenchError',
    'DatabaseUnavailableError',
    # executor
    'EngineExecutor',
    'QueryExecutor',
    # settings
    'DBSettings',
    'connect_with_retry',
    'create_engine',
]


__version__ = '1.0.0'
