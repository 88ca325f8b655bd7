from .contracts import Token, get_pool_contract, load_abi
from .entities import CallLog, Response
from .pool import BPool

__all__ = [
    'BPool',
    'CallLog',
    'Response',
    'Token',
    'get_pool_contract',
    'load_abi',
]
