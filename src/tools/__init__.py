from . import cache, price, process, transaction, w3

__all__ = [
    'cache',
    'price',
    'process',
    'transaction',
    'w3',
]
