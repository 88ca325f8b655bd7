import logging

from web3 import Web3

import configs
from tools.cache import ttl_cache

# Gas price is not time-critical for pool management, so ttl can be higher
GAS_PRICE_CACHE_TTL = 60

log = logging.getLogger(__name__)


@ttl_cache(maxsize=100, ttl=GAS_PRICE_CACHE_TTL)
def get_gas_price(web3: Web3) -> int:
    gas_price = int(web3.eth.gas_price * configs.BASELINE_GAS_PRICE_PREMIUM)
    if gas_price < configs.MIN_GAS_PRICE:
        log.debug(f'Node gas price {gas_price} below minimum, using {configs.MIN_GAS_PRICE}')
        return configs.MIN_GAS_PRICE
    return gas_price
