import logging
import time
from typing import Iterator

from web3 import HTTPProvider, IPCProvider, LegacyWebSocketProvider, Web3
from web3.middleware import ExtraDataToPOAMiddleware

import configs
from tools import process
from tools.cache import ttl_cache

log = logging.getLogger(__name__)


def from_uri(endpoint_uri: str) -> Web3:
    if endpoint_uri.startswith('http'):
        provider = HTTPProvider(endpoint_uri)
    elif endpoint_uri.startswith('ws'):
        provider = LegacyWebSocketProvider(endpoint_uri)
    elif endpoint_uri.endswith('ipc'):
        provider = IPCProvider(endpoint_uri)
    else:
        raise ValueError(f'Invalid {endpoint_uri=}')

    web3 = Web3(provider)
    if configs.POA_CHAIN:
        web3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    return web3


def get_web3(endpoint_uri: str = None, verbose: bool = False) -> Web3:
    endpoint_uri = configs.RPC_URI if endpoint_uri is None else endpoint_uri
    web3 = from_uri(endpoint_uri)
    if not web3.is_connected():
        raise ConnectionError(f'No available RPC connection at {endpoint_uri!r}')

    if verbose:
        log.info(f'Connected to {endpoint_uri}')
        log.info(f'Running on chain_id={get_chain_id(web3)}')
        log.info(f'Latest block: {web3.eth.block_number}')
    return web3


@ttl_cache(maxsize=100, ttl=3600)
def get_chain_id(web3: Web3) -> int:
    if configs.CHAIN_ID is not None:
        return configs.CHAIN_ID
    return web3.eth.chain_id


class BlockListener:
    def __init__(
        self,
        web3: Web3 = None,
        verbose: bool = True,
        poll_interval: float = configs.POLL_INTERVAL,
    ):
        self.web3 = get_web3() if web3 is None else web3
        self.verbose = verbose
        self.poll_interval = poll_interval

    def wait_for_new_blocks(self) -> Iterator[int]:
        """Yield current block number, then every new block number seen while polling"""
        last_block_number = None
        while not process.is_shutting_down():
            block_number = self.web3.eth.block_number
            if last_block_number is None or block_number > last_block_number:
                if last_block_number is not None and block_number - last_block_number > 1:
                    log.debug(
                        f'More than one block passed since last iteration '
                        f'({block_number - last_block_number})'
                    )
                if self.verbose:
                    log.debug(f'New block: {block_number}')
                last_block_number = block_number
                yield block_number
            time.sleep(self.poll_interval)
        log.info('Stopped listener')
