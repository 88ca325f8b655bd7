import functools
import json
import pathlib

from web3 import Web3
from web3.contract import Contract

import configs

ABI_DIRECTORY = pathlib.Path(__file__).parent / 'abi'
POOL_ABI = 'BPool'
TOKEN_ABI = 'TestToken'


@functools.lru_cache
def _read_abi(name: str) -> str:
    return (ABI_DIRECTORY / f'{name}.json').read_text()


def load_abi(name: str) -> list[dict]:
    """Fresh copy of a bundled abi, file is read once"""
    return json.loads(_read_abi(name))


def to_checksum_address(address: str) -> str:
    if not Web3.is_address(address):
        raise ValueError(f'Invalid address {address!r}')
    return Web3.to_checksum_address(address)


def get_pool_contract(web3: Web3, address: str) -> Contract:
    return web3.eth.contract(address=to_checksum_address(address), abi=load_abi(POOL_ABI))


class Token:
    def __init__(self, address: str, web3: Web3, abi: list[dict] = None):
        """ERC-20 token bound to a web3 connection

        Args:
            address (str): Token address, any case
            web3 (Web3): Web3 provider to interact with blockchain
            abi (list[dict]): Token abi, defaults to bundled TestToken abi
        """
        self.address = to_checksum_address(address)
        self.web3 = web3
        self.abi = load_abi(TOKEN_ABI) if abi is None else abi
        self.contract: Contract = web3.eth.contract(address=self.address, abi=self.abi)

    def __repr__(self):
        return f'{self.__class__.__name__}(address={self.address})'

    def __eq__(self, other):
        if isinstance(other, Token):
            return self.address == other.address
        return NotImplemented

    def __hash__(self):
        return int(self.address, 16)

    def balance_of(self, owner: str) -> int:
        owner = to_checksum_address(owner)
        return self.contract.functions.balanceOf(owner).call(block_identifier=configs.BLOCK)

    def allowance(self, owner: str, spender: str) -> int:
        return self.contract.functions.allowance(
            to_checksum_address(owner),
            to_checksum_address(spender),
        ).call(block_identifier=configs.BLOCK)
