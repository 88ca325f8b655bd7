import eth_abi
import pytest
from hexbytes import HexBytes
from web3 import Web3

from bpool import BPool
from tools import cache, transaction

POOL_ADDRESS = Web3.to_checksum_address('0x5FbDB2315678afecb367f032d93F642f64180aa3')
TOKEN_A = Web3.to_checksum_address('0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512')
TOKEN_B = Web3.to_checksum_address('0x9fE46736679d2D9a65F0992F2272dE9f3c7fa6e0')
MANAGER = Web3.to_checksum_address('0x70997970C51812dc3A010C7d01b50e0d17dc79C8')
PRIVATE_KEY = '0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80'
ACCOUNT_ADDRESS = Web3.to_checksum_address('0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266')


def encode_call(signature: str, types: list[str], values: list) -> HexBytes:
    selector = Web3.keccak(text=signature)[:4]
    return HexBytes(selector + eth_abi.encode(types, values))


def encode_bind(token: str, balance: int, weight: int) -> HexBytes:
    return encode_call(
        'bind(address,uint256,uint256)', ['address', 'uint256', 'uint256'], [token, balance, weight])


def encode_set_params(token: str, balance: int, weight: int) -> HexBytes:
    return encode_call(
        'setParams(address,uint256,uint256)',
        ['address', 'uint256', 'uint256'],
        [token, balance, weight],
    )


@pytest.fixture(autouse=True)
def clean_state():
    cache.clear_caches()
    transaction.TX_COUNTERS.clear()
    transaction.ACCOUNT = None
    yield
    cache.clear_caches()
    transaction.TX_COUNTERS.clear()
    transaction.ACCOUNT = None


@pytest.fixture
def web3():
    """Web3 instance that never reaches a node, RPC methods must be patched in tests"""
    return Web3(Web3.HTTPProvider('http://127.0.0.1:1'))


@pytest.fixture
def pool(web3):
    return BPool(POOL_ADDRESS, web3)
