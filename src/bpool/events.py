"""Replay of the pool's LOG_CALL history.

Every state-changing pool call emits ``LOG_CALL(sig, caller, data)`` with the
4-byte function selector as an indexed topic and the complete call data as
payload. Decoding the payload against the pool abi recovers the call
arguments, which is how bound tokens and their parameters are reconstructed.
"""
import logging
from typing import Iterable, Optional, Union

from eth_abi.exceptions import DecodingError
from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract
from web3.exceptions import Web3Exception, Web3RPCError
from web3.types import EventData, LogReceipt

import configs
from exceptions import ShuttingDown
from tools import process

from .contracts import POOL_ABI, load_abi
from .entities import CallLog

log = logging.getLogger(__name__)

LOG_CALL_EVENT = 'LOG_CALL'
BIND_SIGNATURE = 'bind(address,uint256,uint256)'
SET_PARAMS_SIGNATURE = 'setParams(address,uint256,uint256)'
TOKEN_PARAMS_FUNCTIONS = ('bind', 'setParams')


def get_function_selector(signature: str) -> HexBytes:
    return HexBytes(Web3.keccak(text=signature)[:4])


def get_selector_topic(selector: bytes) -> str:
    """Indexed bytes4 values are stored right-padded to 32 bytes"""
    return Web3.to_hex(bytes(selector).ljust(32, b'\x00'))


def get_event_topic(event_abi: dict) -> str:
    types = ','.join(i['type'] for i in event_abi['inputs'])
    return Web3.to_hex(Web3.keccak(text=f"{event_abi['name']}({types})"))


def _get_event_abi(abi: list[dict], name: str) -> dict:
    return next(e for e in abi if e['type'] == 'event' and e['name'] == name)


BIND_SIG = get_function_selector(BIND_SIGNATURE)
SET_PARAMS_SIG = get_function_selector(SET_PARAMS_SIGNATURE)
LOG_CALL_TOPIC = get_event_topic(_get_event_abi(load_abi(POOL_ABI), LOG_CALL_EVENT))


def fetch_logs(
    web3: Web3,
    address: str,
    topics: list,
    from_block: int = None,
    to_block: Union[int, str] = 'latest',
    chunk_size: int = None,
) -> list[LogReceipt]:
    """Return logs emitted by `address` matching `topics`, ordered by (blockNumber, logIndex).

    If `chunk_size` is positive, the block range is requested in chunks of at most that many
    blocks, halving the chunk whenever the node rejects a request. Chunked fetching raises
    ShuttingDown once a shutdown signal is received.
    """
    from_block = configs.LOG_FROM_BLOCK if from_block is None else from_block
    chunk_size = configs.LOG_BLOCK_CHUNK_SIZE if chunk_size is None else chunk_size
    filter_params = {'address': address, 'topics': topics}

    if chunk_size <= 0:
        logs = list(web3.eth.get_logs({**filter_params, 'fromBlock': from_block, 'toBlock': to_block}))
    else:
        last_block = web3.eth.block_number if to_block == 'latest' else int(to_block)
        logs = []
        start = from_block
        while start <= last_block:
            if process.is_shutting_down():
                raise ShuttingDown(f'Stopped fetching logs at block {start} of {last_block}')
            stop = min(last_block, start + chunk_size - 1)
            try:
                batch = web3.eth.get_logs({**filter_params, 'fromBlock': start, 'toBlock': stop})
            except Web3RPCError:
                if chunk_size == 1:
                    raise
                chunk_size = max(1, chunk_size // 2)
                log.debug(f'get_logs rejected for blocks {start}-{stop}, retrying with {chunk_size=}')
                continue
            logs.extend(batch)
            start = stop + 1
        log.debug(f'Fetched {len(logs)} logs from blocks {from_block}-{last_block}')

    return sorted(logs, key=lambda e: (e['blockNumber'], e['logIndex']))


def get_call_events(
    contract: Contract,
    sigs: Optional[Iterable[bytes]] = None,
    from_block: int = None,
    to_block: Union[int, str] = 'latest',
) -> list[EventData]:
    """Return LOG_CALL events of pool `contract`, optionally only those with selector in `sigs`"""
    topics = [LOG_CALL_TOPIC]
    if sigs is not None:
        topics.append([get_selector_topic(sig) for sig in sigs])

    logs = fetch_logs(contract.w3, contract.address, topics, from_block, to_block)
    event = contract.events.LOG_CALL()
    return [event.process_log(log_entry) for log_entry in logs]


def decode_call_data(contract: Contract, data: Union[bytes, str]) -> tuple[Optional[str], list]:
    """Return (function name, arguments in abi order) of call data, (None, []) if unknown"""
    try:
        func, params = contract.decode_function_input(data)
    except (Web3Exception, ValueError, DecodingError) as e:
        log.debug(f'Could not decode call data {Web3.to_hex(HexBytes(data))}: {e}')
        return None, []
    return func.fn_name, list(params.values())


def decode_call_event(contract: Contract, event: EventData) -> CallLog:
    args = event['args']
    decoded_sig, decoded_values = decode_call_data(contract, args['data'])
    return CallLog(
        caller=args['caller'],
        raw_sig=Web3.to_hex(args['sig']),
        raw_data=Web3.to_hex(args['data']),
        decoded_sig=decoded_sig,
        decoded_values=decoded_values,
        block_number=event.get('blockNumber'),
        log_index=event.get('logIndex'),
    )


def fold_token_params(call_logs: Iterable[CallLog]) -> dict[str, dict[str, str]]:
    """Map token address to {balance, weight} of its latest bind / setParams call"""
    token_params = {}
    for call_log in call_logs:
        if call_log.decoded_sig not in TOKEN_PARAMS_FUNCTIONS:
            continue
        token, balance, weight = call_log.decoded_values[:3]
        token_params[token] = {
            'balance': str(balance),
            'weight': str(weight),
        }
    return token_params
