from __future__ import annotations

import logging
from threading import Lock
from typing import Optional

import requests
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.contract.contract import ContractFunction
from web3.exceptions import TransactionNotFound, Web3Exception

import configs
from exceptions import NoAccountAvailable, TransactionFailed, TransactionTimeout
from tools import price, w3

log = logging.getLogger(__name__)

# Errors after which the pending nonce may differ from the local counter
SEND_ERRORS = (Web3Exception, ValueError, requests.exceptions.RequestException, OSError)

ACCOUNT: Optional[LocalAccount] = None
TX_COUNTERS: dict[str, TransactionCounter] = {}
_tx_counters_lock = Lock()


class TransactionCounter:
    def __init__(self, address: str, web3: Web3):
        self.address = address
        self.web3 = web3

        self.lock = Lock()
        self._count = web3.eth.get_transaction_count(address, 'pending')

    def reset(self):
        count = self.web3.eth.get_transaction_count(self.address, 'pending')
        with self.lock:
            if self._count != count:
                log.debug(f'Resetting nonce of {self.address} from {self._count} to {count}')
                self._count = count

    def get_nonce(self) -> int:
        with self.lock:
            self._count += 1
            return self._count - 1

    @property
    def count(self) -> int:
        with self.lock:
            return self._count


def get_account() -> Optional[LocalAccount]:
    """Return local account built from configs.PRIVATE_KEY, or None to let the node sign"""
    global ACCOUNT
    if ACCOUNT is None and configs.PRIVATE_KEY:
        ACCOUNT = Account.from_key(configs.PRIVATE_KEY)
        log.info(f'Signing transactions locally with {ACCOUNT.address}')
    return ACCOUNT


def get_node_account(web3: Web3) -> str:
    if isinstance(web3.eth.default_account, str):
        return web3.eth.default_account
    accounts = web3.eth.accounts
    if not accounts:
        raise NoAccountAvailable('No PRIVATE_KEY configured and node has no unlocked accounts')
    return accounts[0]


def get_sender_address(web3: Web3) -> str:
    account = get_account()
    return get_node_account(web3) if account is None else account.address


def _get_tx_counter(address: str, web3: Web3) -> TransactionCounter:
    with _tx_counters_lock:
        if address not in TX_COUNTERS:
            TX_COUNTERS[address] = TransactionCounter(address, web3)
        return TX_COUNTERS[address]


def get_nonce(address: str, web3: Web3) -> int:
    return _get_tx_counter(address, web3).get_nonce()


def reset_nonce(address: str, web3: Web3):
    _get_tx_counter(address, web3).reset()


def sign_and_send_tx(tx: dict, web3: Web3, account: LocalAccount = None) -> str:
    account = get_account() if account is None else account
    if account is None:
        raise NoAccountAvailable('Local signing requires PRIVATE_KEY')
    tx['gas'] = tx.get('gas', configs.MAX_GAS)

    # Do not use dict get() with default, or it will update nonce unnecessarily
    tx['nonce'] = tx['nonce'] if 'nonce' in tx else get_nonce(account.address, web3)
    tx['gasPrice'] = tx['gasPrice'] if 'gasPrice' in tx else price.get_gas_price(web3)

    signed_tx = account.sign_transaction(tx)
    tx_hash = Web3.to_hex(signed_tx.hash)
    log.debug(f'Sending transaction {tx_hash}: {tx}')
    try:
        web3.eth.send_raw_transaction(signed_tx.raw_transaction)
    except SEND_ERRORS:
        reset_nonce(account.address, web3)
        raise
    return tx_hash


def send_contract_tx(
    func: ContractFunction,
    *args,
    account_: LocalAccount = None,
    value_: int = 0,
    gas_price_: int = None,
    max_gas_: int = None,
    wait_finish_: bool = None,
    **kwargs,
) -> str:
    """Send transaction calling contract function `func`, signed locally if an account
    is available or by the node otherwise. Return transaction hash."""
    web3 = func.w3
    account = get_account() if account_ is None else account_
    gas_price_ = price.get_gas_price(web3) if gas_price_ is None else gas_price_
    max_gas_ = configs.MAX_GAS if max_gas_ is None else max_gas_
    wait_finish_ = configs.WAIT_RECEIPT if wait_finish_ is None else wait_finish_

    tx_params = {
        'value': value_,
        'gas': max_gas_,
        'gasPrice': gas_price_,
    }
    if account is None:
        tx_params['from'] = get_node_account(web3)
        tx_hash = Web3.to_hex(func(*args, **kwargs).transact(tx_params))
        log.debug(f'Sent transaction {tx_hash} from node account {tx_params["from"]}')
    else:
        try:
            tx = func(*args, **kwargs).build_transaction({
                **tx_params,
                'from': account.address,
                'chainId': w3.get_chain_id(web3),
                'nonce': get_nonce(account.address, web3),
            })
            tx_hash = sign_and_send_tx(tx, web3, account)
        except SEND_ERRORS:
            reset_nonce(account.address, web3)
            raise

    if wait_finish_:
        wait_tx_finish(tx_hash, web3)
    return tx_hash


def wait_tx_finish(
    tx_hash: str,
    web3: Web3,
    max_blocks_wait: int = None,
    poll_interval: float = configs.POLL_INTERVAL,
) -> dict:
    """Wait for transaction receipt. Raise TransactionFailed if transaction was reverted
    and TransactionTimeout if it is not mined after `max_blocks_wait` blocks"""
    listener = w3.BlockListener(web3, verbose=False, poll_interval=poll_interval)
    max_blocks_wait = max_blocks_wait or configs.MAX_BLOCKS_WAIT_RECEIPT
    n = 0
    for _ in listener.wait_for_new_blocks():
        try:
            receipt = web3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            n += 1
            if n >= max_blocks_wait:
                raise TransactionTimeout(tx_hash, n)
        else:
            if receipt['status'] == 0:
                log.info(f'Transaction reverted: {tx_hash}')
                raise TransactionFailed(tx_hash, receipt)
            log.debug(f'Transaction {tx_hash} mined on block {receipt["blockNumber"]}')
            return receipt
    raise TransactionTimeout(tx_hash, n)
