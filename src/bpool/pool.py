import logging
from typing import Any

import requests
from web3 import Web3
from web3.contract.contract import ContractFunction
from web3.exceptions import Web3Exception

import configs
from exceptions import BPoolClientError, TransactionFailed, TransactionTimeout
from tools import cache, transaction, w3

from . import events
from .contracts import Token, get_pool_contract, to_checksum_address
from .entities import Response

log = logging.getLogger(__name__)

# Provider transport errors: requests for HTTP, OSError for IPC and websockets
TRANSACTION_ERRORS = (
    Web3Exception,
    ValueError,
    BPoolClientError,
    requests.exceptions.RequestException,
    OSError,
)


class BPool:
    def __init__(self, address: str, web3: Web3 = None):
        """Client for a deployed constant-function market-maker pool

        Args:
            address (str): Pool contract address
            web3 (Web3): Web3 provider to interact with blockchain, defaults to configs.RPC_URI
        """
        self.web3 = w3.get_web3() if web3 is None else web3
        self.contract = get_pool_contract(self.web3, address)
        self.address = self.contract.address

    def __repr__(self):
        return f'{self.__class__.__name__}(address={self.address})'

    def get_token(self, address: str) -> Token:
        return Token(address, self.web3)

    def _call(self, fn_name: str, *args) -> Any:
        func = self.contract.get_function_by_name(fn_name)
        return func(*args).call(block_identifier=configs.BLOCK)

    def get_params(self) -> Response:
        return Response.success({
            'fee': self._call('getFee'),
            'manager': self._call('getManager'),
            'num_tokens': self._call('getNumTokens'),
            'is_paused': self._call('isPaused'),
        })

    def get_spot_price(self, token_in: str, token_out: str) -> Response:
        spot_price = self._call(
            'getSpotPrice',
            to_checksum_address(token_in),
            to_checksum_address(token_out),
        )
        return Response.success(spot_price)

    def get_call_logs(self) -> Response:
        call_logs = [
            events.decode_call_event(self.contract, event)
            for event in events.get_call_events(self.contract)
        ]
        for call_log in call_logs:
            log.debug(f'{call_log.decoded_sig or call_log.raw_sig} called by {call_log.caller}')
        return Response.success([call_log.to_dict() for call_log in call_logs])

    def get_token_params(self) -> Response:
        """Rebuild bound tokens from bind / setParams calls, with balances read from tokens"""
        # Reverted transactions emit no logs, so every call found here succeeded
        call_events = events.get_call_events(
            self.contract,
            sigs=[events.BIND_SIG, events.SET_PARAMS_SIG],
        )
        call_logs = [events.decode_call_event(self.contract, event) for event in call_events]
        token_params = events.fold_token_params(call_logs)

        for address, params in token_params.items():
            params['balance'] = str(self.get_token(address).balance_of(self.address))
        return Response.success(token_params)

    def _send(self, steps: list[tuple[str, ContractFunction, tuple]]) -> Response:
        """Send transactions in order, stopping at the first failure.

        Hashes of transactions already sent are kept in the response data, including on
        failure, since earlier transactions (e.g.: approve) are not rolled back.
        """
        data = {'contract_address': self.address}
        for key, func, args in steps:
            try:
                data[key] = transaction.send_contract_tx(func, *args)
            except TRANSACTION_ERRORS as e:
                if isinstance(e, (TransactionFailed, TransactionTimeout)):
                    # Already broadcast, failed or not mined while waiting for receipt
                    data[key] = e.tx_hash
                log.warning(f'{func.fn_name} on {func.address} failed: {e}')
                log.debug('Transaction error', exc_info=True)
                return Response.failure(e, data)
            log.info(f'{func.fn_name} on {func.address}: {data[key]}')
        cache.clear_caches()
        return Response.success(data)

    def _approve_step(self, token: str, amount: int) -> tuple[str, ContractFunction, tuple]:
        return ('approve_tx', self.get_token(token).contract.functions.approve, (self.address, amount))

    def bind_token(self, token: str, balance: int, weight: int) -> Response:
        token = to_checksum_address(token)
        return self._send([
            self._approve_step(token, balance),
            ('bind_tx', self.contract.functions.bind, (token, balance, weight)),
        ])

    def set_token_params(self, token: str, balance: int, weight: int) -> Response:
        token = to_checksum_address(token)
        return self._send([
            self._approve_step(token, balance),
            ('set_params_tx', self.contract.functions.setParams, (token, balance, weight)),
        ])

    def _swap(self, fn_name: str, token_in: str, amount_in: int, args: tuple, approve: bool) -> Response:
        steps = [(
            'swap_tx',
            self.contract.get_function_by_name(fn_name),
            (to_checksum_address(token_in), amount_in, *args),
        )]
        if approve:
            steps.insert(0, self._approve_step(token_in, amount_in))
        return self._send(steps)

    def swap_exact_amount_in(
        self,
        token_in: str,
        amount_in: int,
        token_out: str,
        min_amount_out: int,
        max_price: int,
        approve: bool = False,
    ) -> Response:
        """Swap exactly `amount_in` of `token_in` (Ti, Ai, To, Lo, LP)"""
        args = (to_checksum_address(token_out), min_amount_out, max_price)
        return self._swap('swap_ExactAmountIn', token_in, amount_in, args, approve)

    def swap_exact_amount_out(
        self,
        token_in: str,
        max_amount_in: int,
        token_out: str,
        amount_out: int,
        max_price: int,
        approve: bool = False,
    ) -> Response:
        """Swap up to `max_amount_in` of `token_in` for exactly `amount_out` (Ti, Li, To, Ao, PL)"""
        args = (to_checksum_address(token_out), amount_out, max_price)
        return self._swap('swap_ExactAmountOut', token_in, max_amount_in, args, approve)

    def swap_exact_marginal_price(
        self,
        token_in: str,
        max_amount_in: int,
        token_out: str,
        max_amount_out: int,
        marginal_price: int,
        approve: bool = False,
    ) -> Response:
        """Swap until pool reaches `marginal_price` (Ti, Li, To, Lo, MP)"""
        args = (to_checksum_address(token_out), max_amount_out, marginal_price)
        return self._swap('swap_ExactMarginalPrice', token_in, max_amount_in, args, approve)
