from unittest.mock import MagicMock, PropertyMock

import configs
from tools import price


def make_web3(gas_price: int) -> tuple[MagicMock, PropertyMock]:
    web3 = MagicMock()
    gas_price_mock = PropertyMock(return_value=gas_price)
    type(web3.eth).gas_price = gas_price_mock
    return web3, gas_price_mock


def test_gas_price_premium(monkeypatch):
    monkeypatch.setattr(configs, 'BASELINE_GAS_PRICE_PREMIUM', 1.5)
    monkeypatch.setattr(configs, 'MIN_GAS_PRICE', 0)
    web3, _ = make_web3(2 * 10 ** 9)

    assert price.get_gas_price(web3) == 3 * 10 ** 9


def test_gas_price_floor(monkeypatch):
    monkeypatch.setattr(configs, 'BASELINE_GAS_PRICE_PREMIUM', 1.0)
    monkeypatch.setattr(configs, 'MIN_GAS_PRICE', 5 * 10 ** 9)
    web3, _ = make_web3(10 ** 9)

    assert price.get_gas_price(web3) == 5 * 10 ** 9


def test_gas_price_cached(monkeypatch):
    monkeypatch.setattr(configs, 'MIN_GAS_PRICE', 0)
    web3, gas_price_mock = make_web3(10 ** 9)

    price.get_gas_price(web3)
    price.get_gas_price(web3)
    assert gas_price_mock.call_count == 1
