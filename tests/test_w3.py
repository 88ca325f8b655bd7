import itertools
from unittest.mock import MagicMock, PropertyMock, patch

import pytest
from web3 import HTTPProvider, IPCProvider, LegacyWebSocketProvider
from web3.middleware import ExtraDataToPOAMiddleware

import configs
from tools import process, w3


class TestFromUri:
    @pytest.mark.parametrize('uri, provider_cls', [
        ('http://127.0.0.1:8545', HTTPProvider),
        ('https://rpc.example.org', HTTPProvider),
        ('ws://127.0.0.1:8546', LegacyWebSocketProvider),
        ('wss://rpc.example.org/ws', LegacyWebSocketProvider),
        ('/tmp/geth.ipc', IPCProvider),
    ])
    def test_provider(self, uri, provider_cls):
        assert isinstance(w3.from_uri(uri).provider, provider_cls)

    def test_invalid_uri(self):
        with pytest.raises(ValueError):
            w3.from_uri('ftp://127.0.0.1')

    def test_poa_middleware(self, monkeypatch):
        monkeypatch.setattr(configs, 'POA_CHAIN', True)
        web3 = w3.from_uri('http://127.0.0.1:8545')
        assert ExtraDataToPOAMiddleware in web3.middleware_onion


class TestGetWeb3:
    def test_unreachable_node(self):
        with pytest.raises(ConnectionError):
            w3.get_web3('http://127.0.0.1:1')

    def test_connected(self):
        web3 = MagicMock()
        web3.is_connected.return_value = True
        with patch('tools.w3.from_uri', return_value=web3) as from_uri:
            assert w3.get_web3('http://node:8545') is web3
        from_uri.assert_called_once_with('http://node:8545')


class TestChainId:
    def test_configured(self, monkeypatch):
        monkeypatch.setattr(configs, 'CHAIN_ID', 56)
        assert w3.get_chain_id(MagicMock()) == 56

    def test_from_node_is_cached(self, monkeypatch):
        monkeypatch.setattr(configs, 'CHAIN_ID', None)
        web3 = MagicMock()
        chain_id = PropertyMock(return_value=1337)
        type(web3.eth).chain_id = chain_id

        assert w3.get_chain_id(web3) == 1337
        assert w3.get_chain_id(web3) == 1337
        assert chain_id.call_count == 1


class TestBlockListener:
    def test_yields_only_new_blocks(self):
        web3 = MagicMock()
        type(web3.eth).block_number = PropertyMock(side_effect=[10, 10, 10, 11, 14])
        listener = w3.BlockListener(web3, poll_interval=0)

        assert list(itertools.islice(listener.wait_for_new_blocks(), 3)) == [10, 11, 14]

    def test_stops_on_shutdown(self):
        web3 = MagicMock()
        type(web3.eth).block_number = PropertyMock(side_effect=itertools.count())
        listener = w3.BlockListener(web3, poll_interval=0)
        blocks = listener.wait_for_new_blocks()

        assert next(blocks) == 0
        process.set_shutting_down_flag()
        try:
            assert list(blocks) == []
        finally:
            process.reset_shutting_down_flag()
