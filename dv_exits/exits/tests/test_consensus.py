from json import JSONDecodeError
from unittest import mock

import aiohttp
import pytest

from dv_exits.decorators import retry_aiohttp_errors
from dv_exits.exits import consensus
from dv_exits.exits.consensus import (
    get_capella_fork,
    get_genesis_validators_root,
    get_network_name,
)
from dv_exits.exits.exceptions import NetworkError
from dv_exits.exits.tests.factories import MAINNET_GENESIS_VALIDATORS_ROOT

BEACON_API_URL = 'http://localhost:5052'


class TestGetCapellaFork:
    @pytest.mark.parametrize(
        'fork_version, capella_fork_version',
        [
            ('0x00000000', '0x03000000'),
            ('0x00001020', '0x03001020'),
            ('0x00000064', '0x03000064'),
            ('0x01017000', '0x04017000'),
            ('0x90000069', '0x90000072'),
            ('0x10000910', '0x40000910'),
        ],
    )
    def test_known_networks(self, fork_version, capella_fork_version):
        assert get_capella_fork(fork_version) == capella_fork_version

    def test_case_insensitive(self):
        assert get_capella_fork('0X00000000') == '0x03000000'

    def test_unknown_network(self):
        assert get_capella_fork('0x12345678') is None


def test_get_network_name():
    assert get_network_name('0x10000910') == 'hoodi'
    assert get_network_name('0x12345678') is None


class TestGetGenesisValidatorsRoot:
    async def test_genesis_root(self):
        response = {
            'data': {
                'genesis_time': '1606824023',
                'genesis_validators_root': MAINNET_GENESIS_VALIDATORS_ROOT,
                'genesis_fork_version': '0x00000000',
            }
        }
        with mock.patch(
            'dv_exits.exits.consensus.aiohttp_fetch', return_value=response
        ) as fetch_mock:
            root = await get_genesis_validators_root('0x00000000', BEACON_API_URL + '/')

        assert root == MAINNET_GENESIS_VALIDATORS_ROOT
        fetch_mock.assert_called_once()
        assert fetch_mock.call_args.args[1] == f'{BEACON_API_URL}/eth/v1/beacon/genesis'

    @pytest.mark.parametrize('response', [{}, {'data': {}}, {'data': None}, []])
    async def test_missing_field(self, response):
        with mock.patch('dv_exits.exits.consensus.aiohttp_fetch', return_value=response):
            assert await get_genesis_validators_root('0x00000000', BEACON_API_URL) is None

    async def test_unknown_network_is_not_fatal(self, caplog):
        response = {'data': {'genesis_validators_root': MAINNET_GENESIS_VALIDATORS_ROOT}}
        with mock.patch('dv_exits.exits.consensus.aiohttp_fetch', return_value=response):
            root = await get_genesis_validators_root('0x12345678', BEACON_API_URL)

        assert root == MAINNET_GENESIS_VALIDATORS_ROOT
        assert 'Unknown network for fork version 0x12345678' in caplog.text

    @pytest.mark.parametrize(
        'error',
        [
            aiohttp.ClientConnectionError('connection refused'),
            aiohttp.ClientResponseError(mock.Mock(), (), status=503),
            JSONDecodeError('Expecting value', '', 0),
        ],
    )
    async def test_network_error(self, error):
        with mock.patch(
            'dv_exits.exits.consensus.aiohttp_fetch', side_effect=error
        ), pytest.raises(NetworkError):
            await get_genesis_validators_root('0x00000000', BEACON_API_URL)


class TestGenesisFetchRetry:
    response = {'data': {'genesis_validators_root': MAINNET_GENESIS_VALIDATORS_ROOT}}

    @staticmethod
    def _fetch_with_retries(delay: int):
        return retry_aiohttp_errors(delay=delay)(consensus._fetch_genesis.__wrapped__)

    async def test_transport_error_is_retried(self):
        with mock.patch(
            'dv_exits.exits.consensus._fetch_genesis', self._fetch_with_retries(delay=2)
        ), mock.patch(
            'dv_exits.exits.consensus.aiohttp_fetch',
            side_effect=[aiohttp.ClientConnectionError('connection reset'), self.response],
        ) as fetch_mock:
            root = await get_genesis_validators_root('0x00000000', BEACON_API_URL)

        assert root == MAINNET_GENESIS_VALIDATORS_ROOT
        assert fetch_mock.call_count == 2

    async def test_decode_error_is_not_retried(self):
        with mock.patch(
            'dv_exits.exits.consensus._fetch_genesis', self._fetch_with_retries(delay=2)
        ), mock.patch(
            'dv_exits.exits.consensus.aiohttp_fetch',
            side_effect=[JSONDecodeError('Expecting value', '', 0), self.response],
        ) as fetch_mock, pytest.raises(NetworkError):
            await get_genesis_validators_root('0x00000000', BEACON_API_URL)

        assert fetch_mock.call_count == 1

    async def test_no_retries_by_default(self):
        with mock.patch(
            'dv_exits.exits.consensus.aiohttp_fetch',
            side_effect=[aiohttp.ClientConnectionError('connection reset'), self.response],
        ) as fetch_mock, pytest.raises(NetworkError):
            await get_genesis_validators_root('0x00000000', BEACON_API_URL)

        assert fetch_mock.call_count == 1
