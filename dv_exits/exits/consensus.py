import asyncio
import logging
from json import JSONDecodeError

import aiohttp
from aiohttp import ClientSession, ClientTimeout
from eth_typing import HexStr

from dv_exits.common import aiohttp_fetch
from dv_exits.config.networks import CAPELLA_FORK_MAPPING, FORK_NAMES
from dv_exits.config.settings import BEACON_API_TIMEOUT, GENESIS_FETCH_RETRY_TIMEOUT
from dv_exits.decorators import retry_aiohttp_errors

from .exceptions import NetworkError

logger = logging.getLogger(__name__)

GENESIS_URL_PATH = '/eth/v1/beacon/genesis'


def get_capella_fork(fork_version: str) -> HexStr | None:
    """Maps a cluster's base fork version to the Capella fork version used for exits."""
    return CAPELLA_FORK_MAPPING.get(fork_version.lower())


def get_network_name(fork_version: str) -> str | None:
    return FORK_NAMES.get(fork_version.lower())


async def get_genesis_validators_root(fork_version: str, beacon_api_url: str) -> HexStr | None:
    """
    Fetches `genesis_validators_root` from the beacon node.
    Returns None when the node answers without the field.
    """
    network = get_network_name(fork_version)
    if network is None:
        logger.warning('Unknown network for fork version %s', fork_version)

    url = f"{beacon_api_url.rstrip('/')}{GENESIS_URL_PATH}"
    try:
        data = await _fetch_genesis(url)
    except (aiohttp.ClientError, asyncio.TimeoutError, JSONDecodeError) as e:
        raise NetworkError(f'Failed to fetch genesis validators root from {url}: {e!r}') from e

    genesis = data.get('data') if isinstance(data, dict) else None
    genesis_validators_root = (
        genesis.get('genesis_validators_root') if isinstance(genesis, dict) else None
    )
    if not genesis_validators_root:
        logger.error(
            'Invalid response structure from genesis endpoint',
            extra={'url': url, 'response': data},
        )
        return None

    logger.debug('Genesis validators root for %s: %s', network, genesis_validators_root)
    return HexStr(genesis_validators_root)


@retry_aiohttp_errors(delay=GENESIS_FETCH_RETRY_TIMEOUT)
async def _fetch_genesis(url: str) -> dict:
    async with ClientSession(timeout=ClientTimeout(BEACON_API_TIMEOUT)) as session:
        return await aiohttp_fetch(session, url)
