import aiohttp
from eth_typing import HexStr
from eth_utils import add_0x_prefix, remove_0x_prefix
from web3 import Web3


async def aiohttp_fetch(session: aiohttp.ClientSession, url: str) -> dict:
    async with session.get(url=url) as response:
        response.raise_for_status()
        data = await response.json()
    return data


def normalize_public_key(public_key: str) -> HexStr:
    """Canonical `0x`-prefixed lowercase form used for key comparisons."""
    return add_0x_prefix(HexStr(public_key.lower()))


def strip_hex(value: str) -> str:
    return remove_0x_prefix(HexStr(value))


def hex_equal(left: str, right: str) -> bool:
    return strip_hex(left).lower() == strip_hex(right).lower()


def hex_to_bytes(value: str) -> bytes:
    """Like `Web3.to_bytes`, but odd-length input raises instead of being zero-padded."""
    if len(strip_hex(value)) % 2:
        raise ValueError(f'Odd-length hex string: {value}')
    return Web3.to_bytes(hexstr=HexStr(value))
