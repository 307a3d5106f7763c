"""
Signing domains and signing roots as defined by the consensus specs:
https://github.com/ethereum/consensus-specs/blob/dev/specs/phase0/beacon-chain.md#compute_domain
"""
from eth_typing import HexStr

from dv_exits.common import hex_to_bytes

from .containers import ForkData, SigningData
from .exceptions import InvalidInputError

DOMAIN_VOLUNTARY_EXIT = bytes.fromhex('04000000')

# only meaningful for tests, real networks fetch the root from a beacon node
GENESIS_VALIDATORS_ROOT = bytes(32)


def compute_fork_data_root(current_version: bytes, genesis_validators_root: bytes) -> bytes:
    return ForkData(
        current_version=current_version,
        genesis_validators_root=genesis_validators_root,
    ).hash_tree_root


def compute_domain(
    domain_type: bytes,
    fork_version: HexStr,
    genesis_validators_root: bytes | None = None,
) -> bytes:
    try:
        fork_version_bytes = hex_to_bytes(fork_version)
    except ValueError as e:
        raise InvalidInputError(f'Invalid fork version: {fork_version}') from e

    if len(fork_version_bytes) != 4:
        raise InvalidInputError('Fork version must be 4 bytes')
    if len(domain_type) != 4:
        raise InvalidInputError('Domain type must be 4 bytes')

    if genesis_validators_root is None:
        genesis_validators_root = GENESIS_VALIDATORS_ROOT
    if len(genesis_validators_root) != 32:
        raise InvalidInputError('Genesis validators root must be 32 bytes')

    fork_data_root = compute_fork_data_root(fork_version_bytes, genesis_validators_root)
    return bytes(domain_type) + fork_data_root[:28]


def compute_signing_root(object_root: bytes, domain: bytes) -> bytes:
    if len(object_root) != 32:
        raise InvalidInputError('Object root must be 32 bytes')
    if len(domain) != 32:
        raise InvalidInputError('Domain must be 32 bytes')

    return SigningData(object_root=object_root, domain=domain).hash_tree_root
