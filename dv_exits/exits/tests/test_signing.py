import hashlib

import pytest
from web3 import Web3

from dv_exits.exits.exceptions import InvalidInputError
from dv_exits.exits.signing import (
    DOMAIN_VOLUNTARY_EXIT,
    compute_domain,
    compute_fork_data_root,
    compute_signing_root,
)
from dv_exits.exits.tests.factories import MAINNET_GENESIS_VALIDATORS_ROOT

DOMAIN_DEPOSIT = bytes.fromhex('03000000')


def _sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


class TestComputeDomain:
    def test_mainnet_deposit_domain(self):
        domain = compute_domain(DOMAIN_DEPOSIT, '0x00000000')

        assert Web3.to_hex(domain) == (
            '0x03000000f5a5fd42d16a20302798ef6ed309979b43003d2320d9f0e8ea9831a9'
        )

    def test_voluntary_exit_domain(self):
        genesis_root = Web3.to_bytes(hexstr=MAINNET_GENESIS_VALIDATORS_ROOT)
        fork_data_root = _sha256(bytes.fromhex('03000000') + bytes(28) + genesis_root)

        domain = compute_domain(DOMAIN_VOLUNTARY_EXIT, '0x03000000', genesis_root)

        assert len(domain) == 32
        assert domain == bytes.fromhex('04000000') + fork_data_root[:28]

    def test_fork_data_root(self):
        genesis_root = bytes(range(32))
        expected = _sha256(bytes.fromhex('90000072') + bytes(28) + genesis_root)

        assert compute_fork_data_root(bytes.fromhex('90000072'), genesis_root) == expected

    def test_fork_version_without_prefix(self):
        assert compute_domain(DOMAIN_DEPOSIT, '00000000') == compute_domain(
            DOMAIN_DEPOSIT, '0x00000000'
        )

    @pytest.mark.parametrize(
        'fork_version', ['0x000000', '0x3000000', '0x0000000000', '0x', '0xzz000000']
    )
    def test_invalid_fork_version(self, fork_version):
        with pytest.raises(InvalidInputError):
            compute_domain(DOMAIN_VOLUNTARY_EXIT, fork_version)

    def test_invalid_domain_type(self):
        with pytest.raises(InvalidInputError, match='Domain type must be 4 bytes'):
            compute_domain(b'\x04\x00\x00', '0x03000000')

    def test_invalid_genesis_root(self):
        with pytest.raises(InvalidInputError, match='Genesis validators root must be 32 bytes'):
            compute_domain(DOMAIN_VOLUNTARY_EXIT, '0x03000000', bytes(31))


class TestComputeSigningRoot:
    def test_signing_root(self):
        object_root = _sha256(b'object')
        domain = compute_domain(DOMAIN_VOLUNTARY_EXIT, '0x03000000')

        assert compute_signing_root(object_root, domain) == _sha256(object_root + domain)

    def test_invalid_object_root(self):
        with pytest.raises(InvalidInputError, match='Object root must be 32 bytes'):
            compute_signing_root(bytes(33), bytes(32))

    def test_invalid_domain(self):
        with pytest.raises(InvalidInputError, match='Domain must be 32 bytes'):
            compute_signing_root(bytes(32), bytes(4))
