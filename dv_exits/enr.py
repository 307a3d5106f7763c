"""
Ethereum Node Records (EIP-778), used as operator identity records.
Only the "v4" identity scheme (secp256k1 + keccak256) is supported.
"""
import base64
import binascii
from dataclasses import dataclass

import rlp
from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_utils import ValidationError, keccak
from rlp.exceptions import DecodingError
from rlp.sedes import big_endian_int

from dv_exits.crypto import ecdsa_verify
from dv_exits.exits.exceptions import InvalidIdentityError

ENR_PREFIX = 'enr:'
MAX_ENR_SIZE = 300
IDENTITY_SCHEME_V4 = b'v4'


@dataclass(frozen=True)
class ENR:
    signature: bytes
    sequence_number: int
    kv_pairs: dict[bytes, bytes | list]

    @property
    def identity_scheme(self) -> bytes | None:
        scheme = self.kv_pairs.get(b'id')
        return scheme if isinstance(scheme, bytes) else None

    @property
    def public_key(self) -> keys.PublicKey:
        compressed = self.kv_pairs.get(b'secp256k1')
        if not isinstance(compressed, bytes):
            raise InvalidIdentityError('ENR has no secp256k1 public key')
        try:
            return keys.PublicKey.from_compressed_bytes(compressed)
        except (ValidationError, BadSignature, ValueError) as e:
            raise InvalidIdentityError(f'Invalid secp256k1 public key in ENR: {e}') from e

    def content(self) -> list:
        items: list = [big_endian_int.serialize(self.sequence_number)]
        for key in sorted(self.kv_pairs):
            items.extend([key, self.kv_pairs[key]])
        return items

    def verify_signature(self) -> bool:
        message_hash = keccak(rlp.encode(self.content()))
        try:
            return ecdsa_verify(self.public_key, message_hash, self.signature)
        except (ValidationError, BadSignature, ValueError):
            return False

    @staticmethod
    def from_repr(representation: str) -> 'ENR':
        if not representation.startswith(ENR_PREFIX):
            raise InvalidIdentityError(f'ENR must start with "{ENR_PREFIX}"')

        encoded = representation[len(ENR_PREFIX) :]
        try:
            raw = base64.urlsafe_b64decode(encoded + '=' * (-len(encoded) % 4))
        except (binascii.Error, ValueError) as e:
            raise InvalidIdentityError(f'ENR is not valid base64: {e}') from e
        if len(raw) > MAX_ENR_SIZE:
            raise InvalidIdentityError(f'ENR exceeds {MAX_ENR_SIZE} bytes')

        try:
            items = rlp.decode(raw)
        except DecodingError as e:
            raise InvalidIdentityError(f'ENR is not valid RLP: {e}') from e

        if not isinstance(items, list) or len(items) < 2 or len(items) % 2:
            raise InvalidIdentityError('ENR must hold a signature, a sequence number and pairs')
        signature, sequence, *pairs = items
        if not isinstance(signature, bytes) or not isinstance(sequence, bytes):
            raise InvalidIdentityError('Malformed ENR signature or sequence number')

        pair_keys = pairs[::2]
        if any(not isinstance(key, bytes) for key in pair_keys):
            raise InvalidIdentityError('ENR keys must be byte strings')
        if pair_keys != sorted(pair_keys) or len(set(pair_keys)) != len(pair_keys):
            raise InvalidIdentityError('ENR keys must be sorted and unique')

        return ENR(
            signature=signature,
            sequence_number=int.from_bytes(sequence, 'big'),
            kv_pairs=dict(zip(pair_keys, pairs[1::2])),
        )


def decode_enr_public_key(record: str) -> keys.PublicKey:
    """Decodes an identity record and returns its verified secp256k1 public key."""
    enr = ENR.from_repr(record)
    if enr.identity_scheme != IDENTITY_SCHEME_V4:
        raise InvalidIdentityError(f'Unsupported ENR identity scheme: {enr.identity_scheme!r}')
    if not enr.verify_signature():
        raise InvalidIdentityError('ENR signature is invalid')
    return enr.public_key
