"""
Signature checks for operator-submitted exits.

Payload roots are computed over `partial_exits` in the order they were
submitted. Signers must hash the very same ordering: the list is never sorted
here, and a reordered list yields a different root, so its signature fails.
"""
from eth_typing import HexStr
from eth_typing.bls import BLSPubkey, BLSSignature
from ssz.exceptions import SerializationError

from dv_exits.common import hex_to_bytes, strip_hex
from dv_exits.crypto import bls_verify, ecdsa_verify
from dv_exits.enr import decode_enr_public_key

from .consensus import get_capella_fork
from .containers import PartialExitsPayload, VoluntaryExit
from .exceptions import (
    InvalidIdentityError,
    InvalidInputError,
    InvalidSignatureFormatError,
    SignatureVerificationError,
    UnsupportedNetworkError,
)
from .signing import DOMAIN_VOLUNTARY_EXIT, compute_domain, compute_signing_root
from .typings import ExitMessage, ExitPayload, SignedExitMessage

PAYLOAD_SIGNATURE_HEX_LENGTH = 130


def compute_exit_message_root(message: ExitMessage) -> bytes:
    return VoluntaryExit.from_message(message).hash_tree_root


def compute_exit_payload_root(exit_payload: ExitPayload) -> bytes:
    try:
        return PartialExitsPayload.from_exit_payload(exit_payload).hash_tree_root
    except InvalidInputError:
        raise
    except (SerializationError, ValueError) as e:
        raise InvalidInputError(f'Exit payload cannot be serialized: {e}') from e


def get_exit_message_signing_root(
    message: ExitMessage, fork_version: HexStr, genesis_validators_root: bytes | None
) -> bytes:
    """Signing root of a voluntary exit for an already resolved Capella fork version."""
    domain = compute_domain(DOMAIN_VOLUNTARY_EXIT, fork_version, genesis_validators_root)
    return compute_signing_root(compute_exit_message_root(message), domain)


def verify_partial_exit_signature(
    public_share_key: HexStr,
    signed_exit_message: SignedExitMessage,
    fork_version: str,
    genesis_validators_root: HexStr | bytes | None,
) -> bool:
    capella_fork_version = get_capella_fork(fork_version)
    if not capella_fork_version:
        raise UnsupportedNetworkError(
            f'Could not determine Capella fork version for base fork: {fork_version}'
        )

    if isinstance(genesis_validators_root, str):
        genesis_validators_root = _hex_to_bytes(genesis_validators_root, 'genesis validators root')

    signing_root = get_exit_message_signing_root(
        signed_exit_message.message, capella_fork_version, genesis_validators_root
    )
    return bls_verify(
        BLSPubkey(_hex_to_bytes(public_share_key, 'public share key')),
        signing_root,
        BLSSignature(_hex_to_bytes(signed_exit_message.signature, 'partial exit signature')),
    )


def verify_exit_payload_signature(operator_enr: str, exit_payload: ExitPayload) -> bool:
    payload_root = compute_exit_payload_root(exit_payload)

    try:
        public_key = decode_enr_public_key(operator_enr)
    except InvalidIdentityError as e:
        raise InvalidIdentityError(f'Invalid ENR string: {operator_enr}. Error: {e}') from e

    signature_hex = strip_hex(exit_payload.signature)
    if len(signature_hex) != PAYLOAD_SIGNATURE_HEX_LENGTH:
        raise InvalidSignatureFormatError(
            f'Invalid signature length. Expected {PAYLOAD_SIGNATURE_HEX_LENGTH} hex chars, '
            f'got {len(signature_hex)}'
        )
    try:
        signature = bytes.fromhex(signature_hex)
    except ValueError as e:
        raise InvalidSignatureFormatError('Payload signature is not valid hex') from e

    try:
        return ecdsa_verify(public_key, payload_root, signature)
    except Exception as e:
        raise SignatureVerificationError(f'Signature verification failed: {e}') from e


def _hex_to_bytes(value: str, name: str) -> bytes:
    try:
        return hex_to_bytes(value)
    except ValueError as e:
        raise InvalidInputError(f'Invalid {name} hex: {value}') from e
