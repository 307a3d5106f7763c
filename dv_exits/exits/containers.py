import ssz
from ssz.sedes import List, bytes4, bytes32, bytes48, bytes96, uint64

from dv_exits.common import hex_to_bytes

from .exceptions import InvalidInputError
from .typings import ExitBlob, ExitMessage, ExitPayload

# list limit of the signed payload type, fixed by the wire format
PARTIAL_EXITS_LIMIT = 65536


class ForkData(ssz.Serializable):
    fields = [
        ('current_version', bytes4),
        ('genesis_validators_root', bytes32),
    ]


class SigningData(ssz.Serializable):
    fields = [
        ('object_root', bytes32),
        ('domain', bytes32),
    ]


class VoluntaryExit(ssz.Serializable):
    fields = [
        ('epoch', uint64),
        ('validator_index', uint64),
    ]

    @classmethod
    def from_message(cls, message: ExitMessage) -> 'VoluntaryExit':
        return cls(epoch=message.epoch_value, validator_index=message.validator_index_value)


class SignedVoluntaryExit(ssz.Serializable):
    fields = [
        ('message', VoluntaryExit),
        ('signature', bytes96),
    ]


class PartialExit(ssz.Serializable):
    fields = [
        ('public_key', bytes48),
        ('signed_exit_message', SignedVoluntaryExit),
    ]

    @classmethod
    def from_exit_blob(cls, exit_blob: ExitBlob) -> 'PartialExit':
        signed_message = exit_blob.signed_exit_message
        return cls(
            public_key=_to_fixed_bytes(exit_blob.public_key, 48, 'public key'),
            signed_exit_message=SignedVoluntaryExit(
                message=VoluntaryExit.from_message(signed_message.message),
                signature=_to_fixed_bytes(signed_message.signature, 96, 'exit signature'),
            ),
        )


class PartialExitsPayload(ssz.Serializable):
    fields = [
        ('partial_exits', List(PartialExit, PARTIAL_EXITS_LIMIT)),
        ('share_idx', uint64),
    ]

    @classmethod
    def from_exit_payload(cls, exit_payload: ExitPayload) -> 'PartialExitsPayload':
        # list order is part of the signed content and is kept as submitted
        return cls(
            partial_exits=tuple(
                PartialExit.from_exit_blob(blob) for blob in exit_payload.partial_exits
            ),
            share_idx=exit_payload.share_idx,
        )


def _to_fixed_bytes(value: str, length: int, name: str) -> bytes:
    try:
        data = hex_to_bytes(value)
    except ValueError as e:
        raise InvalidInputError(f'Invalid {name} hex: {value}') from e
    if len(data) != length:
        raise InvalidInputError(f'{name.capitalize()} must be {length} bytes, got {len(data)}')
    return data
