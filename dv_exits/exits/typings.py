import re
from dataclasses import dataclass, field
from enum import Enum

from eth_typing import HexStr

from dv_exits.common import normalize_public_key

from .exceptions import InvalidInputError, OutOfRangeError

UINT64_MAX = 2**64 - 1

_DECIMAL_RE = re.compile(r'[0-9]+')


def parse_uint64(value: str | int, field_name: str = 'value') -> int:
    """
    Range-checked conversion of a decimal string to an unsigned 64-bit integer.
    Floats are rejected so values above 2**53 never lose precision.
    """
    if isinstance(value, bool):
        raise InvalidInputError(f'{field_name} must be a decimal integer, got {value!r}')
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and _DECIMAL_RE.fullmatch(value):
        number = int(value, 10)
    else:
        raise InvalidInputError(f'{field_name} must be a decimal integer, got {value!r}')

    if not 0 <= number <= UINT64_MAX:
        raise OutOfRangeError(f'{field_name} {number} does not fit into uint64')
    return number


class BlobStatus(Enum):
    """
    NEW blobs still need signature verification and storage. At an epoch that
    is already on record, a blob is NEW only when its operator has no share
    stored yet; a resubmitted share is DUPLICATE and a different one a conflict.
    """

    NEW = 'new'
    DUPLICATE = 'duplicate'


@dataclass(frozen=True)
class ExitMessage:
    epoch: str
    validator_index: str

    @property
    def epoch_value(self) -> int:
        return parse_uint64(self.epoch, 'epoch')

    @property
    def validator_index_value(self) -> int:
        return parse_uint64(self.validator_index, 'validator_index')

    @staticmethod
    def from_dict(data: dict) -> 'ExitMessage':
        return ExitMessage(epoch=str(data['epoch']), validator_index=str(data['validator_index']))

    def as_dict(self) -> dict:
        return {'epoch': self.epoch, 'validator_index': self.validator_index}


@dataclass(frozen=True)
class SignedExitMessage:
    message: ExitMessage
    signature: HexStr

    @staticmethod
    def from_dict(data: dict) -> 'SignedExitMessage':
        return SignedExitMessage(
            message=ExitMessage.from_dict(data['message']),
            signature=HexStr(data['signature']),
        )

    def as_dict(self) -> dict:
        return {'message': self.message.as_dict(), 'signature': self.signature}


@dataclass(frozen=True)
class ExitBlob:
    public_key: HexStr
    signed_exit_message: SignedExitMessage

    @staticmethod
    def from_dict(data: dict) -> 'ExitBlob':
        return ExitBlob(
            public_key=HexStr(data['public_key']),
            signed_exit_message=SignedExitMessage.from_dict(data['signed_exit_message']),
        )

    def as_dict(self) -> dict:
        return {
            'public_key': self.public_key,
            'signed_exit_message': self.signed_exit_message.as_dict(),
        }


@dataclass
class ExitPayload:
    """
    One operator's authenticated submission. `share_idx` is one-based and
    `signature` is the operator's secp256k1 signature over the payload root.
    """

    partial_exits: list[ExitBlob]
    share_idx: int
    signature: HexStr

    @staticmethod
    def from_dict(data: dict) -> 'ExitPayload':
        return ExitPayload(
            partial_exits=[ExitBlob.from_dict(item) for item in data['partial_exits']],
            share_idx=int(data['share_idx']),
            signature=HexStr(data['signature']),
        )

    def as_dict(self) -> dict:
        return {
            'partial_exits': [blob.as_dict() for blob in self.partial_exits],
            'share_idx': self.share_idx,
            'signature': self.signature,
        }


@dataclass
class Operator:
    enr: str


@dataclass
class ClusterDefinition:
    operators: list[Operator]
    fork_version: HexStr
    threshold: int


@dataclass
class DistributedValidator:
    distributed_public_key: HexStr
    public_shares: list[HexStr]


@dataclass
class ClusterConfig:
    definition: ClusterDefinition
    distributed_validators: list[DistributedValidator]

    def find_validator(self, public_key: str) -> DistributedValidator | None:
        normalized = normalize_public_key(public_key)
        for validator in self.distributed_validators:
            if normalize_public_key(validator.distributed_public_key) == normalized:
                return validator
        return None

    @staticmethod
    def from_dict(data: dict) -> 'ClusterConfig':
        definition = data['definition']
        return ClusterConfig(
            definition=ClusterDefinition(
                operators=[Operator(enr=item['enr']) for item in definition['operators']],
                fork_version=HexStr(definition['fork_version']),
                threshold=int(definition['threshold']),
            ),
            distributed_validators=[
                DistributedValidator(
                    distributed_public_key=HexStr(item['distributed_public_key']),
                    public_shares=[HexStr(share) for share in item['public_shares']],
                )
                for item in data['distributed_validators']
            ],
        )


@dataclass
class ShareExitData:
    partial_exit_signature: HexStr


@dataclass
class ExistingExitRecord:
    """
    Partial signatures accumulated for one validator. `shares_exit_data[0]`
    maps a zero-based operator index (as a string) to that operator's share.
    """

    public_key: HexStr
    epoch: str
    validator_index: str
    shares_exit_data: list[dict[str, ShareExitData]] = field(default_factory=list)

    @property
    def epoch_value(self) -> int:
        return parse_uint64(self.epoch, 'epoch')

    @property
    def validator_index_value(self) -> int:
        return parse_uint64(self.validator_index, 'validator_index')

    def get_partial_signature(self, operator_index: int) -> HexStr | None:
        if not self.shares_exit_data:
            return None
        share = self.shares_exit_data[0].get(str(operator_index))
        if share is None or not share.partial_exit_signature:
            return None
        return share.partial_exit_signature

    def merge(self, exit_blob: ExitBlob, operator_index: int) -> 'ExistingExitRecord':
        """
        Returns the record a store should persist after `exit_blob` was accepted.
        A later epoch supersedes every signature collected for the earlier one.
        """
        message = exit_blob.signed_exit_message.message
        if message.epoch_value > self.epoch_value:
            return ExistingExitRecord.from_exit_blob(exit_blob, operator_index)

        shares = dict(self.shares_exit_data[0]) if self.shares_exit_data else {}
        shares[str(operator_index)] = ShareExitData(
            partial_exit_signature=exit_blob.signed_exit_message.signature
        )
        return ExistingExitRecord(
            public_key=self.public_key,
            epoch=self.epoch,
            validator_index=self.validator_index,
            shares_exit_data=[shares, *self.shares_exit_data[1:]],
        )

    @staticmethod
    def from_exit_blob(exit_blob: ExitBlob, operator_index: int) -> 'ExistingExitRecord':
        message = exit_blob.signed_exit_message.message
        return ExistingExitRecord(
            public_key=normalize_public_key(exit_blob.public_key),
            epoch=message.epoch,
            validator_index=message.validator_index,
            shares_exit_data=[
                {
                    str(operator_index): ShareExitData(
                        partial_exit_signature=exit_blob.signed_exit_message.signature
                    )
                }
            ],
        )

    @staticmethod
    def from_dict(data: dict) -> 'ExistingExitRecord':
        shares_exit_data = []
        for shares in data.get('shares_exit_data') or []:
            shares_exit_data.append(
                {
                    str(index): ShareExitData(
                        partial_exit_signature=HexStr(share.get('partial_exit_signature') or '')
                    )
                    for index, share in (shares or {}).items()
                    if share is not None
                }
            )
        return ExistingExitRecord(
            public_key=HexStr(data['public_key']),
            epoch=str(data['epoch']),
            validator_index=str(data['validator_index']),
            shares_exit_data=shares_exit_data,
        )

    def as_dict(self) -> dict:
        return {
            'public_key': self.public_key,
            'epoch': self.epoch,
            'validator_index': self.validator_index,
            'shares_exit_data': [
                {
                    index: {'partial_exit_signature': share.partial_exit_signature}
                    for index, share in shares.items()
                }
                for shares in self.shares_exit_data
            ],
        }


@dataclass(frozen=True)
class FullExitBlob:
    public_key: HexStr
    signed_exit_message: SignedExitMessage

    def as_dict(self) -> dict:
        return {
            'public_key': self.public_key,
            'signed_exit_message': self.signed_exit_message.as_dict(),
        }
