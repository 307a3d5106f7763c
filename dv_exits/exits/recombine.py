import logging

from eth_typing.bls import BLSSignature
from web3 import Web3

from dv_exits.common import strip_hex
from dv_exits.crypto import aggregate_bls_signatures
from dv_exits.metrics import metrics

from .exceptions import (
    InvalidInputError,
    InvalidSignatureLengthError,
    NoDataError,
    NoSignaturesError,
)
from .typings import ExistingExitRecord, ExitMessage, FullExitBlob, SignedExitMessage

logger = logging.getLogger(__name__)

BLS_SIGNATURE_HEX_LENGTH = 192


def recombine_exit_blobs(existing_record: ExistingExitRecord) -> FullExitBlob:
    if not existing_record.shares_exit_data:
        raise NoDataError(f'No exit data recorded for validator {existing_record.public_key}')

    # storage keys are zero-based, operators are numbered from one as share_idx
    signatures: dict[int, BLSSignature] = {}
    for storage_index, share in existing_record.shares_exit_data[0].items():
        if share is None or not share.partial_exit_signature:
            continue
        if not storage_index.isdecimal() or str(int(storage_index)) != storage_index:
            raise InvalidInputError(f'Invalid operator index key {storage_index!r} in exit data')
        signature_hex = strip_hex(share.partial_exit_signature)
        if len(signature_hex) != BLS_SIGNATURE_HEX_LENGTH:
            raise InvalidSignatureLengthError(
                f'Invalid partial exit signature length for operator index {storage_index}. '
                f'Expected {BLS_SIGNATURE_HEX_LENGTH} hex chars, got {len(signature_hex)}'
            )
        try:
            signatures[int(storage_index) + 1] = BLSSignature(bytes.fromhex(signature_hex))
        except ValueError as e:
            raise InvalidInputError(
                f'Malformed partial exit share for operator index {storage_index}'
            ) from e

    if not signatures:
        raise NoSignaturesError(
            f'No partial exit signatures recorded for validator {existing_record.public_key}'
        )

    ordered_signatures = [signatures[index] for index in sorted(signatures)]
    try:
        aggregate_signature = aggregate_bls_signatures(ordered_signatures)
    except Exception as e:
        raise InvalidInputError(f'Failed to aggregate partial exit signatures: {e}') from e

    logger.info(
        'Recombined exit for validator %s from operators %s',
        existing_record.validator_index,
        ', '.join(str(index) for index in sorted(signatures)),
    )
    metrics.recombined_exits.inc()

    return FullExitBlob(
        public_key=existing_record.public_key,
        signed_exit_message=SignedExitMessage(
            message=ExitMessage(
                epoch=existing_record.epoch,
                validator_index=existing_record.validator_index,
            ),
            signature=Web3.to_hex(aggregate_signature),
        ),
    )
