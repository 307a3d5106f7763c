import logging
from typing import Awaitable, Callable

from eth_typing import HexStr

from dv_exits.common import hex_equal, normalize_public_key
from dv_exits.metrics import metrics

from .consensus import get_capella_fork, get_genesis_validators_root, get_network_name
from .exceptions import (
    GenesisRootNotFoundError,
    IndexMismatchError,
    InvalidPartialSignatureError,
    InvalidPayloadSignatureError,
    NotFoundError,
    OutOfRangeError,
    SignatureConflictError,
    StaleEpochError,
    UnsupportedNetworkError,
)
from .typings import BlobStatus, ClusterConfig, ExistingExitRecord, ExitBlob, ExitPayload
from .verification import verify_exit_payload_signature, verify_partial_exit_signature

logger = logging.getLogger(__name__)

ExitRecordGetter = Callable[[HexStr], Awaitable[ExistingExitRecord | None]]


def classify_exit_blob(
    exit_blob: ExitBlob,
    existing_record: ExistingExitRecord | None,
    operator_index: int,
) -> BlobStatus:
    """
    Checks a partial exit against what was already accepted for its validator.
    `operator_index` is zero-based.
    """
    if existing_record is None:
        return BlobStatus.NEW
    if normalize_public_key(existing_record.public_key) != normalize_public_key(
        exit_blob.public_key
    ):
        return BlobStatus.NEW

    message = exit_blob.signed_exit_message.message
    if message.validator_index_value != existing_record.validator_index_value:
        raise IndexMismatchError(
            f'Validator index mismatch for already processed exit for public key '
            f'{exit_blob.public_key}. Expected {existing_record.validator_index}, '
            f'got {message.validator_index}.'
        )

    epoch = message.epoch_value
    existing_epoch = existing_record.epoch_value
    if epoch < existing_epoch:
        raise StaleEpochError(
            f'New exit epoch {epoch} is lower than existing exit epoch {existing_epoch} '
            f'for validator {exit_blob.public_key}.'
        )
    if epoch > existing_epoch:
        return BlobStatus.NEW

    existing_signature = existing_record.get_partial_signature(operator_index)
    if existing_signature is None:
        # another operator opened this epoch, this operator's share is still missing,
        # so it is accepted rather than skipped as already processed
        return BlobStatus.NEW
    if not hex_equal(existing_signature, exit_blob.signed_exit_message.signature):
        raise SignatureConflictError(
            f'Signature mismatch for validator {exit_blob.public_key}, operator index '
            f'{operator_index} at epoch {epoch}. Received different signature than existing.'
        )
    return BlobStatus.DUPLICATE


async def validate_exit_blobs(
    cluster_config: ClusterConfig,
    exit_payload: ExitPayload,
    beacon_api_url: str,
    existing_record: ExistingExitRecord | None = None,
    get_existing_record: ExitRecordGetter | None = None,
) -> list[ExitBlob]:
    """
    Verifies an operator's exit payload and returns the partial exits that
    are new and carry a valid partial signature. Duplicates are skipped,
    the first failure aborts the whole batch.

    Records are looked up with `get_existing_record(public_key)` when given,
    otherwise `existing_record` is checked against every blob.
    """
    operator_index = _validate_operator_and_payload(cluster_config, exit_payload)

    fork_version = cluster_config.definition.fork_version
    genesis_validators_root = await get_genesis_validators_root(fork_version, beacon_api_url)
    if not genesis_validators_root:
        raise GenesisRootNotFoundError('Could not retrieve genesis validators root.')
    if not get_capella_fork(fork_version):
        raise UnsupportedNetworkError(
            f'Unsupported network: Could not determine Capella fork for {fork_version}'
        )
    network = get_network_name(fork_version) or 'unknown'

    new_exit_blobs: list[ExitBlob] = []
    for exit_blob in exit_payload.partial_exits:
        public_share = _find_public_share(cluster_config, exit_blob.public_key, operator_index)

        if get_existing_record is not None:
            record = await get_existing_record(exit_blob.public_key)
        else:
            record = existing_record

        if classify_exit_blob(exit_blob, record, operator_index) == BlobStatus.DUPLICATE:
            logger.info(
                'Skipping already processed exit for validator %s by operator %d',
                exit_blob.public_key,
                exit_payload.share_idx,
            )
            metrics.duplicate_partial_exits.labels(network=network).inc()
            continue

        if not verify_partial_exit_signature(
            public_share,
            exit_blob.signed_exit_message,
            fork_version,
            genesis_validators_root,
        ):
            raise InvalidPartialSignatureError(
                f'Invalid partial exit signature for validator {exit_blob.public_key} '
                f'by operator index {operator_index}.'
            )
        new_exit_blobs.append(exit_blob)

    if new_exit_blobs:
        metrics.accepted_partial_exits.labels(network=network).inc(len(new_exit_blobs))
    logger.info(
        'Operator %d submitted %d partial exits, %d accepted',
        exit_payload.share_idx,
        len(exit_payload.partial_exits),
        len(new_exit_blobs),
    )
    return new_exit_blobs


def _validate_operator_and_payload(
    cluster_config: ClusterConfig, exit_payload: ExitPayload
) -> int:
    operators = cluster_config.definition.operators
    operator_index = exit_payload.share_idx - 1
    if not 0 <= operator_index < len(operators):
        raise OutOfRangeError(
            f'Invalid share_idx {exit_payload.share_idx} for {len(operators)} operators.'
        )

    if not verify_exit_payload_signature(operators[operator_index].enr, exit_payload):
        raise InvalidPayloadSignatureError('Incorrect payload signature for partial exits.')
    return operator_index


def _find_public_share(
    cluster_config: ClusterConfig, public_key: HexStr, operator_index: int
) -> HexStr:
    validator = cluster_config.find_validator(public_key)
    if validator is None:
        raise NotFoundError(
            f"Public key {public_key} not found in the cluster's distributed validators."
        )
    if operator_index >= len(validator.public_shares) or not validator.public_shares[
        operator_index
    ]:
        raise NotFoundError(
            f'Public share for operator index {operator_index} not found '
            f'for validator {public_key}'
        )
    return validator.public_shares[operator_index]
