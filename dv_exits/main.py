import argparse
import asyncio
import json
import logging
import sys

import dv_exits
from dv_exits.config.settings import LOG_LEVEL
from dv_exits.exits.exceptions import ExitValidationError
from dv_exits.exits.recombine import recombine_exit_blobs
from dv_exits.exits.service import validate_exit_blobs
from dv_exits.exits.typings import ClusterConfig, ExistingExitRecord, ExitPayload

logging.basicConfig(
    format='%(asctime)s %(name)s %(levelname)-8s %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
    level=LOG_LEVEL,
)

logger = logging.getLogger(__name__)


def _load_json(path: str) -> dict:
    with open(path, encoding='utf-8') as f:
        return json.load(f)


async def validate(args: argparse.Namespace) -> list[dict]:
    existing_record = None
    if args.record:
        existing_record = ExistingExitRecord.from_dict(_load_json(args.record))

    exit_blobs = await validate_exit_blobs(
        cluster_config=ClusterConfig.from_dict(_load_json(args.cluster)),
        exit_payload=ExitPayload.from_dict(_load_json(args.payload)),
        beacon_api_url=args.beacon_api_url,
        existing_record=existing_record,
    )
    return [exit_blob.as_dict() for exit_blob in exit_blobs]


def recombine(args: argparse.Namespace) -> dict:
    existing_record = ExistingExitRecord.from_dict(_load_json(args.record))
    return recombine_exit_blobs(existing_record).as_dict()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dv-exits', description='Validate and recombine distributed validator exits'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    validate_parser = subparsers.add_parser('validate', help='Verify an operator exit payload')
    validate_parser.add_argument('--cluster', required=True, help='Cluster config JSON file')
    validate_parser.add_argument('--payload', required=True, help='Exit payload JSON file')
    validate_parser.add_argument('--beacon-api-url', required=True, help='Beacon node API URL')
    validate_parser.add_argument('--record', help='Existing exit record JSON file')

    recombine_parser = subparsers.add_parser(
        'recombine', help='Aggregate recorded partial signatures'
    )
    recombine_parser.add_argument('--record', required=True, help='Existing exit record JSON file')
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger.debug('dv-exits version %s', dv_exits.__version__)
    try:
        if args.command == 'validate':
            result = asyncio.run(validate(args))
        else:
            result = recombine(args)
    except ExitValidationError as e:
        logger.error('%s: %s', type(e).__name__, e)
        return 1

    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write('\n')
    return 0


if __name__ == '__main__':
    sys.exit(main())
