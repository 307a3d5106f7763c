from dataclasses import dataclass

from eth_typing import HexStr

MAINNET = 'mainnet'
GOERLI = 'goerli'
GNOSIS = 'gnosis'
HOLESKY = 'holesky'
SEPOLIA = 'sepolia'
HOODI = 'hoodi'


@dataclass
class NetworkConfig:
    GENESIS_FORK_VERSION: HexStr
    # voluntary exits are signed with the Capella fork version from Deneb on
    CAPELLA_FORK_VERSION: HexStr


NETWORKS: dict[str, NetworkConfig] = {
    MAINNET: NetworkConfig(
        GENESIS_FORK_VERSION=HexStr('0x00000000'),
        CAPELLA_FORK_VERSION=HexStr('0x03000000'),
    ),
    GOERLI: NetworkConfig(
        GENESIS_FORK_VERSION=HexStr('0x00001020'),
        CAPELLA_FORK_VERSION=HexStr('0x03001020'),
    ),
    GNOSIS: NetworkConfig(
        GENESIS_FORK_VERSION=HexStr('0x00000064'),
        CAPELLA_FORK_VERSION=HexStr('0x03000064'),
    ),
    HOLESKY: NetworkConfig(
        GENESIS_FORK_VERSION=HexStr('0x01017000'),
        CAPELLA_FORK_VERSION=HexStr('0x04017000'),
    ),
    SEPOLIA: NetworkConfig(
        GENESIS_FORK_VERSION=HexStr('0x90000069'),
        CAPELLA_FORK_VERSION=HexStr('0x90000072'),
    ),
    HOODI: NetworkConfig(
        GENESIS_FORK_VERSION=HexStr('0x10000910'),
        CAPELLA_FORK_VERSION=HexStr('0x40000910'),
    ),
}

FORK_NAMES: dict[str, str] = {
    config.GENESIS_FORK_VERSION: name for name, config in NETWORKS.items()
}

CAPELLA_FORK_MAPPING: dict[str, HexStr] = {
    config.GENESIS_FORK_VERSION: config.CAPELLA_FORK_VERSION for config in NETWORKS.values()
}
