"""
RWAT Deployment Tooling

Network configuration, upgradeable proxy deployment and contract wrappers
for the RWAT asset-tokenization contract and the Multicall utility.
"""

__version__ = "1.0.0"
__author__ = "RWAT"

from .artifacts.loader import (
    get_abi,
    get_bytecode,
    load_artifact,
    get_contract_metadata
)

from .config import NetworkConfig, get_network, load_networks, connect
from .signers import Signer, get_signers
from .deployer import deploy_contract, contract_at
from .proxy import deploy_proxy, upgrade_proxy, ProxyDeployment
from .contracts.rwat import RWATContract
from .contracts.multicall import MulticallContract

__all__ = [
    'get_abi',
    'get_bytecode',
    'load_artifact',
    'get_contract_metadata',
    'NetworkConfig',
    'get_network',
    'load_networks',
    'connect',
    'Signer',
    'get_signers',
    'deploy_contract',
    'contract_at',
    'deploy_proxy',
    'upgrade_proxy',
    'ProxyDeployment',
    'RWATContract',
    'MulticallContract',
]
