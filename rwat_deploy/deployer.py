"""
Plain (non-proxy) contract deployment.

Resolves the compiled artifact by name, submits the creation transaction
and waits for it to be mined. There is no retry: any failure propagates.
"""

import logging
from typing import Any, Optional, Sequence

from web3 import Web3

from .artifacts.loader import get_abi, get_bytecode, get_deployed_bytecode
from .config import NetworkConfig
from .exceptions import ContractSizeError, DeploymentError
from .signers import Signer

logger = logging.getLogger(__name__)

# EIP-170
MAX_CONTRACT_SIZE = 24576


def bytecode_size(bytecode: str) -> int:
    """Number of bytes in a 0x-prefixed hex bytecode string."""
    return len(bytecode.removeprefix("0x")) // 2


def check_contract_size(contract_name: str, network: Optional[NetworkConfig]) -> None:
    """
    Refuse to deploy oversized runtime code on size-limited networks.

    Raises:
        ContractSizeError: If the runtime bytecode exceeds 24576 bytes and
            the network does not allow unlimited contract size
    """
    if network is None or network.allow_unlimited_contract_size:
        return

    size = bytecode_size(get_deployed_bytecode(contract_name))
    if size > MAX_CONTRACT_SIZE:
        raise ContractSizeError(
            f"{contract_name} runtime code is {size} bytes, "
            f"exceeding the {MAX_CONTRACT_SIZE} byte limit on {network.name}"
        )


def contract_at(w3: Web3, contract_name: str, address: str, abi: Optional[list] = None):
    """Bind a contract ABI to an already deployed address."""
    return w3.eth.contract(
        address=Web3.to_checksum_address(address),
        abi=abi if abi is not None else get_abi(contract_name),
    )


def deploy_contract(
    w3: Web3,
    signer: Signer,
    contract_name: str,
    args: Sequence[Any] = (),
    network: Optional[NetworkConfig] = None,
):
    """
    Deploy a contract directly from its artifact.

    Args:
        w3: Connected Web3 instance
        signer: Account paying for the deployment
        contract_name: Artifact name (e.g., 'TestToken')
        args: Constructor arguments
        network: Network profile, used for the contract size check

    Returns:
        Tuple of (contract bound to the new address, receipt)

    Raises:
        ContractSizeError: If the code is too large for the network
        DeploymentError: If the receipt carries no contract address
    """
    check_contract_size(contract_name, network)

    abi = get_abi(contract_name)
    factory = w3.eth.contract(abi=abi, bytecode=get_bytecode(contract_name))

    logger.info("Deploying %s from %s", contract_name, signer.address)
    receipt = signer.transact(factory.constructor(*args), label=f"{contract_name}.constructor")

    address = receipt.get("contractAddress")
    if not address:
        raise DeploymentError(f"{contract_name} deployment produced no contract address")

    logger.info("%s deployed at %s", contract_name, address)
    return contract_at(w3, contract_name, address, abi=abi), receipt
