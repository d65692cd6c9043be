"""
Artifact loader for compiled smart contracts.

This module provides functions to load ABI, bytecode, and other metadata
from the Hardhat-compiled contract artifacts.
"""

import json
import os
from pathlib import Path
from typing import Dict, Any, Optional, Sequence

from eth_abi import encode
from eth_utils.abi import collapse_if_tuple
from web3 import Web3

# Get the package root directory
PACKAGE_DIR = Path(__file__).parent.parent
PROJECT_ROOT = PACKAGE_DIR.parent

# Contract name mappings, relative to the Hardhat artifacts root
CONTRACT_PATHS = {
    "RWAT": "contracts/RWAT.sol/RWAT.json",
    "Multicall": "contracts/Multicall.sol/Multicall.json",
    "TestToken": "contracts/TestToken.sol/TestToken.json",
    "ERC1967Proxy": "@openzeppelin/contracts/proxy/ERC1967/ERC1967Proxy.sol/ERC1967Proxy.json",
    "TransparentUpgradeableProxy": (
        "@openzeppelin/contracts/proxy/transparent/"
        "TransparentUpgradeableProxy.sol/TransparentUpgradeableProxy.json"
    ),
    "ProxyAdmin": "@openzeppelin/contracts/proxy/transparent/ProxyAdmin.sol/ProxyAdmin.json",
}


def artifacts_dir() -> Path:
    """Return the artifacts root, honouring RWAT_ARTIFACTS_DIR."""
    override = os.environ.get("RWAT_ARTIFACTS_DIR")
    if override:
        return Path(override)
    return PROJECT_ROOT / "artifacts"


def artifact_path(contract_name: str) -> Path:
    if contract_name not in CONTRACT_PATHS:
        available = ", ".join(CONTRACT_PATHS.keys())
        raise ValueError(
            f"Unknown contract: {contract_name}. "
            f"Available contracts: {available}"
        )
    return artifacts_dir() / CONTRACT_PATHS[contract_name]


def load_artifact(contract_name: str) -> Dict[str, Any]:
    """
    Load the complete artifact JSON for a contract.

    Args:
        contract_name: Name of the contract (e.g., 'RWAT', 'Multicall')

    Returns:
        Complete artifact dictionary including ABI, bytecode, and metadata

    Raises:
        FileNotFoundError: If the artifact file doesn't exist
        ValueError: If the contract name is not recognized
    """
    path = artifact_path(contract_name)

    if not path.exists():
        raise FileNotFoundError(
            f"Artifact file not found: {path}\n"
            f"Make sure the contracts have been compiled with 'npx hardhat compile'"
        )

    with open(path, 'r') as f:
        return json.load(f)


def get_abi(contract_name: str) -> list:
    """
    Get the ABI for a specific contract.

    Args:
        contract_name: Name of the contract

    Returns:
        Contract ABI as a list
    """
    artifact = load_artifact(contract_name)
    return artifact.get('abi', [])


def get_bytecode(contract_name: str) -> str:
    """
    Get the deployment bytecode for a specific contract.

    Args:
        contract_name: Name of the contract

    Returns:
        Bytecode as a hex string (with '0x' prefix)
    """
    artifact = load_artifact(contract_name)
    return artifact.get('bytecode', '0x')


def get_deployed_bytecode(contract_name: str) -> str:
    """
    Get the deployed bytecode for a specific contract.

    Args:
        contract_name: Name of the contract

    Returns:
        Deployed bytecode as a hex string (with '0x' prefix)
    """
    artifact = load_artifact(contract_name)
    return artifact.get('deployedBytecode', '0x')


def get_contract_metadata(contract_name: str) -> Dict[str, Any]:
    """
    Get metadata about the contract compilation.

    Args:
        contract_name: Name of the contract

    Returns:
        Dictionary containing the artifact format, source name and
        whether unresolved library links remain
    """
    artifact = load_artifact(contract_name)

    return {
        'contractName': artifact.get('contractName'),
        'sourceName': artifact.get('sourceName'),
        'format': artifact.get('_format'),
        'hasLinkReferences': bool(artifact.get('linkReferences')),
    }


def find_function_abi(abi: list, function_name: str) -> Optional[Dict[str, Any]]:
    """Return the first ABI entry describing ``function_name``, if any."""
    for item in abi:
        if item.get('type') == 'function' and item.get('name') == function_name:
            return item
    return None


def get_function_selector(contract_name: str, function_name: str) -> Optional[str]:
    """
    Get the function selector (4-byte signature) for a specific function.

    Args:
        contract_name: Name of the contract
        function_name: Name of the function

    Returns:
        Function selector as a hex string, or None if not found
    """
    item = find_function_abi(get_abi(contract_name), function_name)
    if item is None:
        return None

    inputs = ','.join([inp['type'] for inp in item.get('inputs', [])])
    signature = f"{function_name}({inputs})"

    return '0x' + Web3.keccak(text=signature)[:4].hex().removeprefix('0x')


def encode_function_call(abi: list, function_name: str, args: Sequence[Any]) -> bytes:
    """
    ABI-encode a call to ``function_name`` (selector plus arguments).

    Raises:
        ValueError: If the function is missing or the arguments do not
            match its inputs
    """
    item = find_function_abi(abi, function_name)
    if item is None:
        raise ValueError(f"Function {function_name} not found in ABI")

    types = [collapse_if_tuple(inp) for inp in item.get('inputs', [])]
    if len(types) != len(args):
        raise ValueError(
            f"{function_name} expects {len(types)} arguments, got {len(args)}"
        )

    selector = Web3.keccak(text=f"{function_name}({','.join(types)})")[:4]
    return bytes(selector) + encode(types, list(args))


def load_build_info(contract_name: str) -> Dict[str, Any]:
    """
    Load the Hardhat build-info the contract was compiled in.

    The ``.dbg.json`` sidecar next to each artifact points at the build-info
    file holding the solc standard-JSON input and the long compiler version.

    Raises:
        FileNotFoundError: If the sidecar or build-info file is missing
    """
    path = artifact_path(contract_name)
    dbg_path = path.with_name(path.stem + ".dbg.json")

    if not dbg_path.exists():
        raise FileNotFoundError(f"Debug file not found: {dbg_path}")

    with open(dbg_path, 'r') as f:
        build_info_ref = json.load(f)['buildInfo']

    build_info_path = (dbg_path.parent / build_info_ref).resolve()
    if not build_info_path.exists():
        raise FileNotFoundError(f"Build info not found: {build_info_path}")

    with open(build_info_path, 'r') as f:
        return json.load(f)


def list_available_contracts() -> list:
    """
    List all available contracts in the package.

    Returns:
        List of contract names
    """
    return list(CONTRACT_PATHS.keys())


def validate_artifacts() -> Dict[str, bool]:
    """
    Validate that all expected artifacts are present.

    Returns:
        Dictionary mapping contract names to availability status
    """
    status = {}
    for contract_name in CONTRACT_PATHS:
        try:
            artifact = load_artifact(contract_name)
            status[contract_name] = bool(artifact.get('abi')) and artifact.get('bytecode', '0x') != '0x'
        except (FileNotFoundError, ValueError):
            status[contract_name] = False

    return status
