"""
Source verification on Etherscan-family block explorers.

Submits the solc standard-JSON input recorded in Hardhat's build-info along
with the ABI-encoded constructor arguments, then polls until the explorer
reports a verdict.
"""

import json
import logging
import time
from typing import Any, Dict, Optional, Sequence

import requests
from eth_abi import encode
from eth_utils.abi import collapse_if_tuple
from web3 import Web3

from .artifacts.loader import get_abi, load_artifact, load_build_info
from .config import COMPILER, NetworkConfig
from .exceptions import VerificationError

logger = logging.getLogger(__name__)

ALREADY_VERIFIED = ("already verified", "contract source code already verified")
PENDING = "pending in queue"


def _constructor_types(contract_name: str) -> list:
    for item in get_abi(contract_name):
        if item.get("type") == "constructor":
            return [collapse_if_tuple(inp) for inp in item.get("inputs", [])]
    return []


def coerce_argument(abi_type: str, value: Any) -> Any:
    """Convert a command-line string to the Python value ``abi_type`` expects."""
    if not isinstance(value, str):
        return value
    if abi_type.startswith(("uint", "int")):
        return int(value, 0)
    if abi_type == "address":
        return Web3.to_checksum_address(value)
    if abi_type == "bool":
        return value.lower() in ("1", "true", "yes")
    if abi_type.startswith("bytes"):
        return bytes.fromhex(value.removeprefix("0x"))
    return value


def encode_constructor_arguments(contract_name: str, args: Sequence[Any]) -> str:
    """
    ABI-encode constructor arguments as the unprefixed hex explorers expect.

    Raises:
        ValueError: If the argument count does not match the constructor
    """
    types = _constructor_types(contract_name)
    if len(types) != len(args):
        raise ValueError(
            f"{contract_name} constructor expects {len(types)} arguments, got {len(args)}"
        )
    if not types:
        return ""
    values = [coerce_argument(t, v) for t, v in zip(types, args)]
    return encode(types, values).hex()


def compiler_version(build_info: Dict[str, Any]) -> str:
    long_version = build_info.get("solcLongVersion") or COMPILER.version
    return f"v{long_version}"


class ExplorerClient:
    """Minimal client for the Etherscan ``contract`` API module."""

    def __init__(self, api_url: str, api_key: str, session: Optional[requests.Session] = None,
                 timeout: float = 30):
        self.api_url = api_url
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    @classmethod
    def for_network(cls, network: NetworkConfig, session: Optional[requests.Session] = None):
        if not network.explorer_api_url:
            raise VerificationError(f"Network {network.name} has no block explorer")
        if not network.explorer_api_key:
            raise VerificationError(f"No explorer API key configured for {network.name}")
        return cls(network.explorer_api_url, network.explorer_api_key, session=session)

    def _check(self, response: requests.Response) -> Dict[str, Any]:
        response.raise_for_status()
        return response.json()

    def submit(self, address: str, contract_name: str, build_info: Dict[str, Any],
               constructor_args: str) -> Optional[str]:
        """
        Submit a verification request.

        Returns:
            The request GUID, or None if the contract is already verified
        """
        artifact = load_artifact(contract_name)
        payload = {
            "apikey": self.api_key,
            "module": "contract",
            "action": "verifysourcecode",
            "contractaddress": address,
            "sourceCode": json.dumps(build_info["input"]),
            "codeformat": "solidity-standard-json-input",
            "contractname": f"{artifact['sourceName']}:{artifact['contractName']}",
            "compilerversion": compiler_version(build_info),
            # Etherscan's parameter name is misspelled
            "constructorArguements": constructor_args,
        }
        body = self._check(self.session.post(self.api_url, data=payload, timeout=self.timeout))
        result = str(body.get("result", ""))

        if result.lower() in ALREADY_VERIFIED:
            return None
        if body.get("status") != "1":
            raise VerificationError(f"Verification request rejected: {result}")
        return result

    def status(self, guid: str) -> Dict[str, Any]:
        params = {
            "apikey": self.api_key,
            "module": "contract",
            "action": "checkverifystatus",
            "guid": guid,
        }
        return self._check(self.session.get(self.api_url, params=params, timeout=self.timeout))


def verify_contract(
    network: NetworkConfig,
    address: str,
    contract_name: str,
    constructor_args: Sequence[Any] = (),
    session: Optional[requests.Session] = None,
    poll_interval: float = 5.0,
    max_attempts: int = 20,
) -> str:
    """
    Verify a deployed contract's source on the network's explorer.

    Returns:
        The explorer's final status message

    Raises:
        VerificationError: If the explorer rejects the source or never
            reaches a verdict
    """
    client = ExplorerClient.for_network(network, session=session)
    build_info = load_build_info(contract_name)
    encoded_args = encode_constructor_arguments(contract_name, constructor_args)

    logger.info("Submitting %s at %s for verification on %s", contract_name, address, network.name)
    guid = client.submit(address, contract_name, build_info, encoded_args)
    if guid is None:
        return "Already Verified"

    for _ in range(max_attempts):
        time.sleep(poll_interval)
        body = client.status(guid)
        result = str(body.get("result", ""))

        if result.lower() == PENDING:
            logger.debug("Verification %s pending", guid)
            continue
        if body.get("status") == "1" or result.lower() in ALREADY_VERIFIED:
            logger.info("Verified %s at %s", contract_name, address)
            return result
        raise VerificationError(f"Verification failed: {result}")

    raise VerificationError(f"Verification {guid} still pending after {max_attempts} attempts")
