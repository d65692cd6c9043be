"""
Upgradeable proxy deployment.

Follows the OpenZeppelin upgrades workflow: the implementation is deployed
on its own, state is set up through an ``initialize`` call encoded into the
proxy's constructor, and the caller interacts with the proxy address using
the implementation's ABI.

Two proxy kinds are supported:

* ``transparent``: a ``TransparentUpgradeableProxy`` administered by a
  ``ProxyAdmin`` contract (deployed once and reused when known).
* ``uups``: a bare ``ERC1967Proxy``; upgrades go through the
  implementation's own ``upgradeTo``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from web3 import Web3

from .artifacts.loader import encode_function_call, get_abi
from .config import NetworkConfig
from .deployer import contract_at, deploy_contract
from .exceptions import DeploymentError
from .manifest import DeploymentManifest
from .signers import Signer

logger = logging.getLogger(__name__)

PROXY_KINDS = ("transparent", "uups")

# ERC-1967 storage slots: keccak256("eip1967.proxy.<name>") - 1
IMPLEMENTATION_SLOT = 0x360894A13BA1A3210667C828492DB98DCA3E2076CC3735A920A3CA505D382BBC
ADMIN_SLOT = 0xB53127684A568B3173AE13B9F8A6016E243E63B6E8EE1178D6A717850B5D6103


@dataclass
class ProxyDeployment:
    """Result of a proxy deployment."""

    contract: Any
    address: str
    implementation: str
    kind: str
    admin: Optional[str] = None
    tx_hash: Optional[str] = None


def encode_initializer(abi: list, initializer: Optional[str], args: Sequence[Any]) -> bytes:
    """
    ABI-encode the initializer call passed to the proxy constructor.

    Args:
        abi: Implementation ABI
        initializer: Function name, or None for no initialization
        args: Initializer arguments

    Returns:
        Selector followed by encoded arguments, or empty bytes

    Raises:
        ValueError: If the initializer is missing or the arguments do not
            match its inputs
    """
    if initializer is None:
        if args:
            raise ValueError("Initializer arguments given without an initializer")
        return b""

    return encode_function_call(abi, initializer, args)


def _read_address_slot(w3: Web3, address: str, slot: int) -> str:
    raw = w3.eth.get_storage_at(Web3.to_checksum_address(address), slot)
    return Web3.to_checksum_address(bytes(raw)[-20:])


def get_implementation_address(w3: Web3, proxy_address: str) -> str:
    """Read the implementation address from the ERC-1967 slot."""
    return _read_address_slot(w3, proxy_address, IMPLEMENTATION_SLOT)


def get_admin_address(w3: Web3, proxy_address: str) -> str:
    """Read the admin address from the ERC-1967 slot."""
    return _read_address_slot(w3, proxy_address, ADMIN_SLOT)


def _check_kind(kind: str) -> None:
    if kind not in PROXY_KINDS:
        raise ValueError(f"Unknown proxy kind: {kind}. Expected one of {', '.join(PROXY_KINDS)}")


def _ensure_proxy_admin(
    w3: Web3,
    signer: Signer,
    proxy_admin: Optional[str],
    manifest: Optional[DeploymentManifest],
) -> str:
    if proxy_admin is not None:
        proxy_admin = Web3.to_checksum_address(proxy_admin)
        if not w3.eth.get_code(proxy_admin):
            raise DeploymentError(f"ProxyAdmin {proxy_admin} has no contract code")
        return proxy_admin

    recorded = manifest.admin if manifest is not None else None
    if recorded is not None:
        recorded = Web3.to_checksum_address(recorded)
        if w3.eth.get_code(recorded):
            return recorded
        # the node was reset or the manifest belongs to another chain
        logger.warning("Recorded ProxyAdmin %s has no code on this network, deploying a new one", recorded)

    admin_contract, _ = deploy_contract(w3, signer, "ProxyAdmin")
    if manifest is not None:
        manifest.set_admin(admin_contract.address)
    return admin_contract.address


def deploy_proxy(
    w3: Web3,
    signer: Signer,
    contract_name: str,
    args: Sequence[Any] = (),
    initializer: Optional[str] = "initialize",
    kind: str = "transparent",
    network: Optional[NetworkConfig] = None,
    proxy_admin: Optional[str] = None,
    manifest: Optional[DeploymentManifest] = None,
) -> ProxyDeployment:
    """
    Deploy a contract behind an upgradeable proxy.

    Args:
        w3: Connected Web3 instance
        signer: Deployer account
        contract_name: Implementation artifact name (e.g., 'RWAT')
        args: Initializer arguments
        initializer: Initializer function name, or None
        kind: 'transparent' or 'uups'
        network: Network profile, used for the contract size check
        proxy_admin: Existing ProxyAdmin address to reuse (transparent only)
        manifest: Optional manifest to read the admin from and record into

    Returns:
        ProxyDeployment whose contract uses the implementation ABI at the
        proxy address
    """
    _check_kind(kind)

    abi = get_abi(contract_name)
    data = encode_initializer(abi, initializer, args)

    implementation, _ = deploy_contract(w3, signer, contract_name, network=network)

    admin = None
    if kind == "transparent":
        admin = _ensure_proxy_admin(w3, signer, proxy_admin, manifest)
        proxy, receipt = deploy_contract(
            w3, signer, "TransparentUpgradeableProxy",
            (implementation.address, admin, data),
        )
    else:
        proxy, receipt = deploy_contract(
            w3, signer, "ERC1967Proxy", (implementation.address, data)
        )

    tx_hash = Web3.to_hex(receipt["transactionHash"])
    logger.info(
        "%s proxy (%s) deployed at %s, implementation %s",
        contract_name, kind, proxy.address, implementation.address,
    )

    if manifest is not None:
        manifest.record_proxy(
            contract_name,
            address=proxy.address,
            kind=kind,
            implementation=implementation.address,
            tx_hash=tx_hash,
        )
        manifest.save()

    return ProxyDeployment(
        contract=contract_at(w3, contract_name, proxy.address, abi=abi),
        address=proxy.address,
        implementation=implementation.address,
        kind=kind,
        admin=admin,
        tx_hash=tx_hash,
    )


def upgrade_proxy(
    w3: Web3,
    signer: Signer,
    proxy_address: str,
    contract_name: str,
    kind: str = "transparent",
    proxy_admin: Optional[str] = None,
    network: Optional[NetworkConfig] = None,
) -> str:
    """
    Deploy a new implementation and point an existing proxy at it.

    Returns:
        The new implementation address
    """
    _check_kind(kind)
    proxy_address = Web3.to_checksum_address(proxy_address)

    implementation, _ = deploy_contract(w3, signer, contract_name, network=network)

    if kind == "transparent":
        if proxy_admin is None:
            proxy_admin = get_admin_address(w3, proxy_address)
        admin = contract_at(w3, "ProxyAdmin", proxy_admin)
        signer.transact(
            admin.functions.upgrade(proxy_address, implementation.address),
            label="ProxyAdmin.upgrade",
        )
    else:
        proxy = contract_at(w3, contract_name, proxy_address)
        signer.transact(
            proxy.functions.upgradeTo(implementation.address),
            label=f"{contract_name}.upgradeTo",
        )

    logger.info("Upgraded %s at %s to %s", contract_name, proxy_address, implementation.address)
    return implementation.address
