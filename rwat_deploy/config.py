"""
Network and compiler configuration.

Network profiles are assembled from environment variables (optionally read
from a ``.env`` file). A profile is only validated when it is selected, so a
missing mainnet key does not prevent working against a testnet.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from dotenv import find_dotenv, load_dotenv
from web3 import Web3

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

LOCAL_NETWORK = "hardhat"
DEFAULT_LOCAL_RPC_URL = "http://127.0.0.1:8545"

EXPLORER_API_URLS = {
    "BSCTestnet": "https://api-testnet.bscscan.com/api",
    "BSCMAINNET": "https://api.bscscan.com/api",
    "mumbai": "https://api-testnet.polygonscan.com/api",
}


@dataclass(frozen=True)
class CompilerSettings:
    """Solidity compiler profile the artifacts were built with."""

    version: str = "0.8.4"
    optimizer_enabled: bool = True
    optimizer_runs: int = 1


@dataclass(frozen=True)
class GasReporterSettings:
    """Pricing inputs for the gas report: currency, chain token and price sources."""

    currency: str = "USD"
    token: str = "BNB"
    gas_price_api: str = "https://api.bscscan.com/api?module=proxy&action=eth_gasPrice"
    gas_price_gwei: float = 6.5
    coinmarketcap_api_key: Optional[str] = None
    enabled: bool = False


@dataclass(frozen=True)
class NetworkConfig:
    """A target chain: endpoint, signing keys and contract-size policy."""

    name: str
    url: Optional[str]
    private_keys: List[str] = field(default_factory=list)
    allow_unlimited_contract_size: bool = True
    explorer_api_url: Optional[str] = None
    explorer_api_key: Optional[str] = None

    @property
    def is_local(self) -> bool:
        return self.name == LOCAL_NETWORK

    def validate(self) -> None:
        """
        Check that the profile can actually be used.

        Raises:
            ConfigurationError: If the URL or a signing key is missing
        """
        if not self.url:
            raise ConfigurationError(f"Network {self.name} has no RPC URL configured")
        if self.is_local:
            return
        if not self.private_keys:
            raise ConfigurationError(f"Network {self.name} has no signing key configured")


COMPILER = CompilerSettings()


def _prefixed_key(key: Optional[str]) -> List[str]:
    key = (key or "").strip()
    if not key or key == "0x":
        return []
    if not key.startswith("0x"):
        key = f"0x{key}"
    return [key]


def _read_env(env: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    if env is not None:
        return env
    load_dotenv(find_dotenv(usecwd=True))
    return os.environ


def load_networks(env: Optional[Mapping[str, str]] = None) -> Dict[str, NetworkConfig]:
    """
    Build every known network profile from the environment.

    Args:
        env: Mapping to read variables from. Defaults to ``os.environ``
            after loading ``.env``.

    Returns:
        Dictionary of network name to NetworkConfig
    """
    env = _read_env(env)

    bsc_url = env.get("BSC_API_URL")
    testnet_keys = _prefixed_key(env.get("BSCTESTNET_PRIVATE_KEY_1970"))
    polygonscan_key = env.get("POLYGONSCAN_API_KEY")
    bscscan_key = env.get("BSCSCAN_API_KEY") or polygonscan_key

    return {
        LOCAL_NETWORK: NetworkConfig(
            name=LOCAL_NETWORK,
            url=env.get("HARDHAT_RPC_URL") or DEFAULT_LOCAL_RPC_URL,
        ),
        "BSCTestnet": NetworkConfig(
            name="BSCTestnet",
            url=bsc_url,
            private_keys=testnet_keys,
            explorer_api_url=EXPLORER_API_URLS["BSCTestnet"],
            explorer_api_key=bscscan_key,
        ),
        "BSCMAINNET": NetworkConfig(
            name="BSCMAINNET",
            url=bsc_url,
            private_keys=_prefixed_key(env.get("BSC_MAINNET_PRIVATE_KEY")),
            explorer_api_url=EXPLORER_API_URLS["BSCMAINNET"],
            explorer_api_key=bscscan_key,
        ),
        "mumbai": NetworkConfig(
            name="mumbai",
            url=env.get("POLYGONSCAN_API_URL"),
            private_keys=testnet_keys,
            explorer_api_url=EXPLORER_API_URLS["mumbai"],
            explorer_api_key=polygonscan_key,
        ),
    }


def default_network_name(env: Optional[Mapping[str, str]] = None) -> str:
    env = _read_env(env)
    return env.get("RWAT_NETWORK") or LOCAL_NETWORK


def get_network(name: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> NetworkConfig:
    """
    Select and validate a network profile.

    Args:
        name: Network name (e.g., 'BSCTestnet'). Defaults to RWAT_NETWORK
            or the local network.
        env: Optional environment mapping

    Returns:
        The validated NetworkConfig

    Raises:
        ConfigurationError: If the network is unknown or incomplete
    """
    networks = load_networks(env)
    if name is None:
        name = default_network_name(env)

    if name not in networks:
        available = ", ".join(networks.keys())
        raise ConfigurationError(
            f"Unknown network: {name}. Available networks: {available}"
        )

    network = networks[name]
    network.validate()
    return network


def gas_reporter_settings(env: Optional[Mapping[str, str]] = None) -> GasReporterSettings:
    env = _read_env(env)
    enabled = env.get("REPORT_GAS", "").lower() in ("1", "true", "yes")
    return GasReporterSettings(
        coinmarketcap_api_key=env.get("COINMARKETCAP_API_KEY"),
        enabled=enabled,
    )


def connect(network: NetworkConfig) -> Web3:
    """
    Open a Web3 connection to the network's RPC endpoint.

    Raises:
        ConfigurationError: If the endpoint does not answer
    """
    network.validate()
    w3 = Web3(Web3.HTTPProvider(network.url))
    if not w3.is_connected():
        raise ConfigurationError(f"Cannot connect to {network.name} at {network.url}")
    logger.info("Connected to %s (chainId=%s)", network.name, w3.eth.chain_id)
    return w3
