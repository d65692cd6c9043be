"""
RWAT contract wrapper for deployment and interaction.

This module provides a high-level interface for deploying and interacting
with the RWAT asset-tokenization contract. Asset accounting, access control
and claim verification are implemented by the contract itself; the wrapper
only forwards calls through its ABI.
"""

from typing import Any, Dict, List, Optional, Sequence

from web3 import Web3

from ..config import NetworkConfig
from ..manifest import DeploymentManifest
from ..proxy import deploy_proxy
from ..signatures import ClaimSignature
from ..signers import Signer
from .base import BaseContract


class RWATContract(BaseContract):
    """
    Wrapper for the RWAT NFT contract.

    Each asset is a pool of enumerable ERC-721 units ("shares") minted to the
    contract itself and handed out to whitelisted investors.
    """

    CONTRACT_NAME = "RWAT"

    @classmethod
    def deploy(
        cls,
        w3: Web3,
        signer: Signer,
        owner: str,
        name: str,
        symbol: str,
        cnr: str,
        kind: str = "transparent",
        network: Optional[NetworkConfig] = None,
        manifest: Optional[DeploymentManifest] = None,
    ) -> "RWATContract":
        """
        Deploy RWAT behind a proxy and initialize it.

        Args:
            w3: Connected Web3 instance
            signer: Deployer account
            owner: Initial owner address
            name: ERC-721 token name
            symbol: ERC-721 token symbol
            cnr: CNR registry address passed to ``initialize``

        Returns:
            Wrapper bound to the proxy address
        """
        if not name:
            raise ValueError("Token name is required")

        if not symbol:
            raise ValueError("Token symbol is required")

        deployment = deploy_proxy(
            w3, signer, cls.CONTRACT_NAME,
            [Web3.to_checksum_address(owner), name, symbol, Web3.to_checksum_address(cnr)],
            network=network,
            kind=kind,
            manifest=manifest,
        )
        instance = cls(w3, deployment.address, signer=signer)
        instance.deployment = deployment
        return instance

    # Access control

    def admin_role(self) -> bytes:
        return self.call("ADMIN")

    def grant_role(self, role: bytes, account: str) -> Dict[str, Any]:
        return self.transact("grantRole", role, Web3.to_checksum_address(account))

    def has_role(self, role: bytes, account: str) -> bool:
        return self.call("hasRole", role, Web3.to_checksum_address(account))

    def set_whitelisted(self, accounts: Sequence[str], status: bool) -> Dict[str, Any]:
        return self.transact(
            "setWhitelisted",
            [Web3.to_checksum_address(a) for a in accounts],
            status,
        )

    # Assets

    def create_asset(self, asset_id: int, cap: int, token: str) -> Dict[str, Any]:
        """Register asset ``asset_id`` with a unit cap, priced in ``token``."""
        return self.transact("createAsset", asset_id, cap, Web3.to_checksum_address(token))

    def mint_asset(self, asset_id: int, amount: int) -> Dict[str, Any]:
        return self.transact("mintAsset", asset_id, amount)

    def get_total_minted(self, asset_id: int) -> int:
        return self.call("getTotalMinted", asset_id)

    def get_asset_cap(self, asset_id: int) -> int:
        return self.call("getAssetCap", asset_id)

    def update_asset_cap(self, asset_id: int, cap: int) -> Dict[str, Any]:
        return self.transact("updateAssetCap", asset_id, cap)

    def send_shares_to_user(self, asset_id: int, user: str, amount: int,
                            token_ids: Sequence[int]) -> Dict[str, Any]:
        return self.transact(
            "sendSharesToUser",
            asset_id,
            Web3.to_checksum_address(user),
            amount,
            list(token_ids),
        )

    # Claims

    def update_server(self, server: str) -> Dict[str, Any]:
        return self.transact("updateServer", Web3.to_checksum_address(server))

    def claim_units(self, units: Sequence[int], signature: ClaimSignature) -> Dict[str, Any]:
        return self.transact(
            "claimUnits",
            list(units),
            signature.prefix,
            signature.v,
            signature.r_bytes,
            signature.s_bytes,
        )

    # ERC-721 enumeration

    def balance_of(self, owner: str) -> int:
        return self.call("balanceOf", Web3.to_checksum_address(owner))

    def owner_of(self, token_id: int) -> str:
        return self.call("ownerOf", token_id)

    def token_of_owner_by_index(self, owner: str, index: int) -> int:
        return self.call("tokenOfOwnerByIndex", Web3.to_checksum_address(owner), index)

    def get_all_nfts_of_owner(self, owner: str) -> List[int]:
        return list(self.call("getAllNFTsOfOwner", Web3.to_checksum_address(owner)))

    def tokens_of_owner(self, owner: str) -> List[int]:
        """Enumerate ``owner``'s token ids one index at a time."""
        return [
            self.token_of_owner_by_index(owner, index)
            for index in range(self.balance_of(owner))
        ]
