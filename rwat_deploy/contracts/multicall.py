"""Multicall contract wrapper: batches read calls into one RPC round trip."""

from typing import Any, List, Optional, Sequence, Tuple

from web3 import Web3

from ..config import NetworkConfig
from ..manifest import DeploymentManifest
from ..proxy import deploy_proxy
from ..signers import Signer
from .base import BaseContract


class MulticallContract(BaseContract):

    CONTRACT_NAME = "Multicall"

    @classmethod
    def deploy(
        cls,
        w3: Web3,
        signer: Signer,
        kind: str = "transparent",
        network: Optional[NetworkConfig] = None,
        manifest: Optional[DeploymentManifest] = None,
    ) -> "MulticallContract":
        """Deploy Multicall behind a proxy; ``initialize`` takes no arguments."""
        deployment = deploy_proxy(
            w3, signer, cls.CONTRACT_NAME, [],
            network=network,
            kind=kind,
            manifest=manifest,
        )
        instance = cls(w3, deployment.address, signer=signer)
        instance.deployment = deployment
        return instance

    @staticmethod
    def build_call(target: BaseContract, function_name: str, *args) -> Tuple[str, bytes]:
        return target.address, target.encode_call(function_name, *args)

    def aggregate(self, calls: Sequence[Tuple[str, bytes]]) -> Tuple[int, List[bytes]]:
        """
        Execute ``calls`` in a single static call.

        Args:
            calls: (target address, calldata) pairs, see ``build_call``

        Returns:
            Tuple of (block number, raw return data per call)
        """
        payload: List[Any] = [(Web3.to_checksum_address(t), data) for t, data in calls]
        block_number, return_data = self.call("aggregate", payload)
        return block_number, list(return_data)
