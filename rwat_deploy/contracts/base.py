"""
Common behaviour for deployed contract wrappers.

Wrappers bind a compiled ABI to a deployed address and route state-changing
calls through a Signer. Every call is checked against the loaded ABI before
anything is sent to the node.
"""

from typing import Any, Dict, Optional

from web3 import Web3

from ..artifacts.loader import encode_function_call, find_function_abi, get_abi
from ..signers import Signer


class BaseContract:
    """Wrapper around a deployed contract instance."""

    CONTRACT_NAME: str = ""

    def __init__(self, w3: Web3, address: str, signer: Optional[Signer] = None,
                 abi: Optional[list] = None):
        self.w3 = w3
        self.abi = abi if abi is not None else get_abi(self.CONTRACT_NAME)
        self.address = Web3.to_checksum_address(address)
        self.contract = w3.eth.contract(address=self.address, abi=self.abi)
        self.signer = signer
        self.deployment = None

    def __repr__(self):
        return f"<{type(self).__name__} {self.address}>"

    def connect(self, signer: Signer):
        """Return a wrapper for the same contract that sends as ``signer``."""
        other = type(self)(self.w3, self.address, signer=signer, abi=self.abi)
        other.deployment = self.deployment
        return other

    def prepare_transaction(
        self,
        function_name: str,
        *args,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Prepare a transaction for a specific function.

        Args:
            function_name: Name of the contract function
            *args: Function arguments
            **kwargs: Additional transaction parameters

        Returns:
            Prepared transaction dictionary

        Raises:
            ValueError: If the function is not part of the ABI
        """
        function_abi = find_function_abi(self.abi, function_name)
        if not function_abi:
            raise ValueError(f"Function {function_name} not found in ABI")

        return {
            "function": function_name,
            "args": args,
            "abi": function_abi,
            "params": kwargs,
        }

    def encode_call(self, function_name: str, *args) -> bytes:
        """Calldata for ``function_name(*args)`` on this contract."""
        return encode_function_call(self.abi, function_name, args)

    def call(self, function_name: str, *args) -> Any:
        """Execute a read-only call and return the decoded result."""
        self.prepare_transaction(function_name, *args)
        return getattr(self.contract.functions, function_name)(*args).call()

    def transact(self, function_name: str, *args, value: int = 0) -> Dict[str, Any]:
        """
        Send a state-changing call and wait for its receipt.

        Raises:
            ValueError: If the function is unknown or no signer is attached
            TransactionFailed: If the transaction reverts
        """
        self.prepare_transaction(function_name, *args)
        if self.signer is None:
            raise ValueError(f"{self.CONTRACT_NAME}.{function_name} requires a signer")

        fn = getattr(self.contract.functions, function_name)(*args)
        return self.signer.transact(fn, value=value, label=f"{self.CONTRACT_NAME}.{function_name}")
