"""
Transaction signers.

On the local ``hardhat`` network the node holds unlocked accounts and signs
for us. On remote networks each configured private key becomes a local
eth-account signer and transactions are signed before submission.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from eth_account import Account
from eth_account.datastructures import SignedMessage
from eth_account.messages import defunct_hash_message, encode_defunct
from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from web3 import Web3

from .config import NetworkConfig
from .exceptions import TransactionFailed

logger = logging.getLogger(__name__)


class Signer:
    """An account able to authorise transactions on a network."""

    def __init__(self, w3: Web3, address: str, account: Optional[LocalAccount] = None):
        self.w3 = w3
        self.address = Web3.to_checksum_address(address)
        self.account = account
        self.receipt_hooks: List[Callable[[str, Dict[str, Any]], None]] = []

    def __repr__(self):
        kind = "local" if self.account is not None else "node"
        return f"<Signer {self.address} ({kind})>"

    @property
    def is_local(self) -> bool:
        return self.account is not None

    def base_transaction(self, value: int = 0) -> Dict[str, Any]:
        tx: Dict[str, Any] = {"from": self.address}
        if value:
            tx["value"] = value
        if self.account is not None:
            tx["nonce"] = self.w3.eth.get_transaction_count(self.address, "pending")
        return tx

    def transact(self, call, value: int = 0, label: Optional[str] = None) -> Dict[str, Any]:
        """
        Build, submit and confirm a contract call or constructor.

        Args:
            call: A web3 ContractFunction or ContractConstructor
            value: Wei to send along
            label: Name passed to receipt hooks (e.g., 'RWAT.mintAsset')

        Returns:
            The transaction receipt

        Raises:
            TransactionFailed: If the transaction was mined with status 0
        """
        tx = call.build_transaction(self.base_transaction(value))
        return self.send(tx, label=label)

    def send(self, tx: Dict[str, Any], label: Optional[str] = None) -> Dict[str, Any]:
        if self.account is not None:
            signed = self.account.sign_transaction(tx)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        else:
            tx_hash = self.w3.eth.send_transaction(tx)

        logger.debug("Sent %s from %s: %s", label or "transaction", self.address, Web3.to_hex(tx_hash))
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash)

        if receipt.get("status") == 0:
            raise TransactionFailed(Web3.to_hex(tx_hash), receipt)

        for hook in self.receipt_hooks:
            hook(label or "transaction", receipt)
        return receipt

    def sign_message(self, data: bytes) -> SignedMessage:
        """
        Produce an EIP-191 personal signature over raw bytes.

        Local accounts sign with their key; node-managed accounts sign
        through ``eth_sign`` on the node.

        Returns:
            eth-account SignedMessage with v, r, s and signature fields
        """
        if self.account is not None:
            return self.account.sign_message(encode_defunct(primitive=data))

        signature = bytes(self.w3.eth.sign(self.address, data=data))
        if len(signature) != 65:
            raise ValueError(f"Node returned a {len(signature)}-byte signature, expected 65")
        r = int.from_bytes(signature[:32], "big")
        s = int.from_bytes(signature[32:64], "big")
        v = signature[64]
        # some nodes return the recovery id (0/1) instead of 27/28
        if v < 27:
            v += 27
            signature = signature[:64] + bytes([v])
        return SignedMessage(defunct_hash_message(primitive=data), r, s, v, HexBytes(signature))


def get_signers(w3: Web3, network: NetworkConfig) -> List[Signer]:
    """
    Return the signers available on a network, in configuration order.

    The first signer is conventionally the deployer/owner.
    """
    if network.is_local:
        return [Signer(w3, address) for address in w3.eth.accounts]

    return [
        Signer(w3, account.address, account)
        for account in (Account.from_key(key) for key in network.private_keys)
    ]
