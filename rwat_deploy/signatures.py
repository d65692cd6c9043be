"""Server-side signatures authorising RWAT unit claims."""

from dataclasses import dataclass
from typing import Sequence

from eth_abi import encode

from .signers import Signer

SIGNED_MESSAGE_PREFIX = "\x19Ethereum Signed Message:\n"


@dataclass(frozen=True)
class ClaimSignature:
    prefix: bytes
    v: int
    r: int
    s: int

    @property
    def r_bytes(self) -> bytes:
        return self.r.to_bytes(32, "big")

    @property
    def s_bytes(self) -> bytes:
        return self.s.to_bytes(32, "big")


def encode_claim_payload(investor: str, contract: str, units: Sequence[int]) -> bytes:
    """ABI-encode ``(investor, contract, units)`` as ``(address,address,uint256[])``."""
    return encode(["address", "address", "uint256[]"], [investor, contract, list(units)])


def create_claim_signature(signer: Signer, payload: bytes) -> ClaimSignature:
    """
    Sign a claim payload the way the contract's server role does.

    The prefix is returned alongside the split signature because the
    contract rebuilds the signed digest from it.
    """
    prefix = f"{SIGNED_MESSAGE_PREFIX}{len(payload)}".encode("utf-8")
    signed = signer.sign_message(payload)
    return ClaimSignature(prefix=prefix, v=signed.v, r=signed.r, s=signed.s)
