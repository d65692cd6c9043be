import pytest
from eth_account import Account
from eth_account.messages import encode_defunct

from rwat_deploy.config import NetworkConfig
from rwat_deploy.exceptions import TransactionFailed
from rwat_deploy.signers import Signer, get_signers

from .conftest import INVESTOR, OWNER, OWNER_KEY, PROVIDER, PROVIDER_KEY


class TransferCall:
    """Mimics a web3 call whose build_transaction yields a signable dict."""

    def build_transaction(self, tx):
        return {
            "from": tx["from"],
            "nonce": tx["nonce"],
            "to": INVESTOR,
            "value": tx.get("value", 0),
            "gas": 21000,
            "gasPrice": 1_000_000_000,
            "chainId": 31337,
            "data": "0x",
        }


def test_local_network_uses_node_accounts(chain):
    network = NetworkConfig(name="hardhat", url="http://127.0.0.1:8545")
    signers = get_signers(chain, network)
    assert [s.address for s in signers] == [OWNER, PROVIDER, INVESTOR]
    assert not any(s.is_local for s in signers)


def test_remote_network_uses_private_keys(chain):
    network = NetworkConfig(name="BSCTestnet", url="https://bsc", private_keys=[OWNER_KEY, PROVIDER_KEY])
    signers = get_signers(chain, network)
    assert [s.address for s in signers] == [OWNER, PROVIDER]
    assert all(s.is_local for s in signers)


def test_node_signer_submits_through_node(chain, owner):
    call = chain.contract(address=OWNER, abi=[]).functions.mintAsset(1, 10)
    receipt = owner.transact(call)

    assert receipt["status"] == 1
    tx = chain.transactions[-1]
    assert tx["from"] == OWNER
    assert tx["function"] == "mintAsset"
    assert tx["args"] == (1, 10)
    assert "nonce" not in tx


def test_value_is_forwarded(chain, owner):
    owner.transact(chain.contract(address=OWNER, abi=[]).functions.deposit(), value=5)
    assert chain.transactions[-1]["value"] == 5


def test_reverted_transaction_raises(chain, owner):
    chain.fail_next = True
    with pytest.raises(TransactionFailed) as excinfo:
        owner.transact(chain.contract(address=OWNER, abi=[]).functions.mintAsset(1, 10))
    assert excinfo.value.receipt["status"] == 0
    assert excinfo.value.tx_hash.startswith("0x")


def test_local_signer_signs_raw_transaction(chain):
    chain.nonces[OWNER] = 7
    signer = Signer(chain, OWNER, Account.from_key(OWNER_KEY))

    receipt = signer.transact(TransferCall(), value=3)

    assert receipt["status"] == 1
    assert len(chain.raw_transactions) == 1
    assert chain.raw_transactions[0]


def test_receipt_hooks_see_label(chain, owner):
    seen = []
    owner.receipt_hooks.append(lambda label, receipt: seen.append((label, receipt["gasUsed"])))
    owner.transact(chain.contract(address=OWNER, abi=[]).functions.mintAsset(1, 1), label="RWAT.mintAsset")
    assert seen == [("RWAT.mintAsset", chain.receipts[max(chain.receipts)]["gasUsed"])]


def test_sign_message_recovers_signer(chain):
    signer = Signer(chain, OWNER, Account.from_key(OWNER_KEY))
    signed = signer.sign_message(b"payload")
    recovered = Account.recover_message(encode_defunct(primitive=b"payload"), vrs=(signed.v, signed.r, signed.s))
    assert recovered == OWNER


def test_node_signer_signs_through_node(owner):
    signed = owner.sign_message(b"payload")

    assert signed.v in (27, 28)
    assert signed.signature[-1] == signed.v
    recovered = Account.recover_message(encode_defunct(primitive=b"payload"), vrs=(signed.v, signed.r, signed.s))
    assert recovered == OWNER


def test_node_recovery_id_is_normalised(chain, owner, monkeypatch):
    raw = bytes(chain.sign(OWNER, b"payload"))
    monkeypatch.setattr(chain, "sign", lambda account, data: raw[:64] + bytes([raw[64] - 27]))

    signed = owner.sign_message(b"payload")

    assert signed.v == raw[64]
    assert bytes(signed.signature) == raw


def test_short_node_signature_is_rejected(chain, owner, monkeypatch):
    monkeypatch.setattr(chain, "sign", lambda account, data: b"\x01" * 64)
    with pytest.raises(ValueError, match="64-byte signature"):
        owner.sign_message(b"payload")
