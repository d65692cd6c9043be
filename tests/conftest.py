"""Shared fixtures: fake Hardhat artifacts and an in-memory stand-in for ``w3``."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import Web3

from rwat_deploy.artifacts.loader import CONTRACT_PATHS

OWNER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
PROVIDER = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
INVESTOR = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"
OWNER_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
PROVIDER_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
INVESTOR_KEY = "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a"
CNR = "0x0cadb0d9e410072325d2acc00aab99eb795a8c86"

NODE_KEYS = {OWNER: OWNER_KEY, PROVIDER: PROVIDER_KEY, INVESTOR: INVESTOR_KEY}


def _fn(name: str, inputs: List[str], outputs: List[str] = (), mutability: str = "nonpayable") -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": f"arg{i}", "type": t} for i, t in enumerate(inputs)],
        "outputs": [{"name": "", "type": t} for t in outputs],
        "stateMutability": mutability,
    }


def _ctor(inputs: List[str]) -> Dict[str, Any]:
    return {
        "type": "constructor",
        "inputs": [{"name": f"arg{i}", "type": t} for i, t in enumerate(inputs)],
        "stateMutability": "nonpayable",
    }


ABIS = {
    "RWAT": [
        _fn("initialize", ["address", "string", "string", "address"]),
        _fn("ADMIN", [], ["bytes32"], "view"),
        _fn("grantRole", ["bytes32", "address"]),
        _fn("hasRole", ["bytes32", "address"], ["bool"], "view"),
        _fn("createAsset", ["uint256", "uint256", "address"]),
        _fn("mintAsset", ["uint256", "uint256"]),
        _fn("getTotalMinted", ["uint256"], ["uint256"], "view"),
        _fn("setWhitelisted", ["address[]", "bool"]),
        _fn("sendSharesToUser", ["uint256", "address", "uint256", "uint256[]"]),
        _fn("getAllNFTsOfOwner", ["address"], ["uint256[]"], "view"),
        _fn("balanceOf", ["address"], ["uint256"], "view"),
        _fn("tokenOfOwnerByIndex", ["address", "uint256"], ["uint256"], "view"),
        _fn("ownerOf", ["uint256"], ["address"], "view"),
        _fn("updateServer", ["address"]),
        _fn("claimUnits", ["uint256[]", "bytes", "uint8", "bytes32", "bytes32"]),
        _fn("upgradeTo", ["address"]),
    ],
    "Multicall": [
        _fn("initialize", []),
        {
            "type": "function",
            "name": "aggregate",
            "inputs": [{
                "name": "calls",
                "type": "tuple[]",
                "components": [
                    {"name": "target", "type": "address"},
                    {"name": "callData", "type": "bytes"},
                ],
            }],
            "outputs": [
                {"name": "blockNumber", "type": "uint256"},
                {"name": "returnData", "type": "bytes[]"},
            ],
            "stateMutability": "nonpayable",
        },
    ],
    "TestToken": [_ctor(["string", "string"]), _fn("balanceOf", ["address"], ["uint256"], "view")],
    "ERC1967Proxy": [_ctor(["address", "bytes"])],
    "TransparentUpgradeableProxy": [_ctor(["address", "address", "bytes"])],
    "ProxyAdmin": [_fn("upgrade", ["address", "address"])],
}


def bytecode_for(name: str) -> str:
    return "0x" + name.encode("utf-8").hex()


def name_from_bytecode(bytecode: str) -> str:
    return bytes.fromhex(bytecode[2:]).decode("utf-8")


def write_artifact(root: Path, name: str, deployed_size: int = 16) -> Path:
    path = root / CONTRACT_PATHS[name]
    path.parent.mkdir(parents=True, exist_ok=True)
    source_name = CONTRACT_PATHS[name].rsplit("/", 1)[0]
    artifact = {
        "_format": "hh-sol-artifact-1",
        "contractName": name,
        "sourceName": source_name,
        "abi": ABIS[name],
        "bytecode": bytecode_for(name),
        "deployedBytecode": "0x" + "60" * deployed_size,
        "linkReferences": {},
        "deployedLinkReferences": {},
    }
    path.write_text(json.dumps(artifact), encoding="utf-8")

    build_info_dir = root / "build-info"
    build_info_dir.mkdir(parents=True, exist_ok=True)
    build_info = {
        "_format": "hh-sol-build-info-1",
        "solcVersion": "0.8.4",
        "solcLongVersion": "0.8.4+commit.c7e474f2",
        "input": {
            "language": "Solidity",
            "sources": {source_name: {"content": f"contract {name} {{}}"}},
            "settings": {"optimizer": {"enabled": True, "runs": 1}},
        },
    }
    (build_info_dir / f"{name}.json").write_text(json.dumps(build_info), encoding="utf-8")

    depth = len(Path(CONTRACT_PATHS[name]).parts) - 1
    dbg = {"_format": "hh-sol-dbg-1", "buildInfo": "/".join([".."] * depth + ["build-info", f"{name}.json"])}
    path.with_name(f"{name}.dbg.json").write_text(json.dumps(dbg), encoding="utf-8")
    return path


@pytest.fixture
def artifacts(tmp_path, monkeypatch) -> Path:
    """Populate a temporary Hardhat artifacts tree and point the loader at it."""
    root = tmp_path / "artifacts"
    for name in CONTRACT_PATHS:
        write_artifact(root, name)
    monkeypatch.setenv("RWAT_ARTIFACTS_DIR", str(root))
    return root


class FakeCall:
    def __init__(self, chain: "FakeChain", kind: str, target: str, function: str, args: tuple):
        self.chain = chain
        self.kind = kind
        self.target = target
        self.function = function
        self.args = args

    def build_transaction(self, tx: Dict[str, Any]) -> Dict[str, Any]:
        built = dict(tx)
        built.update({"kind": self.kind, "target": self.target, "function": self.function, "args": self.args})
        return built

    def call(self) -> Any:
        return self.chain.view(self.target, self.function, self.args)


class FakeFunctions:
    def __init__(self, contract: "FakeContract"):
        self._contract = contract

    def __getattr__(self, name: str) -> Callable[..., FakeCall]:
        contract = self._contract
        return lambda *args: FakeCall(contract.chain, "call", contract.address, name, args)


class FakeContract:
    def __init__(self, chain: "FakeChain", abi: list, bytecode: str | None, address: str | None):
        self.chain = chain
        self.abi = abi
        self.bytecode = bytecode
        self.address = address
        self.functions = FakeFunctions(self)

    def constructor(self, *args) -> FakeCall:
        return FakeCall(self.chain, "deploy", name_from_bytecode(self.bytecode), "constructor", args)


class FakeChain:
    """Records submitted transactions and mints addresses for deployments."""

    def __init__(self, accounts: List[str]):
        self.accounts = accounts
        self.chain_id = 31337
        self.transactions: List[Dict[str, Any]] = []
        self.raw_transactions: List[bytes] = []
        self.receipts: Dict[bytes, Dict[str, Any]] = {}
        self.views: Dict[str, Any] = {}
        self.storage: Dict[tuple, bytes] = {}
        self.code: Dict[str, bytes] = {}
        self.nonces: Dict[str, int] = {}
        self.fail_next = False
        self._next_address = 0x1000

    @property
    def eth(self) -> "FakeChain":
        return self

    def is_connected(self) -> bool:
        return True

    def contract(self, address=None, abi=None, bytecode=None) -> FakeContract:
        return FakeContract(self, abi, bytecode, address)

    def new_address(self) -> str:
        self._next_address += 1
        return Web3.to_checksum_address("0x" + f"{self._next_address:040x}")

    def _mine(self, tx: Dict[str, Any]) -> bytes:
        tx_hash = len(self.receipts).to_bytes(32, "big")
        contract_address = None
        if tx.get("kind") == "deploy":
            contract_address = self.new_address()
            self.code[contract_address] = b"\x60\x80"
            tx["address"] = contract_address
        self.transactions.append(tx)
        self.receipts[tx_hash] = {
            "status": 0 if self.fail_next else 1,
            "transactionHash": tx_hash,
            "contractAddress": contract_address,
            "gasUsed": 50000 + 1000 * len(self.transactions),
        }
        self.fail_next = False
        return tx_hash

    def send_transaction(self, tx: Dict[str, Any]) -> bytes:
        return self._mine(dict(tx))

    def send_raw_transaction(self, raw: bytes) -> bytes:
        self.raw_transactions.append(bytes(raw))
        return self._mine({"kind": "raw"})

    def wait_for_transaction_receipt(self, tx_hash: bytes) -> Dict[str, Any]:
        return self.receipts[tx_hash]

    def get_transaction_count(self, address: str, block: str = "latest") -> int:
        return self.nonces.get(address, 0)

    def get_storage_at(self, address: str, slot: int) -> bytes:
        return self.storage.get((address, slot), b"\x00" * 32)

    def get_code(self, address: str) -> bytes:
        return self.code.get(address, b"")

    def sign(self, account: str, data: bytes) -> bytes:
        """Node-side eth_sign with the unlocked key behind ``account``."""
        key = NODE_KEYS[Web3.to_checksum_address(account)]
        return Account.from_key(key).sign_message(encode_defunct(primitive=data)).signature

    def view(self, target: str, function: str, args: tuple) -> Any:
        value = self.views[function]
        return value(*args) if callable(value) else value

    def deploys(self) -> List[Dict[str, Any]]:
        return [tx for tx in self.transactions if tx.get("kind") == "deploy"]

    def calls(self) -> List[Dict[str, Any]]:
        return [tx for tx in self.transactions if tx.get("kind") == "call"]


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain([OWNER, PROVIDER, INVESTOR])


@pytest.fixture
def owner(chain):
    from rwat_deploy.signers import Signer

    return Signer(chain, OWNER)
