"""
Per-network deployment manifest.

Keeps track of the ProxyAdmin and every proxy deployed on a network so
later deployments can reuse the admin and upgrades can find their proxy.
Stored as ``deployments/<network>.json``.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

MANIFEST_DIR = "deployments"


class DeploymentManifest:
    """JSON record of the ProxyAdmin and proxies deployed on one network."""

    def __init__(self, network: str, path: Path, data: Optional[Dict[str, Any]] = None):
        self.network = network
        self.path = path
        self.data = data or {"network": network, "admin": None, "proxies": []}

    @classmethod
    def load(cls, network: str, root: Union[str, Path] = ".") -> "DeploymentManifest":
        """Read the manifest for ``network``, or start an empty one."""
        path = Path(root) / MANIFEST_DIR / f"{network}.json"
        if not path.exists():
            return cls(network, path)

        with open(path, 'r') as f:
            return cls(network, path, json.load(f))

    @property
    def admin(self) -> Optional[str]:
        return self.data.get("admin")

    def set_admin(self, address: str) -> None:
        self.data["admin"] = address

    def record_proxy(self, contract_name: str, address: str, kind: str,
                     implementation: str, tx_hash: Optional[str] = None) -> Dict[str, Any]:
        entry = {
            "contract": contract_name,
            "address": address,
            "kind": kind,
            "implementation": implementation,
            "txHash": tx_hash,
        }
        self.data.setdefault("proxies", []).append(entry)
        return entry

    def proxies_for(self, contract_name: str) -> List[Dict[str, Any]]:
        return [p for p in self.data.get("proxies", []) if p["contract"] == contract_name]

    def latest(self, contract_name: str) -> Optional[Dict[str, Any]]:
        proxies = self.proxies_for(contract_name)
        return proxies[-1] if proxies else None

    def save(self) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump(self.data, f, indent=2)
        return self.path
