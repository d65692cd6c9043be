"""
Gas usage reporting.

Collects ``gasUsed`` from transaction receipts per contract method and
prices the totals in the chain's native token and, when a token price is
known, in fiat.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .config import GasReporterSettings
from .signers import Signer

COINMARKETCAP_QUOTES_URL = "https://pro-api.coinmarketcap.com/v1/cryptocurrency/quotes/latest"


@dataclass
class MethodGas:
    method: str
    calls: int
    min_gas: int
    max_gas: int
    avg_gas: int
    token_cost: float
    fiat_cost: Optional[float] = None


class GasReporter:
    """Accumulates gas usage; attach it to signers with ``watch``."""

    def __init__(self, settings: GasReporterSettings, token_price: Optional[float] = None):
        self.settings = settings
        self.gas_price_gwei = settings.gas_price_gwei
        self.token_price = token_price
        self._usage: Dict[str, List[int]] = defaultdict(list)

    def watch(self, signer: Signer) -> None:
        signer.receipt_hooks.append(self.record)

    def record(self, method: str, receipt: Dict[str, Any]) -> None:
        self._usage[method].append(int(receipt["gasUsed"]))

    def token_cost(self, gas: int) -> float:
        return gas * self.gas_price_gwei * 1e-9

    def rows(self) -> List[MethodGas]:
        rows = []
        for method in sorted(self._usage):
            used = self._usage[method]
            avg = sum(used) // len(used)
            cost = self.token_cost(avg)
            rows.append(MethodGas(
                method=method,
                calls=len(used),
                min_gas=min(used),
                max_gas=max(used),
                avg_gas=avg,
                token_cost=cost,
                fiat_cost=cost * self.token_price if self.token_price is not None else None,
            ))
        return rows

    def format(self) -> str:
        """Render the collected usage as a plain-text table."""
        token = self.settings.token
        currency = self.settings.currency
        header = (
            f"{'Method':<40} {'Calls':>6} {'Min':>10} {'Max':>10} {'Avg':>10} "
            f"{token:>12} {currency:>10}"
        )
        lines = [f"Gas price: {self.gas_price_gwei} gwei", header, "-" * len(header)]
        for row in self.rows():
            fiat = f"{row.fiat_cost:.2f}" if row.fiat_cost is not None else "-"
            lines.append(
                f"{row.method:<40} {row.calls:>6} {row.min_gas:>10} {row.max_gas:>10} "
                f"{row.avg_gas:>10} {row.token_cost:>12.6f} {fiat:>10}"
            )
        return "\n".join(lines)

    def refresh_prices(self, session: Optional[requests.Session] = None) -> None:
        """Replace the configured gas price and token price with live quotes."""
        session = session or requests.Session()
        self.gas_price_gwei = fetch_gas_price_gwei(self.settings, session)
        if self.settings.coinmarketcap_api_key:
            self.token_price = fetch_token_price(self.settings, session)


def fetch_gas_price_gwei(settings: GasReporterSettings, session: requests.Session) -> float:
    """Query the ``eth_gasPrice`` proxy endpoint; the result is hex wei."""
    response = session.get(settings.gas_price_api, timeout=30)
    response.raise_for_status()
    wei = int(response.json()["result"], 16)
    return wei / 1e9


def fetch_token_price(settings: GasReporterSettings, session: requests.Session) -> float:
    response = session.get(
        COINMARKETCAP_QUOTES_URL,
        params={"symbol": settings.token, "convert": settings.currency},
        headers={"X-CMC_PRO_API_KEY": settings.coinmarketcap_api_key},
        timeout=30,
    )
    response.raise_for_status()
    data = response.json()["data"][settings.token]
    return float(data["quote"][settings.currency]["price"])
