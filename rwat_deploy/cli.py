"""Command line entry point: ``rwat-deploy <command> --network <name>``."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import requests

from .artifacts.loader import validate_artifacts
from .config import connect, gas_reporter_settings, get_network, load_networks
from .contracts import MulticallContract, RWATContract
from .exceptions import ConfigurationError
from .gas_report import GasReporter
from .manifest import DeploymentManifest
from .proxy import PROXY_KINDS
from .signers import get_signers
from .verify import verify_contract

logger = logging.getLogger(__name__)


def _session(args: argparse.Namespace):
    network = get_network(args.network)
    w3 = connect(network)
    signers = get_signers(w3, network)
    if not signers:
        raise ConfigurationError(f"No signers available on {network.name}")

    reporter = None
    settings = gas_reporter_settings()
    if settings.enabled:
        reporter = GasReporter(settings)
        if settings.coinmarketcap_api_key:
            try:
                reporter.refresh_prices()
            except requests.RequestException as exc:
                logger.warning("Could not fetch live gas prices: %s", exc)
        reporter.watch(signers[0])

    manifest = DeploymentManifest.load(network.name, args.manifest_root)
    return network, w3, signers, manifest, reporter


def deploy_multicall(args: argparse.Namespace) -> int:
    network, w3, signers, manifest, reporter = _session(args)
    multicall = MulticallContract.deploy(
        w3, signers[0], kind=args.kind, network=network, manifest=manifest
    )
    print("multicall Contract deployed to:", multicall.address)
    if reporter is not None:
        print(reporter.format())
    return 0


def deploy_rwat(args: argparse.Namespace) -> int:
    network, w3, signers, manifest, reporter = _session(args)
    owner = signers[0]
    rwat = RWATContract.deploy(
        w3, owner,
        owner=args.owner or owner.address,
        name=args.name,
        symbol=args.symbol,
        cnr=args.cnr,
        kind=args.kind,
        network=network,
        manifest=manifest,
    )
    print("RWAT Contract deployed to:", rwat.address)
    if reporter is not None:
        print(reporter.format())
    return 0


def verify(args: argparse.Namespace) -> int:
    network = get_network(args.network)
    result = verify_contract(network, args.address, args.contract, args.constructor_args)
    print(f"{args.contract} at {args.address}: {result}")
    return 0


def list_networks(args: argparse.Namespace) -> int:
    for name, network in load_networks().items():
        configured = "configured" if network.url and (network.is_local or network.private_keys) else "incomplete"
        print(f"{name:<12} {network.url or '-':<50} {configured}")
    return 0


def check(args: argparse.Namespace) -> int:
    status = validate_artifacts()
    for name, ok in status.items():
        print(f"  {'✅' if ok else '❌'} {name}")
    return 0 if all(status.values()) else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rwat-deploy", description="Deploy and verify RWAT contracts")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    def network_option(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--network", default=None, help="Network profile (default: RWAT_NETWORK or hardhat)")

    deploy = commands.add_parser("deploy", help="Deploy a contract behind an upgradeable proxy")
    targets = deploy.add_subparsers(dest="target", required=True)

    multicall = targets.add_parser("multicall", help="Deploy Multicall")
    rwat = targets.add_parser("rwat", help="Deploy RWAT")
    rwat.add_argument("--owner", help="Initial owner (default: first signer)")
    rwat.add_argument("--name", default="tokenName", help="Token name")
    rwat.add_argument("--symbol", default="tokenSymbol", help="Token symbol")
    rwat.add_argument("--cnr", required=True, help="CNR registry address")
    for sub, handler in ((multicall, deploy_multicall), (rwat, deploy_rwat)):
        network_option(sub)
        sub.add_argument("--kind", choices=PROXY_KINDS, default="transparent", help="Proxy kind")
        sub.add_argument("--manifest-root", default=".", help="Directory holding deployments/")
        sub.set_defaults(handler=handler)

    verify_cmd = commands.add_parser("verify", help="Verify contract source on the block explorer")
    network_option(verify_cmd)
    verify_cmd.add_argument("--contract", default="RWAT", help="Artifact name of the deployed contract")
    verify_cmd.add_argument("address", help="Deployed contract address")
    verify_cmd.add_argument("constructor_args", nargs="*", help="Constructor arguments")
    verify_cmd.set_defaults(handler=verify)

    networks = commands.add_parser("networks", help="List network profiles")
    networks.set_defaults(handler=list_networks)

    check_cmd = commands.add_parser("check", help="Validate compiled artifacts")
    check_cmd.set_defaults(handler=check)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.handler(args)
    except Exception as exc:
        print(exc, file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
