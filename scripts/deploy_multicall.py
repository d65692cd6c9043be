#!/usr/bin/env python3
"""
Deploy Multicall behind an upgradeable proxy.

    python scripts/deploy_multicall.py --network BSCTestnet
    rwat-deploy verify --network BSCTestnet --contract Multicall <implementation>
"""

import sys

from rwat_deploy.cli import main


if __name__ == "__main__":
    sys.exit(main(["deploy", "multicall", *sys.argv[1:]]))
