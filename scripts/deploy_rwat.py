#!/usr/bin/env python3
"""
Deploy RWAT behind an upgradeable proxy and initialize it with
(owner, name, symbol, CNR).

    python scripts/deploy_rwat.py --network BSCTestnet --cnr 0x0cadb0d9e410072325d2acc00aab99eb795a8c86
"""

import sys

from rwat_deploy.cli import main


if __name__ == "__main__":
    sys.exit(main(["deploy", "rwat", *sys.argv[1:]]))
