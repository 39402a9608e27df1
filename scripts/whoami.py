#!/usr/bin/env python3
"""
Whoami Script
=============

Print the deployer address and its Sepolia balance.

Usage:
    python scripts/whoami.py

Configuration is read from the environment or `.env`.

Version: 0.1.0
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from proofpay.cli import whoami_main


if __name__ == "__main__":
    sys.exit(whoami_main())
