#!/usr/bin/env python3
"""
Deploy Script
=============

Deploy ProofPayNetwork to Sepolia, wait for confirmations and verify it on Etherscan.

Usage:
    python scripts/deploy.py

Configuration is read from the environment or `.env`.

Version: 0.1.0
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from proofpay.cli import deploy_main


if __name__ == "__main__":
    sys.exit(deploy_main())
