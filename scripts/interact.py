#!/usr/bin/env python3
"""
Interact Script
===============

Submit a sample proof to the contract at CONTRACT_ADDRESS and list the signer's proofs.

Usage:
    python scripts/interact.py

Configuration is read from the environment or `.env`.

Version: 0.1.0
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from proofpay.cli import interact_main


if __name__ == "__main__":
    sys.exit(interact_main())
