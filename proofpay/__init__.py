"""
ProofPay Deploy
===============

Deployment and interaction tooling for the ProofPayNetwork contract.

Modules:
    - config: Configuration management with Pydantic Settings
    - logging: Structured logging with structlog
    - artifacts: Compiled contract artifacts (Hardhat layout)
    - chain: Chain client interface (web3 / mock)
    - verification: Source verification (Etherscan / mock)
    - workflow: Deployment workflow
    - operations: deploy, whoami and interact operations

Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "ProofPay Team"

from proofpay.config import Settings, get_settings
from proofpay.logging import get_logger, setup_logging

__all__ = [
    "Settings",
    "get_settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
