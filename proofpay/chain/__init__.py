"""
Chain Module
============

Abstraction layer for chain operations.

Supports:
- Mock (development/testing)
- Testnet (Sepolia over JSON-RPC)

Features:
- Contract deployment from compiled artifacts
- Contract calls and transactions
- Balance queries
- Confirmation tracking with deadlines

Usage:
    from proofpay.chain import create_chain_client, load_account

    account = load_account(settings.account.private_key)
    client = create_chain_client(settings, account)

    tx_hash = await client.submit_deployment(artifact)
    receipt = await client.wait_for_confirmations(tx_hash, depth=6, timeout=600)
"""

from proofpay.chain.client import (
    AccountBalance,
    ChainClient,
    ConfirmationStatus,
    TransactionReceipt,
    create_chain_client,
    load_account,
)
from proofpay.chain.mock import MockChainClient

__all__ = [
    # Client
    "ChainClient",
    "create_chain_client",
    "load_account",
    # Models
    "AccountBalance",
    "ConfirmationStatus",
    "TransactionReceipt",
    # Implementations
    "MockChainClient",
]
