"""
Configuration Module
====================

Centralized configuration management using Pydantic Settings.
Loads from environment variables (and `.env`) with type validation and defaults.

Usage:
    from proofpay.config import get_settings

    settings = get_settings()
    print(settings.network.rpc_url)
    print(settings.deployment.confirmations)
"""

from proofpay.config.settings import (
    SEPOLIA_CHAIN_ID,
    AccountSettings,
    ChainMode,
    CompilerSettings,
    DeploymentSettings,
    EtherscanSettings,
    LogLevel,
    NetworkSettings,
    Settings,
    get_settings,
)

__all__ = [
    "SEPOLIA_CHAIN_ID",
    "AccountSettings",
    "ChainMode",
    "CompilerSettings",
    "DeploymentSettings",
    "EtherscanSettings",
    "LogLevel",
    "NetworkSettings",
    "Settings",
    "get_settings",
]
