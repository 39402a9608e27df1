"""
Settings Module
===============

Pydantic-based configuration with environment variable loading.

Version: 0.1.0
"""

from decimal import Decimal
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SEPOLIA_CHAIN_ID = 11155111

_COMMON_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    case_sensitive=False,
    extra="ignore",
    populate_by_name=True,
)


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ChainMode(str, Enum):
    """Chain client mode."""

    MOCK = "mock"
    TESTNET = "testnet"


class NetworkSettings(BaseSettings):
    """Sepolia network configuration."""

    model_config = SettingsConfigDict(**_COMMON_CONFIG)

    name: str = Field(default="sepolia", alias="NETWORK_NAME")
    sepolia_rpc_url: str = Field(default="", alias="SEPOLIA_RPC_URL")
    infura_project_id: SecretStr = Field(default=SecretStr(""), alias="INFURA_PROJECT_ID")
    chain_id: int = Field(default=SEPOLIA_CHAIN_ID, alias="CHAIN_ID")
    gas_price_gwei: Decimal = Field(default=Decimal(20), gt=0, alias="GAS_PRICE_GWEI")
    explorer_url: str = Field(default="https://sepolia.etherscan.io", alias="EXPLORER_URL")

    @property
    def rpc_url(self) -> str:
        """RPC endpoint, falling back to Infura when no URL is configured."""
        if self.sepolia_rpc_url:
            return self.sepolia_rpc_url
        project_id = self.infura_project_id.get_secret_value()
        return f"https://sepolia.infura.io/v3/{project_id}"

    @property
    def gas_price_wei(self) -> int:
        """Fixed legacy gas price in wei."""
        return int(self.gas_price_gwei * 10**9)

    def address_url(self, address: str) -> str:
        """Explorer page for an address."""
        return f"{self.explorer_url.rstrip('/')}/address/{address}"

    def tx_url(self, tx_hash: str) -> str:
        """Explorer page for a transaction."""
        return f"{self.explorer_url.rstrip('/')}/tx/{tx_hash}"


class AccountSettings(BaseSettings):
    """Signer credentials."""

    model_config = SettingsConfigDict(**_COMMON_CONFIG)

    private_key: SecretStr = Field(default=SecretStr(""), alias="PRIVATE_KEY")


class EtherscanSettings(BaseSettings):
    """Etherscan source verification configuration."""

    model_config = SettingsConfigDict(**_COMMON_CONFIG, env_prefix="ETHERSCAN_")

    api_key: SecretStr = SecretStr("")
    api_url: str = "https://api.etherscan.io/v2/api"
    timeout_seconds: float = 30.0
    poll_interval_seconds: float = Field(default=5.0, ge=0)
    max_polls: int = Field(default=12, ge=1)


class CompilerSettings(BaseSettings):
    """Solidity compiler settings the contract is built with."""

    model_config = SettingsConfigDict(**_COMMON_CONFIG, env_prefix="SOLC_")

    version: str = "0.8.19"
    optimizer_enabled: bool = True
    optimizer_runs: int = Field(default=200, ge=0)


class DeploymentSettings(BaseSettings):
    """Deployment workflow configuration."""

    model_config = SettingsConfigDict(**_COMMON_CONFIG, env_prefix="DEPLOY_")

    contract_name: str = "ProofPayNetwork"
    artifacts_dir: Path = Path("artifacts")
    confirmations: int = Field(default=6, ge=1)
    confirmation_timeout_seconds: float = Field(default=600.0, gt=0)
    poll_interval_seconds: float = Field(default=4.0, ge=0)

    # Target of the interact operation
    contract_address: str = Field(default="", alias="CONTRACT_ADDRESS")


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and `.env` with
    sensible defaults. Build it once with `get_settings()` and pass it
    to the operations that need it.
    """

    model_config = SettingsConfigDict(**_COMMON_CONFIG)

    # General
    log_level: LogLevel = LogLevel.INFO
    json_logs: bool = False
    chain_mode: ChainMode = ChainMode.TESTNET

    network: NetworkSettings = Field(default_factory=NetworkSettings)
    account: AccountSettings = Field(default_factory=AccountSettings)
    etherscan: EtherscanSettings = Field(default_factory=EtherscanSettings)
    compiler: CompilerSettings = Field(default_factory=CompilerSettings)
    deployment: DeploymentSettings = Field(default_factory=DeploymentSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @property
    def is_mock(self) -> bool:
        """Check if running against the in-memory chain."""
        return self.chain_mode == ChainMode.MOCK


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings.
    """
    return Settings()
