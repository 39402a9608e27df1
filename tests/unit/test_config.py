"""
Unit tests for settings.
"""

from decimal import Decimal

import pytest
from pydantic import SecretStr

from proofpay.config import (
    SEPOLIA_CHAIN_ID,
    AccountSettings,
    ChainMode,
    DeploymentSettings,
    LogLevel,
    NetworkSettings,
    Settings,
)


class TestNetworkSettings:
    """Tests for NetworkSettings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test Sepolia defaults."""
        for var in ("SEPOLIA_RPC_URL", "INFURA_PROJECT_ID", "CHAIN_ID", "GAS_PRICE_GWEI"):
            monkeypatch.delenv(var, raising=False)

        network = NetworkSettings(_env_file=None)

        assert network.chain_id == SEPOLIA_CHAIN_ID == 11155111
        assert network.gas_price_gwei == Decimal(20)
        assert network.gas_price_wei == 20_000_000_000

    def test_rpc_url_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test SEPOLIA_RPC_URL takes precedence."""
        monkeypatch.setenv("SEPOLIA_RPC_URL", "https://rpc.sepolia.example")
        monkeypatch.setenv("INFURA_PROJECT_ID", "abc123")

        network = NetworkSettings(_env_file=None)

        assert network.rpc_url == "https://rpc.sepolia.example"

    def test_rpc_url_infura_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test Infura URL is built when no RPC URL is set."""
        monkeypatch.delenv("SEPOLIA_RPC_URL", raising=False)
        monkeypatch.setenv("INFURA_PROJECT_ID", "abc123")

        network = NetworkSettings(_env_file=None)

        assert network.rpc_url == "https://sepolia.infura.io/v3/abc123"

    def test_explorer_urls(self) -> None:
        """Test explorer links."""
        network = NetworkSettings(_env_file=None, explorer_url="https://sepolia.etherscan.io/")

        assert network.address_url("0xabc") == "https://sepolia.etherscan.io/address/0xabc"
        assert network.tx_url("0x123") == "https://sepolia.etherscan.io/tx/0x123"

    def test_fractional_gas_price(self) -> None:
        """Test gwei to wei conversion keeps fractions."""
        network = NetworkSettings(_env_file=None, gas_price_gwei=Decimal("1.5"))

        assert network.gas_price_wei == 1_500_000_000


class TestAccountSettings:
    """Tests for AccountSettings."""

    def test_private_key_is_secret(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the key is loaded but not shown in repr."""
        monkeypatch.setenv("PRIVATE_KEY", "0xdeadbeef")

        account = AccountSettings(_env_file=None)

        assert account.private_key.get_secret_value() == "0xdeadbeef"
        assert "deadbeef" not in repr(account)

    def test_missing_private_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the key defaults to empty."""
        monkeypatch.delenv("PRIVATE_KEY", raising=False)

        assert AccountSettings(_env_file=None).private_key.get_secret_value() == ""


class TestDeploymentSettings:
    """Tests for DeploymentSettings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test six confirmations and a bounded wait by default."""
        for var in ("DEPLOY_CONFIRMATIONS", "DEPLOY_CONFIRMATION_TIMEOUT_SECONDS", "CONTRACT_ADDRESS"):
            monkeypatch.delenv(var, raising=False)

        deployment = DeploymentSettings(_env_file=None)

        assert deployment.contract_name == "ProofPayNetwork"
        assert deployment.confirmations == 6
        assert deployment.confirmation_timeout_seconds > 0
        assert deployment.contract_address == ""

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test prefixed variables and the unprefixed CONTRACT_ADDRESS."""
        monkeypatch.setenv("DEPLOY_CONFIRMATIONS", "2")
        monkeypatch.setenv("CONTRACT_ADDRESS", "0x5FbDB2315678afecb367f032d93F642f64180aa3")

        deployment = DeploymentSettings(_env_file=None)

        assert deployment.confirmations == 2
        assert deployment.contract_address == "0x5FbDB2315678afecb367f032d93F642f64180aa3"

    def test_confirmations_must_be_positive(self) -> None:
        """Test zero confirmations is rejected."""
        with pytest.raises(ValueError):
            DeploymentSettings(_env_file=None, confirmations=0)


class TestSettings:
    """Tests for root Settings."""

    def test_log_level_case_insensitive(self) -> None:
        """Test lowercase log level is accepted."""
        settings = Settings(_env_file=None, log_level="debug")

        assert settings.log_level == LogLevel.DEBUG

    def test_chain_mode(self) -> None:
        """Test mock mode flag."""
        assert Settings(_env_file=None, chain_mode=ChainMode.MOCK).is_mock is True
        assert Settings(_env_file=None, chain_mode=ChainMode.TESTNET).is_mock is False

    def test_nested_settings(self) -> None:
        """Test nested settings can be passed explicitly."""
        settings = Settings(
            _env_file=None,
            account=AccountSettings(_env_file=None, private_key=SecretStr("0x01")),
        )

        assert settings.account.private_key.get_secret_value() == "0x01"
