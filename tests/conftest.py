"""
Test Configuration
==================

Pytest fixtures for ProofPay tests.
"""

import json
import os
from pathlib import Path
from typing import Any

import aiohttp
import pytest
from eth_account import Account
from eth_account.signers.local import LocalAccount
from multidict import CIMultiDict, CIMultiDictProxy
from pydantic import SecretStr
from yarl import URL

# Set test environment
os.environ["CHAIN_MODE"] = "mock"

from proofpay.chain import MockChainClient  # noqa: E402
from proofpay.config import (  # noqa: E402
    AccountSettings,
    ChainMode,
    DeploymentSettings,
    EtherscanSettings,
    NetworkSettings,
    Settings,
)
from proofpay.verification import MockVerificationService  # noqa: E402


# Well-known development key (Hardhat/Anvil account #0), never funded on a public chain
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

PROOFPAY_ABI: list[dict[str, Any]] = [
    {"inputs": [], "stateMutability": "nonpayable", "type": "constructor"},
    {
        "inputs": [
            {"internalType": "uint256[2]", "name": "a", "type": "uint256[2]"},
            {"internalType": "uint256[2][2]", "name": "b", "type": "uint256[2][2]"},
            {"internalType": "uint256[2]", "name": "c", "type": "uint256[2]"},
            {"internalType": "uint256", "name": "requiredAmount", "type": "uint256"},
            {"internalType": "uint256", "name": "publicHash", "type": "uint256"},
        ],
        "name": "submitProof",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "address", "name": "user", "type": "address"}],
        "name": "getUserProofs",
        "outputs": [{"internalType": "uint256[]", "name": "", "type": "uint256[]"}],
        "stateMutability": "view",
        "type": "function",
    },
]

BUILD_INFO_ID = "3f2c1c0b9e7d4a5b8c6d2e1f0a9b8c7d"


def write_artifacts(root: Path, abi: list[dict[str, Any]] | None = None) -> Path:
    """Write a Hardhat-style artifacts tree for ProofPayNetwork under `root`."""
    contract_dir = root / "contracts" / "ProofPayNetwork.sol"
    build_info_dir = root / "build-info"
    contract_dir.mkdir(parents=True, exist_ok=True)
    build_info_dir.mkdir(parents=True, exist_ok=True)

    (contract_dir / "ProofPayNetwork.json").write_text(
        json.dumps(
            {
                "_format": "hh-sol-artifact-1",
                "contractName": "ProofPayNetwork",
                "sourceName": "contracts/ProofPayNetwork.sol",
                "abi": abi if abi is not None else PROOFPAY_ABI,
                "bytecode": "0x6080604052348015600f57600080fd5b50603f80601d6000396000f3fe",
                "deployedBytecode": "0x6080604052600080fdfe",
                "linkReferences": {},
                "deployedLinkReferences": {},
            }
        )
    )
    (contract_dir / "ProofPayNetwork.dbg.json").write_text(
        json.dumps(
            {
                "_format": "hh-sol-dbg-1",
                "buildInfo": f"../../build-info/{BUILD_INFO_ID}.json",
            }
        )
    )
    (build_info_dir / f"{BUILD_INFO_ID}.json").write_text(
        json.dumps(
            {
                "_format": "hh-sol-build-info-1",
                "id": BUILD_INFO_ID,
                "solcVersion": "0.8.19",
                "solcLongVersion": "0.8.19+commit.7dd6d404",
                "input": {
                    "language": "Solidity",
                    "sources": {
                        "contracts/ProofPayNetwork.sol": {
                            "content": "// SPDX-License-Identifier: MIT\npragma solidity ^0.8.19;\n"
                        }
                    },
                    "settings": {"optimizer": {"enabled": True, "runs": 200}},
                },
                "output": {},
            }
        )
    )
    return root


def http_error(status: int, message: str, url: str) -> aiohttp.ClientResponseError:
    """Error raised by the web3 aiohttp transport for a non-2xx response."""
    request_info = aiohttp.RequestInfo(
        url=URL(url),
        method="POST",
        headers=CIMultiDictProxy(CIMultiDict()),
        real_url=URL(url),
    )
    return aiohttp.ClientResponseError(request_info, (), status=status, message=message)


@pytest.fixture
def artifacts_dir(tmp_path: Path) -> Path:
    """Compiled ProofPayNetwork artifacts."""
    return write_artifacts(tmp_path / "artifacts")


@pytest.fixture
def account() -> LocalAccount:
    """Deployer account."""
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def settings(artifacts_dir: Path) -> Settings:
    """Settings for the mock chain with fast polling."""
    return Settings(
        chain_mode=ChainMode.MOCK,
        network=NetworkSettings(sepolia_rpc_url="http://localhost:8545"),
        account=AccountSettings(private_key=SecretStr(TEST_PRIVATE_KEY)),
        etherscan=EtherscanSettings(
            api_key=SecretStr("test-etherscan-key"),
            api_url="https://api.etherscan.test/v2/api",
            poll_interval_seconds=0,
            max_polls=3,
        ),
        deployment=DeploymentSettings(
            artifacts_dir=artifacts_dir,
            confirmations=6,
            confirmation_timeout_seconds=5,
            poll_interval_seconds=0,
            contract_address="",
        ),
    )


@pytest.fixture
def mock_client(account: LocalAccount) -> MockChainClient:
    """Fresh mock chain with a funded deployer."""
    return MockChainClient(account=account)


@pytest.fixture
def mock_verifier() -> MockVerificationService:
    """Verification service that succeeds."""
    return MockVerificationService()
