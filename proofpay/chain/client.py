"""
Chain Client Interface
======================

Abstract base class and models for chain operations.

Version: 0.1.0
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from eth_account import Account
from eth_account.signers.local import LocalAccount
from pydantic import BaseModel, ConfigDict, Field, SecretStr
from web3 import Web3

from proofpay.artifacts import ContractArtifact
from proofpay.config import ChainMode, Settings
from proofpay.errors import ConfirmationTimeout, CredentialsError, SubmissionError
from proofpay.logging import get_logger

logger = get_logger(__name__)


class TransactionReceipt(BaseModel):
    """Mined transaction."""

    model_config = ConfigDict(frozen=True)

    tx_hash: str
    block_number: int
    status: int = Field(..., description="1 = success, 0 = reverted")
    contract_address: str | None = None
    gas_used: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status == 1


class ConfirmationStatus(BaseModel):
    """Inclusion state of a transaction at the current chain head."""

    model_config = ConfigDict(frozen=True)

    receipt: TransactionReceipt | None = None
    confirmations: int = Field(default=0, ge=0)


class AccountBalance(BaseModel):
    """Native balance of an address."""

    model_config = ConfigDict(frozen=True)

    address: str
    balance_wei: int = Field(..., ge=0)

    @property
    def balance_ether(self) -> Decimal:
        return Web3.from_wei(self.balance_wei, "ether")


def load_account(private_key: SecretStr | str) -> LocalAccount:
    """
    Build the signer from a hex private key.

    Raises:
        CredentialsError: Key missing or not a valid secp256k1 key
    """
    key = private_key.get_secret_value() if isinstance(private_key, SecretStr) else private_key
    key = key.strip()
    if not key:
        raise CredentialsError("PRIVATE_KEY is not set")

    try:
        return Account.from_key(key)
    except (ValueError, TypeError) as e:
        # Message of the underlying error can contain the key
        raise CredentialsError("PRIVATE_KEY is not a valid private key") from e


class ChainClient(ABC):
    """
    Abstract base class for chain clients.

    Implements the Strategy pattern for live and in-memory chains.
    Transactions are signed by the single account the client was
    created with.
    """

    def __init__(self, account: LocalAccount | None = None) -> None:
        self._account = account

    @property
    @abstractmethod
    def mode(self) -> ChainMode:
        """Get the chain mode."""
        ...

    @property
    def account(self) -> LocalAccount:
        """Signing account. Raises CredentialsError when none was configured."""
        if self._account is None:
            raise CredentialsError("No signer configured; set PRIVATE_KEY")
        return self._account

    @abstractmethod
    async def connect(self) -> None:
        """Connect to the network."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Disconnect from the network."""
        ...

    @abstractmethod
    async def chain_id(self) -> int:
        """Chain id served by the endpoint."""
        ...

    # =========================================================================
    # Reads
    # =========================================================================

    @abstractmethod
    async def get_balance(self, address: str) -> int:
        """
        Get the native balance of an address.

        Args:
            address: Account address

        Returns:
            Balance in wei

        Raises:
            QueryError: The query failed
        """
        ...

    @abstractmethod
    async def call(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function: str,
        args: Sequence[Any] = (),
    ) -> Any:
        """
        Call a view function.

        Args:
            address: Contract address
            abi: Contract ABI
            function: Function name
            args: Positional arguments

        Returns:
            Decoded return value

        Raises:
            QueryError: The call failed
        """
        ...

    @abstractmethod
    async def get_confirmation_status(self, tx_hash: str) -> ConfirmationStatus:
        """
        Get the receipt and confirmation count of a transaction.

        A transaction still in the mempool has no receipt and zero
        confirmations; the block that includes it counts as one.
        """
        ...

    # =========================================================================
    # Writes
    # =========================================================================

    @abstractmethod
    async def submit_deployment(
        self,
        artifact: ContractArtifact,
        constructor_args: Sequence[Any] = (),
    ) -> str:
        """
        Sign and broadcast a contract-creation transaction.

        Args:
            artifact: Compiled contract
            constructor_args: Constructor arguments in ABI order

        Returns:
            Transaction hash

        Raises:
            SubmissionError: Signer missing or transaction rejected
        """
        ...

    @abstractmethod
    async def transact(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function: str,
        args: Sequence[Any] = (),
    ) -> str:
        """
        Sign and broadcast a state-changing contract call.

        Returns:
            Transaction hash

        Raises:
            SubmissionError: Signer missing or transaction rejected
        """
        ...

    # =========================================================================
    # Confirmation
    # =========================================================================

    async def wait_for_confirmations(
        self,
        tx_hash: str,
        depth: int = 1,
        timeout: float | None = None,
        poll_interval: float = 4.0,
    ) -> TransactionReceipt:
        """
        Block until a transaction has `depth` confirmations.

        Args:
            tx_hash: Transaction to wait for
            depth: Required confirmations (1 = included)
            timeout: Deadline in seconds, None waits forever
            poll_interval: Seconds between status polls

        Returns:
            Receipt of the confirmed transaction

        Raises:
            SubmissionError: The transaction was reverted
            ConfirmationTimeout: Deadline expired first
        """
        if depth < 1:
            raise ValueError(f"depth must be >= 1, got {depth}")

        observed = 0
        try:
            async with asyncio.timeout(timeout):
                while True:
                    status = await self.get_confirmation_status(tx_hash)
                    observed = status.confirmations

                    if status.receipt is not None and not status.receipt.succeeded:
                        raise SubmissionError(
                            f"Transaction {tx_hash} reverted in block {status.receipt.block_number}"
                        )

                    if status.receipt is not None and observed >= depth:
                        logger.debug(
                            "transaction_confirmed",
                            tx_hash=tx_hash,
                            confirmations=observed,
                            depth=depth,
                        )
                        return status.receipt

                    await asyncio.sleep(poll_interval)
        except TimeoutError as e:
            raise ConfirmationTimeout(tx_hash, depth, observed, timeout) from e


def create_chain_client(settings: Settings, account: LocalAccount | None = None) -> ChainClient:
    """
    Create the chain client selected by `settings.chain_mode`.

    Args:
        settings: Application settings
        account: Signer, required only for state-changing operations

    Returns:
        ChainClient instance
    """
    mode = settings.chain_mode

    if mode == ChainMode.MOCK:
        from proofpay.chain.mock import MockChainClient

        mock = MockChainClient(
            account=account,
            chain_id=settings.network.chain_id,
        )
        if Web3.is_address(settings.deployment.contract_address):
            mock.add_contract(
                settings.deployment.contract_name,
                abi=[],
                address=settings.deployment.contract_address,
            )
        client: ChainClient = mock
    elif mode == ChainMode.TESTNET:
        from proofpay.chain.evm import Web3ChainClient

        client = Web3ChainClient(
            rpc_url=settings.network.rpc_url,
            chain_id=settings.network.chain_id,
            gas_price_wei=settings.network.gas_price_wei,
            account=account,
        )
    else:
        raise ValueError(f"Unknown chain mode: {mode}")

    logger.info(
        "chain_client_initialized",
        mode=mode.value,
        network=settings.network.name,
        chain_id=settings.network.chain_id,
    )
    return client
