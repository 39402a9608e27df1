"""
Web3 Chain Client
=================

Live chain client over JSON-RPC using web3.py's async API.
Transactions are signed locally and sent raw with a fixed legacy gas price.

Version: 0.1.0
"""

from collections.abc import Sequence
from typing import Any

import aiohttp
from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import TransactionNotFound, Web3Exception

from proofpay.artifacts import ContractArtifact
from proofpay.chain.client import ChainClient, ConfirmationStatus, TransactionReceipt
from proofpay.config import ChainMode
from proofpay.errors import NetworkMismatchError, QueryError, SubmissionError
from proofpay.logging import get_logger, redact_url_credentials

logger = get_logger(__name__)

# Failures raised by web3 and its aiohttp transport
RPC_ERRORS: tuple[type[Exception], ...] = (
    Web3Exception,
    aiohttp.ClientError,
    ValueError,
    OSError,
    TimeoutError,
)


def describe_rpc_error(error: Exception) -> str:
    """Error text without the endpoint URL, which can carry a provider key."""
    if isinstance(error, aiohttp.ClientResponseError):
        return f"HTTP {error.status} {error.message}".rstrip()
    return redact_url_credentials(str(error)) or type(error).__name__


class Web3ChainClient(ChainClient):
    """
    Chain client backed by an HTTP JSON-RPC endpoint.

    Gas is estimated by the node; the gas price is fixed by configuration
    and the nonce is taken from the pending pool.
    """

    def __init__(
        self,
        rpc_url: str,
        chain_id: int,
        gas_price_wei: int,
        account: LocalAccount | None = None,
        request_timeout: float = 30.0,
    ) -> None:
        """
        Initialize the client.

        Args:
            rpc_url: JSON-RPC endpoint
            chain_id: Expected chain id, also used for EIP-155 signing
            gas_price_wei: Legacy gas price for every transaction
            account: Signer for state-changing operations
            request_timeout: Per-request timeout in seconds
        """
        super().__init__(account)
        self._rpc_url = rpc_url
        self._chain_id = chain_id
        self._gas_price_wei = gas_price_wei
        self._w3 = AsyncWeb3(
            AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout})
        )
        self._connected = False

    @property
    def mode(self) -> ChainMode:
        return ChainMode.TESTNET

    async def connect(self) -> None:
        """
        Check the endpoint is reachable and serves the configured chain.

        Raises:
            QueryError: Endpoint unreachable
            NetworkMismatchError: Endpoint serves another chain
        """
        actual = await self.chain_id()
        if actual != self._chain_id:
            raise NetworkMismatchError(self._chain_id, actual)

        self._connected = True
        logger.info("chain_connected", chain_id=actual)

    async def disconnect(self) -> None:
        """Close the provider session."""
        provider = self._w3.provider
        if isinstance(provider, AsyncHTTPProvider):
            await provider.disconnect()
        self._connected = False
        logger.debug("chain_disconnected")

    async def chain_id(self) -> int:
        try:
            return await self._w3.eth.chain_id
        except RPC_ERRORS as e:
            raise QueryError(f"Cannot reach RPC endpoint: {describe_rpc_error(e)}") from e

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_balance(self, address: str) -> int:
        """Get the balance of an address in wei."""
        try:
            return await self._w3.eth.get_balance(Web3.to_checksum_address(address))
        except RPC_ERRORS as e:
            raise QueryError(
                f"Balance query for {address} failed: {describe_rpc_error(e)}"
            ) from e

    async def call(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function: str,
        args: Sequence[Any] = (),
    ) -> Any:
        """Call a view function."""
        try:
            contract = self._w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
            return await contract.functions[function](*args).call()
        except RPC_ERRORS as e:
            raise QueryError(
                f"Call {function} on {address} failed: {describe_rpc_error(e)}"
            ) from e

    async def get_confirmation_status(self, tx_hash: str) -> ConfirmationStatus:
        """Get receipt and confirmations relative to the latest block."""
        try:
            raw = await self._w3.eth.get_transaction_receipt(HexBytes(tx_hash))
        except TransactionNotFound:
            return ConfirmationStatus()
        except RPC_ERRORS as e:
            raise QueryError(
                f"Receipt query for {tx_hash} failed: {describe_rpc_error(e)}"
            ) from e

        try:
            head = await self._w3.eth.block_number
        except RPC_ERRORS as e:
            raise QueryError(f"Block number query failed: {describe_rpc_error(e)}") from e

        receipt = TransactionReceipt(
            tx_hash=tx_hash,
            block_number=raw["blockNumber"],
            status=raw["status"],
            contract_address=raw.get("contractAddress"),
            gas_used=raw.get("gasUsed", 0),
        )
        confirmations = max(head - receipt.block_number + 1, 0)
        return ConfirmationStatus(receipt=receipt, confirmations=confirmations)

    # =========================================================================
    # Writes
    # =========================================================================

    async def _base_transaction(self) -> dict[str, Any]:
        sender = self.account.address
        nonce = await self._w3.eth.get_transaction_count(sender, "pending")
        return {
            "from": sender,
            "nonce": nonce,
            "gasPrice": self._gas_price_wei,
            "chainId": self._chain_id,
        }

    async def _sign_and_send(self, tx: dict[str, Any]) -> str:
        signed = self.account.sign_transaction(tx)
        tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(tx_hash)

    async def submit_deployment(
        self,
        artifact: ContractArtifact,
        constructor_args: Sequence[Any] = (),
    ) -> str:
        """Sign and broadcast a contract-creation transaction."""
        # Raises CredentialsError before anything touches the network
        sender = self.account.address

        try:
            factory = self._w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
            tx = await factory.constructor(*constructor_args).build_transaction(
                await self._base_transaction()
            )
            tx_hash = await self._sign_and_send(tx)
        except RPC_ERRORS as e:
            raise SubmissionError(
                f"Deployment of {artifact.contract_name} rejected: {describe_rpc_error(e)}"
            ) from e

        logger.info(
            "deployment_transaction_sent",
            contract=artifact.contract_name,
            sender=sender,
            tx_hash=tx_hash,
            nonce=tx["nonce"],
            gas=tx.get("gas"),
        )
        return tx_hash

    async def transact(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function: str,
        args: Sequence[Any] = (),
    ) -> str:
        """Sign and broadcast a state-changing contract call."""
        sender = self.account.address

        try:
            contract = self._w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
            tx = await contract.functions[function](*args).build_transaction(
                await self._base_transaction()
            )
            tx_hash = await self._sign_and_send(tx)
        except RPC_ERRORS as e:
            raise SubmissionError(
                f"Transaction {function} on {address} rejected: {describe_rpc_error(e)}"
            ) from e

        logger.info(
            "transaction_sent",
            contract=address,
            function=function,
            sender=sender,
            tx_hash=tx_hash,
        )
        return tx_hash
