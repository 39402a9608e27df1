"""
Mock Chain Client
=================

In-memory mock implementation for development and testing.

Version: 0.1.0
"""

import hashlib
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from eth_account.signers.local import LocalAccount
from web3 import Web3

from proofpay.artifacts import ContractArtifact
from proofpay.chain.client import ChainClient, ConfirmationStatus, TransactionReceipt
from proofpay.config import SEPOLIA_CHAIN_ID, ChainMode
from proofpay.errors import QueryError, SubmissionError
from proofpay.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BALANCE_WEI = 10 * 10**18
DEPLOYMENT_COST_WEI = 2 * 10**15
CALL_COST_WEI = 2 * 10**14


@dataclass
class _MockTransaction:
    tx_hash: str
    sender: str
    kind: str
    to: str | None = None
    function: str | None = None
    args: tuple[Any, ...] = ()
    contract_address: str | None = None
    block_number: int | None = None
    status: int = 1
    gas_used: int = 0


@dataclass
class _MockContract:
    address: str
    name: str
    abi: list[dict[str, Any]]
    transactions: list[str] = field(default_factory=list)


class MockChainClient(ChainClient):
    """
    In-memory mock chain client.

    Simulates a chain for development without a network. Pending
    transactions are mined into the next block the first time their
    status is polled, and every further poll mines one more block, so
    confirmations grow by one per poll.

    `getUserProofs(user)` is served out of the box and returns the ids of
    the successful `submitProof` calls sent by `user`.

    Data is stored in memory and lost on restart.
    """

    def __init__(
        self,
        account: LocalAccount | None = None,
        chain_id: int = SEPOLIA_CHAIN_ID,
        balances: dict[str, int] | None = None,
    ) -> None:
        """Initialize mock client with in-memory storage."""
        super().__init__(account)
        self._chain_id = chain_id
        self._connected = False
        self._block_number = 1000

        self._balances: dict[str, int] = {}
        if account is not None:
            self._balances[account.address] = DEFAULT_BALANCE_WEI
        for address, balance in (balances or {}).items():
            self._balances[Web3.to_checksum_address(address)] = balance

        self._transactions: dict[str, _MockTransaction] = {}
        self._contracts: dict[str, _MockContract] = {}
        self._views: dict[str, Callable[..., Any]] = {"getUserProofs": self._user_proofs}

        # Failure simulation
        self.reject_with: str | None = None
        self.revert_next: bool = False
        self.stall: bool = False

        # Ordered record of client operations, e.g. ("transact", "submitProof")
        self.operations: list[tuple[str, str]] = []
        # Confirmation count returned by each status poll, in order
        self.confirmation_log: list[int] = []

        logger.debug("mock_chain_initialized", chain_id=chain_id)

    @property
    def mode(self) -> ChainMode:
        return ChainMode.MOCK

    async def connect(self) -> None:
        """Simulate connection."""
        self._connected = True
        logger.info("mock_chain_connected", chain_id=self._chain_id)

    async def disconnect(self) -> None:
        """Simulate disconnection."""
        self._connected = False
        logger.info("mock_chain_disconnected")

    async def chain_id(self) -> int:
        return self._chain_id

    def _generate_tx_hash(self) -> str:
        """Generate a mock transaction hash."""
        return "0x" + hashlib.sha256(uuid.uuid4().bytes).hexdigest()

    def _generate_address(self) -> str:
        """Generate a mock contract address."""
        return Web3.to_checksum_address("0x" + hashlib.sha256(uuid.uuid4().bytes).hexdigest()[:40])

    def _next_block(self) -> int:
        """Get next block number."""
        self._block_number += 1
        return self._block_number

    def _charge(self, sender: str, cost: int) -> None:
        balance = self._balances.get(sender, 0)
        if balance < cost:
            raise SubmissionError(
                f"insufficient funds for gas * price + value: address {sender} "
                f"have {balance} want {cost}"
            )
        self._balances[sender] = balance - cost

    def _broadcast(self, tx: _MockTransaction, cost: int) -> None:
        if self.reject_with is not None:
            raise SubmissionError(self.reject_with)
        self._charge(tx.sender, cost)
        if self.revert_next:
            tx.status = 0
            self.revert_next = False
        tx.gas_used = cost // 10**9
        self._transactions[tx.tx_hash] = tx

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_balance(self, address: str) -> int:
        """Get the balance of an address."""
        self.operations.append(("get_balance", address))
        try:
            checksum = Web3.to_checksum_address(address)
        except ValueError as e:
            raise QueryError(f"Invalid address {address!r}") from e
        return self._balances.get(checksum, 0)

    async def call(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function: str,
        args: Sequence[Any] = (),
    ) -> Any:
        """Call a registered view function on a mock contract."""
        self.operations.append(("call", function))
        if Web3.to_checksum_address(address) not in self._contracts:
            raise QueryError(f"No contract deployed at {address}")
        if function not in self._views:
            raise QueryError(f"execution reverted: {function} not available")
        return self._views[function](*args)

    async def get_confirmation_status(self, tx_hash: str) -> ConfirmationStatus:
        """Mine one block and report the transaction's confirmations."""
        if tx_hash not in self._transactions:
            raise QueryError(f"Unknown transaction {tx_hash}")

        tx = self._transactions[tx_hash]
        if self.stall:
            self.confirmation_log.append(0)
            return ConfirmationStatus()

        block = self._next_block()
        if tx.block_number is None:
            tx.block_number = block

        confirmations = block - tx.block_number + 1
        self.confirmation_log.append(confirmations)

        receipt = TransactionReceipt(
            tx_hash=tx.tx_hash,
            block_number=tx.block_number,
            status=tx.status,
            contract_address=tx.contract_address if tx.status == 1 else None,
            gas_used=tx.gas_used,
        )
        return ConfirmationStatus(receipt=receipt, confirmations=confirmations)

    # =========================================================================
    # Writes
    # =========================================================================

    async def submit_deployment(
        self,
        artifact: ContractArtifact,
        constructor_args: Sequence[Any] = (),
    ) -> str:
        """Simulate a contract-creation transaction."""
        self.operations.append(("submit_deployment", artifact.contract_name))
        sender = self.account.address

        address = self._generate_address()
        tx = _MockTransaction(
            tx_hash=self._generate_tx_hash(),
            sender=sender,
            kind="deployment",
            args=tuple(constructor_args),
            contract_address=address,
        )
        self._broadcast(tx, DEPLOYMENT_COST_WEI)
        if tx.status == 1:
            self._contracts[address] = _MockContract(
                address=address,
                name=artifact.contract_name,
                abi=artifact.abi,
            )

        logger.debug(
            "mock_deployment_sent",
            contract=artifact.contract_name,
            address=address,
            tx_hash=tx.tx_hash,
        )
        return tx.tx_hash

    async def transact(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function: str,
        args: Sequence[Any] = (),
    ) -> str:
        """Simulate a state-changing contract call."""
        self.operations.append(("transact", function))
        sender = self.account.address

        checksum = Web3.to_checksum_address(address)
        if checksum not in self._contracts:
            raise SubmissionError(f"No contract deployed at {address}")

        tx = _MockTransaction(
            tx_hash=self._generate_tx_hash(),
            sender=sender,
            kind="call",
            to=checksum,
            function=function,
            args=tuple(args),
        )
        self._broadcast(tx, CALL_COST_WEI)
        self._contracts[checksum].transactions.append(tx.tx_hash)

        logger.debug(
            "mock_transaction_sent",
            contract=checksum,
            function=function,
            tx_hash=tx.tx_hash,
        )
        return tx.tx_hash

    def _user_proofs(self, user: str) -> list[int]:
        """Ids of the submitProof calls sent by `user`, in submission order."""
        submissions = [
            tx for tx in self._transactions.values()
            if tx.function == "submitProof" and tx.status == 1
        ]
        user = Web3.to_checksum_address(user)
        return [proof_id for proof_id, tx in enumerate(submissions) if tx.sender == user]

    # =========================================================================
    # Test Utilities
    # =========================================================================

    def add_contract(
        self,
        name: str,
        abi: list[dict[str, Any]],
        address: str | None = None,
    ) -> str:
        """Register an already deployed contract and return its address."""
        checksum = Web3.to_checksum_address(address) if address else self._generate_address()
        self._contracts[checksum] = _MockContract(address=checksum, name=name, abi=abi)
        return checksum

    def register_view(self, function: str, handler: Callable[..., Any]) -> None:
        """Serve calls to `function` with `handler(*args)`."""
        self._views[function] = handler

    def set_balance(self, address: str, balance_wei: int) -> None:
        self._balances[Web3.to_checksum_address(address)] = balance_wei

    def transactions_to(self, address: str, function: str | None = None) -> list[tuple[Any, ...]]:
        """Arguments of mined or pending calls sent to a contract."""
        contract = self._contracts[Web3.to_checksum_address(address)]
        return [
            self._transactions[h].args
            for h in contract.transactions
            if self._transactions[h].kind == "call"
            and (function is None or self._transactions[h].function == function)
        ]

    def clear_all(self) -> None:
        """Clear all mock data (for testing)."""
        self._transactions.clear()
        self._contracts.clear()
        self._views = {"getUserProofs": self._user_proofs}
        self.operations.clear()
        self.confirmation_log.clear()
        self._block_number = 1000
        logger.debug("mock_chain_cleared")

    def get_stats(self) -> dict[str, int]:
        """Get storage statistics."""
        return {
            "transactions": len(self._transactions),
            "contracts": len(self._contracts),
            "block_number": self._block_number,
        }
