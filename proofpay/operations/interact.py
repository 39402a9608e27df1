"""
Interact Operation
==================

Submit a sample proof to a deployed ProofPayNetwork contract and read
back the signer's proof list.

Version: 0.1.0
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from web3 import Web3

from proofpay.artifacts import ContractArtifact
from proofpay.chain import ChainClient, TransactionReceipt
from proofpay.config import Settings
from proofpay.errors import SubmissionError
from proofpay.logging import get_logger

logger = get_logger(__name__)

SUBMIT_FUNCTION = "submitProof"
USER_PROOFS_FUNCTION = "getUserProofs"


class ProofSubmission(BaseModel):
    """
    Arguments of `submitProof`.

    Groth16 proof points plus the payment terms the proof attests to.
    """

    model_config = ConfigDict(frozen=True)

    # Proof points (G1, G2, G1)
    a: tuple[int, int]
    b: tuple[tuple[int, int], tuple[int, int]]
    c: tuple[int, int]

    required_amount: int
    public_hash: int

    def to_call_args(self) -> list[Any]:
        """Convert to positional Solidity call arguments."""
        return [
            list(self.a),
            [list(row) for row in self.b],
            list(self.c),
            self.required_amount,
            self.public_hash,
        ]


SAMPLE_PROOF = ProofSubmission(
    a=(1, 2),
    b=((3, 4), (5, 6)),
    c=(7, 8),
    required_amount=Web3.to_wei(1000, "ether"),
    public_hash=12345,
)


class InteractionResult(BaseModel):
    """Outcome of a submit-then-read interaction."""

    model_config = ConfigDict(frozen=True)

    contract_address: str
    user: str
    tx_hash: str
    receipt: TransactionReceipt
    user_proofs: Any = None


def resolve_contract_address(settings: Settings) -> str:
    """
    Checksummed CONTRACT_ADDRESS.

    Raises:
        SubmissionError: Not set or not an address
    """
    address = settings.deployment.contract_address.strip()
    if not address:
        raise SubmissionError("CONTRACT_ADDRESS is not set")
    if not Web3.is_address(address):
        raise SubmissionError(f"CONTRACT_ADDRESS {address!r} is not a valid address")
    return Web3.to_checksum_address(address)


async def interact(
    settings: Settings,
    client: ChainClient,
    artifact: ContractArtifact,
    proof: ProofSubmission = SAMPLE_PROOF,
) -> InteractionResult:
    """
    Submit one proof, wait for inclusion, then list the signer's proofs.

    Args:
        settings: Application settings
        client: Connected chain client with the signer
        artifact: Compiled contract (for its ABI)
        proof: Proof to submit

    Returns:
        InteractionResult

    Raises:
        SubmissionError: Submission rejected or reverted
        ConfirmationTimeout: Not included in time
        QueryError: Proof list query failed
    """
    address = resolve_contract_address(settings)
    user = client.account.address

    logger.info("interaction_started", contract=address, user=user)

    tx_hash = await client.transact(address, artifact.abi, SUBMIT_FUNCTION, proof.to_call_args())
    logger.info("proof_submission_sent", tx_hash=tx_hash)

    receipt = await client.wait_for_confirmations(
        tx_hash,
        depth=1,
        timeout=settings.deployment.confirmation_timeout_seconds,
        poll_interval=settings.deployment.poll_interval_seconds,
    )
    logger.info("proof_submitted", tx_hash=tx_hash, block_number=receipt.block_number)

    user_proofs = await client.call(address, artifact.abi, USER_PROOFS_FUNCTION, [user])
    logger.info("user_proofs_fetched", user=user, user_proofs=user_proofs)

    return InteractionResult(
        contract_address=address,
        user=user,
        tx_hash=tx_hash,
        receipt=receipt,
        user_proofs=user_proofs,
    )
