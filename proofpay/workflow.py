"""
Deployment Workflow
===================

Submit a contract-creation transaction, wait for the confirmation depth,
request source verification and report the outcome.

Verification is best-effort: its failures are logged and reported but
never fail the deployment. Submission and confirmation failures propagate.

Version: 0.1.0
"""

from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from proofpay.artifacts import ContractArtifact
from proofpay.chain import ChainClient, TransactionReceipt
from proofpay.config import Settings
from proofpay.errors import SubmissionError
from proofpay.logging import get_logger
from proofpay.verification import VerificationOutcome, VerificationService

logger = get_logger(__name__)


class DeploymentRequest(BaseModel):
    """What to deploy."""

    model_config = ConfigDict(frozen=True)

    artifact: ContractArtifact
    constructor_args: tuple[Any, ...] = ()

    @property
    def contract_name(self) -> str:
        return self.artifact.contract_name


class DeploymentResult(BaseModel):
    """Deployed contract at the required confirmation depth."""

    model_config = ConfigDict(frozen=True)

    contract_name: str
    address: str = Field(..., min_length=1)
    tx_hash: str = Field(..., min_length=1)
    block_number: int
    confirmations: int


class DeploymentReport(BaseModel):
    """Final outcome of a workflow run."""

    model_config = ConfigDict(frozen=True)

    result: DeploymentResult
    verification: VerificationOutcome
    network: str
    explorer_url: str | None = None


class WorkflowStage(str, Enum):
    """Workflow progress events, in emission order."""

    SUBMITTED = "submitted"
    DEPLOYED = "deployed"
    CONFIRMED = "confirmed"
    VERIFIED = "verified"
    VERIFICATION_FAILED = "verification_failed"
    COMPLETED = "completed"


class WorkflowEvent(BaseModel):
    """A progress notification."""

    model_config = ConfigDict(frozen=True)

    stage: WorkflowStage
    tx_hash: str | None = None
    address: str | None = None
    confirmations: int | None = None
    message: str | None = None
    report: DeploymentReport | None = None


WorkflowListener = Callable[[WorkflowEvent], None]


class DeploymentWorkflow:
    """
    Linear deployment workflow.

    Steps:
    1. Submit: broadcast the creation transaction
    2. Confirm: wait for inclusion, then for `confirmations` blocks
    3. Verify: best-effort source verification
    4. Report: emit a DeploymentReport
    """

    def __init__(
        self,
        client: ChainClient,
        verifier: VerificationService,
        confirmations: int = 6,
        confirmation_timeout: float | None = None,
        poll_interval: float = 4.0,
        network: str = "sepolia",
        explorer_url: Callable[[str], str] | None = None,
        listeners: Sequence[WorkflowListener] = (),
    ) -> None:
        """
        Initialize the workflow.

        Args:
            client: Chain client with the deployer account
            verifier: Source verification service
            confirmations: Required confirmation depth
            confirmation_timeout: Deadline per confirmation wait, None waits forever
            poll_interval: Seconds between confirmation polls
            network: Network name for the report
            explorer_url: Maps an address to its explorer page
            listeners: Progress event callbacks
        """
        if confirmations < 1:
            raise ValueError(f"confirmations must be >= 1, got {confirmations}")

        self._client = client
        self._verifier = verifier
        self._confirmations = confirmations
        self._timeout = confirmation_timeout
        self._poll_interval = poll_interval
        self._network = network
        self._explorer_url = explorer_url
        self._listeners: list[WorkflowListener] = list(listeners)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: ChainClient,
        verifier: VerificationService,
        listeners: Sequence[WorkflowListener] = (),
    ) -> "DeploymentWorkflow":
        """Build a workflow from application settings."""
        deployment = settings.deployment
        return cls(
            client=client,
            verifier=verifier,
            confirmations=deployment.confirmations,
            confirmation_timeout=deployment.confirmation_timeout_seconds,
            poll_interval=deployment.poll_interval_seconds,
            network=settings.network.name,
            explorer_url=settings.network.address_url,
            listeners=listeners,
        )

    def subscribe(self, listener: WorkflowListener) -> None:
        """Register a progress event callback."""
        self._listeners.append(listener)

    def _emit(self, stage: WorkflowStage, **fields: Any) -> None:
        event = WorkflowEvent(stage=stage, **fields)
        for listener in self._listeners:
            listener(event)

    async def run(self, request: DeploymentRequest) -> DeploymentResult:
        """
        Deploy, confirm, verify and report.

        Args:
            request: Contract and constructor arguments

        Returns:
            DeploymentResult at the required confirmation depth

        Raises:
            SubmissionError: Transaction not broadcast or reverted
            ConfirmationTimeout: Depth not reached in time
        """
        tx_hash = await self._submit(request)
        result = await self._confirm(request, tx_hash)
        outcome = await self._verify(request, result)
        self._report(result, outcome)
        return result

    async def _submit(self, request: DeploymentRequest) -> str:
        logger.info(
            "deployment_started",
            contract=request.contract_name,
            network=self._network,
        )
        tx_hash = await self._client.submit_deployment(
            request.artifact,
            request.constructor_args,
        )

        logger.info("deployment_submitted", contract=request.contract_name, tx_hash=tx_hash)
        self._emit(WorkflowStage.SUBMITTED, tx_hash=tx_hash)
        return tx_hash

    async def _wait(self, tx_hash: str, depth: int) -> TransactionReceipt:
        return await self._client.wait_for_confirmations(
            tx_hash,
            depth=depth,
            timeout=self._timeout,
            poll_interval=self._poll_interval,
        )

    async def _confirm(self, request: DeploymentRequest, tx_hash: str) -> DeploymentResult:
        receipt = await self._wait(tx_hash, depth=1)
        if not receipt.contract_address:
            raise SubmissionError(f"Transaction {tx_hash} created no contract")

        address = receipt.contract_address
        logger.info(
            "contract_deployed",
            contract=request.contract_name,
            address=address,
            block_number=receipt.block_number,
            explorer=self._explorer_url(address) if self._explorer_url else None,
        )
        self._emit(WorkflowStage.DEPLOYED, tx_hash=tx_hash, address=address, confirmations=1)

        if self._confirmations > 1:
            logger.info(
                "awaiting_confirmations",
                tx_hash=tx_hash,
                confirmations=self._confirmations,
                timeout_seconds=self._timeout,
            )
            receipt = await self._wait(tx_hash, depth=self._confirmations)

        logger.info("deployment_confirmed", address=address, confirmations=self._confirmations)
        self._emit(
            WorkflowStage.CONFIRMED,
            tx_hash=tx_hash,
            address=address,
            confirmations=self._confirmations,
        )

        return DeploymentResult(
            contract_name=request.contract_name,
            address=address,
            tx_hash=tx_hash,
            block_number=receipt.block_number,
            confirmations=self._confirmations,
        )

    async def _verify(
        self,
        request: DeploymentRequest,
        result: DeploymentResult,
    ) -> VerificationOutcome:
        logger.info("verification_started", address=result.address, service=self._verifier.name)
        try:
            outcome = await self._verifier.verify(
                result.address,
                request.constructor_args,
                contract=request.artifact,
            )
        except Exception as e:
            # Verification never fails a deployment
            outcome = VerificationOutcome.failed(str(e) or type(e).__name__)

        if outcome.success:
            logger.info("verification_passed", address=result.address, detail=outcome.message)
            self._emit(WorkflowStage.VERIFIED, address=result.address, message=outcome.message)
        else:
            logger.warning("verification_failed", address=result.address, error=outcome.message)
            self._emit(
                WorkflowStage.VERIFICATION_FAILED,
                address=result.address,
                message=outcome.message,
            )
        return outcome

    def _report(self, result: DeploymentResult, outcome: VerificationOutcome) -> DeploymentReport:
        report = DeploymentReport(
            result=result,
            verification=outcome,
            network=self._network,
            explorer_url=self._explorer_url(result.address) if self._explorer_url else None,
        )
        logger.info(
            "deployment_completed",
            contract=result.contract_name,
            address=result.address,
            tx_hash=result.tx_hash,
            verified=outcome.success,
        )
        self._emit(
            WorkflowStage.COMPLETED,
            tx_hash=result.tx_hash,
            address=result.address,
            confirmations=result.confirmations,
            report=report,
        )
        return report
