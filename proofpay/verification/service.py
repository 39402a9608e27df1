"""
Verification Service Interface
==============================

Abstract base class and models for publishing contract source to a block
explorer.

Version: 0.1.0
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from proofpay.artifacts import ArtifactStore, ContractArtifact
from proofpay.config import Settings
from proofpay.logging import get_logger

logger = get_logger(__name__)


class VerificationOutcome(BaseModel):
    """Result of a source verification attempt."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str | None = Field(default=None, description="Diagnostic detail")
    verified_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def passed(cls, message: str | None = None) -> "VerificationOutcome":
        return cls(success=True, message=message)

    @classmethod
    def failed(cls, message: str) -> "VerificationOutcome":
        return cls(success=False, message=message)


class VerificationService(ABC):
    """Publishes the source of a deployed contract for public auditability."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name."""
        ...

    @abstractmethod
    async def verify(
        self,
        address: str,
        constructor_arguments: Sequence[Any] = (),
        contract: ContractArtifact | None = None,
    ) -> VerificationOutcome:
        """
        Verify a deployed contract.

        Args:
            address: Deployed contract address
            constructor_arguments: Constructor arguments in ABI order
            contract: Artifact the contract was deployed from

        Returns:
            VerificationOutcome

        Raises:
            VerificationError: Verification could not be completed
        """
        ...

    async def close(self) -> None:
        """Release held resources."""
        return None


def create_verification_service(
    settings: Settings,
    artifacts: ArtifactStore | None = None,
) -> VerificationService:
    """
    Create the verification service matching the chain mode.

    Args:
        settings: Application settings
        artifacts: Store used to find build-info for verified contracts

    Returns:
        VerificationService instance
    """
    if settings.is_mock:
        from proofpay.verification.mock import MockVerificationService

        service: VerificationService = MockVerificationService()
    else:
        from proofpay.verification.etherscan import EtherscanVerificationService

        service = EtherscanVerificationService(
            settings=settings,
            artifacts=artifacts or ArtifactStore(settings.deployment.artifacts_dir),
        )

    logger.debug("verification_service_initialized", service=service.name)
    return service
