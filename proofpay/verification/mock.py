"""
Mock Verification Service
=========================

Scripted verification results for development and testing.

Version: 0.1.0
"""

from collections.abc import Sequence
from typing import Any

from proofpay.artifacts import ContractArtifact
from proofpay.logging import get_logger
from proofpay.verification.service import VerificationOutcome, VerificationService

logger = get_logger(__name__)


class MockVerificationService(VerificationService):
    """
    In-memory verification service.

    Succeeds by default. Set `fail_with` to return a failed outcome or
    `raise_error` to raise from `verify`.
    """

    def __init__(
        self,
        fail_with: str | None = None,
        raise_error: Exception | None = None,
    ) -> None:
        self.fail_with = fail_with
        self.raise_error = raise_error
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._verified: set[str] = set()

    @property
    def name(self) -> str:
        return "mock"

    async def verify(
        self,
        address: str,
        constructor_arguments: Sequence[Any] = (),
        contract: ContractArtifact | None = None,
    ) -> VerificationOutcome:
        """Record the call and return the scripted outcome."""
        self.calls.append((address, tuple(constructor_arguments)))

        if self.raise_error is not None:
            raise self.raise_error
        if self.fail_with is not None:
            logger.debug("mock_verification_failed", address=address, reason=self.fail_with)
            return VerificationOutcome.failed(self.fail_with)

        if address in self._verified:
            return VerificationOutcome.passed("Already Verified")
        self._verified.add(address)

        logger.debug("mock_verification_passed", address=address)
        return VerificationOutcome.passed("Pass - Verified")

    def is_verified(self, address: str) -> bool:
        return address in self._verified
