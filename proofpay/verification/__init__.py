"""
Verification Module
===================

Source verification of deployed contracts.

Supports:
- Etherscan (API v2, standard-JSON input)
- Mock (development/testing)

Usage:
    from proofpay.verification import create_verification_service

    service = create_verification_service(settings)
    outcome = await service.verify(address, [], contract=artifact)
"""

from proofpay.verification.mock import MockVerificationService
from proofpay.verification.service import (
    VerificationOutcome,
    VerificationService,
    create_verification_service,
)

__all__ = [
    "MockVerificationService",
    "VerificationOutcome",
    "VerificationService",
    "create_verification_service",
]
