"""
Operations
==========

Entry-level operations behind the command line scripts:

- deploy: deploy, confirm and verify the contract
- whoami: signer address and balance
- interact: submit a sample proof and list the signer's proofs
"""

from proofpay.operations.deploy import build_request, deploy
from proofpay.operations.interact import (
    SAMPLE_PROOF,
    InteractionResult,
    ProofSubmission,
    interact,
    resolve_contract_address,
)
from proofpay.operations.whoami import whoami

__all__ = [
    "SAMPLE_PROOF",
    "InteractionResult",
    "ProofSubmission",
    "build_request",
    "deploy",
    "interact",
    "resolve_contract_address",
    "whoami",
]
