"""
Errors
======

Exception hierarchy shared by the chain client, verification service,
deployment workflow and operations.

Fatal errors (everything except `VerificationError`) propagate to the
process boundary, which exits with status 1.

Version: 0.1.0
"""


class ProofPayError(Exception):
    """Base class for all ProofPay errors."""


class SubmissionError(ProofPayError):
    """Transaction could not be built, signed, broadcast or was reverted."""


class CredentialsError(SubmissionError):
    """Signer could not be constructed from the configured credentials."""


class ConfirmationTimeout(ProofPayError):
    """Confirmation depth was not reached before the deadline."""

    def __init__(
        self,
        tx_hash: str,
        depth: int,
        observed: int,
        timeout: float | None,
    ) -> None:
        self.tx_hash = tx_hash
        self.depth = depth
        self.observed = observed
        self.timeout = timeout
        deadline = f"within {timeout}s" if timeout is not None else "before the wait ended"
        super().__init__(
            f"Transaction {tx_hash} reached {observed}/{depth} confirmations {deadline}"
        )


class VerificationError(ProofPayError):
    """Source verification failed. Never fatal to a deployment."""


class QueryError(ProofPayError):
    """Read-only chain query failed."""


class ArtifactError(ProofPayError):
    """Compiled contract artifact is missing or malformed."""


class NetworkMismatchError(ProofPayError):
    """RPC endpoint serves a different chain than the configured one."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"RPC endpoint reports chain id {actual}, expected {expected}")
