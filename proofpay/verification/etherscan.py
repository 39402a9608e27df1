"""
Etherscan Verification
======================

Publishes contract source through the Etherscan v2 API using the
standard-JSON compiler input recorded in the artifact's build-info.

Version: 0.1.0
"""

import json
from collections.abc import Sequence
from typing import Any

import httpx
from eth_abi import encode
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from proofpay.artifacts import ArtifactStore, BuildInfo, ContractArtifact
from proofpay.config import Settings
from proofpay.errors import ArtifactError, VerificationError
from proofpay.logging import get_logger
from proofpay.verification.service import VerificationOutcome, VerificationService


logger = get_logger(__name__)

STATUS_PENDING = "Pending in queue"
STATUS_PASS = "Pass - Verified"
STATUS_ALREADY_VERIFIED = "Already Verified"


class _StillPending(Exception):
    """Etherscan has not finished processing the submission."""


def abi_type(param: dict[str, Any]) -> str:
    """Canonical ABI type of a parameter, expanding tuples."""
    type_ = param["type"]
    if type_.startswith("tuple"):
        inner = ",".join(abi_type(c) for c in param.get("components", []))
        return f"({inner}){type_[len('tuple'):]}"
    return type_


def encode_constructor_arguments(
    artifact: ContractArtifact,
    constructor_arguments: Sequence[Any],
) -> str:
    """
    ABI-encode constructor arguments as unprefixed hex.

    Raises:
        VerificationError: Argument count does not match the constructor
    """
    inputs = artifact.constructor_inputs
    if len(inputs) != len(constructor_arguments):
        raise VerificationError(
            f"{artifact.contract_name} constructor takes {len(inputs)} arguments, "
            f"got {len(constructor_arguments)}"
        )
    if not inputs:
        return ""

    types = [abi_type(p) for p in inputs]
    return encode(types, list(constructor_arguments)).hex()


class EtherscanVerificationService(VerificationService):
    """
    Etherscan source verification.

    Flow:
    1. Skip if the explorer already has source for the address
    2. Submit standard-JSON input (`verifysourcecode`)
    3. Poll `checkverifystatus` until pass, fail or poll budget exhausted
    """

    def __init__(
        self,
        settings: Settings,
        artifacts: ArtifactStore,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            settings: Application settings (API key, chain id, compiler)
            artifacts: Store to resolve build-info from
            http_client: Preconfigured client, mainly for tests
        """
        self._settings = settings
        self._api_key = settings.etherscan.api_key.get_secret_value()
        self._chain_id = settings.network.chain_id
        self._poll_interval = settings.etherscan.poll_interval_seconds
        self._max_polls = settings.etherscan.max_polls
        self._artifacts = artifacts
        self._api_url = settings.etherscan.api_url

        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.etherscan.timeout_seconds),
        )

        logger.debug(
            "etherscan_service_initialized",
            api_url=settings.etherscan.api_url,
            chain_id=self._chain_id,
        )

    @property
    def name(self) -> str:
        return "etherscan"

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        params: dict[str, Any],
        data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send an API request and return the decoded body."""
        query = {"chainid": self._chain_id, "apikey": self._api_key, **params}
        try:
            response = await self._client.request(method, self._api_url, params=query, data=data)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            # Not formatting the exception: its URL carries the API key
            raise VerificationError(
                f"Etherscan request failed with HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise VerificationError(f"Etherscan request failed: {type(e).__name__}") from e
        except ValueError as e:
            raise VerificationError("Etherscan returned a non-JSON response") from e

    async def is_verified(self, address: str) -> bool:
        """Check whether the explorer already has source for an address."""
        body = await self._request(
            "GET",
            {"module": "contract", "action": "getsourcecode", "address": address},
        )
        if body.get("status") != "1":
            return False
        result = body.get("result") or [{}]
        return bool(result[0].get("SourceCode"))

    def _check_compiler(self, build_info: BuildInfo) -> None:
        """Warn when the build-info differs from the configured compiler."""
        compiler = self._settings.compiler
        optimizer = build_info.optimizer

        mismatches = {}
        if build_info.solc_version != compiler.version:
            mismatches["version"] = (compiler.version, build_info.solc_version)
        if optimizer.get("enabled", False) != compiler.optimizer_enabled:
            mismatches["optimizer_enabled"] = (
                compiler.optimizer_enabled,
                optimizer.get("enabled", False),
            )
        if compiler.optimizer_enabled and optimizer.get("runs") != compiler.optimizer_runs:
            mismatches["optimizer_runs"] = (compiler.optimizer_runs, optimizer.get("runs"))

        if mismatches:
            logger.warning(
                "compiler_settings_mismatch",
                mismatches={k: {"configured": c, "build": b} for k, (c, b) in mismatches.items()},
            )

    async def submit(
        self,
        address: str,
        contract: ContractArtifact,
        build_info: BuildInfo,
        constructor_arguments: Sequence[Any],
    ) -> str | None:
        """
        Submit source for verification.

        Returns:
            Submission GUID, or None if the contract is already verified
        """
        form = {
            "contractaddress": address,
            "sourceCode": json.dumps(build_info.input),
            "codeformat": "solidity-standard-json-input",
            "contractname": contract.fully_qualified_name,
            "compilerversion": build_info.compiler_version,
            # Etherscan's parameter name is misspelled
            "constructorArguements": encode_constructor_arguments(contract, constructor_arguments),
        }
        body = await self._request(
            "POST",
            {"module": "contract", "action": "verifysourcecode"},
            data=form,
        )

        result = str(body.get("result", ""))
        if body.get("status") == "1":
            return result
        if "already verified" in result.lower():
            return None
        raise VerificationError(f"Etherscan rejected the submission: {result}")

    async def check_status(self, guid: str) -> str:
        """
        Get the status of a submission.

        Raises:
            _StillPending: Not processed yet
            VerificationError: Verification failed
        """
        body = await self._request(
            "GET",
            {"module": "contract", "action": "checkverifystatus", "guid": guid},
        )
        result = str(body.get("result", ""))

        if result == STATUS_PENDING:
            raise _StillPending(guid)
        if body.get("status") == "1" or result in (STATUS_PASS, STATUS_ALREADY_VERIFIED):
            return result
        raise VerificationError(f"Etherscan verification failed: {result}")

    async def wait_for_result(self, guid: str) -> str:
        """Poll a submission until it leaves the queue."""
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(_StillPending),
                stop=stop_after_attempt(self._max_polls),
                wait=wait_fixed(self._poll_interval),
                before_sleep=lambda retry_state: logger.debug(
                    "etherscan_verification_pending",
                    guid=guid,
                    attempt=retry_state.attempt_number,
                ),
            ):
                with attempt:
                    return await self.check_status(guid)
        except RetryError as e:
            raise VerificationError(
                f"Verification {guid} still pending after {self._max_polls} polls"
            ) from e
        raise VerificationError(f"Verification {guid} produced no result")

    async def verify(
        self,
        address: str,
        constructor_arguments: Sequence[Any] = (),
        contract: ContractArtifact | None = None,
    ) -> VerificationOutcome:
        """Verify a deployed contract on Etherscan."""
        if not self._api_key:
            raise VerificationError("ETHERSCAN_API_KEY is not set")
        if contract is None:
            raise VerificationError("Etherscan verification needs the contract artifact")

        try:
            build_info = self._artifacts.load_build_info(contract)
        except ArtifactError as e:
            raise VerificationError(str(e)) from e
        if build_info is None:
            raise VerificationError(
                f"No build info for {contract.fully_qualified_name}; recompile the contracts"
            )
        self._check_compiler(build_info)

        if await self.is_verified(address):
            logger.info("etherscan_already_verified", address=address)
            return VerificationOutcome.passed(STATUS_ALREADY_VERIFIED)

        guid = await self.submit(address, contract, build_info, constructor_arguments)
        if guid is None:
            logger.info("etherscan_already_verified", address=address)
            return VerificationOutcome.passed(STATUS_ALREADY_VERIFIED)

        logger.info("etherscan_verification_submitted", address=address, guid=guid)
        result = await self.wait_for_result(guid)

        logger.info("etherscan_verification_passed", address=address, result=result)
        return VerificationOutcome.passed(result)
