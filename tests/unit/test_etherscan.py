"""
Unit tests for Etherscan verification.

HTTP traffic goes through httpx.MockTransport.
"""

from collections.abc import Callable
from pathlib import Path
from urllib.parse import parse_qs

import httpx
import pytest
from pydantic import SecretStr

from proofpay.artifacts import ArtifactStore, ContractArtifact
from proofpay.config import Settings
from proofpay.errors import VerificationError
from proofpay.verification.etherscan import (
    EtherscanVerificationService,
    abi_type,
    encode_constructor_arguments,
)

ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

NOT_VERIFIED = {"status": "1", "message": "OK", "result": [{"SourceCode": "", "ABI": ""}]}
VERIFIED = {"status": "1", "message": "OK", "result": [{"SourceCode": "pragma solidity"}]}


class FakeEtherscan:
    """Scripted Etherscan API recording every request."""

    def __init__(
        self,
        source=NOT_VERIFIED,
        submit=None,
        statuses=(),
    ) -> None:
        self.source = source
        self.submit = submit or {"status": "1", "message": "OK", "result": "guid-123"}
        self.statuses = list(statuses)
        self.requests: list[httpx.Request] = []

    def actions(self) -> list[str]:
        return [r.url.params["action"] for r in self.requests]

    def form(self) -> dict[str, str]:
        post = next(r for r in self.requests if r.method == "POST")
        return {k: v[0] for k, v in parse_qs(post.content.decode(), keep_blank_values=True).items()}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        action = request.url.params["action"]
        if action == "getsourcecode":
            return httpx.Response(200, json=self.source)
        if action == "verifysourcecode":
            return httpx.Response(200, json=self.submit)
        if action == "checkverifystatus":
            return httpx.Response(200, json=self.statuses.pop(0))
        return httpx.Response(404)


def _pending() -> dict[str, str]:
    return {"status": "0", "message": "NOTOK", "result": "Pending in queue"}


@pytest.fixture
def artifact(artifacts_dir: Path) -> ContractArtifact:
    return ArtifactStore(artifacts_dir).load("ProofPayNetwork")


@pytest.fixture
def make_service(
    settings: Settings,
    artifacts_dir: Path,
) -> Callable[..., EtherscanVerificationService]:
    def factory(handler, settings: Settings = settings) -> EtherscanVerificationService:
        return EtherscanVerificationService(
            settings=settings,
            artifacts=ArtifactStore(artifacts_dir),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

    return factory


class TestConstructorArguments:
    """Tests for constructor argument encoding."""

    def _artifact(self, inputs: list[dict]) -> ContractArtifact:
        return ContractArtifact(
            contract_name="Token",
            source_name="contracts/Token.sol",
            abi=[{"type": "constructor", "inputs": inputs}],
            bytecode="0x6080",
        )

    def test_no_constructor_arguments(self) -> None:
        """Test empty encoding for a parameterless constructor."""
        assert encode_constructor_arguments(self._artifact([]), ()) == ""

    def test_encodes_without_prefix(self) -> None:
        """Test arguments are ABI-encoded as bare hex."""
        artifact = self._artifact([{"type": "uint256"}, {"type": "address"}])

        encoded = encode_constructor_arguments(artifact, [1, ADDRESS])

        assert not encoded.startswith("0x")
        assert len(encoded) == 128
        assert encoded[:64] == "0" * 63 + "1"
        assert encoded[64:].endswith(ADDRESS[2:].lower())

    def test_argument_count_mismatch(self) -> None:
        """Test wrong number of arguments."""
        artifact = self._artifact([{"type": "uint256"}])

        with pytest.raises(VerificationError, match="takes 1 arguments, got 0"):
            encode_constructor_arguments(artifact, [])

    def test_tuple_type(self) -> None:
        """Test struct parameters expand to tuple types."""
        param = {
            "type": "tuple[]",
            "components": [{"type": "uint256"}, {"type": "address"}],
        }

        assert abi_type(param) == "(uint256,address)[]"


class TestEtherscanVerificationService:
    """Tests for EtherscanVerificationService."""

    def test_service_name(self, make_service) -> None:
        assert make_service(FakeEtherscan()).name == "etherscan"

    @pytest.mark.asyncio
    async def test_already_verified(self, make_service, artifact: ContractArtifact) -> None:
        """Test nothing is submitted for already verified contracts."""
        api = FakeEtherscan(source=VERIFIED)
        service = make_service(api)

        outcome = await service.verify(ADDRESS, contract=artifact)

        assert outcome.success
        assert outcome.message == "Already Verified"
        assert api.actions() == ["getsourcecode"]

    @pytest.mark.asyncio
    async def test_submit_and_poll(self, make_service, artifact: ContractArtifact) -> None:
        """Test submission is polled until it passes."""
        api = FakeEtherscan(
            statuses=[_pending(), {"status": "1", "message": "OK", "result": "Pass - Verified"}]
        )
        service = make_service(api)

        outcome = await service.verify(ADDRESS, contract=artifact)

        assert outcome.success
        assert outcome.message == "Pass - Verified"
        assert api.actions() == [
            "getsourcecode",
            "verifysourcecode",
            "checkverifystatus",
            "checkverifystatus",
        ]
        assert api.requests[-1].url.params["guid"] == "guid-123"

    @pytest.mark.asyncio
    async def test_submission_form(self, make_service, artifact: ContractArtifact) -> None:
        """Test the standard-JSON submission fields."""
        api = FakeEtherscan(statuses=[{"status": "1", "result": "Pass - Verified"}])
        service = make_service(api)

        await service.verify(ADDRESS, contract=artifact)

        form = api.form()
        assert form["contractaddress"] == ADDRESS
        assert form["codeformat"] == "solidity-standard-json-input"
        assert form["contractname"] == "contracts/ProofPayNetwork.sol:ProofPayNetwork"
        assert form["compilerversion"] == "v0.8.19+commit.7dd6d404"
        assert form["constructorArguements"] == ""
        assert '"language": "Solidity"' in form["sourceCode"]

    @pytest.mark.asyncio
    async def test_chain_and_key_sent(self, make_service, artifact: ContractArtifact) -> None:
        """Test every request names the chain and carries the API key."""
        api = FakeEtherscan(source=VERIFIED)
        service = make_service(api)

        await service.verify(ADDRESS, contract=artifact)

        params = api.requests[0].url.params
        assert params["chainid"] == "11155111"
        assert params["apikey"] == "test-etherscan-key"
        assert api.requests[0].url.path == "/v2/api"

    @pytest.mark.asyncio
    async def test_verification_failed(self, make_service, artifact: ContractArtifact) -> None:
        """Test explorer-side failure."""
        api = FakeEtherscan(
            statuses=[{"status": "0", "message": "NOTOK", "result": "Fail - Unable to verify"}]
        )
        service = make_service(api)

        with pytest.raises(VerificationError, match="Fail - Unable to verify"):
            await service.verify(ADDRESS, contract=artifact)

    @pytest.mark.asyncio
    async def test_submission_already_verified(
        self,
        make_service,
        artifact: ContractArtifact,
    ) -> None:
        """Test a submit answered with 'already verified' passes."""
        api = FakeEtherscan(
            submit={"status": "0", "message": "NOTOK", "result": "Contract source code already verified"}
        )
        service = make_service(api)

        outcome = await service.verify(ADDRESS, contract=artifact)

        assert outcome.success
        assert "checkverifystatus" not in api.actions()

    @pytest.mark.asyncio
    async def test_submission_rejected(self, make_service, artifact: ContractArtifact) -> None:
        """Test rejected submission."""
        api = FakeEtherscan(submit={"status": "0", "message": "NOTOK", "result": "Invalid API Key"})
        service = make_service(api)

        with pytest.raises(VerificationError, match="rejected the submission: Invalid API Key"):
            await service.verify(ADDRESS, contract=artifact)

    @pytest.mark.asyncio
    async def test_poll_budget_exhausted(self, make_service, artifact: ContractArtifact) -> None:
        """Test polling stops after max_polls."""
        api = FakeEtherscan(statuses=[_pending() for _ in range(5)])
        service = make_service(api)

        with pytest.raises(VerificationError, match="still pending after 3 polls"):
            await service.verify(ADDRESS, contract=artifact)

        assert api.actions().count("checkverifystatus") == 3

    @pytest.mark.asyncio
    async def test_http_error_hides_api_key(
        self,
        make_service,
        artifact: ContractArtifact,
    ) -> None:
        """Test HTTP failures do not leak the API key."""
        service = make_service(lambda request: httpx.Response(502, text="Bad Gateway"))

        with pytest.raises(VerificationError, match="HTTP 502") as exc_info:
            await service.verify(ADDRESS, contract=artifact)

        assert "test-etherscan-key" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_json_response(self, make_service, artifact: ContractArtifact) -> None:
        """Test HTML error pages."""
        service = make_service(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(VerificationError, match="non-JSON"):
            await service.verify(ADDRESS, contract=artifact)

    @pytest.mark.asyncio
    async def test_missing_api_key(
        self,
        make_service,
        settings: Settings,
        artifact: ContractArtifact,
    ) -> None:
        """Test no request is made without an API key."""
        settings = settings.model_copy(
            update={
                "etherscan": settings.etherscan.model_copy(update={"api_key": SecretStr("")})
            }
        )
        api = FakeEtherscan()
        service = make_service(api, settings=settings)

        with pytest.raises(VerificationError, match="ETHERSCAN_API_KEY is not set"):
            await service.verify(ADDRESS, contract=artifact)

        assert api.requests == []

    @pytest.mark.asyncio
    async def test_missing_contract(self, make_service) -> None:
        """Test the artifact is required."""
        service = make_service(FakeEtherscan())

        with pytest.raises(VerificationError, match="needs the contract artifact"):
            await service.verify(ADDRESS)

    @pytest.mark.asyncio
    async def test_missing_build_info(
        self,
        make_service,
        artifacts_dir: Path,
        artifact: ContractArtifact,
    ) -> None:
        """Test artifacts without build-info cannot be verified."""
        (artifacts_dir / "contracts" / "ProofPayNetwork.sol" / "ProofPayNetwork.dbg.json").unlink()
        api = FakeEtherscan()
        service = make_service(api)

        with pytest.raises(VerificationError, match="No build info"):
            await service.verify(ADDRESS, contract=artifact)

        assert api.requests == []

    @pytest.mark.asyncio
    async def test_close(self, make_service) -> None:
        """Test close releases the HTTP client."""
        service = make_service(FakeEtherscan())

        await service.close()

        assert service._client.is_closed
