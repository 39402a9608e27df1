"""
Contract Artifacts
==================

Loads compiled contracts from a Hardhat-style artifacts directory:

    artifacts/
        build-info/<id>.json
        contracts/ProofPayNetwork.sol/ProofPayNetwork.json
        contracts/ProofPayNetwork.sol/ProofPayNetwork.dbg.json

Version: 0.1.0
"""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from proofpay.errors import ArtifactError
from proofpay.logging import get_logger

logger = get_logger(__name__)


class ContractArtifact(BaseModel):
    """ABI and creation bytecode of a compiled contract."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    contract_name: str = Field(..., alias="contractName")
    source_name: str = Field(..., alias="sourceName")
    abi: list[dict[str, Any]]
    bytecode: str

    # Where the artifact was read from (not part of the JSON)
    path: Path | None = Field(default=None, exclude=True)

    @field_validator("bytecode")
    @classmethod
    def bytecode_must_be_hex(cls, v: str) -> str:
        body = v[2:] if v.startswith("0x") else v
        if not body:
            raise ValueError("bytecode is empty (abstract contract or interface?)")
        try:
            bytes.fromhex(body)
        except ValueError as e:
            raise ValueError("bytecode is not valid hex") from e
        return "0x" + body

    @property
    def fully_qualified_name(self) -> str:
        """`<sourceName>:<contractName>`, as expected by Etherscan."""
        return f"{self.source_name}:{self.contract_name}"

    @property
    def constructor_inputs(self) -> list[dict[str, Any]]:
        """ABI inputs of the constructor (empty when there is none)."""
        for entry in self.abi:
            if entry.get("type") == "constructor":
                return list(entry.get("inputs", []))
        return []

    def has_function(self, name: str) -> bool:
        return any(
            entry.get("type") == "function" and entry.get("name") == name
            for entry in self.abi
        )


class BuildInfo(BaseModel):
    """Compiler input and version a contract was built from."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    solc_version: str = Field(..., alias="solcVersion")
    solc_long_version: str = Field(..., alias="solcLongVersion")
    input: dict[str, Any]

    @property
    def compiler_version(self) -> str:
        """Compiler version string in Etherscan format (`v0.8.19+commit.7dd6d404`)."""
        return f"v{self.solc_long_version}"

    @property
    def optimizer(self) -> dict[str, Any]:
        return self.input.get("settings", {}).get("optimizer", {})


class ArtifactStore:
    """
    Read-only view over an artifacts directory.

    Equivalent of resolving a contract factory by name: the name may be
    bare (`ProofPayNetwork`) or fully qualified
    (`contracts/ProofPayNetwork.sol:ProofPayNetwork`).
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _candidates(self, contract_name: str) -> list[Path]:
        if ":" in contract_name:
            source_name, name = contract_name.rsplit(":", 1)
            path = self.root / source_name / f"{name}.json"
            return [path] if path.is_file() else []

        return sorted(
            path
            for path in self.root.rglob(f"{contract_name}.json")
            if "build-info" not in path.parts
        )

    def load(self, contract_name: str) -> ContractArtifact:
        """
        Load a compiled contract.

        Args:
            contract_name: Bare or fully qualified contract name

        Returns:
            ContractArtifact

        Raises:
            ArtifactError: Missing, ambiguous or malformed artifact
        """
        if not self.root.is_dir():
            raise ArtifactError(
                f"Artifacts directory {self.root} does not exist; compile the contracts first"
            )

        candidates = self._candidates(contract_name)
        if not candidates:
            raise ArtifactError(f"Artifact for contract '{contract_name}' not found in {self.root}")
        if len(candidates) > 1:
            names = ", ".join(str(p.relative_to(self.root)) for p in candidates)
            raise ArtifactError(
                f"Multiple artifacts match '{contract_name}': {names}. "
                "Use the fully qualified name."
            )

        path = candidates[0]
        data = self._read_json(path)
        try:
            artifact = ContractArtifact.model_validate({**data, "path": path})
        except ValidationError as e:
            raise ArtifactError(f"Malformed artifact {path}: {e}") from e

        logger.debug(
            "artifact_loaded",
            contract=artifact.fully_qualified_name,
            path=str(path),
        )
        return artifact

    def load_build_info(self, artifact: ContractArtifact) -> BuildInfo | None:
        """
        Load the build-info an artifact was produced from.

        Returns:
            BuildInfo, or None when the artifact has no debug file
        """
        if artifact.path is None:
            return None

        dbg_path = artifact.path.with_name(f"{artifact.contract_name}.dbg.json")
        if not dbg_path.is_file():
            return None

        dbg = self._read_json(dbg_path)
        build_info_ref = dbg.get("buildInfo")
        if not build_info_ref:
            return None

        build_info_path = (dbg_path.parent / build_info_ref).resolve()
        if not build_info_path.is_file():
            raise ArtifactError(f"Build info {build_info_path} referenced by {dbg_path} is missing")

        try:
            return BuildInfo.model_validate(self._read_json(build_info_path))
        except ValidationError as e:
            raise ArtifactError(f"Malformed build info {build_info_path}: {e}") from e

    @staticmethod
    def _read_json(path: Path) -> dict[str, Any]:
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ArtifactError(f"Cannot read {path}: {e}") from e
