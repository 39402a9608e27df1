"""
Deploy Operation
================

Deploy the configured contract through the deployment workflow.

Version: 0.1.0
"""

from collections.abc import Sequence
from typing import Any

from proofpay.artifacts import ArtifactStore, ContractArtifact
from proofpay.chain import ChainClient
from proofpay.config import Settings
from proofpay.verification import VerificationService
from proofpay.workflow import (
    DeploymentRequest,
    DeploymentResult,
    DeploymentWorkflow,
    WorkflowListener,
)


def build_request(
    settings: Settings,
    artifacts: ArtifactStore | None = None,
    constructor_args: Sequence[Any] = (),
) -> DeploymentRequest:
    """
    Resolve the configured contract into a deployment request.

    Raises:
        ArtifactError: Contract not compiled
    """
    store = artifacts or ArtifactStore(settings.deployment.artifacts_dir)
    artifact: ContractArtifact = store.load(settings.deployment.contract_name)
    return DeploymentRequest(artifact=artifact, constructor_args=tuple(constructor_args))


async def deploy(
    settings: Settings,
    client: ChainClient,
    verifier: VerificationService,
    request: DeploymentRequest,
    listeners: Sequence[WorkflowListener] = (),
) -> DeploymentResult:
    """
    Deploy a contract, wait for the configured depth and verify it.

    Args:
        settings: Application settings
        client: Connected chain client with the deployer account
        verifier: Source verification service
        request: Contract to deploy
        listeners: Workflow progress callbacks

    Returns:
        DeploymentResult
    """
    workflow = DeploymentWorkflow.from_settings(settings, client, verifier, listeners)
    return await workflow.run(request)
