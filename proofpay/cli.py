"""
Command Line Entry Points
=========================

`proofpay-deploy`, `proofpay-whoami` and `proofpay-interact`.

Each takes no arguments, reads configuration from the environment (and
`.env`), exits 0 on success and 1 on failure with the error printed to
standard error.

Version: 0.1.0
"""

import asyncio
import sys
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from functools import partial

from eth_account.signers.local import LocalAccount

from proofpay.artifacts import ArtifactStore
from proofpay.chain import ChainClient, create_chain_client, load_account
from proofpay.config import NetworkSettings, Settings, get_settings
from proofpay.errors import CredentialsError, QueryError
from proofpay.logging import get_logger, redact_url_credentials, setup_logging
from proofpay.operations import build_request, deploy, interact, whoami
from proofpay.verification import create_verification_service
from proofpay.workflow import WorkflowEvent, WorkflowStage

logger = get_logger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


@asynccontextmanager
async def chain_session(
    settings: Settings,
    account: LocalAccount | None,
) -> AsyncIterator[ChainClient]:
    """Create, connect and finally disconnect a chain client."""
    client = create_chain_client(settings, account)
    await client.connect()
    try:
        yield client
    finally:
        await client.disconnect()


def run_script(script: str, main: Callable[[Settings], Awaitable[None]]) -> int:
    """
    Run an async script body with the process-level error boundary.

    Returns:
        Process exit status
    """
    try:
        settings = get_settings()
        setup_logging(
            log_level=settings.log_level.value,
            json_logs=settings.json_logs,
            service_name=script,
        )
        asyncio.run(main(settings))
    except Exception as e:
        logger.error("script_failed", script=script, error_type=type(e).__name__, error=str(e))
        print(f"Error: {redact_url_credentials(str(e))}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_SUCCESS


# =============================================================================
# deploy
# =============================================================================


def _print_progress(network: NetworkSettings, event: WorkflowEvent) -> None:
    if event.stage == WorkflowStage.SUBMITTED:
        print(f"Deployment transaction: {network.tx_url(event.tx_hash)}")
    elif event.stage == WorkflowStage.DEPLOYED:
        print(f"Deployed to: {event.address}")
    elif event.stage == WorkflowStage.CONFIRMED:
        print(f"Confirmed with {event.confirmations} blocks")
    elif event.stage == WorkflowStage.VERIFIED:
        print(f"Verified: {event.message}")
    elif event.stage == WorkflowStage.VERIFICATION_FAILED:
        print(f"Verification failed: {event.message}")
    elif event.stage == WorkflowStage.COMPLETED and event.report is not None:
        report = event.report
        print()
        print("Contract Details:")
        print(f"  Contract: {report.result.contract_name}")
        print(f"  Address:  {report.result.address}")
        print(f"  Tx:       {report.result.tx_hash}")
        print(f"  Network:  {report.network}")
        if report.explorer_url:
            print(f"  Explorer: {report.explorer_url}")
        print(f"  Verified: {'yes' if report.verification.success else 'no'}")


async def _deploy(settings: Settings) -> None:
    artifacts = ArtifactStore(settings.deployment.artifacts_dir)
    request = build_request(settings, artifacts)
    account = load_account(settings.account.private_key)

    print(f"Deploying {request.contract_name} to {settings.network.name}...")
    verifier = create_verification_service(settings, artifacts)
    try:
        async with chain_session(settings, account) as client:
            await deploy(
                settings,
                client,
                verifier,
                request,
                listeners=[partial(_print_progress, settings.network)],
            )
    finally:
        await verifier.close()


def deploy_main() -> int:
    """Deploy the configured contract."""
    return run_script("deploy", _deploy)


# =============================================================================
# whoami
# =============================================================================


async def _whoami(settings: Settings) -> None:
    try:
        account = load_account(settings.account.private_key)
    except CredentialsError as e:
        raise QueryError(str(e)) from e

    async with chain_session(settings, account) as client:
        balance = await whoami(client)

    print(f"Deployer address: {balance.address}")
    print(f"{settings.network.name.capitalize()} balance: {balance.balance_ether} ETH")


def whoami_main() -> int:
    """Print the signer address and balance."""
    return run_script("whoami", _whoami)


# =============================================================================
# interact
# =============================================================================


async def _interact(settings: Settings) -> None:
    artifact = ArtifactStore(settings.deployment.artifacts_dir).load(
        settings.deployment.contract_name
    )
    account = load_account(settings.account.private_key)

    async with chain_session(settings, account) as client:
        print(f"Testing {artifact.contract_name} as: {account.address}")
        result = await interact(settings, client, artifact)

    print(f"Transaction hash: {result.tx_hash}")
    print("Proof submitted successfully")
    print(f"User proofs: {result.user_proofs}")


def interact_main() -> int:
    """Submit a sample proof to CONTRACT_ADDRESS."""
    return run_script("interact", _interact)
