"""
Whoami Operation
================

Report the signer address and its native balance. Read-only.
"""

from proofpay.chain import AccountBalance, ChainClient
from proofpay.errors import CredentialsError, QueryError
from proofpay.logging import get_logger

logger = get_logger(__name__)


async def whoami(client: ChainClient) -> AccountBalance:
    """
    Get the balance of the client's signer.

    Raises:
        QueryError: No signer configured or the balance query failed
    """
    try:
        address = client.account.address
    except CredentialsError as e:
        raise QueryError(str(e)) from e

    balance_wei = await client.get_balance(address)
    balance = AccountBalance(address=address, balance_wei=balance_wei)

    logger.info("balance_queried", address=address, balance_ether=str(balance.balance_ether))
    return balance
