"""
Logging Module
==============

Structured logging using structlog with JSON output for production
and colored console output for development.

Usage:
    from proofpay.logging import get_logger, setup_logging

    # Setup at process start
    setup_logging()

    # Get logger for a module
    logger = get_logger(__name__)

    # Log with context
    logger.info("deployment_submitted", tx_hash="0x...")
    logger.warning("verification_failed", error=str(e))
"""

from proofpay.logging.logger import (
    clear_context,
    get_logger,
    redact_url_credentials,
    setup_logging,
)


__all__ = [
    "clear_context",
    "get_logger",
    "redact_url_credentials",
    "setup_logging",
]
