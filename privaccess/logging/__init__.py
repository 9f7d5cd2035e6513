"""
Logging Module
==============

Structured logging using structlog with JSON output for production
and colored console output for development.

Usage:
    from privaccess.logging import get_logger, setup_logging

    # Setup at application start
    setup_logging()

    # Get logger for a module
    logger = get_logger(__name__)

    # Log with context
    logger.info("access_decision", door_id="101", granted=True)
    logger.error("engine_failure", error=str(e), circuit=circuit_name)
"""

from privaccess.logging.logger import (
    bind_context,
    censor_secrets,
    clear_context,
    get_logger,
    log_context,
    setup_logging,
)


__all__ = [
    "get_logger",
    "setup_logging",
    "bind_context",
    "log_context",
    "clear_context",
    "censor_secrets",
]
