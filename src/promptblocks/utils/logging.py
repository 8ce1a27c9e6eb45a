"""Structured logging setup for promptblocks."""

import structlog
from pathlib import Path
from typing import Any
import os


def configure_logging() -> None:
    """
    Configure structlog for JSON logging to ~/.cache/promptblocks/logs/promptblocks.log.

    Log level can be controlled via PROMPTBLOCKS_LOG_LEVEL environment variable:
    - Set to "DEBUG" to see every decoded element and resolved block
    - Defaults to "INFO" if not set

    Log levels:
    - DEBUG: Per-element encode/decode/render details
    - INFO: CLI commands, config and library loading
    - WARNING: Recovered orphaned text, encoder fallbacks, missing blocks
    - ERROR: Config, library or file failures

    Example:
        # Enable debug logging
        export PROMPTBLOCKS_LOG_LEVEL=DEBUG
        promptblocks render prompt.txt

        # View logs with jq for readability:
        tail -f ~/.cache/promptblocks/logs/promptblocks.log | jq .
    """
    # Ensure log directory exists
    log_dir = Path.home() / ".cache" / "promptblocks" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "promptblocks.log"

    log_level = os.environ.get("PROMPTBLOCKS_LOG_LEVEL", "INFO").upper()

    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR"]
    if log_level not in valid_levels:
        log_level = "INFO"

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=open(log_file, "a")),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Returns:
        Structured logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.warning("decode_orphaned_text", length=12)
    """
    return structlog.get_logger(name)
