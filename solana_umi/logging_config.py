"""Logging configuration for the Solana Umi client core."""

import logging
import sys
from typing import Optional

import structlog

# Default log format
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(log_level: str = "INFO",
                      log_format: Optional[str] = None,
                      json_logs: bool = False) -> None:
    """Configure global logging settings.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format string for plain-text output
        json_logs: Render records as JSON lines through structlog
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    if json_logs:
        handler.setFormatter(structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=[
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.format_exc_info,
            ],
        ))
    else:
        handler.setFormatter(logging.Formatter(log_format or DEFAULT_LOG_FORMAT))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(numeric_level)

    # Set third-party loggers to a higher level to reduce noise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger
    """
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger,
                     level: str,
                     message: str,
                     **context) -> None:
    """Log a message with additional context information.

    The context is appended as ``key=value`` pairs and also attached to the
    record so JSON output keeps the fields separate.

    Args:
        logger: Logger instance
        level: Log level (debug, info, warning, error, critical)
        message: Log message
        context: Additional context information as keyword arguments
    """
    context_str = ", ".join(f"{k}={v!r}" for k, v in context.items())
    log_method = getattr(logger, level.lower(), logger.info)
    if context_str:
        log_method(f"{message} ({context_str})", extra={"context": context})
    else:
        log_method(message)
