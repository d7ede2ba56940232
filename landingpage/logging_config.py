"""Logging configuration for landingpage using structlog."""

import logging
import os
import sys
from typing import Any, Optional, Tuple

import structlog

# Polled by liveness probes; logged at debug to keep the request log readable
QUIET_PATHS = ("/health",)


def _resolve_level(verbose: bool) -> Tuple[str, int]:
    """Return the level name and number, falling back to INFO for unknown names."""
    name = "DEBUG" if verbose else os.getenv("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        return "INFO", logging.INFO
    return name, level


def setup_logging(verbose: bool = False) -> None:
    """Setup structured logging configuration.

    Args:
        verbose: If True, enables DEBUG logging regardless of LOG_LEVEL env var
    """
    log_level, numeric_level = _resolve_level(verbose)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _get_renderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.get_logger(__name__).info("Logging configured", log_level=log_level, verbose=verbose)


def _get_renderer() -> Any:
    """Pick JSON output when LOG_FORMAT=json, console output otherwise."""
    if os.getenv("LOG_FORMAT", "console").lower() == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stdout.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_function_entry(logger: structlog.stdlib.BoundLogger, func_name: str, **kwargs: Any) -> None:
    logger.debug("Function entry", function=func_name, **kwargs)


def log_function_exit(logger: structlog.stdlib.BoundLogger, func_name: str, **kwargs: Any) -> None:
    logger.debug("Function exit", function=func_name, **kwargs)


def log_http_request(
    logger: structlog.stdlib.BoundLogger,
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    client_ip: Optional[str] = None,
) -> None:
    """Log one served HTTP request as a single line."""
    log = logger.debug if path in QUIET_PATHS else logger.info
    log("HTTP request",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=duration_ms,
        client_ip=client_ip or "unknown")


def log_k8s_operation(logger: structlog.stdlib.BoundLogger, operation: str, cluster: str, **kwargs: Any) -> None:
    """Log a call against a Kubernetes API server.

    Args:
        logger: The logger instance
        operation: Kind of call (read_secret, list_ingress, ...)
        cluster: Name of the cluster the call goes to
        **kwargs: Additional call details
    """
    logger.debug("Kubernetes operation", operation=operation, cluster=cluster, **kwargs)


def log_refresh_event(logger: structlog.stdlib.BoundLogger, event_type: str, **kwargs: Any) -> None:
    logger.info("Refresh event", event_type=event_type, **kwargs)
