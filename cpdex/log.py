"""structlog setup for the API server."""

import logging

import structlog


def configure_logging(debug: bool = False) -> None:
    """Configure structlog with level, ISO timestamp and console rendering.

    Args:
        debug: Emit debug events (transfer details) as well as info and above
    """
    level = logging.DEBUG if debug else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
