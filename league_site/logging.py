"""
Structured logging setup (structlog).

JSON output for deployed instances, console output for development.
Every event carries an ISO timestamp, level and service name.
"""
from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def add_service_info(service_name: str) -> structlog.typing.Processor:
    """Processor that stamps the service name on every event."""

    def processor(
        logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict["service"] = service_name
        return event_dict

    return processor


def setup_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    service_name: str = "league-site",
) -> None:
    """
    Configure structlog for the application.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_format: JSON lines when True, coloured console output otherwise
        service_name: included in every event
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    shared_processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_service_info(service_name),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """
    Bound structlog logger.

        log = get_logger("season_service")
        log.info("seasons_listed", groups=4)
    """
    return structlog.get_logger(name)
