"""Structured logging setup for applications using fieldmask."""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

from ..core.config import LoggingConfig, get_config
from ..integrations.logging import MaskingProcessor
from ..masking.engine import MaskEngine


def add_timestamp(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add an ISO-8601 UTC timestamp to log events."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_level(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add log level to event dict."""
    event_dict["level"] = method_name.upper()
    return event_dict


def build_processors(
    config: LoggingConfig,
    mask_events: bool = True,
    engine: MaskEngine | None = None,
) -> list[Any]:
    """Assemble the structlog processor chain for ``config``."""
    processors_list: list[Any] = [
        structlog.stdlib.filter_by_level,
        add_timestamp,
        add_level,
        structlog.stdlib.add_logger_name,
    ]
    if mask_events:
        processors_list.append(MaskingProcessor(engine))
    processors_list.extend(
        [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
        ]
    )

    if config.format == "json":
        processors_list.append(structlog.processors.JSONRenderer(default=repr))
    else:
        processors_list.append(structlog.dev.ConsoleRenderer(colors=False))
    return processors_list


def configure_logging(
    config: LoggingConfig | None = None,
    mask_events: bool = True,
    engine: MaskEngine | None = None,
) -> None:
    """Configure structlog on top of the standard library.

    Args:
        config: Logging configuration; the global configuration's logging
            section when None
        mask_events: Insert a :class:`MaskingProcessor` so records passed as
            event values are logged masked
        engine: Engine used for masking; the process-wide default when None
    """
    if config is None:
        config = get_config().logging

    structlog.configure(
        processors=build_processors(config, mask_events=mask_events, engine=engine),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, config.level.upper(), logging.INFO),
        force=True,
    )


def get_logger(name: str) -> Any:
    """Get a structlog logger bound to ``name``."""
    return structlog.get_logger(name)
