"""Structured logging configuration using structlog.

The engine never configures logging on import. An embedding application calls
configure_logging() once at startup; until then structlog's defaults apply and
the LOG_FORMAT and DEBUG settings have no effect.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from decimal import Decimal
from typing import Any

import orjson
import structlog
from structlog.types import Processor

from src.core.config import settings

# Context variables identifying the return being computed
computation_id_ctx: ContextVar[str | None] = ContextVar("computation_id", default=None)
tax_year_ctx: ContextVar[int | None] = ContextVar("tax_year", default=None)
filing_status_ctx: ContextVar[str | None] = ContextVar("filing_status", default=None)


@contextmanager
def computation_context(
    computation_id: str, tax_year: int, filing_status: str
) -> Iterator[None]:
    """Tag every event logged inside the block with the return's identity.

    Args:
        computation_id: Short id of one compute_return run.
        tax_year: Tax year of the filing profile.
        filing_status: Filing status value (e.g. "single").
    """
    tokens = (
        computation_id_ctx.set(computation_id),
        tax_year_ctx.set(tax_year),
        filing_status_ctx.set(filing_status),
    )
    try:
        yield
    finally:
        filing_status_ctx.reset(tokens[2])
        tax_year_ctx.reset(tokens[1])
        computation_id_ctx.reset(tokens[0])


def _add_context_vars(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add the current computation's identity to log events.

    Args:
        logger: The logger instance (unused).
        method_name: The logging method name (unused).
        event_dict: The log event dictionary.

    Returns:
        Updated event dictionary with context variables.
    """
    if computation_id := computation_id_ctx.get():
        event_dict["computation_id"] = computation_id
    if (tax_year := tax_year_ctx.get()) is not None:
        event_dict["tax_year"] = tax_year
    if filing_status := filing_status_ctx.get():
        event_dict["filing_status"] = filing_status
    return event_dict


def _json_default(obj: Any) -> str:
    # Amounts keep their exact fixed-point text; line keys use their str form
    if isinstance(obj, Decimal):
        return format(obj, "f")
    return str(obj)


def _orjson_serializer(obj: Any, **kwargs: Any) -> str:
    """Serialize log event to JSON using orjson.

    Args:
        obj: Object to serialize.
        **kwargs: Additional keyword arguments (unused).

    Returns:
        JSON string representation.
    """
    return orjson.dumps(obj, default=_json_default).decode("utf-8")


def _use_json() -> bool:
    """JSON unless LOG_FORMAT says console or we are in development."""
    if settings.log_format:
        return settings.log_format.lower() == "json"
    return settings.environment != "development"


def _log_level() -> int:
    # line_resolved events are debug-level; tracing implies DEBUG
    if settings.debug or settings.trace_line_resolution:
        return logging.DEBUG
    return logging.INFO


def configure_logging() -> None:
    """Configure structlog for the engine.

    Call once at application startup, before the first compute_return.

    Development mode: ConsoleRenderer with colors for readability.
    Elsewhere: JSONRenderer with orjson, one event per line, so computation
    logs can be joined on computation_id.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _add_context_vars,
    ]

    if _use_json():
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.EventRenamer("message"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(serializer=_orjson_serializer),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=_log_level(),
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a configured structlog logger.

    Args:
        name: Optional logger name. Defaults to __name__ of caller.

    Returns:
        Configured structlog bound logger.
    """
    return structlog.get_logger(name)
