"""Structured logging setup for fetch runs."""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any, TextIO

import structlog

from src.observability.redact import REDACTED_VALUE, redact_headers


# Event keys whose values are credentials in any context
_SECRET_KEYS = frozenset({"password", "token", "token_id", "cookie"})

# Event keys holding header mappings
_HEADER_KEYS = frozenset({"headers", "request_headers", "response_headers"})


def scrub_secrets(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Processor masking credentials that reach a log call.

    Header mappings are passed through redact_headers; keys that always
    carry secrets are replaced outright.
    """
    for key in list(event_dict):
        lowered = key.lower()
        value = event_dict[key]
        if lowered in _SECRET_KEYS and value:
            event_dict[key] = REDACTED_VALUE
        elif lowered in _HEADER_KEYS and isinstance(value, dict):
            event_dict[key] = redact_headers(value)
    return event_dict


def parse_level(level: str | int) -> int:
    """Turn a level name such as ``"info"`` into a logging constant.

    Unknown names fall back to INFO.
    """
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
    level: str | int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structlog for a fetch run.

    Args:
        level: Minimum level, as a logging constant or a name.
        output: Output stream (default: stderr).
        json_format: Render JSON lines instead of the console format.
    """
    numeric_level = parse_level(level)
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        scrub_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=output.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    # httpx logs every request at INFO
    logging.basicConfig(format="%(message)s", stream=output, level=numeric_level)
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def bind_run_context(run_id: str) -> None:
    """Attach the run id to every subsequent log line."""
    structlog.contextvars.bind_contextvars(run_id=run_id)


def clear_run_context() -> None:
    """Drop the run id bound by bind_run_context."""
    structlog.contextvars.unbind_contextvars("run_id")
