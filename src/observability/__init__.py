"""Observability module for logging, metrics and redaction."""

from src.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
    parse_level,
    scrub_secrets,
)
from src.observability.metrics import FetchMetrics
from src.observability.redact import (
    REDACTED_VALUE,
    is_sensitive_header,
    redact_headers,
    redact_url_credentials,
)


__all__ = [
    "REDACTED_VALUE",
    "FetchMetrics",
    "bind_run_context",
    "clear_run_context",
    "configure_logging",
    "parse_level",
    "is_sensitive_header",
    "redact_headers",
    "redact_url_credentials",
    "scrub_secrets",
]
