"""Masking of credentials in headers and URLs before they are logged."""

import re
from collections.abc import Iterable, Mapping

from src.config.constants import (
    OPENAM_LOGOUT_SESSION_HEADER,
    OPENAM_PASSWORD_HEADER,
)


REDACTED_VALUE = "[REDACTED]"

# Headers whose whole value is a credential
SENSITIVE_HEADERS = frozenset(
    name.lower()
    for name in (
        "Authorization",
        "Proxy-Authorization",
        "X-API-Key",
        "X-Auth-Token",
        OPENAM_PASSWORD_HEADER,
        OPENAM_LOGOUT_SESSION_HEADER,
    )
)

# Headers holding name=value cookie pairs; names stay visible
COOKIE_HEADERS = frozenset({"cookie", "set-cookie"})

_URL_CREDENTIALS = re.compile(r"(https?://)([^:/@]+):([^@]+)@")


def redact_cookie(value: str) -> str:
    """Mask every cookie value in a Cookie or Set-Cookie header.

    ``iPlanetDirectoryPro=abc; lang=en`` becomes
    ``iPlanetDirectoryPro=[REDACTED]; lang=[REDACTED]``. Bare
    Set-Cookie flags such as ``Secure`` are dropped.
    """
    masked = []
    for pair in value.split(";"):
        name, sep, _ = pair.strip().partition("=")
        if sep:
            masked.append(f"{name}={REDACTED_VALUE}")
    return "; ".join(masked) if masked else REDACTED_VALUE


def is_sensitive_header(header_name: str) -> bool:
    """Check if a header carries credentials."""
    lowered = header_name.lower()
    return lowered in SENSITIVE_HEADERS or lowered in COOKIE_HEADERS


def redact_headers(
    headers: Mapping[str, str],
    extra_sensitive: Iterable[str] = (),
) -> dict[str, str]:
    """Return a copy of ``headers`` that is safe to log.

    Args:
        headers: Request or response headers.
        extra_sensitive: Additional header names to mask (any case).

    Returns:
        New dictionary; credential values replaced with [REDACTED].
    """
    extra = {name.lower() for name in extra_sensitive}
    result: dict[str, str] = {}
    for key, value in headers.items():
        lowered = key.lower()
        if lowered in COOKIE_HEADERS:
            result[key] = redact_cookie(value)
        elif lowered in SENSITIVE_HEADERS or lowered in extra:
            result[key] = REDACTED_VALUE
        else:
            result[key] = value
    return result


def redact_url_credentials(url: str) -> str:
    """Mask ``user:password@`` userinfo in a URL."""
    return _URL_CREDENTIALS.sub(rf"\1{REDACTED_VALUE}:{REDACTED_VALUE}@", url)
