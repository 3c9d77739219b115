"""Error types for the OpenAM session exchange."""

from enum import Enum


class AuthErrorKind(str, Enum):
    """Classification of login failures.

    - LOGIN_FAILED: OpenAM answered but the login was rejected or unusable
    - TRANSPORT_FAILURE: The login request failed below HTTP
    """

    LOGIN_FAILED = "LOGIN_FAILED"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"


class AuthError(Exception):
    """Raised when a login exchange fails.

    Carries the feed URL and the HTTP status so callers can render a
    diagnostic.
    """

    def __init__(
        self,
        kind: AuthErrorKind,
        message: str,
        site: str,
        status_code: int | None = None,
        reason_phrase: str | None = None,
    ) -> None:
        """Initialize the auth error.

        Args:
            kind: Classification of the failure.
            message: Human-readable error message.
            site: Feed URL the login was made for.
            status_code: Login response status, if a response was received.
            reason_phrase: Login response reason phrase, if any.
        """
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.site = site
        self.status_code = status_code
        self.reason_phrase = reason_phrase

    def to_dict(self) -> dict[str, str | int | None]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "site": self.site,
            "status_code": self.status_code,
            "reason_phrase": self.reason_phrase,
        }
