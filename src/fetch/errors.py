"""Error types for the authenticated fetch layer."""

from enum import Enum


class FetchErrorKind(str, Enum):
    """Classification of feed fetch failures.

    - AUTH_FAILED: The OpenAM login failed; no feed request was made
    - TRANSPORT_FAILURE: The feed request failed below HTTP
    - NOT_MODIFIED: The server answered 304; there is nothing new to import
    - HTTP_ERROR: The server answered with a 4xx/5xx status
    """

    AUTH_FAILED = "AUTH_FAILED"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    NOT_MODIFIED = "NOT_MODIFIED"
    HTTP_ERROR = "HTTP_ERROR"


class FetchError(Exception):
    """Raised when an authenticated feed fetch fails.

    When raised for a login failure the originating AuthError is chained as
    ``__cause__``.
    """

    def __init__(
        self,
        kind: FetchErrorKind,
        message: str,
        site: str,
        status_code: int | None = None,
    ) -> None:
        """Initialize the fetch error.

        Args:
            kind: Classification of the failure.
            message: Human-readable error message.
            site: Feed URL that was being fetched.
            status_code: Relevant HTTP status code, if any.
        """
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.site = site
        self.status_code = status_code

    def to_dict(self) -> dict[str, str | int | None]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "site": self.site,
            "status_code": self.status_code,
        }


class NotModifiedError(FetchError):
    """Raised when the feed has not changed since the cached headers."""

    def __init__(self, site: str) -> None:
        super().__init__(
            FetchErrorKind.NOT_MODIFIED,
            "The feed has not been updated.",
            site,
            status_code=304,
        )
