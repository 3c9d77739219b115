"""Per-feed OpenAM fetch configuration schema."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.config.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    FEED_REQUEST_COOKIE_NAME,
    OPENAM_LOGIN_URI,
    OPENAM_LOGOUT_SESSION_HEADER,
    OPENAM_LOGOUT_SUCCESS_MARKER,
    OPENAM_LOGOUT_URI,
    OPENAM_PASSWORD_HEADER,
    OPENAM_SESSION_COOKIE_NAME,
    OPENAM_SESSION_ID_FIELD,
    OPENAM_USER_AGENT,
    OPENAM_USERNAME_HEADER,
)


NonEmptyStr = Annotated[str, Field(min_length=1)]


class FetchConfiguration(BaseModel):
    """Parameters of the OpenAM login/fetch/logout exchange for one feed.

    Attributes:
        login_uri: Login endpoint, absolute or relative to the feed host.
        logout_uri: Logout endpoint, absolute or relative to the feed host.
        username: Account used for the login exchange.
        password_ref: Credential-store reference for the password.
        username_header_name: Login header carrying the username.
        password_header_name: Login header carrying the resolved password.
        session_cookie_name: Name of the OpenAM session cookie. Informational;
            the feed request always uses FEED_REQUEST_COOKIE_NAME.
        session_id_field_name: JSON field of the login response holding the token.
        user_agent: User-Agent sent on login and logout.
        logout_session_header_name: Logout header carrying the token.
        logout_success_marker: Text searched for in the logout response body.
        always_logout: Log out even when the feed request fails in transport.
        timeout_seconds: Deadline applied to each request of the exchange.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    login_uri: NonEmptyStr = OPENAM_LOGIN_URI
    logout_uri: NonEmptyStr = OPENAM_LOGOUT_URI
    username: NonEmptyStr
    password_ref: NonEmptyStr
    username_header_name: NonEmptyStr = OPENAM_USERNAME_HEADER
    password_header_name: NonEmptyStr = OPENAM_PASSWORD_HEADER
    session_cookie_name: NonEmptyStr = OPENAM_SESSION_COOKIE_NAME
    session_id_field_name: NonEmptyStr = OPENAM_SESSION_ID_FIELD
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        OPENAM_USER_AGENT
    )
    logout_session_header_name: NonEmptyStr = OPENAM_LOGOUT_SESSION_HEADER
    logout_success_marker: NonEmptyStr = OPENAM_LOGOUT_SUCCESS_MARKER
    always_logout: bool = False
    timeout_seconds: Annotated[float, Field(ge=1.0, le=300.0)] = (
        DEFAULT_TIMEOUT_SECONDS
    )

    @field_validator("login_uri", "logout_uri")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Accept absolute http(s) URLs or host-relative paths."""
        if v.startswith(("http://", "https://", "/")):
            return v
        msg = "Endpoint must be an http(s) URL or a path starting with '/'"
        raise ValueError(msg)

    @property
    def feed_request_cookie_name(self) -> str:
        """Cookie name used on the authenticated feed request."""
        return FEED_REQUEST_COOKIE_NAME
