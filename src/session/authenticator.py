"""OpenAM login and logout exchanges."""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from http import HTTPStatus
from typing import Any

import httpx
import structlog

from src.common.url import resolve_endpoint
from src.config.constants import COMPONENT_SESSION
from src.config.schemas.fetch import FetchConfiguration
from src.credentials.provider import CredentialNotFoundError, CredentialProvider
from src.observability.metrics import FetchMetrics
from src.observability.redact import redact_url_credentials
from src.session.errors import AuthError, AuthErrorKind
from src.session.models import Session


logger = structlog.get_logger()


class SessionAuthenticator:
    """Performs the OpenAM login and logout exchanges.

    Login credentials travel as request headers; neither request has a body.
    A login failure is fatal and raised as AuthError. A logout failure is
    only logged, since a dangling external session does not break the fetch.

    Both exchanges treat a response as failed only when the status is not
    200 *and* the body contains the configured marker. Any other response
    is decoded as JSON.
    """

    def __init__(
        self,
        http_client: httpx.Client,
        credentials: CredentialProvider,
    ) -> None:
        """Initialize the authenticator.

        Args:
            http_client: Shared HTTP client.
            credentials: Resolves the password reference at login time.
        """
        self._client = http_client
        self._credentials = credentials
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component=COMPONENT_SESSION)

    def login(self, config: FetchConfiguration, site: str) -> Session:
        """Log into OpenAM for a feed.

        Args:
            config: Fetch configuration of the feed.
            site: Normalized feed URL; relative endpoints resolve against it.

        Returns:
            Session decoded from the login response.

        Raises:
            AuthError: If the login is rejected or the request fails.
        """
        log = self._log.bind(site=redact_url_credentials(site))
        endpoint = resolve_endpoint(config.login_uri, site)

        try:
            password = self._credentials.resolve(config.password_ref)
        except CredentialNotFoundError as e:
            raise self._login_failure(
                log,
                "login_credential_unresolved",
                f'Unable to log into feed {site} because the password reference "{e.ref}" '
                "could not be resolved.",
                site,
                error=str(e),
            ) from e

        headers = {
            "User-Agent": config.user_agent,
            "Accept": "application/json",
            "Content-Type": "application/json",
            config.username_header_name: config.username,
            config.password_header_name: password,
        }

        try:
            response = self._client.post(
                endpoint, headers=headers, timeout=config.timeout_seconds
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            log.error("login_transport_failed", endpoint=endpoint, error=str(e))
            self._metrics.record_login_failure(AuthErrorKind.TRANSPORT_FAILURE.value)
            msg = (
                f"Unable to log into the feed {site} it seems to be broken "
                f'because of error "{e}".'
            )
            raise AuthError(AuthErrorKind.TRANSPORT_FAILURE, msg, site) from e

        body = response.text
        if (
            response.status_code != HTTPStatus.OK
            and config.session_id_field_name in body
        ):
            raise self._login_failure(
                log,
                "login_failed",
                f"Unable to log into feed {site} it seems to be broken because of "
                f'error "{response.status_code}/{response.reason_phrase}".',
                site,
                status_code=response.status_code,
                reason_phrase=response.reason_phrase,
            )

        # Stricter than OpenAM clients that treat an undecodable body as an
        # empty session; an object missing the token field still proceeds.
        payload = _decode_object(body)
        if payload is None:
            raise self._login_failure(
                log,
                "login_response_invalid",
                f"Unable to log into feed {site} because the login response "
                f"(status {response.status_code}) is not a JSON object.",
                site,
                status_code=response.status_code,
                reason_phrase=response.reason_phrase,
            )

        self._metrics.record_login()
        log.debug(
            "login_succeeded",
            status_code=response.status_code,
            has_token=config.session_id_field_name in payload,
        )
        return Session(payload, config.session_id_field_name)

    def logout(
        self,
        config: FetchConfiguration,
        session: Session,
        site: str,
    ) -> dict[str, Any] | None:
        """Log out of OpenAM. Never raises.

        Args:
            config: Fetch configuration of the feed.
            session: Session returned by the matching login.
            site: Normalized feed URL.

        Returns:
            Decoded logout response, or None if the logout failed.
        """
        log = self._log.bind(site=redact_url_credentials(site))
        endpoint = resolve_endpoint(config.logout_uri, site)
        headers = {
            "User-Agent": config.user_agent,
            "Accept": "application/json",
            config.logout_session_header_name: session.token,
        }

        try:
            response = self._client.post(
                endpoint, headers=headers, timeout=config.timeout_seconds
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            log.warning(
                "logout_transport_failed",
                endpoint=endpoint,
                message=(
                    f"Unable to log out of feed {site} it seems to be broken "
                    f'because of error "{e}".'
                ),
                error=str(e),
            )
            self._metrics.record_logout(succeeded=False)
            return None

        body = response.text
        if (
            response.status_code != HTTPStatus.OK
            and config.logout_success_marker in body
        ):
            log.warning(
                "logout_failed",
                message=(
                    f"Unable to log out of feed {site} it seems to be broken because "
                    f'of error "{response.status_code}/{response.reason_phrase}".'
                ),
                status_code=response.status_code,
                reason_phrase=response.reason_phrase,
            )
            self._metrics.record_logout(succeeded=False)
            return None

        payload = _decode_object(body)
        if payload is None:
            log.warning(
                "logout_response_invalid",
                status_code=response.status_code,
            )
            self._metrics.record_logout(succeeded=False)
            return None

        self._metrics.record_logout(succeeded=True)
        log.debug("logout_succeeded", status_code=response.status_code)
        return payload

    @contextmanager
    def session(self, config: FetchConfiguration, site: str) -> Iterator[Session]:
        """Hold an OpenAM session for the duration of a block.

        Logs in on entry and logs out when the block completes. When the
        block raises, the session is only logged out if
        ``config.always_logout`` is set; otherwise it is left to expire on
        the OpenAM side.

        Args:
            config: Fetch configuration of the feed.
            site: Normalized feed URL.

        Yields:
            The logged-in session.

        Raises:
            AuthError: If the login fails.
        """
        session = self.login(config, site)
        try:
            yield session
        except BaseException:
            if config.always_logout:
                self.logout(config, session, site)
            else:
                self._log.debug(
                    "logout_skipped",
                    site=redact_url_credentials(site),
                    reason="request_failed",
                )
            raise
        self.logout(config, session, site)

    def _login_failure(  # noqa: PLR0913
        self,
        log: structlog.stdlib.BoundLogger,
        event: str,
        message: str,
        site: str,
        status_code: int | None = None,
        reason_phrase: str | None = None,
        error: str | None = None,
    ) -> AuthError:
        """Log a rejected login and build the error to raise."""
        log.error(
            event,
            message=message,
            status_code=status_code,
            reason_phrase=reason_phrase,
            error=error,
        )
        self._metrics.record_login_failure(AuthErrorKind.LOGIN_FAILED.value)
        return AuthError(
            AuthErrorKind.LOGIN_FAILED,
            message,
            site,
            status_code=status_code,
            reason_phrase=reason_phrase,
        )


def _decode_object(body: str) -> dict[str, Any] | None:
    """Decode a JSON object body, or None if it is not one."""
    try:
        decoded = json.loads(body)
    except ValueError:
        return None
    if not isinstance(decoded, dict):
        return None
    return decoded
