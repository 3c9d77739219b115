"""Authenticated feed fetch: login, conditional GET, cache update, logout."""

import time
from typing import BinaryIO

import httpx
import structlog

from src.common.url import normalize_feed_url
from src.config.constants import COMPONENT_FETCH, FEED_REQUEST_COOKIE_NAME
from src.config.schemas.fetch import FetchConfiguration
from src.fetch.cache import CacheManager
from src.fetch.constants import DEFAULT_CHUNK_SIZE, HTTP_STATUS_NOT_MODIFIED
from src.fetch.errors import FetchError, FetchErrorKind
from src.fetch.state_machine import FetchState, FetchStateMachine
from src.observability.metrics import FetchMetrics
from src.observability.redact import redact_headers, redact_url_credentials
from src.session.authenticator import SessionAuthenticator
from src.session.errors import AuthError


logger = structlog.get_logger()


class AuthenticatedFetcher:
    """Fetches a feed behind an OpenAM session.

    One call to :meth:`fetch` runs the whole exchange on the calling thread:
    login, a GET carrying the session cookie and any conditional headers,
    a cache update from the response headers, then logout. Separate calls
    share nothing but the header cache, so they may run concurrently.
    """

    def __init__(
        self,
        authenticator: SessionAuthenticator,
        http_client: httpx.Client,
        cache: CacheManager | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            authenticator: Performs the login and logout exchanges.
            http_client: Shared HTTP client for the feed request.
            cache: Header cache for conditional requests. Without one,
                cache keys are ignored.
        """
        self._authenticator = authenticator
        self._client = http_client
        self._cache = cache
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component=COMPONENT_FETCH)

    def fetch(
        self,
        url: str,
        config: FetchConfiguration,
        sink: BinaryIO,
        cache_key: str | None = None,
        state_machine: FetchStateMachine | None = None,
    ) -> httpx.Response:
        """Fetch a feed, writing its body into ``sink``.

        Args:
            url: Feed URL; feed:// style pseudo-schemes are rewritten.
            config: OpenAM exchange parameters of the feed.
            sink: Binary stream receiving the response body.
            cache_key: Key of the feed's cached headers, if caching is wanted.
            state_machine: Lifecycle tracker; a fresh one is used if omitted.

        Returns:
            The feed response. Its body has been consumed into ``sink``;
            status and headers remain readable.

        Raises:
            FetchError: AUTH_FAILED if the login fails (no feed request is
                made), TRANSPORT_FAILURE if the feed request fails below HTTP.
        """
        site = normalize_feed_url(url)
        machine = state_machine or FetchStateMachine(redact_url_credentials(site))
        log = self._log.bind(site=redact_url_credentials(site), cache_key=cache_key)

        try:
            with self._authenticator.session(config, site) as session:
                machine.transition_to(FetchState.LOGGED_IN)
                if not session.has_token:
                    log.warning(
                        "session_token_missing",
                        token_field=config.session_id_field_name,
                    )

                headers = {"Cookie": f"{FEED_REQUEST_COOKIE_NAME}={session.token}"}
                if cache_key and self._cache is not None:
                    headers.update(self._cache.get_conditional_headers(cache_key))

                machine.transition_to(FetchState.REQUESTED)
                response = self._request(site, headers, sink, config, machine, log)

                if cache_key and self._cache is not None:
                    self._cache.update_from_headers(cache_key, response.headers)
                machine.transition_to(FetchState.CACHE_UPDATED)
        except AuthError as e:
            machine.transition_to(FetchState.AUTH_FAILED)
            raise FetchError(
                FetchErrorKind.AUTH_FAILED,
                e.message,
                site,
                status_code=e.status_code,
            ) from e

        machine.transition_to(FetchState.LOGGED_OUT)
        machine.transition_to(FetchState.DONE)
        return response

    def _request(  # noqa: PLR0913
        self,
        site: str,
        headers: dict[str, str],
        sink: BinaryIO,
        config: FetchConfiguration,
        machine: FetchStateMachine,
        log: structlog.stdlib.BoundLogger,
    ) -> httpx.Response:
        """Issue the authenticated GET and stream the body into the sink.

        Raises:
            FetchError: TRANSPORT_FAILURE if the request fails below HTTP.
        """
        start_ns = time.perf_counter_ns()
        bytes_written = 0

        try:
            with self._client.stream(
                "GET", site, headers=headers, timeout=config.timeout_seconds
            ) as response:
                for chunk in response.iter_bytes(chunk_size=DEFAULT_CHUNK_SIZE):
                    sink.write(chunk)
                    bytes_written += len(chunk)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            machine.transition_to(FetchState.TRANSPORT_FAILED)
            self._metrics.record_transport_failure()
            msg = f'The feed from {site} seems to be broken because of error "{e}".'
            log.error(
                "feed_request_failed",
                message=msg,
                error=str(e),
                headers=redact_headers(headers),
            )
            raise FetchError(FetchErrorKind.TRANSPORT_FAILURE, msg, site) from e

        duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
        self._metrics.record_request(response.status_code, bytes_written, duration_ms)
        not_modified = response.status_code == HTTP_STATUS_NOT_MODIFIED
        if not_modified:
            self._metrics.record_not_modified()

        log.info(
            "feed_request_complete",
            status_code=response.status_code,
            not_modified=not_modified,
            bytes=bytes_written,
            duration_ms=round(duration_ms, 2),
        )
        return response
