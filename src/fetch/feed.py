"""Feed-level fetching: download a configured feed to a file."""

import os
import tempfile
from pathlib import Path

import structlog

from src.common.url import cache_key_for_url, normalize_feed_url
from src.config.constants import COMPONENT_FETCH
from src.config.schemas.sources import FeedSource
from src.fetch.cache import CacheManager
from src.fetch.client import AuthenticatedFetcher
from src.fetch.constants import HTTP_STATUS_BAD_REQUEST, HTTP_STATUS_NOT_MODIFIED
from src.fetch.errors import FetchError, FetchErrorKind, NotModifiedError
from src.fetch.models import FetcherResult


logger = structlog.get_logger()


class FeedFetcher:
    """Downloads configured feeds into a directory.

    Each feed's headers are cached under a key derived from its URL, so a
    second fetch of an unchanged feed is answered with 304 and reported as
    NotModifiedError.
    """

    def __init__(
        self,
        fetcher: AuthenticatedFetcher,
        download_dir: Path,
        cache: CacheManager | None = None,
    ) -> None:
        """Initialize the feed fetcher.

        Args:
            fetcher: Authenticated fetcher performing the exchange.
            download_dir: Directory receiving downloaded feed bodies.
            cache: Header cache; must be the one the fetcher uses.
        """
        self._fetcher = fetcher
        self._download_dir = download_dir
        self._cache = cache
        self._log = logger.bind(component=COMPONENT_FETCH)

    def fetch(self, source: FeedSource) -> FetcherResult:
        """Download one feed.

        Args:
            source: Feed to fetch.

        Returns:
            Result pointing at the downloaded file.

        Raises:
            NotModifiedError: If the feed is unchanged since the last fetch.
            FetchError: If the login or the feed request fails, or the server
                answers with an error status.
        """
        site = normalize_feed_url(source.url)
        cache_key = cache_key_for_url(source.url) if self._cache is not None else None

        self._download_dir.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(
            prefix=f"{source.id}-", suffix=".download", dir=self._download_dir
        )
        file_path = Path(temp_name)

        try:
            with os.fdopen(fd, "wb") as sink:
                response = self._fetcher.fetch(source.url, source.auth, sink, cache_key)
        except BaseException:
            file_path.unlink(missing_ok=True)
            raise

        if response.status_code == HTTP_STATUS_NOT_MODIFIED:
            file_path.unlink(missing_ok=True)
            self._log.info("feed_not_modified", source_id=source.id)
            raise NotModifiedError(site)

        if response.status_code >= HTTP_STATUS_BAD_REQUEST:
            file_path.unlink(missing_ok=True)
            msg = (
                f"The feed from {site} seems to be broken because of error "
                f'"{response.status_code}/{response.reason_phrase}".'
            )
            self._log.error(
                "feed_http_error",
                source_id=source.id,
                status_code=response.status_code,
            )
            raise FetchError(
                FetchErrorKind.HTTP_ERROR, msg, site, status_code=response.status_code
            )

        headers = {name.lower(): value for name, value in response.headers.items()}
        return FetcherResult(
            source_id=source.id,
            url=site,
            file_path=file_path,
            status_code=response.status_code,
            headers=headers,
            bytes_written=file_path.stat().st_size,
        )

    def clear(self, source: FeedSource) -> None:
        """Forget the cached headers of a feed so the next fetch is unconditional."""
        if self._cache is None:
            return
        self._cache.clear(cache_key_for_url(source.url))
