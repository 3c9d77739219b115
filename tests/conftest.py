"""Shared fixtures."""

from collections.abc import Generator

import httpx
import pytest

from src.config.schemas.fetch import FetchConfiguration
from src.credentials.provider import StaticCredentialProvider
from src.fetch.cache import CacheManager, InMemoryHeaderCache
from src.fetch.client import AuthenticatedFetcher
from src.observability.metrics import FetchMetrics
from src.session.authenticator import SessionAuthenticator
from tests.helpers.openam import FakeOpenAM


@pytest.fixture(autouse=True)
def reset_metrics() -> Generator[None]:
    """Reset the metrics singleton around each test."""
    FetchMetrics.reset()
    yield
    FetchMetrics.reset()


@pytest.fixture
def fetch_config() -> FetchConfiguration:
    """Configuration using the OpenAM defaults."""
    return FetchConfiguration(username="svc", password_ref="svc-pw")


@pytest.fixture
def credentials() -> StaticCredentialProvider:
    """Credential store holding the service password."""
    return StaticCredentialProvider({"svc-pw": "hunter2"})


@pytest.fixture
def openam() -> FakeOpenAM:
    """Fake OpenAM and feed server."""
    return FakeOpenAM()


@pytest.fixture
def http_client(openam: FakeOpenAM) -> Generator[httpx.Client]:
    """HTTP client routed to the fake server."""
    with openam.client() as client:
        yield client


@pytest.fixture
def authenticator(
    http_client: httpx.Client, credentials: StaticCredentialProvider
) -> SessionAuthenticator:
    """Authenticator talking to the fake server."""
    return SessionAuthenticator(http_client, credentials)


@pytest.fixture
def header_store() -> InMemoryHeaderCache:
    """Empty in-memory header cache."""
    return InMemoryHeaderCache()


@pytest.fixture
def fetcher(
    authenticator: SessionAuthenticator,
    http_client: httpx.Client,
    header_store: InMemoryHeaderCache,
) -> AuthenticatedFetcher:
    """Authenticated fetcher with an in-memory header cache."""
    return AuthenticatedFetcher(authenticator, http_client, CacheManager(header_store))
