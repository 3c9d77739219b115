"""Authenticated feed fetch layer.

This module provides OpenAM-authenticated HTTP fetching with:
- One login/logout exchange per feed request
- ETag/Last-Modified conditional requests backed by a header cache
- Feed downloads to disk with 304 detection
- Parallel multi-feed runs with failure isolation
"""

from src.fetch.cache import (
    CacheManager,
    HeaderCacheStore,
    InMemoryHeaderCache,
    SqliteHeaderCache,
)
from src.fetch.client import AuthenticatedFetcher
from src.fetch.errors import FetchError, FetchErrorKind, NotModifiedError
from src.fetch.feed import FeedFetcher
from src.fetch.models import FetcherResult
from src.fetch.runner import FetchRunner, RunnerResult, SourceOutcome, SourceRunResult
from src.fetch.state_machine import (
    FetchState,
    FetchStateMachine,
    FetchStateTransitionError,
)


__all__ = [
    # Client
    "AuthenticatedFetcher",
    "FeedFetcher",
    "FetchRunner",
    # Cache
    "CacheManager",
    "HeaderCacheStore",
    "InMemoryHeaderCache",
    "SqliteHeaderCache",
    # Models
    "FetcherResult",
    "RunnerResult",
    "SourceOutcome",
    "SourceRunResult",
    # Errors
    "FetchError",
    "FetchErrorKind",
    "NotModifiedError",
    # State machine
    "FetchState",
    "FetchStateMachine",
    "FetchStateTransitionError",
]
