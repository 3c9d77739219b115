"""Fetch runner with parallel execution and failure isolation."""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

import structlog

from src.config.constants import COMPONENT_RUNNER
from src.config.schemas.sources import FeedSource
from src.fetch.errors import FetchError, NotModifiedError
from src.fetch.feed import FeedFetcher
from src.fetch.models import FetcherResult


logger = structlog.get_logger()


class SourceOutcome(str, Enum):
    """Outcome of fetching one source."""

    FETCHED = "FETCHED"
    NOT_MODIFIED = "NOT_MODIFIED"
    FAILED = "FAILED"


@dataclass
class SourceRunResult:
    """Result of fetching a single source."""

    source_id: str
    outcome: SourceOutcome
    result: FetcherResult | None = None
    error: dict[str, str | int | None] | None = None
    duration_ms: float = 0.0


@dataclass
class RunnerResult:
    """Result of a complete runner execution."""

    run_id: str
    started_at: datetime
    finished_at: datetime
    source_results: dict[str, SourceRunResult]
    sources_fetched: int = 0
    sources_not_modified: int = 0
    sources_failed: int = 0

    @property
    def success(self) -> bool:
        """Check that no source failed."""
        return self.sources_failed == 0

    @property
    def duration_ms(self) -> float:
        """Get total duration in milliseconds."""
        return (self.finished_at - self.started_at).total_seconds() * 1000


class FetchRunner:
    """Fetches many sources, optionally in parallel.

    Provides:
    - Parallel source processing with configurable concurrency
    - Failure isolation (one source failing doesn't stop others)
    - One OpenAM session per source, never shared
    """

    def __init__(
        self,
        feed_fetcher: FeedFetcher,
        run_id: str,
        max_workers: int = 4,
    ) -> None:
        """Initialize the fetch runner.

        Args:
            feed_fetcher: Downloads one source.
            run_id: Unique run identifier.
            max_workers: Maximum parallel workers.
        """
        self._feed_fetcher = feed_fetcher
        self._run_id = run_id
        self._max_workers = max_workers
        self._log = logger.bind(component=COMPONENT_RUNNER, run_id=run_id)

    def run(self, sources: list[FeedSource]) -> RunnerResult:
        """Fetch all enabled sources.

        Args:
            sources: Source configurations.

        Returns:
            RunnerResult with per-source outcomes.
        """
        started_at = datetime.now(UTC)
        active_sources = [s for s in sources if s.enabled]

        self._log.info(
            "runner_started",
            source_count=len(sources),
            active_count=len(active_sources),
            skipped_count=len(sources) - len(active_sources),
            max_workers=self._max_workers,
        )

        source_results: dict[str, SourceRunResult] = {}

        if self._max_workers <= 1:
            for source in active_sources:
                source_results[source.id] = self._run_isolated(source)
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                future_to_source = {
                    executor.submit(self._run_isolated, source): source
                    for source in active_sources
                }

                for future in as_completed(future_to_source):
                    source = future_to_source[future]
                    source_results[source.id] = future.result()

        outcomes = [r.outcome for r in source_results.values()]
        result = RunnerResult(
            run_id=self._run_id,
            started_at=started_at,
            finished_at=datetime.now(UTC),
            source_results=source_results,
            sources_fetched=outcomes.count(SourceOutcome.FETCHED),
            sources_not_modified=outcomes.count(SourceOutcome.NOT_MODIFIED),
            sources_failed=outcomes.count(SourceOutcome.FAILED),
        )

        self._log.info(
            "runner_complete",
            sources_fetched=result.sources_fetched,
            sources_not_modified=result.sources_not_modified,
            sources_failed=result.sources_failed,
            duration_ms=round(result.duration_ms, 2),
        )
        return result

    def _run_isolated(self, source: FeedSource) -> SourceRunResult:
        """Fetch one source; unexpected exceptions fail only that source."""
        try:
            return self._run_single_source(source)
        except Exception as e:  # noqa: BLE001
            self._log.error(
                "source_execution_error",
                source_id=source.id,
                error=str(e),
            )
            return SourceRunResult(
                source_id=source.id,
                outcome=SourceOutcome.FAILED,
                error={"kind": "UNEXPECTED", "message": str(e)},
            )

    def _run_single_source(self, source: FeedSource) -> SourceRunResult:
        """Fetch one source, converting fetch errors into a result."""
        start = time.perf_counter()
        log = self._log.bind(source_id=source.id)

        try:
            fetched = self._feed_fetcher.fetch(source)
        except NotModifiedError:
            return SourceRunResult(
                source_id=source.id,
                outcome=SourceOutcome.NOT_MODIFIED,
                duration_ms=(time.perf_counter() - start) * 1000,
            )
        except FetchError as e:
            log.warning("source_failed", **e.to_dict())
            return SourceRunResult(
                source_id=source.id,
                outcome=SourceOutcome.FAILED,
                error=e.to_dict(),
                duration_ms=(time.perf_counter() - start) * 1000,
            )

        log.info(
            "source_fetched",
            status_code=fetched.status_code,
            bytes=fetched.bytes_written,
            file_path=str(fetched.file_path),
        )
        return SourceRunResult(
            source_id=source.id,
            outcome=SourceOutcome.FETCHED,
            result=fetched,
            duration_ms=(time.perf_counter() - start) * 1000,
        )
