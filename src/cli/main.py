"""CLI commands for the OpenAM feed fetcher."""

import json
import logging
import sys
import uuid
from pathlib import Path

import click
import httpx
import structlog

from src.common.url import cache_key_for_url
from src.config.constants import COMPONENT_CLI
from src.config.loader import ConfigLoader, ConfigValidationError
from src.config.schemas.sources import FeedSource, SourcesConfig
from src.credentials.provider import (
    CredentialProvider,
    EnvironmentCredentialProvider,
    FileCredentialProvider,
)
from src.fetch.cache import CacheManager, SqliteHeaderCache
from src.fetch.client import AuthenticatedFetcher
from src.fetch.feed import FeedFetcher
from src.fetch.runner import FetchRunner, RunnerResult
from src.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
)
from src.observability.metrics import FetchMetrics
from src.session.authenticator import SessionAuthenticator
from src.settings.app import AppSettings, get_settings


logger = structlog.get_logger()


def _load_sources(config_path: Path, run_id: str) -> SourcesConfig:
    """Load the sources file, exiting with a readable report on failure."""
    loader = ConfigLoader(run_id=run_id)
    try:
        return loader.load(config_path)
    except ConfigValidationError as e:
        click.echo(f"Configuration validation failed: {e.file_path}", err=True)
        for error in e.errors:
            click.echo(f"  - {error['loc']}: {error['msg']}", err=True)
        sys.exit(1)


def _select_sources(sources: SourcesConfig, source_id: str | None) -> list[FeedSource]:
    """Restrict to one source when requested, exiting if it is unknown."""
    if source_id is None:
        return list(sources.sources)
    source = sources.get_source(source_id)
    if source is None:
        click.echo(f"Error: unknown source '{source_id}'", err=True)
        sys.exit(1)
    return [source]


def _credential_provider(settings: AppSettings) -> CredentialProvider:
    """Pick the credential backend from settings."""
    if settings.credentials_dir is not None:
        return FileCredentialProvider(settings.credentials_dir)
    return EnvironmentCredentialProvider()


def _http_client() -> httpx.Client:
    """Build the HTTP client shared by every exchange of a run."""
    return httpx.Client(follow_redirects=True)


def _echo_summary(result: RunnerResult) -> None:
    click.echo(
        f"Fetched: {result.sources_fetched}  "
        f"Not modified: {result.sources_not_modified}  "
        f"Failed: {result.sources_failed}"
    )
    for source_id, source_result in sorted(result.source_results.items()):
        line = f"  {source_id}: {source_result.outcome.value}"
        if source_result.result is not None:
            line += f" -> {source_result.result.file_path}"
        if source_result.error is not None:
            line += f" ({source_result.error.get('message')})"
        click.echo(line)


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """OpenAM-authenticated feed fetcher CLI."""


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to sources.yaml (default: OPENAM_FETCH_SOURCES_PATH).",
)
@click.option(
    "--state",
    "state_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the SQLite header cache (default: OPENAM_FETCH_STATE_PATH).",
)
@click.option(
    "--out",
    "output_dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Directory for downloaded feeds (default: OPENAM_FETCH_DOWNLOAD_DIR).",
)
@click.option(
    "--source",
    "source_id",
    type=str,
    default=None,
    help="Fetch only this source id.",
)
@click.option(
    "--workers",
    "max_workers",
    type=click.IntRange(1, 32),
    default=None,
    help="Parallel fetches (default: OPENAM_FETCH_MAX_WORKERS).",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=None,
    help="Use JSON format for logs (default: OPENAM_FETCH_JSON_LOGS).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
def fetch(  # noqa: PLR0913
    config_path: Path | None,
    state_path: Path | None,
    output_dir: Path | None,
    source_id: str | None,
    max_workers: int | None,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Fetch every enabled feed through its OpenAM session.

    Exits with status 1 if any feed failed; unchanged feeds are not failures.
    """
    settings = get_settings()
    run_id = str(uuid.uuid4())

    configure_logging(
        level=logging.DEBUG if verbose else settings.log_level,
        json_format=settings.json_logs if json_logs is None else json_logs,
    )
    bind_run_context(run_id)
    log = logger.bind(component=COMPONENT_CLI, command="fetch")

    sources = _load_sources(config_path or settings.sources_path, run_id)
    selected = _select_sources(sources, source_id)

    with (
        SqliteHeaderCache(state_path or settings.state_path) as store,
        _http_client() as http_client,
    ):
        cache = CacheManager(store)
        authenticator = SessionAuthenticator(http_client, _credential_provider(settings))
        fetcher = AuthenticatedFetcher(authenticator, http_client, cache)
        feed_fetcher = FeedFetcher(
            fetcher, output_dir or settings.download_dir, cache=cache
        )
        runner = FetchRunner(
            feed_fetcher,
            run_id=run_id,
            max_workers=max_workers or settings.max_workers,
        )
        result = runner.run(selected)

    log.info("fetch_metrics", **FetchMetrics.get_instance().to_dict())
    clear_run_context()
    _echo_summary(result)
    if not result.success:
        sys.exit(1)


@cli.command()
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=Path),
    help="Path to sources.yaml configuration file.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output the validated configuration as JSON.",
)
def validate(config_path: Path, json_output: bool) -> None:
    """Validate a sources file without fetching anything."""
    run_id = str(uuid.uuid4())
    configure_logging(json_format=False, level=logging.WARNING)

    sources = _load_sources(config_path, run_id)

    if json_output:
        # password_ref names a secret; resolved values never enter the model
        click.echo(json.dumps(sources.model_dump(mode="json"), indent=2))
        return

    click.echo("Configuration is valid!")
    click.echo(f"  Sources: {len(sources.sources)}")
    click.echo(f"  Enabled: {len(sources.enabled_sources)}")


@cli.command("clear-cache")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to sources.yaml (default: OPENAM_FETCH_SOURCES_PATH).",
)
@click.option(
    "--state",
    "state_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the SQLite header cache (default: OPENAM_FETCH_STATE_PATH).",
)
@click.option(
    "--source",
    "source_id",
    type=str,
    default=None,
    help="Clear only this source id.",
)
def clear_cache(
    config_path: Path | None,
    state_path: Path | None,
    source_id: str | None,
) -> None:
    """Forget cached ETag/Last-Modified headers so the next fetch is unconditional."""
    settings = get_settings()
    run_id = str(uuid.uuid4())
    configure_logging(json_format=False, level=logging.WARNING)

    sources = _load_sources(config_path or settings.sources_path, run_id)
    selected = _select_sources(sources, source_id)

    with SqliteHeaderCache(state_path or settings.state_path) as store:
        cache = CacheManager(store)
        for source in selected:
            cache.clear(cache_key_for_url(source.url))
            click.echo(f"Cleared: {source.id}")


def main() -> None:
    """Console script entry point."""
    cli()
