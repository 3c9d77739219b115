"""Tests for logging configuration and the secret-scrubbing processor."""

import io
import json
import logging
from collections.abc import Generator

import pytest
import structlog

from src.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
    parse_level,
    scrub_secrets,
)
from src.observability.redact import REDACTED_VALUE


@pytest.fixture
def restore_structlog() -> Generator[None]:
    """Undo global structlog configuration after the test."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


class TestScrubSecrets:
    """Tests for the scrub_secrets processor."""

    def test_masks_secret_keys(self) -> None:
        """Values under credential keys are replaced."""
        event = scrub_secrets(
            None,
            "info",
            {"event": "x", "password": "hunter2", "Token": "abc123", "site": "s"},
        )

        assert event["password"] == REDACTED_VALUE
        assert event["Token"] == REDACTED_VALUE
        assert event["site"] == "s"

    def test_keeps_empty_secret_values(self) -> None:
        """Empty values stay empty so missing tokens remain visible."""
        event = scrub_secrets(None, "info", {"event": "x", "token": ""})

        assert event["token"] == ""

    def test_redacts_header_mappings(self) -> None:
        """Header dicts are redacted per header."""
        event = scrub_secrets(
            None,
            "error",
            {
                "event": "x",
                "headers": {
                    "Cookie": "iPlanetDirectoryPro=abc123",
                    "If-None-Match": '"v1"',
                },
            },
        )

        assert event["headers"] == {
            "Cookie": f"iPlanetDirectoryPro={REDACTED_VALUE}",
            "If-None-Match": '"v1"',
        }

    def test_ignores_non_secret_flags(self) -> None:
        """Boolean markers such as has_token are not touched."""
        event = scrub_secrets(None, "debug", {"event": "x", "has_token": True})

        assert event["has_token"] is True


class TestParseLevel:
    """Tests for parse_level."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("bogus", logging.INFO)],
    )
    def test_names(self, name: str, expected: int) -> None:
        """Level names resolve case-insensitively."""
        assert parse_level(name) == expected

    def test_ints_pass_through(self) -> None:
        """Numeric levels are returned unchanged."""
        assert parse_level(logging.ERROR) == logging.ERROR


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.mark.usefixtures("restore_structlog")
    def test_json_lines_with_run_context(self) -> None:
        """JSON output carries the run id and scrubbed fields."""
        output = io.StringIO()
        configure_logging(level="info", output=output, json_format=True)
        bind_run_context("run-42")

        structlog.get_logger().info("login_failed", password="hunter2")
        clear_run_context()

        line = json.loads(output.getvalue().strip())
        assert line["event"] == "login_failed"
        assert line["run_id"] == "run-42"
        assert line["password"] == REDACTED_VALUE
        assert line["level"] == "info"

    @pytest.mark.usefixtures("restore_structlog")
    def test_level_filtering(self) -> None:
        """Events below the level are dropped."""
        output = io.StringIO()
        configure_logging(level=logging.WARNING, output=output, json_format=True)

        structlog.get_logger().info("quiet")

        assert output.getvalue() == ""
