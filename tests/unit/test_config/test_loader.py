"""Unit tests for the sources file loader."""

from pathlib import Path

import pytest

from src.config.loader import ConfigLoader, ConfigValidationError


FIXTURES_DIR = Path(__file__).parent.parent.parent / "fixtures" / "config"


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_load_fixture(self) -> None:
        """The sample sources file loads with overrides applied."""
        loader = ConfigLoader(run_id="test-run-001")

        config = loader.load(FIXTURES_DIR / "sources.yaml")

        assert [s.id for s in config.sources] == [
            "intranet-news",
            "hr-calendar",
            "legacy-feed",
        ]
        assert [s.id for s in config.enabled_sources] == [
            "intranet-news",
            "hr-calendar",
        ]
        calendar = config.get_source("hr-calendar")
        assert calendar is not None
        assert calendar.url == "webcals://hr.example.com/calendar.ics"
        assert calendar.auth.always_logout is True
        assert calendar.auth.timeout_seconds == 10
        assert calendar.auth.login_uri.startswith("https://sso.example.com/")

    def test_checksum_and_duration(self) -> None:
        """Loading records the file checksum and validation time."""
        loader = ConfigLoader(run_id="test-run-002")

        loader.load(FIXTURES_DIR / "sources.yaml")

        assert loader.checksum is not None
        assert len(loader.checksum) == 64
        assert loader.validation_duration_ms > 0
        assert loader.validation_errors == []

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file is reported as a validation error."""
        loader = ConfigLoader(run_id="test-run-003")

        with pytest.raises(ConfigValidationError) as exc_info:
            loader.load(tmp_path / "absent.yaml")

        assert exc_info.value.errors[0]["type"] == "file_not_found"
        assert exc_info.value.file_path.endswith("absent.yaml")

    def test_directory_path(self, tmp_path: Path) -> None:
        """A path that cannot be read as a file is reported, not raised raw."""
        with pytest.raises(ConfigValidationError) as exc_info:
            ConfigLoader(run_id="test-run-003").load(tmp_path)

        assert exc_info.value.errors[0]["type"] == "file_unreadable"
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_invalid_utf8(self, tmp_path: Path) -> None:
        """Non-UTF-8 bytes are reported as an encoding error."""
        path = tmp_path / "sources.yaml"
        path.write_bytes(b"sources:\n  - id: \xff\xfe\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            ConfigLoader(run_id="test-run-003").load(path)

        assert exc_info.value.errors[0]["type"] == "encoding_error"

    def test_yaml_syntax_error(self, tmp_path: Path) -> None:
        """Malformed YAML is reported as a validation error."""
        path = tmp_path / "sources.yaml"
        path.write_text("sources: [unclosed\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            ConfigLoader(run_id="test-run-004").load(path)

        assert exc_info.value.errors[0]["type"] == "yaml_parse_error"

    def test_schema_error_locations(self, tmp_path: Path) -> None:
        """Schema errors carry dotted locations."""
        path = tmp_path / "sources.yaml"
        path.write_text(
            "sources:\n"
            "  - id: news\n"
            "    url: https://example.com/rss\n"
            "    auth:\n"
            "      username: svc\n"
        )
        loader = ConfigLoader(run_id="test-run-005")

        with pytest.raises(ConfigValidationError) as exc_info:
            loader.load(path)

        locations = [error["loc"] for error in exc_info.value.errors]
        assert "sources.0.auth.password_ref" in locations
        assert loader.validation_errors == exc_info.value.errors

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file is missing its sources list."""
        path = tmp_path / "sources.yaml"
        path.write_text("")

        with pytest.raises(ConfigValidationError) as exc_info:
            ConfigLoader(run_id="test-run-006").load(path)

        assert exc_info.value.errors[0]["loc"] == "sources"
