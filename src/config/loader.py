"""Sources file loader with validation."""

import hashlib
import time
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from src.config.constants import COMPONENT_CONFIG
from src.config.schemas.sources import SourcesConfig


logger = structlog.get_logger()


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details.
            file_path: Path to the file that failed validation.
        """
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Validation failed for {file_path}: {len(errors)} errors")


class ConfigLoader:
    """Loads and validates a sources.yaml file.

    Every failure (unreadable file, encoding, YAML syntax, schema) is
    reported as a ConfigValidationError whose ``errors`` list has
    ``loc``/``msg``/``type`` entries.
    """

    def __init__(self, run_id: str) -> None:
        """Initialize the loader.

        Args:
            run_id: Unique identifier for the current run.
        """
        self._run_id = run_id
        self._checksum: str | None = None
        self._validation_errors: list[dict[str, str]] = []
        self._validation_duration_ms: float = 0

    @property
    def checksum(self) -> str | None:
        """SHA-256 of the last file read."""
        return self._checksum

    @property
    def validation_errors(self) -> list[dict[str, str]]:
        """Get validation errors if any."""
        return self._validation_errors.copy()

    @property
    def validation_duration_ms(self) -> float:
        """Get validation duration in milliseconds."""
        return self._validation_duration_ms

    def _load_yaml_file(self, file_path: Path) -> dict[str, object]:
        """Read a YAML file and record its checksum.

        Raises:
            OSError: If the file cannot be read.
            UnicodeDecodeError: If the file is not UTF-8.
            yaml.YAMLError: If YAML parsing fails.
        """
        content_bytes = file_path.read_bytes()
        self._checksum = hashlib.sha256(content_bytes).hexdigest()
        parsed: dict[str, object] = yaml.safe_load(content_bytes.decode("utf-8")) or {}
        return parsed

    def load(self, sources_path: Path) -> SourcesConfig:
        """Load and validate a sources file.

        Args:
            sources_path: Path to sources.yaml.

        Returns:
            Validated sources configuration.

        Raises:
            ConfigValidationError: If the file is missing, malformed or invalid.
        """
        start_time = time.perf_counter()
        self._validation_errors = []
        log = logger.bind(
            run_id=self._run_id,
            component=COMPONENT_CONFIG,
            file_path=str(sources_path),
        )
        log.info("loading_config_file")

        try:
            data = self._load_yaml_file(sources_path)
            sources = SourcesConfig.model_validate(data)
        except ValidationError as e:
            for err in e.errors():
                self._validation_errors.append(
                    {
                        "loc": ".".join(str(loc) for loc in err["loc"]),
                        "msg": err["msg"],
                        "type": err["type"],
                    }
                )
            log.error(
                "config_validation_failed",
                validation_error_count=len(self._validation_errors),
                errors=self._validation_errors,
            )
            raise ConfigValidationError(
                self.validation_errors, str(sources_path)
            ) from e
        except FileNotFoundError as e:
            self._validation_errors.append(
                {"loc": "file", "msg": str(e), "type": "file_not_found"}
            )
            log.error("config_file_not_found", error=str(e))
            raise ConfigValidationError(
                self.validation_errors, str(sources_path)
            ) from e
        except OSError as e:
            self._validation_errors.append(
                {"loc": "file", "msg": str(e), "type": "file_unreadable"}
            )
            log.error("config_file_unreadable", error=str(e))
            raise ConfigValidationError(
                self.validation_errors, str(sources_path)
            ) from e
        except UnicodeDecodeError as e:
            self._validation_errors.append(
                {"loc": "file", "msg": str(e), "type": "encoding_error"}
            )
            log.error("config_file_not_utf8", error=str(e))
            raise ConfigValidationError(
                self.validation_errors, str(sources_path)
            ) from e
        except yaml.YAMLError as e:
            self._validation_errors.append(
                {"loc": "yaml", "msg": str(e), "type": "yaml_parse_error"}
            )
            log.error("config_yaml_parse_error", error=str(e))
            raise ConfigValidationError(
                self.validation_errors, str(sources_path)
            ) from e

        self._validation_duration_ms = (time.perf_counter() - start_time) * 1000
        log.info(
            "config_file_loaded",
            file_sha256=self._checksum,
            source_count=len(sources.sources),
            enabled_count=len(sources.enabled_sources),
            config_validation_duration_ms=self._validation_duration_ms,
        )
        return sources
