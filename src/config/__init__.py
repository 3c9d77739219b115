"""Configuration loading and validation module."""

from src.config.loader import ConfigLoader, ConfigValidationError
from src.config.schemas import FeedSource, FetchConfiguration, SourcesConfig


__all__ = [
    "ConfigLoader",
    "ConfigValidationError",
    "FeedSource",
    "FetchConfiguration",
    "SourcesConfig",
]
