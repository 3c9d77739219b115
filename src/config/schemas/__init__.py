"""Configuration schema definitions."""

from src.config.schemas.fetch import FetchConfiguration
from src.config.schemas.sources import FeedSource, SourcesConfig


__all__ = [
    "FeedSource",
    "FetchConfiguration",
    "SourcesConfig",
]
