"""Feed source configuration schema."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.config.constants import FEED_URL_SCHEMES
from src.config.schemas.fetch import FetchConfiguration


class FeedSource(BaseModel):
    """Configuration for a single authenticated feed.

    Attributes:
        id: Unique identifier for the source.
        name: Optional human-readable name.
        url: Feed URL; feed:// style pseudo-schemes are accepted.
        enabled: Whether the source is fetched.
        auth: OpenAM exchange parameters.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: Annotated[str, Field(min_length=1, max_length=100, pattern=r"^[a-z0-9_-]+$")]
    name: Annotated[str, Field(max_length=200)] = ""
    url: Annotated[str, Field(min_length=1)]
    enabled: bool = True
    auth: FetchConfiguration

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate the URL scheme."""
        if not v.startswith(FEED_URL_SCHEMES):
            msg = f"URL must start with one of {', '.join(FEED_URL_SCHEMES)}"
            raise ValueError(msg)
        return v


class SourcesConfig(BaseModel):
    """Root configuration for sources.yaml.

    Attributes:
        version: Schema version.
        sources: List of feed sources.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: Annotated[str, Field(pattern=r"^\d+\.\d+$")] = "1.0"
    sources: list[FeedSource]

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "SourcesConfig":
        """Ensure all source IDs are unique."""
        ids = [s.id for s in self.sources]
        duplicates = [id_ for id_ in ids if ids.count(id_) > 1]
        if duplicates:
            msg = f"Duplicate source IDs found: {set(duplicates)}"
            raise ValueError(msg)
        return self

    @property
    def enabled_sources(self) -> list[FeedSource]:
        """Sources that should be fetched."""
        return [s for s in self.sources if s.enabled]

    def get_source(self, source_id: str) -> FeedSource | None:
        """Look up a source by id."""
        for source in self.sources:
            if source.id == source_id:
                return source
        return None
