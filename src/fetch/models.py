"""Data models for the authenticated fetch layer."""

from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class FetcherResult(BaseModel):
    """Result of fetching one configured feed to disk.

    The body lives in ``file_path``; the caller owns the file.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    source_id: Annotated[str, Field(min_length=1)]
    url: Annotated[str, Field(min_length=1, description="Normalized feed URL")]
    file_path: Path
    status_code: int = Field(ge=100, le=599, description="HTTP status code")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Lower-cased response headers"
    )
    bytes_written: int = Field(default=0, ge=0)

    @property
    def etag(self) -> str | None:
        """ETag of the response, if any."""
        return self.headers.get("etag")

    @property
    def last_modified(self) -> str | None:
        """Last-Modified of the response, if any."""
        return self.headers.get("last-modified")
