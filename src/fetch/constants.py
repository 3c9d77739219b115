"""HTTP constants for the fetch layer."""

HTTP_STATUS_NOT_MODIFIED = 304
HTTP_STATUS_BAD_REQUEST = 400

# Chunk size for streaming the feed body into the sink
DEFAULT_CHUNK_SIZE = 8192

# Conditional request headers and the cached response headers they come from
CONDITIONAL_HEADER_SOURCES: dict[str, str] = {
    "If-None-Match": "etag",
    "If-Modified-Since": "last-modified",
}
