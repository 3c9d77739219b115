"""Session value produced by an OpenAM login."""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any


class Session(Mapping[str, Any]):
    """Decoded login response.

    A read-only mapping of the JSON fields OpenAM returned. Only the field
    named by ``token_field`` is used downstream. A session backs exactly one
    feed request and one logout and is never persisted.
    """

    __slots__ = ("_payload", "_token_field")

    def __init__(self, payload: Mapping[str, Any], token_field: str) -> None:
        self._payload = MappingProxyType(dict(payload))
        self._token_field = token_field

    def __getitem__(self, key: str) -> Any:
        return self._payload[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._payload)

    def __len__(self) -> int:
        return len(self._payload)

    def __repr__(self) -> str:
        # Token values are credentials; keep them out of reprs and logs.
        return f"Session(fields={sorted(self._payload)!r})"

    @property
    def token_field(self) -> str:
        """Name of the field carrying the session token."""
        return self._token_field

    @property
    def token(self) -> str:
        """Session token, or an empty string when the field is absent."""
        value = self._payload.get(self._token_field)
        if value is None:
            return ""
        return str(value)

    @property
    def has_token(self) -> bool:
        """Whether the login response carried a non-empty token."""
        return bool(self.token)
