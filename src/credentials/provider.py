"""Credential lookup by reference.

Feed configuration only ever names a credential; the secret is resolved at
login time through a CredentialProvider.
"""

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

_REF_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")

DEFAULT_ENV_PREFIX = "OPENAM_KEY_"


class CredentialNotFoundError(Exception):
    """Raised when a credential reference cannot be resolved."""

    def __init__(self, ref: str, reason: str = "unknown credential reference") -> None:
        """Initialize the error.

        Args:
            ref: The reference that failed to resolve.
            reason: Why it failed.
        """
        self.ref = ref
        self.reason = reason
        super().__init__(f"Cannot resolve credential '{ref}': {reason}")


class CredentialProvider(Protocol):
    """Resolves a credential reference to its plaintext value."""

    def resolve(self, ref: str) -> str:
        """Return the secret for ``ref``.

        Raises:
            CredentialNotFoundError: If the reference is unknown.
        """
        ...


class StaticCredentialProvider:
    """In-memory provider backed by a mapping."""

    def __init__(self, secrets: Mapping[str, str]) -> None:
        self._secrets = dict(secrets)

    def resolve(self, ref: str) -> str:
        try:
            return self._secrets[ref]
        except KeyError:
            raise CredentialNotFoundError(ref) from None


class EnvironmentCredentialProvider:
    """Provider reading secrets from environment variables.

    Reference ``svc-pw`` maps to ``OPENAM_KEY_SVC_PW``.
    """

    def __init__(
        self,
        prefix: str = DEFAULT_ENV_PREFIX,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            prefix: Variable name prefix.
            environ: Environment mapping (defaults to os.environ).
        """
        self._prefix = prefix
        self._environ = environ if environ is not None else os.environ

    def variable_name(self, ref: str) -> str:
        """Get the environment variable name for a reference."""
        return self._prefix + re.sub(r"[^A-Za-z0-9]", "_", ref).upper()

    def resolve(self, ref: str) -> str:
        name = self.variable_name(ref)
        value = self._environ.get(name)
        if not value:
            raise CredentialNotFoundError(ref, f"environment variable {name} is not set")
        return value


class FileCredentialProvider:
    """Provider reading one secret per file from a directory.

    The file named after the reference holds the secret; a single trailing
    newline is stripped.
    """

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)

    def resolve(self, ref: str) -> str:
        if not _REF_PATTERN.match(ref):
            raise CredentialNotFoundError(ref, "invalid reference name")

        path = self._directory / ref
        try:
            value = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise CredentialNotFoundError(ref, f"no file {path}") from None
        except OSError as e:
            raise CredentialNotFoundError(ref, str(e)) from e

        value = value.removesuffix("\n").removesuffix("\r")
        if not value:
            raise CredentialNotFoundError(ref, f"file {path} is empty")
        return value
