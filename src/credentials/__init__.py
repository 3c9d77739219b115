"""Credential providers resolving secrets by reference."""

from src.credentials.provider import (
    CredentialNotFoundError,
    CredentialProvider,
    EnvironmentCredentialProvider,
    FileCredentialProvider,
    StaticCredentialProvider,
)


__all__ = [
    "CredentialNotFoundError",
    "CredentialProvider",
    "EnvironmentCredentialProvider",
    "FileCredentialProvider",
    "StaticCredentialProvider",
]
