"""OpenAM session exchange: login, logout and the session value."""

from src.session.authenticator import SessionAuthenticator
from src.session.errors import AuthError, AuthErrorKind
from src.session.models import Session


__all__ = [
    "AuthError",
    "AuthErrorKind",
    "Session",
    "SessionAuthenticator",
]
