"""Environment-driven settings for fetch runs (OPENAM_FETCH_* variables)."""

from src.settings.app import AppSettings, get_settings


__all__ = ["AppSettings", "get_settings"]
