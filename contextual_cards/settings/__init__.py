"""Card manager settings loading."""

from .app import CardSettings, get_settings


__all__ = ["CardSettings", "get_settings"]
