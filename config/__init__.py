"""Configuration for the Base block stream client."""

from .settings import Settings, settings

__all__ = [
    "Settings",
    "settings",
]
