"""Utility modules for the forum data layer."""

from .config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
