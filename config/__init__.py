"""Configuration package for the interview form tool."""
from .host import HostSettings, load_host_settings, resolve_timeout
from .settings import Settings, settings

__all__ = [
    "HostSettings",
    "load_host_settings",
    "resolve_timeout",
    "Settings",
    "settings",
]
