"""
Configuration package for the TebiTrip planning core.
"""

from .settings import (
    Settings,
    Environment,
    LogLevel,
    StorageBackend,
    GenerationSettings,
    PhotoSettings,
    RateLimitSettings,
    RedisSettings,
    StorageSettings,
    settings,
    get_settings,
    reload_settings,
)

__all__ = [
    "Settings",
    "Environment",
    "LogLevel",
    "StorageBackend",
    "GenerationSettings",
    "PhotoSettings",
    "RateLimitSettings",
    "RedisSettings",
    "StorageSettings",
    "settings",
    "get_settings",
    "reload_settings",
]
