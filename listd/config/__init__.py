"""Configuration module for the Listd catalog API."""

from .settings import (
    Settings,
    DatabaseConfig,
    CacheConfig,
    QueryConfig,
    load_settings,
)

__all__ = [
    'Settings',
    'DatabaseConfig',
    'CacheConfig',
    'QueryConfig',
    'load_settings',
]
