"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process. The discovery enablement flag is therefore fixed at boot.

Testing:
    In tests, clear the cache to force reload:
    clear_all_caches()

    Or override with custom values:
    settings = ConsulSettings(enabled=True, host="consul.test")
"""

from __future__ import annotations

from functools import lru_cache

from .consul import ConsulSettings
from .logs import LoggingSettings


@lru_cache(maxsize=1)
def get_consul_settings() -> ConsulSettings:
    """Get cached Consul settings.

    Returns:
        Validated and frozen ConsulSettings instance.
    """
    return ConsulSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


def clear_all_caches() -> None:
    """Clear all settings caches.

    Useful for testing or when you need to force reload settings.
    In production, prefer process restarts over cache clearing.
    """
    get_consul_settings.cache_clear()
    get_logging_settings.cache_clear()
