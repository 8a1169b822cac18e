"""Pydantic Settings v2 configuration.

Import settings via cached loaders:
    from service_registrar.core.settings import get_consul_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. YAML/conf.d files (optional, local/dev)
    3. Environment variables (production)
    4. .env file (development only)
    5. secrets_dir (Kubernetes/Docker secrets)
"""

from __future__ import annotations

from .consul import ConsulSettings
from .environment import DISCOVERY_ENV_MARKER, discovery_enabled, discovery_variables
from .loader import clear_all_caches, get_consul_settings, get_logging_settings
from .logs import LoggingSettings

__all__ = [
    "ConsulSettings",
    "LoggingSettings",
    "DISCOVERY_ENV_MARKER",
    "discovery_enabled",
    "discovery_variables",
    "clear_all_caches",
    "get_consul_settings",
    "get_logging_settings",
]
