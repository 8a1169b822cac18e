"""Consul service discovery configuration settings.

Environment variables use CONSUL_ prefix.
Example: CONSUL_HOST=consul.local, CONSUL_TOKEN=...

When ``enabled`` is not given explicitly it defaults to the environment
scan in :mod:`service_registrar.core.settings.environment`: discovery is on
as soon as any variable name contains ``CONSUL_``.
"""

from __future__ import annotations

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .environment import discovery_enabled
from .yaml_sources import create_consul_yaml_source


class ConsulSettings(BaseSettings):
    """Consul agent connection settings.

    Environment variables use CONSUL_ prefix.
    Unknown CONSUL_* variables (CONSUL_HTTP_ADDR and friends used by the
    consul CLI) are ignored but still count towards enablement.
    """

    # ──────────────────────────────────────────────────────────────
    # Enable/Disable toggle
    # ──────────────────────────────────────────────────────────────

    enabled: bool = Field(
        default_factory=discovery_enabled,
        description="Enable Consul service discovery (defaults to CONSUL_* presence)",
    )

    # ──────────────────────────────────────────────────────────────
    # Consul agent connection
    # ──────────────────────────────────────────────────────────────

    host: str = Field(
        default="127.0.0.1",
        description="Consul agent hostname or IP address",
    )

    port: int = Field(
        default=8500,
        ge=1,
        le=65535,
        description="Consul agent HTTP API port",
    )

    scheme: str = Field(
        default="http",
        pattern=r"^https?$",
        description="HTTP scheme for Consul API (http or https)",
    )

    token: SecretStr | None = Field(
        default=None,
        description="Consul ACL token for authentication",
    )

    verify_ssl: bool = Field(
        default=True,
        description="Verify SSL certificates when using HTTPS",
    )

    connect_timeout: float = Field(
        default=5.0,
        ge=0.5,
        le=30.0,
        description="HTTP timeout in seconds for agent calls",
    )

    # ──────────────────────────────────────────────────────────────
    # Service registration
    # ──────────────────────────────────────────────────────────────

    service_address: str | None = Field(
        default=None,
        description="Address to advertise. None lets the agent use its own address",
    )

    @computed_field
    @property
    def base_url(self) -> str:
        """Build Consul agent base URL."""
        return f"{self.scheme}://{self.host}:{self.port}"

    def get_auth_headers(self) -> dict[str, str]:
        """Get HTTP headers for Consul API authentication.

        Returns:
            Dictionary with X-Consul-Token header if token is set.
        """
        if self.token:
            return {"X-Consul-Token": self.token.get_secret_value()}
        return {}

    model_config = SettingsConfigDict(
        env_prefix="CONSUL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """Customize settings source precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_consul_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )
