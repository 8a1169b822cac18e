"""Unit tests for registrar settings."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from service_registrar.core.settings import (
    ConsulSettings,
    LoggingSettings,
    clear_all_caches,
    discovery_enabled,
    discovery_variables,
    get_consul_settings,
    get_logging_settings,
)


@pytest.mark.unit
class TestDiscoveryEnvironment:
    """Enablement is decided by CONSUL_ in variable names."""

    def test_marker_anywhere_in_name(self):
        environ = {"MY_CONSUL_ADDR": "", "PATH": "/usr/bin", "CONSUL_TOKEN": "x"}

        assert discovery_variables(environ) == ["CONSUL_TOKEN", "MY_CONSUL_ADDR"]
        assert discovery_enabled(environ) is True

    def test_value_is_irrelevant(self):
        assert discovery_enabled({"CONSUL_HTTP_ADDR": ""}) is True

    def test_no_marker(self):
        assert discovery_enabled({"PATH": "/usr/bin", "consul_addr": "x"}) is False

    def test_reads_process_environment(self, monkeypatch):
        assert discovery_enabled() is False

        monkeypatch.setenv("CONSUL_HTTP_ADDR", "127.0.0.1:8500")

        assert discovery_enabled() is True


@pytest.mark.unit
class TestConsulSettings:
    """Test suite for ConsulSettings."""

    def test_defaults(self):
        settings = ConsulSettings()

        assert settings.enabled is False
        assert settings.host == "127.0.0.1"
        assert settings.port == 8500
        assert settings.base_url == "http://127.0.0.1:8500"
        assert settings.get_auth_headers() == {}

    def test_any_consul_variable_enables(self, monkeypatch):
        monkeypatch.setenv("CONSUL_HTTP_ADDR", "ignored")

        assert ConsulSettings().enabled is True

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("CONSUL_HOST", "consul.local")
        monkeypatch.setenv("CONSUL_PORT", "8501")
        monkeypatch.setenv("CONSUL_SCHEME", "https")
        monkeypatch.setenv("CONSUL_TOKEN", "s3cret")

        settings = ConsulSettings()

        assert settings.enabled is True
        assert settings.base_url == "https://consul.local:8501"
        assert settings.get_auth_headers() == {"X-Consul-Token": "s3cret"}

    def test_explicit_enabled_wins(self, monkeypatch):
        monkeypatch.setenv("CONSUL_HOST", "consul.local")

        assert ConsulSettings(enabled=False).enabled is False

    def test_yaml_source(self, tmp_path, monkeypatch):
        conf = tmp_path / "yaml-conf"
        (conf / "consul.d").mkdir(parents=True)
        (conf / "consul.yaml").write_text("host: consul.yaml.test\nport: 8600\n")
        (conf / "consul.d" / "10-override.yaml").write_text("port: 8700\n")
        monkeypatch.setenv("REGISTRAR_CONFIG_DIR", str(conf))

        settings = ConsulSettings()

        assert settings.host == "consul.yaml.test"
        assert settings.port == 8700

    def test_invalid_scheme(self):
        with pytest.raises(ValidationError):
            ConsulSettings(scheme="ftp")

    def test_frozen(self):
        settings = ConsulSettings()

        with pytest.raises(ValidationError):
            settings.host = "other"


@pytest.mark.unit
class TestLoggingSettings:
    def test_defaults(self):
        settings = LoggingSettings()

        assert settings.level == "INFO"
        assert settings.json_logs is True
        assert settings.log_file is None

    def test_level_normalized(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = LoggingSettings()

        assert settings.level == "DEBUG"

    def test_to_logging_kwargs(self):
        kwargs = LoggingSettings(json_logs=False, log_file="/tmp/registrar.log").to_logging_kwargs()

        assert kwargs["json_logs"] is False
        assert kwargs["file_path"] == "/tmp/registrar.log"
        assert kwargs["log_level"] == "INFO"


@pytest.mark.unit
class TestSettingsLoader:
    def test_loader_caches(self):
        assert get_consul_settings() is get_consul_settings()
        assert get_logging_settings() is get_logging_settings()

    def test_clear_all_caches(self, monkeypatch):
        first = get_consul_settings()
        monkeypatch.setenv("CONSUL_HOST", "consul.local")

        assert get_consul_settings().enabled is False

        clear_all_caches()

        assert get_consul_settings() is not first
        assert get_consul_settings().enabled is True
