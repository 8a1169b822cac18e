"""Tests for core exceptions."""

from service_registrar.core import exceptions as exc


def test_registrar_error_defaults() -> None:
    error = exc.RegistrarError(detail="bad")
    assert error.type == "registrar-error"
    assert error.extra == {}
    assert str(error) == "bad"


def test_config_error_type() -> None:
    error = exc.ConfigError(detail="no port", extra={"listen": "noport"})
    assert isinstance(error, exc.RegistrarError)
    assert error.type == "config-error"
    assert error.extra["listen"] == "noport"


def test_backend_error_merges_extra() -> None:
    error = exc.BackendError(detail="boom", operation="register", status_code=500, extra={"env": "test"})
    assert error.status_code == 500
    assert error.extra == {"operation": "register", "status_code": 500, "env": "test"}


def test_registry_error_builds_detail() -> None:
    cause = exc.BackendError(detail="Unexpected response code: 500", operation="report_health")
    error = exc.RegistryError(service_id="orders-1", operation="health_check", cause=cause)
    assert error.detail == "cannot health check service orders-1: Unexpected response code: 500"
    assert error.cause is cause
    assert error.extra["service_id"] == "orders-1"


def test_listener_fatal_error_fields() -> None:
    error = exc.ListenerFatalError(host="0.0.0.0", port=9100, cause=OSError("in use"))
    assert error.port == 9100
    assert "0.0.0.0:9100" in error.detail
