"""Tests for registration records."""

from __future__ import annotations

from datetime import timedelta

import pytest

from service_registrar.infra.discovery import (
    CheckKind,
    HealthCheckSpec,
    ServiceIdentity,
    ServiceRegistration,
)
from service_registrar.infra.discovery.models import format_duration, metrics_registration


@pytest.mark.unit
class TestFormatDuration:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (timedelta(seconds=5), "5s"),
            (timedelta(milliseconds=1500), "1.5s"),
            (timedelta(minutes=1), "60s"),
        ],
    )
    def test_format(self, value, expected):
        assert format_duration(value) == expected


@pytest.mark.unit
class TestHealthCheckSpec:
    def test_ttl_check_defaults_to_five_seconds(self):
        check = HealthCheckSpec.ttl_check()

        assert check.kind == CheckKind.TTL
        assert check.to_payload() == {"TTL": "5s"}

    def test_http_check_payload(self):
        check = HealthCheckSpec.http_check("http://10.0.0.7:8080/health")

        assert check.to_payload() == {
            "HTTP": "http://10.0.0.7:8080/health",
            "Interval": "10s",
        }

    def test_incomplete_check_rejected(self):
        with pytest.raises(ValueError):
            HealthCheckSpec(kind=CheckKind.HTTP).to_payload()


@pytest.mark.unit
class TestServiceRegistration:
    def test_payload_without_check_or_address(self):
        registration = ServiceRegistration(
            identity=ServiceIdentity(name="orders", service_id="orders-1", port=8080),
            tags=("b", "a"),
        )

        assert registration.to_payload() == {
            "ID": "orders-1",
            "Name": "orders",
            "Port": 8080,
            "Tags": ["b", "a"],
        }

    def test_metrics_registration(self):
        registration = metrics_registration("orders", "orders-1-prom", 9100, address="10.0.0.7")

        payload = registration.to_payload()
        assert payload["ID"] == "orders-1-prom"
        assert payload["Name"] == "orders"
        assert payload["Port"] == 9100
        assert payload["Tags"] == ["prom"]
        assert payload["Address"] == "10.0.0.7"
        assert "Check" not in payload

    def test_records_are_immutable(self):
        identity = ServiceIdentity(name="orders", service_id="orders-1", port=8080)

        with pytest.raises(AttributeError):
            identity.port = 9090  # type: ignore[misc]
