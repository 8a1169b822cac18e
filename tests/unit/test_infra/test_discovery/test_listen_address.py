"""Tests for listen address parsing."""

from __future__ import annotations

import pytest

from service_registrar.core.exceptions import ConfigError
from service_registrar.infra.discovery import parse_listen_port


@pytest.mark.unit
class TestParseListenPort:
    """Test suite for parse_listen_port."""

    @pytest.mark.parametrize(
        ("listen", "expected"),
        [
            ("0.0.0.0:8080", 8080),
            (":9000", 9000),
            ("localhost:0", 0),
            ("[::1]:443", 443),
        ],
    )
    def test_valid_addresses(self, listen, expected):
        assert parse_listen_port(listen) == expected

    def test_missing_colon(self):
        """An address without ':' has no port."""
        with pytest.raises(ConfigError) as exc_info:
            parse_listen_port("noport")

        assert exc_info.value.extra["listen"] == "noport"

    @pytest.mark.parametrize("listen", ["host:abc", "host:", "host:-1", "host:８０"])
    def test_non_integer_port(self, listen):
        with pytest.raises(ConfigError):
            parse_listen_port(listen)

    def test_port_out_of_range(self):
        with pytest.raises(ConfigError, match="out of range"):
            parse_listen_port("host:70000")
