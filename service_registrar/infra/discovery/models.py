"""Service registration records sent to the discovery backend.

Records are immutable and built fresh for every registry call. Their
``to_payload()`` output is the body of Consul's
``PUT /v1/agent/service/register``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any

# Primary service TTL. Health checks must arrive more often than this.
PRIMARY_TTL = timedelta(seconds=5)

# Tag carried by the metrics endpoint registration
METRICS_TAG = "prom"

# Note attached to passing TTL updates
PASSING_NOTE = "ok"


class CheckKind(str, Enum):
    """Health check kinds supported by the registry."""

    TTL = "ttl"  # service pushes its status
    HTTP = "http"  # registry polls a URL


class RegistrationState(str, Enum):
    """Lifecycle of the primary registration."""

    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    DEREGISTERED = "deregistered"


class HealthState(str, Enum):
    """Last health signal successfully reported for the primary registration."""

    UNKNOWN = "unknown"
    PASSING = "passing"
    FAILING = "failing"


def format_duration(value: timedelta) -> str:
    """Render a duration the way the Consul agent parses it.

    Example:
        >>> format_duration(timedelta(seconds=5))
        '5s'
        >>> format_duration(timedelta(milliseconds=1500))
        '1.5s'
    """
    return f"{value.total_seconds():g}s"


@dataclass(frozen=True)
class ServiceIdentity:
    """Name, unique id and port of one service instance."""

    name: str
    service_id: str
    port: int | None


@dataclass(frozen=True)
class HealthCheckSpec:
    """Health check attached to a registration.

    Use the ``ttl_check`` / ``http_check`` constructors rather than
    filling fields by hand.
    """

    kind: CheckKind
    ttl: timedelta | None = None
    http_url: str | None = None
    interval: timedelta | None = None

    @classmethod
    def ttl_check(cls, ttl: timedelta = PRIMARY_TTL) -> HealthCheckSpec:
        return cls(kind=CheckKind.TTL, ttl=ttl)

    @classmethod
    def http_check(cls, url: str, interval: timedelta = timedelta(seconds=10)) -> HealthCheckSpec:
        return cls(kind=CheckKind.HTTP, http_url=url, interval=interval)

    def to_payload(self) -> dict[str, Any]:
        """Build the ``Check`` field of a service registration."""
        if self.kind == CheckKind.TTL:
            if self.ttl is None:
                raise ValueError("TTL check requires a ttl")
            return {"TTL": format_duration(self.ttl)}

        if not self.http_url or self.interval is None:
            raise ValueError("HTTP check requires a url and an interval")
        return {"HTTP": self.http_url, "Interval": format_duration(self.interval)}


@dataclass(frozen=True)
class ServiceRegistration:
    """One service record to register.

    Attributes:
        identity: Name, id and port advertised.
        tags: Ordered tags; order is preserved on the wire.
        check: Health check, or None for a service that is always up.
        address: Advertised address, or None to let the agent decide.
    """

    identity: ServiceIdentity
    tags: tuple[str, ...] = field(default_factory=tuple)
    check: HealthCheckSpec | None = None
    address: str | None = None

    @property
    def service_id(self) -> str:
        return self.identity.service_id

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "ID": self.identity.service_id,
            "Name": self.identity.name,
            "Port": self.identity.port or 0,
            "Tags": list(self.tags),
        }
        if self.address:
            payload["Address"] = self.address
        if self.check is not None:
            payload["Check"] = self.check.to_payload()
        return payload


def metrics_registration(
    service_name: str,
    metrics_service_id: str,
    monitor_port: int,
    address: str | None = None,
) -> ServiceRegistration:
    """Build the registration describing the metrics endpoint itself."""
    return ServiceRegistration(
        identity=ServiceIdentity(
            name=service_name,
            service_id=metrics_service_id,
            port=monitor_port,
        ),
        tags=(METRICS_TAG,),
        address=address,
    )
