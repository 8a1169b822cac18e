"""Prometheus metrics for Consul service discovery.

These metrics cover the agent calls made by ConsulClient: registration,
deregistration and TTL updates, plus errors and latency. They are
registered on the shared REGISTRY and exposed by the metrics endpoint.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

from service_registrar.infra.metrics.prometheus import DEFAULT_LATENCY_BUCKETS, REGISTRY

# ──────────────────────────────────────────────────────────────
# Registration metrics
# ──────────────────────────────────────────────────────────────

service_discovery_registrations_total = Counter(
    "service_discovery_registrations_total",
    "Total service registration attempts with Consul.",
    ["status"],  # success, failure
    registry=REGISTRY,
)

service_discovery_deregistrations_total = Counter(
    "service_discovery_deregistrations_total",
    "Total service deregistration attempts with Consul.",
    ["status"],  # success, failure
    registry=REGISTRY,
)

# ──────────────────────────────────────────────────────────────
# TTL heartbeat metrics
# ──────────────────────────────────────────────────────────────

service_discovery_ttl_updates_total = Counter(
    "service_discovery_ttl_updates_total",
    "Total TTL health check updates sent to Consul.",
    ["status", "check_status"],  # status: success/failure, check_status: pass/fail
    registry=REGISTRY,
)

# ──────────────────────────────────────────────────────────────
# Error metrics
# ──────────────────────────────────────────────────────────────

service_discovery_errors_total = Counter(
    "service_discovery_errors_total",
    "Total errors during service discovery operations.",
    ["operation", "error_type"],  # error_type: timeout/connection/http_error
    registry=REGISTRY,
)

# ──────────────────────────────────────────────────────────────
# Latency metrics
# ──────────────────────────────────────────────────────────────

service_discovery_operation_duration_seconds = Histogram(
    "service_discovery_operation_duration_seconds",
    "Duration of Consul API operations in seconds.",
    ["operation"],  # register, deregister, ttl_pass, ttl_fail
    buckets=DEFAULT_LATENCY_BUCKETS,
    registry=REGISTRY,
)
