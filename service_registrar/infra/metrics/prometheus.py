"""Prometheus registry shared by the registrar and its metrics endpoint."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Info

# Custom registry so the metrics endpoint only exposes what we register
REGISTRY = CollectorRegistry()

# Covers agent round-trips from 1ms to 10s
DEFAULT_LATENCY_BUCKETS = (
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
)

service_info = Info(
    "service",
    "Identity of the service exposing this metrics endpoint. "
    "Set once when the metrics endpoint starts.",
    registry=REGISTRY,
)
