"""
Prometheus metrics for the eigenda-store client.

Counters and histograms for:
- put() outcomes and end-to-end duration
- status polls grouped by the status observed
- encoded payload sizes sent and received
- get() outcomes

Typical usage:

    from eigenda_store.metrics import get_metrics

    METRICS = get_metrics()
    METRICS.submissions_total.labels(outcome="confirmed").inc()

Tests should pass their own `CollectorRegistry` to `ClientMetrics` so that
instruments do not collide with the process-wide registry.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

_SIZE_BUCKETS = (
    1_024,
    4_096,
    16_384,
    65_536,
    262_144,
    524_288,
    1_048_576,
    2_097_152,
)

_DURATION_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0)


class ClientMetrics:
    """
    Instruments backed by prometheus_client, registered on `registry`
    (the default process registry when omitted).
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        reg = registry if registry is not None else REGISTRY

        self.submissions_total = Counter(
            "eigenda_store_submissions_total",
            "Total put() calls grouped by outcome",
            ["outcome"],
            registry=reg,
        )
        self.status_polls_total = Counter(
            "eigenda_store_status_polls_total",
            "Total disperser status polls grouped by observed status",
            ["status"],
            registry=reg,
        )
        self.submission_seconds = Histogram(
            "eigenda_store_submission_seconds",
            "Wall time from put() start to resolution (seconds)",
            registry=reg,
            buckets=_DURATION_BUCKETS,
        )
        self.payload_bytes = Histogram(
            "eigenda_store_payload_bytes",
            "Encoded payload sizes grouped by direction (out=put, in=get)",
            ["direction"],
            registry=reg,
            buckets=_SIZE_BUCKETS,
        )
        self.retrievals_total = Counter(
            "eigenda_store_retrievals_total",
            "Total get() calls grouped by outcome",
            ["outcome"],
            registry=reg,
        )


@lru_cache(maxsize=1)
def get_metrics() -> ClientMetrics:
    """Process-wide metrics instance on the default registry (created once)."""
    return ClientMetrics()


__all__ = ["ClientMetrics", "get_metrics"]
