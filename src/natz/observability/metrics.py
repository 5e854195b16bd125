"""
Prometheus Metrics Integration.

Provides metrics collection for reconciliation and propagation.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge


class MetricsCollector:
    """
    Prometheus metrics collector for natz.

    Exposes metrics:
    - natz_reconcile_total{kind="...", result="synchronized|failed|paused|deleted|conflict"}
    - natz_token_issued_total{kind="..."}
    - natz_publish_total{subject="...", status="success|fail"}
    - natz_account_index_size

    Each collector registers on its own registry unless one is given, so
    several engines can live in one process; pass
    ``prometheus_client.REGISTRY`` to expose them on the default endpoint.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize metrics collector."""
        self.registry = registry if registry is not None else CollectorRegistry()

        self.reconcile_total = Counter(
            "natz_reconcile_total",
            "Total number of reconciliation outcomes",
            ["kind", "result"],
            registry=self.registry,
        )

        self.token_issued_total = Counter(
            "natz_token_issued_total",
            "Total number of tokens written to status",
            ["kind"],
            registry=self.registry,
        )

        self.publish_total = Counter(
            "natz_publish_total",
            "Total number of control messages published",
            ["subject", "status"],
            registry=self.registry,
        )

        self.account_index_size = Gauge(
            "natz_account_index_size",
            "Number of accounts served by the account server",
            registry=self.registry,
        )

    def record_reconcile(self, kind: str, result: str):
        """Record the outcome of a reconciliation pass."""
        self.reconcile_total.labels(kind=kind, result=result).inc()

    def record_token_issued(self, kind: str):
        """Record a token written to a resource's status."""
        self.token_issued_total.labels(kind=kind).inc()

    def record_publish(self, subject: str, success: bool):
        """Record a control message publish."""
        status = "success" if success else "fail"
        self.publish_total.labels(subject=subject, status=status).inc()

    def set_account_index_size(self, count: int):
        """Set the number of indexed accounts."""
        self.account_index_size.set(count)

    def sample(self, name: str, labels: Optional[dict[str, str]] = None) -> float:
        """Current value of a sample, 0.0 if it was never recorded."""
        value = self.registry.get_sample_value(name, labels or {})
        return value if value is not None else 0.0
