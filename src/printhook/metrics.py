"""Prometheus metrics for printhook.

Metrics Defined:
- printhook_webhooks_received_total: Counter of webhooks by event type
- printhook_receipts_total: Counter of receipts by event type and result
- printhook_print_duration_seconds: Histogram of time spent printing

Metrics are exposed at the `/metrics` endpoint in Prometheus format.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

# Thermal printers finish a receipt in well under a few seconds; the upper
# buckets catch a stalled device.
DEFAULT_DURATION_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)

RESULT_PRINTED = "printed"
RESULT_SKIPPED = "skipped"
RESULT_FAILED = "failed"


class ReceiptMetrics:
    """Prometheus metrics for webhook handling and printing.

    Each instance registers its metrics in its own registry unless one is
    passed in, so several applications (or tests) can coexist in one
    process.

    Example:
        >>> metrics = ReceiptMetrics()
        >>> metrics.record_webhook("issues")
        >>> metrics.record_printed("issues", duration=0.4)
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        self.webhooks_received_total = Counter(
            "printhook_webhooks_received_total",
            "Total number of webhooks received",
            labelnames=["event_type"],
            registry=self.registry,
        )
        self.receipts_total = Counter(
            "printhook_receipts_total",
            "Total number of receipts handled, by outcome",
            labelnames=["event_type", "result"],
            registry=self.registry,
        )
        self.print_duration_seconds = Histogram(
            "printhook_print_duration_seconds",
            "Time spent sending a receipt to the printer",
            buckets=DEFAULT_DURATION_BUCKETS,
            registry=self.registry,
        )

    def record_webhook(self, event_type: str) -> None:
        self.webhooks_received_total.labels(event_type=event_type or "none").inc()

    def record_printed(self, event_type: str, duration: float) -> None:
        self.receipts_total.labels(event_type=event_type or "none", result=RESULT_PRINTED).inc()
        self.print_duration_seconds.observe(duration)

    def record_skipped(self, event_type: str) -> None:
        self.receipts_total.labels(event_type=event_type or "none", result=RESULT_SKIPPED).inc()

    def record_failed(self, event_type: str) -> None:
        self.receipts_total.labels(event_type=event_type or "none", result=RESULT_FAILED).inc()

    def value(self, event_type: str, result: str) -> float:
        """Current receipts_total count for one label pair."""
        sample = self.registry.get_sample_value(
            "printhook_receipts_total",
            {"event_type": event_type or "none", "result": result},
        )
        return sample or 0.0

    def generate_latest(self) -> bytes:
        """Render this registry in the Prometheus text format."""
        return generate_latest(self.registry)
