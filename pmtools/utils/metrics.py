"""Prometheus metrics for document storage and the AI proxy."""

from prometheus_client import Counter, Histogram

# Document store metrics
document_ops_total = Counter(
    "document_ops_total",
    "Total document store operations",
    ["kind", "op", "outcome"],
)

# AI proxy metrics
ai_requests_total = Counter(
    "ai_requests_total",
    "Total AI enhancement proxy requests",
    ["outcome"],
)

ai_latency_ms = Histogram(
    "ai_latency_ms",
    "AI enhancement proxy latency in milliseconds",
    ["outcome"],
    buckets=[250, 500, 1000, 2000, 4000, 8000, 16000, 32000, 64000],
)


class PrometheusDocumentMetrics:
    """Prometheus-based metrics for the REST surface."""

    def inc_document_op(self, kind: str, op: str, outcome: str) -> None:
        """Increment document operation counter."""
        document_ops_total.labels(kind=kind, op=op, outcome=outcome).inc()

    def record_ai_request(self, outcome: str, latency_ms: float) -> None:
        """Record one proxied AI request."""
        ai_requests_total.labels(outcome=outcome).inc()
        ai_latency_ms.labels(outcome=outcome).observe(latency_ms)


metrics = PrometheusDocumentMetrics()
