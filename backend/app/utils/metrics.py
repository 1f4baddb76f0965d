"""Prometheus metrics for document generation and purchases."""

from prometheus_client import Counter, Histogram

# Document generation metrics
document_latency_ms = Histogram(
    "document_latency_ms",
    "Document generation latency in milliseconds",
    ["kind", "outcome"],
    buckets=[50, 100, 250, 500, 1000, 2500, 5000, 10000, 30000, 60000],
)

documents_total = Counter(
    "documents_total",
    "Documents served",
    ["kind", "outcome"],
)

document_cache_hits_total = Counter(
    "document_cache_hits_total",
    "Documents served from the disk cache",
    ["kind"],
)

drafting_failures_total = Counter(
    "drafting_failures_total",
    "LLM drafting failures",
    ["reason"],
)

# Purchase lifecycle metrics
purchase_transitions_total = Counter(
    "purchase_transitions_total",
    "Purchase status transitions",
    ["status"],
)

web_vitals_total = Counter(
    "web_vitals_total",
    "Web vitals samples recorded",
    ["name"],
)


class PrometheusDocumentMetrics:
    """Prometheus-based document metrics implementation."""

    def record_latency(self, kind: str, outcome: str, latency_ms: float) -> None:
        """Record document generation latency."""
        document_latency_ms.labels(kind=kind, outcome=outcome).observe(latency_ms)
        documents_total.labels(kind=kind, outcome=outcome).inc()

    def inc_cache_hit(self, kind: str) -> None:
        """Increment cache hit counter."""
        document_cache_hits_total.labels(kind=kind).inc()

    def inc_transition(self, status: str) -> None:
        """Increment purchase transition counter."""
        purchase_transitions_total.labels(status=status).inc()
