from __future__ import annotations

from dataclasses import dataclass

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Gauge, Histogram, generate_latest
from prometheus_client import Counter


@dataclass
class Metrics:
    registry: CollectorRegistry
    errors_total: Counter
    queries_total: Counter
    query_latency_seconds: Histogram
    corpus_documents: Gauge

    def render(self) -> tuple[bytes, str]:
        return generate_latest(self.registry), CONTENT_TYPE_LATEST


_metrics_singleton: Metrics | None = None


def get_metrics() -> Metrics:
    global _metrics_singleton
    if _metrics_singleton is not None:
        return _metrics_singleton

    # Dedicated registry so repeated imports (tests, reloads) never collide on the default one.
    registry = CollectorRegistry(auto_describe=True)

    errors_total = Counter(
        "faq_errors_total",
        "Total classified errors",
        ["stage", "code"],
        registry=registry,
    )
    queries_total = Counter(
        "faq_retrieval_queries_total",
        "Total retrieval queries served",
        registry=registry,
    )
    query_latency_seconds = Histogram(
        "faq_retrieval_latency_seconds",
        "Retrieval latency in seconds",
        buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
        registry=registry,
    )
    corpus_documents = Gauge(
        "faq_retrieval_corpus_documents",
        "Documents in the active corpus index",
        registry=registry,
    )

    _metrics_singleton = Metrics(
        registry=registry,
        errors_total=errors_total,
        queries_total=queries_total,
        query_latency_seconds=query_latency_seconds,
        corpus_documents=corpus_documents,
    )
    return _metrics_singleton


def inc_error(*, stage: str, code: str) -> None:
    try:
        m = get_metrics()
        m.errors_total.labels(stage=str(stage), code=str(code)).inc()
    except Exception:
        return


def observe_query(*, duration_seconds: float) -> None:
    m = get_metrics()
    m.queries_total.inc()
    m.query_latency_seconds.observe(max(0.0, float(duration_seconds)))


def set_corpus_size(n_documents: int) -> None:
    get_metrics().corpus_documents.set(float(n_documents))
