"""Prometheus metrics for the smart search pipeline."""
from prometheus_client import Counter

search_counter = Counter(
    "smart_search_events_total",
    "Count of smart search requests by interpretation path",
    labelnames=["path"],
)


def record_search(path: str) -> None:
    """path: llm, rules, llm_timeout, llm_error or rejected"""
    search_counter.labels(path=path).inc()
