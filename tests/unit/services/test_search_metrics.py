"""
Tests for smart search Prometheus counters
"""

from prometheus_client import REGISTRY

from smartsearch.services.search_metrics import record_search


def _count(path):
    return REGISTRY.get_sample_value("smart_search_events_total", {"path": path}) or 0


class TestRecordSearch:

    def test_increments_path_label(self):
        before = _count("llm_timeout")
        record_search("llm_timeout")
        assert _count("llm_timeout") == before + 1

    def test_labels_are_independent(self):
        before_rules = _count("rules")
        before_rejected = _count("rejected")

        record_search("rejected")

        assert _count("rejected") == before_rejected + 1
        assert _count("rules") == before_rules
