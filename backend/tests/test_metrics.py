"""
Unit tests for metrics collection and id generation.
"""

from dyematch.utils.ids import generate_request_id
from dyematch.utils.metrics import MetricsCollector


class TestMetricsCollector:
    """Test the in-process collector"""

    def test_counters(self):
        metrics = MetricsCollector()
        metrics.increment("match_requests_total")
        metrics.increment("match_requests_total", 2)
        assert metrics.get_counters() == {"match_requests_total": 3}

    def test_timing_stats(self):
        metrics = MetricsCollector()
        for duration in [10.0, 20.0, 30.0, 40.0]:
            metrics.record_timing("match", duration)

        stats = metrics.get_timing_stats()["match_duration_ms"]
        assert stats["count"] == 4
        assert stats["mean"] == 25.0
        assert stats["p50"] == 25.0
        assert stats["max"] == 40.0

    def test_timed_block(self):
        metrics = MetricsCollector()
        with metrics.timed("extraction"):
            pass
        assert metrics.get_timing_stats()["extraction_duration_ms"]["count"] == 1

    def test_deviance_stats_and_reset(self):
        metrics = MetricsCollector()
        assert metrics.get_deviance_stats() == {}
        metrics.record_deviance(0.5)
        metrics.record_deviance(2.5)
        assert metrics.get_deviance_stats()["mean"] == 1.5

        metrics.reset()
        assert metrics.get_summary()["counters"] == {}
        assert metrics.get_deviance_stats() == {}


def test_generate_request_id():
    first = generate_request_id(prefix="img")
    second = generate_request_id(prefix="img")
    assert first.startswith("img-")
    assert len(first.split("-")) == 3
    assert first != second
