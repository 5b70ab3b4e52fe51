"""
Tests for the Prometheus performance monitor.
"""

from buildops.core.cqrs.middleware import PerformanceMetric
from buildops.core.monitoring import PrometheusPerformanceMonitor


def metric(command_type="quote.submit_request", duration_ms=20.0, success=True, slow=False):
    return PerformanceMetric(
        command_type=command_type,
        command_id="cmd-1",
        duration_ms=duration_ms,
        success=success,
        slow=slow,
    )


class TestPrometheusPerformanceMonitor:
    """Test suite for PrometheusPerformanceMonitor."""

    def test_counts_by_type_and_outcome(self):
        monitor = PrometheusPerformanceMonitor()

        monitor.record_metric(metric())
        monitor.record_metric(metric())
        monitor.record_metric(metric(success=False))

        assert monitor.sample(
            "buildops_commands_total",
            {"command_type": "quote.submit_request", "success": "true"},
        ) == 2
        assert monitor.sample(
            "buildops_commands_total",
            {"command_type": "quote.submit_request", "success": "false"},
        ) == 1

    def test_duration_recorded_in_seconds(self):
        monitor = PrometheusPerformanceMonitor()

        monitor.record_metric(metric(duration_ms=250.0))

        total = monitor.sample(
            "buildops_command_duration_seconds_sum",
            {"command_type": "quote.submit_request", "success": "true"},
        )
        assert total == 0.25

    def test_slow_commands_counted(self):
        monitor = PrometheusPerformanceMonitor()

        monitor.record_metric(metric(slow=True, duration_ms=5000.0))
        monitor.record_metric(metric())

        assert monitor.sample(
            "buildops_slow_commands_total", {"command_type": "quote.submit_request"}
        ) == 1

    def test_keeps_in_memory_history(self):
        monitor = PrometheusPerformanceMonitor(max_metrics=2)

        for _ in range(3):
            monitor.record_metric(metric())

        assert len(monitor.get_metrics()) == 2

    def test_instances_do_not_share_registries(self):
        """Test two monitors can coexist without duplicate series errors."""
        first = PrometheusPerformanceMonitor()
        second = PrometheusPerformanceMonitor()

        first.record_metric(metric())

        assert second.sample(
            "buildops_commands_total",
            {"command_type": "quote.submit_request", "success": "true"},
        ) is None

    def test_export_text_format(self):
        monitor = PrometheusPerformanceMonitor()
        monitor.record_metric(metric())

        text = monitor.export_metrics()

        assert "# TYPE buildops_commands_total counter" in text
        assert 'command_type="quote.submit_request"' in text
