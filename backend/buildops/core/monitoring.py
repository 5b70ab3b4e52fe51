"""
Prometheus export for command performance.

The performance middleware records one ``PerformanceMetric`` per dispatch.
``PrometheusPerformanceMonitor`` keeps the in-memory history used by the
dashboard and mirrors every record into Prometheus collectors registered on
its own ``CollectorRegistry``, so separate app instances (and tests) never
collide on metric names.
"""

from typing import Any

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from buildops.core.cqrs.middleware import InMemoryPerformanceMonitor, PerformanceMetric
from buildops.core.logging import get_logger

logger = get_logger(__name__)

METRIC_NAMESPACE = "buildops"

# Seconds; command handlers are expected to finish well under a second.
DURATION_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class PrometheusPerformanceMonitor(InMemoryPerformanceMonitor):
    """
    Performance monitor backed by Prometheus collectors.

    Exported series:
        buildops_command_duration_seconds{command_type, success}
        buildops_commands_total{command_type, success}
        buildops_slow_commands_total{command_type}
    """

    def __init__(
        self,
        max_metrics: int = 1000,
        registry: CollectorRegistry | None = None,
        namespace: str = METRIC_NAMESPACE,
    ):
        super().__init__(max_metrics=max_metrics)
        self.registry = registry or CollectorRegistry()

        self.command_duration = Histogram(
            f"{namespace}_command_duration_seconds",
            "Command dispatch duration in seconds",
            labelnames=["command_type", "success"],
            buckets=DURATION_BUCKETS,
            registry=self.registry,
        )
        self.commands_total = Counter(
            f"{namespace}_commands_total",
            "Commands dispatched",
            labelnames=["command_type", "success"],
            registry=self.registry,
        )
        self.slow_commands_total = Counter(
            f"{namespace}_slow_commands_total",
            "Commands that exceeded the slow-command threshold",
            labelnames=["command_type"],
            registry=self.registry,
        )

        logger.debug("Prometheus performance monitor initialized", namespace=namespace)

    def record_metric(self, metric: PerformanceMetric) -> None:
        super().record_metric(metric)

        success = "true" if metric.success else "false"
        self.command_duration.labels(
            command_type=metric.command_type, success=success
        ).observe(metric.duration_ms / 1000)
        self.commands_total.labels(command_type=metric.command_type, success=success).inc()
        if metric.slow:
            self.slow_commands_total.labels(command_type=metric.command_type).inc()

    def export_metrics(self) -> str:
        """All series in the Prometheus text exposition format."""
        return generate_latest(self.registry).decode("utf-8")

    def sample(self, name: str, labels: dict[str, str] | None = None) -> Any:
        """Current value of one sample, or None when it was never recorded."""
        return self.registry.get_sample_value(name, labels or {})


__all__ = ["DURATION_BUCKETS", "PrometheusPerformanceMonitor"]
