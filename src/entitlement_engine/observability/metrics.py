"""
Prometheus metrics for the entitlement engine

Counters and histograms live in a private registry so the host
application decides whether and where to expose them. Recording a metric
never changes a computed result.
"""
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


REGISTRY = CollectorRegistry()


# =======================
# VALIDATION METRICS
# =======================

records_validated_total = Counter(
    name="entitlement_records_validated_total",
    documentation="Total number of provisioning records validated",
    labelnames=["status"],  # PASS, FAIL
    registry=REGISTRY,
)

rule_results_total = Counter(
    name="entitlement_rule_results_total",
    documentation="Validation rule outcomes",
    labelnames=["rule_id", "status"],
    registry=REGISTRY,
)

rule_errors_total = Counter(
    name="entitlement_rule_errors_total",
    documentation="Rule evaluations that raised and were converted to PASS",
    labelnames=["rule_id"],
    registry=REGISTRY,
)

# =======================
# ANALYSIS METRICS
# =======================

expirations_detected_total = Counter(
    name="entitlement_expirations_detected_total",
    documentation="Expiring entitlements emitted by the expiration analyzer",
    labelnames=["extended"],  # true, false
    registry=REGISTRY,
)

aggregated_products_total = Counter(
    name="entitlement_aggregated_products_total",
    documentation="Active products produced by the customer product aggregator",
    labelnames=["category"],  # models, apps, data
    registry=REGISTRY,
)

operation_duration_seconds = Histogram(
    name="entitlement_operation_duration_seconds",
    documentation="Time spent in engine operations",
    labelnames=["operation"],  # validate, analyze_expirations, aggregate
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=REGISTRY,
)


class MetricsCollector:
    """
    Convenience wrapper around the module-level metrics
    """

    @staticmethod
    def record_validation(status: str) -> None:
        records_validated_total.labels(status=status).inc()

    @staticmethod
    def record_rule_result(rule_id: str, status: str) -> None:
        rule_results_total.labels(rule_id=rule_id, status=status).inc()

    @staticmethod
    def record_rule_error(rule_id: str) -> None:
        rule_errors_total.labels(rule_id=rule_id).inc()

    @staticmethod
    def record_expiration(is_extended: bool) -> None:
        expirations_detected_total.labels(extended=str(is_extended).lower()).inc()

    @staticmethod
    def record_aggregated_products(category: str, count: int) -> None:
        if count:
            aggregated_products_total.labels(category=category).inc(count)

    @staticmethod
    def observe_duration(operation: str, duration_seconds: float) -> None:
        operation_duration_seconds.labels(operation=operation).observe(duration_seconds)


def get_metrics() -> bytes:
    """
    Get current metrics in Prometheus text format

    Returns:
        Metrics data as bytes
    """
    return generate_latest(REGISTRY)
