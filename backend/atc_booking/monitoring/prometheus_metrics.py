"""
Prometheus metrics for the booking service.

Service operation timings are fed by ``BaseService.measure_operation``;
admission outcomes and lock waits are recorded by the admission engine.
"""

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "atc_booking_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "atc_booking_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "atc_booking_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

admission_decisions_total = Counter(
    "atc_booking_admission_decisions_total",
    "Admission engine decisions by operation and outcome",
    ["operation", "outcome"],
    registry=REGISTRY,
)

position_lock_wait_seconds = Histogram(
    "atc_booking_position_lock_wait_seconds",
    "Time spent waiting for the per-position admission lock",
    registry=REGISTRY,
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0),
)

catalog_cache_events_total = Counter(
    "atc_booking_catalog_cache_events_total",
    "Position catalog cache hits, misses and reloads",
    ["event"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin recording facade so callers never touch metric objects directly."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'AdmissionEngine')
            operation: Operation/method name (e.g., 'submit')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_admission(operation: str, outcome: str) -> None:
        """``outcome`` is ``admitted``/``deleted`` or a rejection kind."""
        admission_decisions_total.labels(operation=operation, outcome=outcome).inc()

    @staticmethod
    def record_lock_wait(seconds: float) -> None:
        position_lock_wait_seconds.observe(seconds)

    @staticmethod
    def record_catalog_cache(event: str) -> None:
        catalog_cache_events_total.labels(event=event).inc()

    @staticmethod
    def get_metrics() -> bytes:
        return generate_latest(REGISTRY)

    @staticmethod
    def get_content_type() -> str:
        return str(CONTENT_TYPE_LATEST)


prometheus_metrics = PrometheusMetrics()
