"""
Prometheus metrics module for Roombook.

Exposes service operation timings recorded by @measure_operation plus a
few booking-domain counters.
"""

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Custom registry to avoid conflicts with default process metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "roombook_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "roombook_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "roombook_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

booking_conflicts_total = Counter(
    "roombook_booking_conflicts_total",
    "Reservation writes rejected because the slot was taken",
    ["source"],  # precheck | constraint
    registry=REGISTRY,
)

reservations_swept_total = Counter(
    "roombook_reservations_swept_total",
    "Reservations transitioned to passed by the sweep",
    registry=REGISTRY,
)

notifications_total = Counter(
    "roombook_notifications_total",
    "Notification delivery outcomes",
    ["kind", "status"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

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
            service: Service name (e.g., 'BookingService')
            operation: Operation/method name (e.g., 'create_reservation')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(duration)
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def inc_booking_conflict(source: str) -> None:
        booking_conflicts_total.labels(source=source).inc()

    @staticmethod
    def inc_reservations_swept(count: int) -> None:
        if count > 0:
            reservations_swept_total.inc(count)

    @staticmethod
    def record_notification(kind: str, status: str) -> None:
        notifications_total.labels(kind=kind, status=status).inc()

    @staticmethod
    def get_metrics() -> bytes:
        return generate_latest(REGISTRY)

    @staticmethod
    def get_content_type() -> str:
        return CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
