"""Prometheus metrics for parking payments and lookups."""

from prometheus_client import Counter, Histogram, CollectorRegistry, generate_latest

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

REGISTRATIONS_CREATED = Counter(
    "parking_registrations_created_total",
    "Total number of parking registrations created",
    ["duration_type"],
    registry=REGISTRY,
)

PAYMENTS_CONFIRMED = Counter(
    "parking_payments_confirmed_total",
    "Total number of registrations transitioned to paid",
    registry=REGISTRY,
)

PAYMENT_INTENTS = Counter(
    "parking_payment_intents_total",
    "Payment intents requested, by processor",
    ["processor"],
    registry=REGISTRY,
)

# Status checks by verdict type (staff, paid, expired, not_found)
STATUS_CHECKS = Counter(
    "parking_status_checks_total",
    "Total number of license plate status checks",
    ["verdict"],
    registry=REGISTRY,
)

RATE_CATALOG_FALLBACKS = Counter(
    "parking_rate_catalog_fallbacks_total",
    "Times the rate catalog served built-in defaults in degraded mode",
    registry=REGISTRY,
)

# Row store call latency (in seconds)
STORE_LATENCY = Histogram(
    "parking_store_latency_seconds",
    "Time taken by row store calls",
    ["operation"],
    buckets=(0.05, 0.1, 0.25, 0.5, 0.75, 1.0, 2.0, 5.0, 10.0),
    registry=REGISTRY,
)

STORE_ERRORS = Counter(
    "parking_store_errors_total",
    "Failed row store calls",
    ["operation"],
    registry=REGISTRY,
)


def record_registration_created(duration_type: str) -> None:
    """Count a newly created registration."""
    REGISTRATIONS_CREATED.labels(duration_type=duration_type).inc()


def record_payment_confirmed() -> None:
    PAYMENTS_CONFIRMED.inc()


def record_payment_intent(processor: str) -> None:
    PAYMENT_INTENTS.labels(processor=processor).inc()


def record_status_check(verdict: str) -> None:
    """Count a status check by its verdict type."""
    STATUS_CHECKS.labels(verdict=verdict).inc()


def record_rate_fallback() -> None:
    RATE_CATALOG_FALLBACKS.inc()


def record_store_latency(operation: str, latency_seconds: float) -> None:
    """Record row store call latency."""
    STORE_LATENCY.labels(operation=operation).observe(latency_seconds)


def record_store_error(operation: str) -> None:
    STORE_ERRORS.labels(operation=operation).inc()


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest(REGISTRY)
