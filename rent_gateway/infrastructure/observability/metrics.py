"""Prometheus metrics for rent scheduling, collection status and store health"""

from prometheus_client import Counter, Histogram

# Scheduling metrics
periods_generated_counter = Counter(
    "rent_periods_generated_total",
    "Billing periods generated for leases",
    ["pro_rated"],  # true | false
)

# Status metrics
rent_status_counter = Counter(
    "rent_status_evaluations_total",
    "Rent status evaluations by outcome",
    ["status"],  # current | overdue
)

payments_recorded_counter = Counter(
    "rent_payments_recorded_total",
    "Payment recording attempts",
    ["outcome"],  # recorded | not_found | already_paid | failed
)

invoices_generated_counter = Counter(
    "rent_invoices_generated_total",
    "Invoice generation attempts",
    ["outcome"],  # issued | not_found
)

# Store health
store_unavailable_counter = Counter(
    "rent_store_unavailable_total",
    "Reads answered with an empty result because the payment store is missing",
    ["operation"],
)

write_failure_counter = Counter(
    "rent_store_write_failures_total",
    "Store writes that failed after retries",
    ["operation"],
)

write_retry_counter = Counter(
    "rent_store_write_retries_total",
    "Transient store write errors",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_periods_generated(periods) -> None:
    """Count generated periods split by pro-rated flag"""
    pro_rated = sum(1 for p in periods if p.is_pro_rated)
    if pro_rated:
        periods_generated_counter.labels(pro_rated="true").inc(pro_rated)
    if len(periods) - pro_rated:
        periods_generated_counter.labels(pro_rated="false").inc(len(periods) - pro_rated)


def record_rent_status(status: str) -> None:
    rent_status_counter.labels(status=status).inc()
