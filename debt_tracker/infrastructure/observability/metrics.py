"""Prometheus metrics for payment reconciliation, remote sync and data quality"""

from prometheus_client import Counter, Histogram

from debt_tracker.domain.diagnostics import DiagnosticEvent, EventBus, diagnostics

# Payment metrics
payment_outcome_counter = Counter(
    "payment_outcome_total",
    "Payment reconciliation outcomes",
    ["outcome"],  # verified | insufficient_funds | overpayment | verification_mismatch | ...
)

verification_attempts_histogram = Histogram(
    "payment_verification_attempts",
    "Snapshot reads needed to verify a payment",
    buckets=[1, 2],
)

# Remote store metrics
mutation_latency_histogram = Histogram(
    "mutation_submit_latency_seconds",
    "Time to hand a mutation to the spreadsheet endpoint",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

snapshot_fetch_failures_counter = Counter(
    "snapshot_fetch_failures_total",
    "Failed snapshot reads from the spreadsheet endpoint",
)

# Data quality
status_correction_counter = Counter(
    "expense_status_corrections_total",
    "Pending expenses whose stored status disagreed with their balance",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_payment(outcome: str, attempts: int = 0) -> None:
    """Record one finished reconciliation; attempts counts verification reads"""
    payment_outcome_counter.labels(outcome=outcome).inc()
    if attempts:
        verification_attempts_histogram.observe(attempts)


def _count_diagnostic(event: DiagnosticEvent) -> None:
    if event.name == "expense.status_corrected":
        status_correction_counter.inc()


_attached_buses = set()


def attach_metrics_sink(bus: EventBus = diagnostics) -> None:
    """Count data-quality diagnostics; safe to call more than once"""
    if id(bus) in _attached_buses:
        return
    bus.subscribe(_count_diagnostic)
    _attached_buses.add(id(bus))
