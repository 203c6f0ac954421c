"""Prometheus metrics for application flow, report latency, and document storage"""

from prometheus_client import Counter, Histogram

# Lifecycle metrics
application_submitted_counter = Counter(
    "mfi_application_submitted_total",
    "Loan applications accepted",
    ["loan_type"],
)

application_rejected_submission_counter = Counter(
    "mfi_application_invalid_total",
    "Loan application submissions refused by validation",
)

status_transition_counter = Counter(
    "mfi_status_transition_total",
    "Application status changes",
    ["from_status", "to_status"],
)

# Reporting metrics
report_duration_histogram = Histogram(
    "mfi_report_duration_seconds",
    "Report generation time",
    ["report"],  # applications | financial
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

# Document metrics
upload_counter = Counter(
    "mfi_document_upload_total",
    "Uploaded files by outcome",
    ["outcome"],  # stored | rejected
)

file_removal_failure_counter = Counter(
    "mfi_document_file_removal_failures_total",
    "Document deletions whose stored file could not be removed",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transition(previous: str, current: str) -> None:
    """Count a status change; same-status updates are counted too"""
    status_transition_counter.labels(from_status=previous, to_status=current).inc()


def record_upload(stored: int, rejected: int) -> None:
    if stored:
        upload_counter.labels(outcome="stored").inc(stored)
    if rejected:
        upload_counter.labels(outcome="rejected").inc(rejected)
