"""Prometheus metrics for monitoring transaction outcomes and optimistic-lock contention"""

from prometheus_client import Counter, Histogram

# Journal metrics
transaction_counter = Counter(
    "atm_transactions_total",
    "Journal entries written, by type and status",
    ["type", "status"],  # WITHDRAWAL | DEPOSIT ; PENDING | SUCCESS | FAILED | DECLINED
)

declined_counter = Counter(
    "atm_declined_total",
    "Initiations rejected by a business rule",
    ["reason"],  # insufficient_funds | daily_limit | inactive_account
)

# Concurrency metrics
version_conflict_counter = Counter(
    "atm_version_conflicts_total",
    "Optimistic version conflicts that triggered a retry",
    ["operation"],
)

retry_exhausted_counter = Counter(
    "atm_retry_exhausted_total",
    "Operations that gave up after exhausting conflict retries",
    ["operation"],
)

# Authentication metrics
authentication_counter = Counter(
    "atm_authentication_total",
    "Authentication attempts",
    ["outcome"],  # success | failure
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transaction(txn_type: str, status: str) -> None:
    """Count a journal write for monitoring settlement and failure rates"""
    transaction_counter.labels(type=txn_type, status=status).inc()
