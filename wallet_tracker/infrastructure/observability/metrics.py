"""Prometheus metrics for cache consistency, ledger calls and budget health"""

from prometheus_client import Counter, Histogram

from wallet_tracker.domain.models import BudgetStatus

# Consistency metrics
aggregate_recompute_counter = Counter(
    "wallet_aggregate_recompute_total",
    "Aggregate recomputations after transaction mutations",
    ["outcome"],  # ok | error
)

safety_net_counter = Counter(
    "wallet_safety_net_total",
    "Safety-net refetch passes per key",
    ["outcome"],  # ok | error
)

mutation_counter = Counter(
    "wallet_transaction_mutation_total",
    "Transaction mutations by operation",
    ["operation"],  # create | update | delete
)

# Ledger metrics
ledger_latency_histogram = Histogram(
    "ledger_request_latency_seconds",
    "Ledger backend response time",
    ["operation"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ledger_failure_counter = Counter(
    "ledger_failures_total",
    "Failed ledger calls",
    ["operation"],
)

# Budget health
budget_status_counter = Counter(
    "wallet_budget_status_total",
    "Budget views rendered by status",
    ["status"],  # ok | warning | over
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_recompute(ok: bool) -> None:
    aggregate_recompute_counter.labels(outcome="ok" if ok else "error").inc()


def record_safety_net(ok: bool) -> None:
    safety_net_counter.labels(outcome="ok" if ok else "error").inc()


def record_budget_status(status: BudgetStatus) -> None:
    """Record budget health distribution for monitoring overspend"""
    budget_status_counter.labels(status=status.value).inc()
