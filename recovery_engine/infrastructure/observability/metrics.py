"""Prometheus metrics for scoring, allocation and case workflow monitoring"""

from prometheus_client import Counter, Histogram

# Scoring metrics
cases_scored_counter = Counter(
    "recovery_cases_scored_total",
    "Cases run through the scorer",
    ["sla_breach_risk"],  # LOW | HIGH
)

# Allocation metrics
allocation_counter = Counter(
    "recovery_allocations_total",
    "Cases assigned to partners",
    ["mode", "segment"],  # auto | manual | batch ; High Value | Standard | n/a
)

allocation_failures_counter = Counter(
    "recovery_allocation_failures_total",
    "Allocation attempts rejected by the domain",
    ["reason"],
)

status_transition_counter = Counter(
    "recovery_status_transitions_total",
    "Manual case status changes",
    ["status"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_scoring(sla_breach_risk: str) -> None:
    cases_scored_counter.labels(sla_breach_risk=sla_breach_risk).inc()


def record_allocation(mode: str, segment: str = "n/a", count: int = 1) -> None:
    """Record allocation metrics by mode and value segment"""
    if count:
        allocation_counter.labels(mode=mode, segment=segment).inc(count)
