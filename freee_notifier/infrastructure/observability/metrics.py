"""Prometheus metrics for report generation, freee fetches and LINE delivery"""

from prometheus_client import Counter, Histogram

# Report metrics
report_counter = Counter(
    "freee_notifier_reports_total",
    "Daily reports generated",
    ["outcome"],  # success | failure
)

flagged_deals_histogram = Histogram(
    "freee_notifier_flagged_deals",
    "Deals missing a required receipt per report",
    buckets=[0, 1, 5, 10, 25, 50, 100],
)

period_fallback_counter = Counter(
    "freee_notifier_period_fallbacks_total",
    "Trial balance requests retried against the previous fiscal year",
)

# freee API metrics
freee_fetch_failures_counter = Counter(
    "freee_fetch_failures_total",
    "Failed freee API calls",
    ["resource"],  # trial_pl | deals | wallet_txns
)

# LINE API metrics
line_push_latency_histogram = Histogram(
    "line_push_latency_seconds",
    "LINE Messaging API response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

line_failure_counter = Counter(
    "line_failures_total",
    "Failed LINE message deliveries",
)

# Broadcast metrics
broadcast_recipient_counter = Counter(
    "freee_notifier_broadcast_recipients_total",
    "Scheduled broadcast outcome per recipient",
    ["outcome"],  # delivered | failed
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_report(success: bool, flagged_deals: int = 0) -> None:
    """Record report generation outcome and how many deals were flagged"""
    report_counter.labels(outcome="success" if success else "failure").inc()
    if success:
        flagged_deals_histogram.observe(flagged_deals)
