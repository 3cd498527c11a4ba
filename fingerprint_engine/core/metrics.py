"""Prometheus metrics for fingerprint runs."""

from prometheus_client import Counter, Histogram, Info

APP_INFO = Info("fingerprint_engine", "AI visibility fingerprint engine info")
APP_INFO.info({"version": "1.0.0", "name": "fingerprint_engine"})

FINGERPRINT_RUNS = Counter(
    "fingerprint_runs_total",
    "Total fingerprint runs",
    ["status"],
)

PROVIDER_QUERIES = Counter(
    "fingerprint_provider_queries_total",
    "Model queries issued by the orchestrator",
    ["model", "prompt_type", "outcome"],
)

QUERY_DURATION = Histogram(
    "fingerprint_query_duration_seconds",
    "Model query round-trip in seconds (including analysis)",
    ["model"],
    buckets=[0.25, 0.5, 1, 2.5, 5, 10, 30, 60, 120],
)

VISIBILITY_SCORE = Histogram(
    "fingerprint_visibility_score",
    "Distribution of computed visibility scores",
    buckets=[0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100],
)
