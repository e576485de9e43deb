"""Prometheus exporter helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


recommendation_requests_total = Counter(
    "recommendation_requests_total",
    "Total number of recommendation requests served.",
)

result_cache_lookups_total = Counter(
    "result_cache_lookups_total",
    "Result cache lookups partitioned by outcome.",
    ["outcome"],
)

outfit_generation_seconds = Histogram(
    "outfit_generation_seconds",
    "Time spent running the outfit search engine.",
)

enrichment_jobs_total = Counter(
    "enrichment_jobs_total",
    "Rationale enrichment job transitions partitioned by state.",
    ["state"],
)
