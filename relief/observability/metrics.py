"""
Metrics definitions for Insta-Relief.

This module defines Prometheus metrics for monitoring
the alert ingestion and notification pipeline.
"""

from prometheus_client import Counter, Histogram, Gauge

# 카운터 메트릭
alerts_fetched = Counter(
    "alerts_fetched_total",
    "Number of alerts returned by the weather feed"
)

alerts_duplicate = Counter(
    "alerts_duplicate_total",
    "Number of alerts skipped because a processed marker already existed"
)

alerts_processed = Counter(
    "alerts_processed_total",
    "Number of newly processed alerts",
    ["severity"]
)

notifications = Counter(
    "notifications_total",
    "Per-user notification outcomes",
    ["result"]
)

payouts = Counter(
    "payouts_total",
    "Number of balance credits applied by the dispatcher"
)

# 히스토그램 메트릭
ingestion_seconds = Histogram(
    "ingestion_duration_seconds",
    "Time spent in one ingestion run",
    buckets=[0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0]
)

# 게이지 메트릭
users_total = Gauge(
    "users_total",
    "Number of registered users"
)
