# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics definitions — single registry for all service metrics.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP metrics ──
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)
HTTP_ERRORS = Counter(
    "http_errors_total",
    "Total HTTP errors",
    ["method", "endpoint", "status"],
)

# ── Rotation metrics ──
ROTATION_ACTIONS = Counter(
    "rotation_actions_total",
    "Assign / rotate / postpone actions recorded",
    ["action"],
)
DUPLICATE_SUBMISSIONS = Counter(
    "duplicate_submissions_total",
    "Repeated submits collapsed by idempotency key",
)
TASKS_CREATED = Counter(
    "sensitive_tasks_created_total",
    "Sensitive tasks registered",
)
TASKS_BY_STATUS = Gauge(
    "sensitive_tasks_total",
    "Sensitive tasks by derived status (refreshed on dashboard reads)",
    ["status"],
)
NOTIFICATIONS_SENT = Counter(
    "rotation_notifications_sent_total",
    "Notifications sent to notification-service",
    ["channel"],
)
