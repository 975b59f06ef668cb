"""
Prometheus metrics for content importer observability.

Provides standardized metrics for adapter calls, HTTP traffic and
normalization throughput.

Usage:
    from content_importer.monitoring.metrics import track_normalization

    with track_normalization("twitter_archive"):
        item = normalizer.normalize(raw)

    # Or manually
    ITEMS_NORMALIZED_TOTAL.labels(adapter="mastodon", status="success").inc()
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Histogram, generate_latest


# =============================================================================
# Metric Definitions
# =============================================================================

# Normalization metrics
ITEMS_NORMALIZED_TOTAL = Counter(
    "content_importer_items_normalized_total",
    "Total number of raw items passed through normalization",
    ["adapter", "status"],
)

NORMALIZATION_DURATION = Histogram(
    "content_importer_normalization_duration_seconds",
    "Duration of single-item normalization in seconds",
    ["adapter"],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

# Adapter metrics
ADAPTER_OPERATIONS = Counter(
    "content_importer_adapter_operations_total",
    "Total adapter operations",
    ["adapter", "operation", "status"],
)

ADAPTER_LATENCY = Histogram(
    "content_importer_adapter_latency_seconds",
    "Latency of adapter operations",
    ["adapter", "operation"],
    buckets=[0.01, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)

# HTTP metrics
HTTP_REQUESTS_TOTAL = Counter(
    "content_importer_http_requests_total",
    "Total outbound HTTP requests",
    ["method", "status_code"],
)


# =============================================================================
# Tracking Context Managers
# =============================================================================


@contextmanager
def track_normalization(adapter: str) -> Generator[None, None, None]:
    """
    Context manager to track normalization duration and outcome.

    Usage:
        with track_normalization("medium"):
            item = normalizer.normalize(raw)
    """
    start_time = time.perf_counter()
    status = "success"
    try:
        yield
    except Exception:
        status = "error"
        raise
    finally:
        duration = time.perf_counter() - start_time
        NORMALIZATION_DURATION.labels(adapter=adapter).observe(duration)
        ITEMS_NORMALIZED_TOTAL.labels(adapter=adapter, status=status).inc()


@contextmanager
def track_adapter_operation(
    adapter: str,
    operation: str,
) -> Generator[None, None, None]:
    """
    Context manager to track adapter operations.

    Usage:
        with track_adapter_operation("mastodon", "fetch_manifest"):
            manifest = self._build_manifest()
    """
    start_time = time.perf_counter()
    status = "success"
    try:
        yield
    except Exception:
        status = "error"
        raise
    finally:
        duration = time.perf_counter() - start_time
        ADAPTER_OPERATIONS.labels(
            adapter=adapter,
            operation=operation,
            status=status,
        ).inc()
        ADAPTER_LATENCY.labels(
            adapter=adapter,
            operation=operation,
        ).observe(duration)


def record_http_request(method: str, status_code: int | str) -> None:
    """Record an outbound HTTP request outcome."""
    HTTP_REQUESTS_TOTAL.labels(method=method.upper(), status_code=str(status_code)).inc()


def render_metrics() -> bytes:
    """Render all metrics in the Prometheus text exposition format."""
    return generate_latest()
