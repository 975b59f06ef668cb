"""
Monitoring and observability for the content importer.

Usage:
    from content_importer.monitoring import track_normalization

    with track_normalization("mastodon"):
        item = normalizer.normalize(raw)
"""

from content_importer.monitoring.metrics import (
    ITEMS_NORMALIZED_TOTAL,
    NORMALIZATION_DURATION,
    ADAPTER_OPERATIONS,
    ADAPTER_LATENCY,
    HTTP_REQUESTS_TOTAL,
    track_normalization,
    track_adapter_operation,
    record_http_request,
    render_metrics,
)

__all__ = [
    # Prometheus metrics
    "ITEMS_NORMALIZED_TOTAL",
    "NORMALIZATION_DURATION",
    "ADAPTER_OPERATIONS",
    "ADAPTER_LATENCY",
    "HTTP_REQUESTS_TOTAL",
    # Context managers
    "track_normalization",
    "track_adapter_operation",
    # Helper functions
    "record_http_request",
    "render_metrics",
]
