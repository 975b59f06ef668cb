"""Normalization pipeline for transforming fetched payloads.

Registers normalizers by adapter id and applies them to raw payloads to
produce NormalizedItem instances, one at a time or as a batch on a bounded
worker pool.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable

import structlog

from content_importer.core.exceptions import ImporterError, NormalizerNotFoundError
from content_importer.monitoring.metrics import track_normalization
from content_importer.normalizer.base import ContentNormalizer
from content_importer.normalizer.item import NormalizedItem

logger = structlog.get_logger(__name__)


class NormalizationPipeline:
    """Dispatches raw payloads to the normalizer registered for their adapter.

    Args:
        max_workers: Upper bound on threads used by ``normalize_batch``.
    """

    def __init__(self, max_workers: int = 4):
        self._normalizers: dict[str, ContentNormalizer] = {}
        self.max_workers = max_workers

    def register_normalizer(self, normalizer: ContentNormalizer) -> None:
        """Register a normalizer under its adapter id, replacing any previous one."""
        adapter_id = normalizer.get_adapter_id()
        self._normalizers[adapter_id] = normalizer
        logger.debug("normalizer_registered", adapter_id=adapter_id)

    def get_normalizer(self, adapter_id: str) -> ContentNormalizer:
        """Look up the normalizer for an adapter.

        Raises:
            NormalizerNotFoundError: If none is registered.
        """
        normalizer = self._normalizers.get(adapter_id)
        if normalizer is None:
            raise NormalizerNotFoundError(adapter_id)
        return normalizer

    def has_normalizer(self, adapter_id: str) -> bool:
        return adapter_id in self._normalizers

    def list_adapters(self) -> list[str]:
        """Adapter ids with a registered normalizer."""
        return list(self._normalizers.keys())

    def normalize(self, adapter_id: str, raw_item: dict[str, Any]) -> NormalizedItem:
        """Normalize one payload.

        Args:
            adapter_id: Adapter the payload came from.
            raw_item: Platform payload.

        Returns:
            The normalized item.

        Raises:
            NormalizerNotFoundError: If no normalizer handles the adapter.
            ImporterError: Whatever the normalizer raises for a bad payload.
        """
        normalizer = self.get_normalizer(adapter_id)
        with track_normalization(adapter_id):
            return normalizer.normalize(raw_item)

    def normalize_batch(
        self,
        adapter_id: str,
        raw_items: Iterable[dict[str, Any]],
        skip_errors: bool = False,
    ) -> list[NormalizedItem]:
        """Normalize many payloads concurrently.

        Results keep the input order.

        Args:
            adapter_id: Adapter the payloads came from.
            raw_items: Platform payloads.
            skip_errors: Drop (and log) payloads that fail instead of raising.

        Returns:
            Normalized items in input order.
        """
        self.get_normalizer(adapter_id)
        raw_items = list(raw_items)
        if not raw_items:
            return []

        workers = max(1, min(self.max_workers, len(raw_items)))
        results: list[NormalizedItem] = []
        skipped = 0

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="normalize") as pool:
            futures = [pool.submit(self.normalize, adapter_id, raw) for raw in raw_items]
            for index, future in enumerate(futures):
                try:
                    results.append(future.result())
                except ImporterError as e:
                    if not skip_errors:
                        logger.error(
                            "normalization_failed",
                            adapter_id=adapter_id,
                            index=index,
                            error=str(e),
                            error_type=type(e).__name__,
                        )
                        for pending in futures[index + 1:]:
                            pending.cancel()
                        raise
                    skipped += 1
                    logger.warning(
                        "normalization_skipped",
                        adapter_id=adapter_id,
                        index=index,
                        error=str(e),
                        error_type=type(e).__name__,
                    )

        logger.info(
            "batch_normalized",
            adapter_id=adapter_id,
            total=len(raw_items),
            normalized=len(results),
            skipped=skipped,
        )
        return results
