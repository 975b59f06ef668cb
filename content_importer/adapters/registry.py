"""Adapter registry and adapter class catalog.

AdapterRegistry tracks adapter instances by id for one composition root
(the container, a CLI run, a test). The module-level catalog maps adapter
ids to classes through the ``register_adapter_class`` decorator so
adapters can be built by id.
"""

import threading
from typing import Any, Optional

import structlog

from content_importer.adapters.base import Adapter, AuthType
from content_importer.core.events import (
    ADAPTER_REGISTERED,
    ADAPTER_UNREGISTERED,
    EventEmitter,
)
from content_importer.core.exceptions import AdapterNotFoundError, DuplicateAdapterError

logger = structlog.get_logger(__name__)


# =============================================================================
# Class Catalog
# =============================================================================

_adapter_classes: dict[str, type[Adapter]] = {}


def register_adapter_class(adapter_id: str):
    """Decorator to register an adapter class under an id.

    Args:
        adapter_id: Id the class is looked up by.

    Returns:
        Decorator function that registers the class.

    Example:
        @register_adapter_class("mastodon")
        class MastodonAdapter(BaseAdapter):
            ...
    """

    def decorator(cls: type[Adapter]) -> type[Adapter]:
        _adapter_classes[adapter_id] = cls
        return cls

    return decorator


def get_adapter_class(adapter_id: str) -> type[Adapter]:
    """Look up a registered adapter class.

    Raises:
        AdapterNotFoundError: If no class is registered under the id.
    """
    if adapter_id not in _adapter_classes:
        raise AdapterNotFoundError(adapter_id, f"Unknown adapter class: {adapter_id}")
    return _adapter_classes[adapter_id]


def list_adapter_classes() -> list[str]:
    """Ids of all registered adapter classes."""
    return list(_adapter_classes.keys())


# =============================================================================
# Registry
# =============================================================================


class AdapterRegistry:
    """Adapter instances keyed by id.

    Mutations are serialized by a lock; reads return snapshots.

    Args:
        events: Emitter notified with ``(adapter, adapter_id)`` on
            registration and unregistration.
    """

    def __init__(self, events: Optional[EventEmitter] = None):
        self._adapters: dict[str, Adapter] = {}
        self._lock = threading.RLock()
        self.events = events or EventEmitter()

    def register(self, adapter: Adapter) -> None:
        """Add an adapter.

        Raises:
            DuplicateAdapterError: If the id is already registered.
        """
        adapter_id = adapter.get_id()
        with self._lock:
            if adapter_id in self._adapters:
                raise DuplicateAdapterError(
                    adapter_id,
                    f'Adapter with ID "{adapter_id}" is already registered.',
                )
            self._adapters[adapter_id] = adapter

        logger.info("adapter_registered", adapter_id=adapter_id)
        self.events.emit(ADAPTER_REGISTERED, adapter, adapter_id)

    def unregister(self, adapter_id: str) -> bool:
        """Remove an adapter.

        Returns:
            True if an adapter was removed.
        """
        with self._lock:
            adapter = self._adapters.pop(adapter_id, None)

        if adapter is None:
            return False

        logger.info("adapter_unregistered", adapter_id=adapter_id)
        self.events.emit(ADAPTER_UNREGISTERED, adapter, adapter_id)
        return True

    def get(self, adapter_id: str) -> Optional[Adapter]:
        with self._lock:
            return self._adapters.get(adapter_id)

    def require(self, adapter_id: str) -> Adapter:
        """Like ``get`` but raises AdapterNotFoundError for unknown ids."""
        adapter = self.get(adapter_id)
        if adapter is None:
            raise AdapterNotFoundError(adapter_id, "Adapter is not registered.")
        return adapter

    def has(self, adapter_id: str) -> bool:
        with self._lock:
            return adapter_id in self._adapters

    def get_all(self) -> dict[str, Adapter]:
        with self._lock:
            return dict(self._adapters)

    def get_ids(self) -> list[str]:
        with self._lock:
            return list(self._adapters.keys())

    def get_authenticated(self) -> dict[str, Adapter]:
        return {
            adapter_id: adapter
            for adapter_id, adapter in self.get_all().items()
            if adapter.is_authenticated()
        }

    def get_by_auth_type(self, auth_type: AuthType | str) -> dict[str, Adapter]:
        auth_type = AuthType(auth_type)
        return {
            adapter_id: adapter
            for adapter_id, adapter in self.get_all().items()
            if adapter.get_auth_type() == auth_type
        }

    def count(self) -> int:
        with self._lock:
            return len(self._adapters)

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, adapter_id: object) -> bool:
        with self._lock:
            return adapter_id in self._adapters

    def to_array(self) -> dict[str, dict[str, Any]]:
        """Describe every adapter for listings."""
        return {
            adapter_id: {
                "id": adapter.get_id(),
                "name": adapter.get_name(),
                "description": adapter.get_description(),
                "icon": adapter.get_icon(),
                "auth_type": AuthType(adapter.get_auth_type()).value,
                "is_authenticated": adapter.is_authenticated(),
                "content_types": [
                    content_type.value for content_type in adapter.get_supported_content_types()
                ],
            }
            for adapter_id, adapter in self.get_all().items()
        }

    def reset(self) -> None:
        """Remove every adapter without emitting events."""
        with self._lock:
            self._adapters.clear()
        logger.debug("adapter_registry_reset")
