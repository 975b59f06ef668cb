"""Storage collaborators used by adapters.

The host publishing system provides two stores:

- KeyValueStore: persistent options (adapter credentials)
- TransientCache: expiring values (manifests, API lookups)

In-memory implementations back tests and the CLI.
"""

import copy
import threading
import time
from typing import Any, Callable, Protocol


class KeyValueStore(Protocol):
    """Persistent string-keyed store."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> bool: ...

    def delete(self, key: str) -> bool: ...


class TransientCache(Protocol):
    """String-keyed store whose values expire."""

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any, ttl: int) -> bool: ...

    def delete(self, key: str) -> bool: ...


class InMemoryKeyValueStore:
    """Dictionary-backed KeyValueStore.

    Values are deep-copied on the way in and out so callers cannot mutate
    stored state by accident.
    """

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            if key not in self._data:
                return default
            return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> bool:
        with self._lock:
            self._data[key] = copy.deepcopy(value)
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)


class InMemoryCache:
    """Dictionary-backed TransientCache with per-entry expiry.

    Args:
        clock: Monotonic time source, replaceable in tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, tuple[float, Any]] = {}
        self._clock = clock
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        """Return the cached value, or None when absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return copy.deepcopy(value)

    def set(self, key: str, value: Any, ttl: int) -> bool:
        with self._lock:
            self._entries[key] = (self._clock() + ttl, copy.deepcopy(value))
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None
