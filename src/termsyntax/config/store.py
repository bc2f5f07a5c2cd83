"""Process-wide key/value store for resolved configuration.

Values are keyed by ``(owner, scope, key)``. The unscoped entry
(``scope=None``) holds the global value of a key; a scoped lookup falls back
to it when the scope has no value of its own.
"""

from __future__ import annotations

import threading
from collections.abc import Hashable
from typing import Any, Protocol

StoreKey = tuple[Hashable, Hashable, Hashable]


class ConfigStore(Protocol):
    """Interface for configuration storage.

    Entries are addressed as ``(owner, scope, key)``; the methods take the
    scope as a trailing keyword, so ``get(owner, scope, key, default)`` is
    spelled ``get(owner, key, default, scope=scope)``.

    Backends must ensure:
    - Reads never block on writers.
    - Writes are last-write-wins per key.
    - ``increment`` is atomic per key.
    """

    def get(self, owner: Hashable, key: Hashable, default: Any = None, scope: Hashable = None) -> Any: ...

    def put(self, owner: Hashable, key: Hashable, value: Any, scope: Hashable = None) -> None: ...

    def delete(self, owner: Hashable, key: Hashable, scope: Hashable = None) -> None: ...

    def increment(self, owner: Hashable, key: Hashable, delta: int = 1, scope: Hashable = None) -> int: ...


class MemoryConfigStore(ConfigStore):
    """In-memory ConfigStore backed by a dict.

    Single dict reads and writes are atomic in CPython, so only
    :meth:`increment` takes the lock.
    """

    def __init__(self) -> None:
        self._values: dict[StoreKey, Any] = {}
        self._lock = threading.RLock()

    def get(self, owner: Hashable, key: Hashable, default: Any = None, scope: Hashable = None) -> Any:
        """Get a value, falling back to the unscoped value, then to *default*."""
        if scope is not None:
            try:
                return self._values[(owner, scope, key)]
            except KeyError:
                pass
        return self._values.get((owner, None, key), default)

    def put(self, owner: Hashable, key: Hashable, value: Any, scope: Hashable = None) -> None:
        self._values[(owner, scope, key)] = value

    def delete(self, owner: Hashable, key: Hashable, scope: Hashable = None) -> None:
        self._values.pop((owner, scope, key), None)

    def increment(self, owner: Hashable, key: Hashable, delta: int = 1, scope: Hashable = None) -> int:
        """Atomically add *delta* to a counter and return the new value.

        A missing counter starts at zero; no fallback to the unscoped value.

        Raises:
            TypeError: If the stored value is not an integer
        """
        store_key = (owner, scope, key)
        with self._lock:
            current = self._values.get(store_key, 0)
            if isinstance(current, bool) or not isinstance(current, int):
                raise TypeError(f"Counter {key!r} holds a non-integer value: {current!r}")
            current += delta
            self._values[store_key] = current
            return current

    def items(self, owner: Hashable, scope: Hashable = None) -> dict[Hashable, Any]:
        """Snapshot of the values of *owner* stored exactly under *scope*."""
        return {k: v for (o, s, k), v in list(self._values.items()) if o == owner and s == scope}

    def clear(self) -> None:
        with self._lock:
            self._values.clear()


# Shared store used when callers don't pass their own
default_store = MemoryConfigStore()
