"""A thread-safe map keyed by the hash of its keys."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from .keys import mem_hash

_MASK64 = (1 << 64) - 1


class CoreMap:
    """Map whose keys are reduced to 64-bit hashes; equal hashes share a slot."""

    def __init__(self) -> None:
        self._items: dict[int, Any] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key_to_hash(key: Any) -> int:
        if key is None:
            return 0
        if isinstance(key, bool):
            raise TypeError("Key:[bool] type not supported")
        if isinstance(key, int):
            return key & _MASK64
        if isinstance(key, (bytes, bytearray, memoryview, str)):
            return mem_hash(key if isinstance(key, str) else bytes(key))
        raise TypeError(f"Key:[{type(key).__name__}] type not supported")

    def get(self, key: Any) -> tuple[Any, bool]:
        """Return ``(value, True)`` if present, else ``(None, False)``."""
        hashed = self._key_to_hash(key)
        with self._lock:
            if hashed in self._items:
                return self._items[hashed], True
            return None, False

    def set(self, key: Any, value: Any) -> None:
        hashed = self._key_to_hash(key)
        with self._lock:
            self._items[hashed] = value

    def delete(self, key: Any) -> None:
        hashed = self._key_to_hash(key)
        with self._lock:
            self._items.pop(hashed, None)

    def range(self, fn: Callable[[int, Any], bool]) -> None:
        """Call ``fn(hashed_key, value)`` for each item until it returns False."""
        with self._lock:
            snapshot = list(self._items.items())
        for hashed, value in snapshot:
            if not fn(hashed, value):
                break