"""A W-TinyLFU style cache: window LRU, segmented LRU and frequency-based admission."""

from __future__ import annotations

import hashlib
import threading
from typing import Any

from ..keys import mem_hash
from .doorkeeper import new_bloom_filter
from .lru import SegmentedLRU, Stage, StoreItem, WindowLRU
from .sketch import CountMinSketch

_MASK32 = 0xFFFFFFFF
_MASK64 = (1 << 64) - 1
_LRU_PCT = 1


def _conflict_hash(data: bytes) -> int:
    return int.from_bytes(hashlib.blake2b(data, digest_size=8).digest(), "little")


def _key_to_hash(key: Any) -> tuple[int, int]:
    if key is None:
        return 0, 0
    if isinstance(key, bool):
        raise TypeError("Key type not supported")
    if isinstance(key, int):
        return key & _MASK64, 0
    if isinstance(key, str):
        data = key.encode("utf-8")
    elif isinstance(key, (bytes, bytearray, memoryview)):
        data = bytes(key)
    else:
        raise TypeError("Key type not supported")
    return mem_hash(data), _conflict_hash(data)


class Cache:
    """Bounded cache that admits evicted window items only if they are used more."""

    def __init__(self, size: int, reset_threshold: int = 0) -> None:
        """``reset_threshold``, when positive, ages frequencies after that many gets."""
        if size <= 0:
            raise ValueError(f"cache size must be positive, got {size}")
        lru_size = max(_LRU_PCT * size // 100, 1)
        slru_size = max(int(size * ((100 - _LRU_PCT) / 100.0)), 1)
        stage_one = max(int(0.2 * slru_size), 1)
        self._data: dict[int, StoreItem] = {}
        self._window = WindowLRU(lru_size, self._data)
        self._slru = SegmentedLRU(self._data, stage_one, slru_size - stage_one)
        self._door = new_bloom_filter(size, 0.01)
        self._sketch = CountMinSketch(size)
        self._lock = threading.Lock()
        self._gets = 0
        self._reset_threshold = reset_threshold

    def set(self, key: Any, value: Any) -> bool:
        """Store ``value`` under ``key``; it may later lose admission to hotter keys."""
        key_hash, conflict = _key_to_hash(key)
        with self._lock:
            existing = self._data.get(key_hash)
            if existing is not None:
                existing.conflict = conflict
                existing.value = value
                self._touch(existing)
                return True

            item = StoreItem(key=key_hash, conflict=conflict, value=value)
            evicted = self._window.add(item)
            if evicted is None:
                return True

            victim = self._slru.victim()
            if victim is None:
                self._slru.add(evicted)
                return True

            if not self._door.allow(key_hash & _MASK32):
                return True

            if self._sketch.estimate(evicted.key) < self._sketch.estimate(victim.key):
                return True

            self._slru.add(evicted)
            return True

    def _touch(self, item: StoreItem) -> None:
        if item.stage == Stage.WINDOW:
            self._window.get(item)
        else:
            self._slru.get(item)

    def get(self, key: Any) -> tuple[Any, bool]:
        """Return ``(value, True)`` on a hit, ``(None, False)`` on a miss."""
        key_hash, conflict = _key_to_hash(key)
        with self._lock:
            self._gets += 1
            if self._reset_threshold > 0 and self._gets >= self._reset_threshold:
                self._sketch.reset()
                self._door.reset()
                self._gets = 0

            item = self._data.get(key_hash)
            if item is None or item.conflict != conflict:
                self._sketch.increment(key_hash)
                return None, False

            self._sketch.increment(item.key)
            self._touch(item)
            return item.value, True

    def delete(self, key: Any) -> tuple[Any, bool]:
        """Remove ``key``; return ``(old_value, True)`` or ``(None, False)``."""
        key_hash, conflict = _key_to_hash(key)
        with self._lock:
            item = self._data.get(key_hash)
            if item is None:
                return None, False
            if conflict != 0 and conflict != item.conflict:
                return None, False
            del self._data[key_hash]
            if item.stage == Stage.WINDOW:
                self._window.remove(item)
            else:
                self._slru.remove(item)
            return item.value, True