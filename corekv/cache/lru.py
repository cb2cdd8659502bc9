"""Window LRU and segmented LRU lists sharing one index of stored items."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class Stage(IntEnum):
    """Which list an item currently lives in."""

    WINDOW = 0
    PROBATION = 1
    PROTECTED = 2


@dataclass(eq=False)
class StoreItem:
    """A cached value with its key hash and conflict hash."""

    key: int
    conflict: int = 0
    value: Any = None
    stage: Stage = Stage.WINDOW


def _forget(data: dict[int, StoreItem], item: StoreItem) -> None:
    if data.get(item.key) is item:
        del data[item.key]


class WindowLRU:
    """Small LRU that admits every new item; the oldest is pushed out."""

    def __init__(self, capacity: int, data: dict[int, StoreItem]) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._data = data
        # Most recently used at the end.
        self._items: OrderedDict[int, StoreItem] = OrderedDict()

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: StoreItem) -> StoreItem | None:
        """Insert ``item``; return the item it pushed out, if any."""
        item.stage = Stage.WINDOW
        evicted = None
        if len(self._items) >= self._capacity and item.key not in self._items:
            _, evicted = self._items.popitem(last=False)
            _forget(self._data, evicted)
        self._items[item.key] = item
        self._items.move_to_end(item.key)
        self._data[item.key] = item
        return evicted

    def get(self, item: StoreItem) -> None:
        """Mark ``item`` as most recently used."""
        self._items.move_to_end(item.key)

    def remove(self, item: StoreItem) -> None:
        self._items.pop(item.key, None)


class SegmentedLRU:
    """Two-segment LRU: a probation list and a protected list for repeat hits."""

    def __init__(self, data: dict[int, StoreItem], stage_one_cap: int, stage_two_cap: int) -> None:
        if stage_one_cap < 1 or stage_two_cap < 0:
            raise ValueError("stage one needs room for an item and stage two cannot be negative")
        self._data = data
        self._one_cap = stage_one_cap
        self._two_cap = stage_two_cap
        self._one: OrderedDict[int, StoreItem] = OrderedDict()
        self._two: OrderedDict[int, StoreItem] = OrderedDict()

    def __len__(self) -> int:
        return len(self._one) + len(self._two)

    def _full(self) -> bool:
        return len(self) >= self._one_cap + self._two_cap

    def add(self, item: StoreItem) -> None:
        """Insert ``item`` into probation, evicting its oldest item when full."""
        item.stage = Stage.PROBATION
        if (len(self._one) >= self._one_cap and self._full()) and item.key not in self._one:
            _, evicted = self._one.popitem(last=False)
            _forget(self._data, evicted)
        self._one[item.key] = item
        self._one.move_to_end(item.key)
        self._data[item.key] = item

    def get(self, item: StoreItem) -> None:
        """Record a hit: protected items move up, probation items get promoted."""
        if item.stage == Stage.PROTECTED:
            self._two.move_to_end(item.key)
            return
        if self._two_cap == 0:
            self._one.move_to_end(item.key)
            return
        del self._one[item.key]
        if len(self._two) >= self._two_cap:
            _, demoted = self._two.popitem(last=False)
            demoted.stage = Stage.PROBATION
            self._one[demoted.key] = demoted
        item.stage = Stage.PROTECTED
        self._two[item.key] = item

    def victim(self) -> StoreItem | None:
        """The item that the next insertion would evict, or None if there is room."""
        if not self._full():
            return None
        return next(iter(self._one.values()))

    def remove(self, item: StoreItem) -> None:
        self._one.pop(item.key, None)
        self._two.pop(item.key, None)