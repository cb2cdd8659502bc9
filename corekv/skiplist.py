"""Arena-backed skip list used as the in-memory table."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from dataclasses import dataclass, field

from .entry import Entry, ValueStruct
from .randutil import rand_n

DEFAULT_MAX_LEVEL = 20
OFFSET_SIZE = 4
NODE_ALIGN = 7
# Size of a node with every level present: score, value, key offset/size, height, links.
MAX_NODE_SIZE = 8 + 8 + 4 + 2 + 2 + DEFAULT_MAX_LEVEL * OFFSET_SIZE
_MAX_GROWTH = 1 << 30


class Arena:
    """A growable byte buffer holding keys and encoded values."""

    def __init__(self, capacity: int) -> None:
        self._buf = bytearray(capacity)
        # Offset 0 is reserved to mean "nothing".
        self._used = 1
        self._lock = threading.Lock()

    def allocate(self, size: int) -> int:
        """Reserve ``size`` bytes and return their offset, growing as needed."""
        with self._lock:
            offset = self._used + size
            self._used = offset
            while offset > len(self._buf) - MAX_NODE_SIZE:
                grow = max(min(len(self._buf), _MAX_GROWTH), size, 1)
                self._buf.extend(bytes(grow))
            return offset - size

    def _put_node(self, height: int) -> int:
        unused = (DEFAULT_MAX_LEVEL - height) * OFFSET_SIZE
        offset = self.allocate(MAX_NODE_SIZE - unused + NODE_ALIGN)
        return (offset + NODE_ALIGN) & ~NODE_ALIGN

    def put_key(self, key: bytes) -> int:
        offset = self.allocate(len(key))
        self._buf[offset:offset + len(key)] = key
        return offset

    def put_value(self, value: ValueStruct) -> int:
        data = value.encode()
        offset = self.allocate(len(data))
        self._buf[offset:offset + len(data)] = data
        return offset

    def get_key(self, offset: int, size: int) -> bytes:
        return bytes(self._buf[offset:offset + size])

    def get_value(self, offset: int, size: int) -> ValueStruct:
        return ValueStruct.decode(bytes(self._buf[offset:offset + size]))

    def size(self) -> int:
        """Bytes allocated so far."""
        return self._used


@dataclass(eq=False)
class _Element:
    score: float
    key_offset: int
    key_size: int
    value_offset: int
    value_size: int
    levels: list = field(default_factory=list)


def _calc_score(key: bytes) -> float:
    prefix = bytes(key[:8]).ljust(8, b"\0")
    return float(int.from_bytes(prefix, "big"))


class SkipList:
    """A sorted map from keys to values, safe for concurrent use."""

    def __init__(self, arena_size: int, max_level: int = DEFAULT_MAX_LEVEL) -> None:
        if not 1 <= max_level <= DEFAULT_MAX_LEVEL:
            raise ValueError(f"max_level must be between 1 and {DEFAULT_MAX_LEVEL}")
        self._arena = Arena(arena_size)
        self._max_level = max_level
        self._height = 1
        self._lock = threading.Lock()
        self._closed = False
        self._head = self._new_element(b"", ValueStruct(), DEFAULT_MAX_LEVEL)

    def _new_element(self, key: bytes, value: ValueStruct, height: int) -> _Element:
        self._arena._put_node(height)
        key_offset = self._arena.put_key(key)
        value_offset = self._arena.put_value(value)
        return _Element(
            score=_calc_score(key),
            key_offset=key_offset,
            key_size=len(key),
            value_offset=value_offset,
            value_size=value.encoded_size(),
            levels=[None] * height,
        )

    def _key(self, elem: _Element) -> bytes:
        return self._arena.get_key(elem.key_offset, elem.key_size)

    def _compare(self, score: float, key: bytes, elem: _Element) -> int:
        if score == elem.score:
            other = self._key(elem)
            return (key > other) - (key < other)
        return -1 if score < elem.score else 1

    def _path_to(self, key: bytes) -> list[_Element]:
        """Per level, the last element whose key is smaller than ``key``."""
        score = _calc_score(key)
        path = [self._head] * DEFAULT_MAX_LEVEL
        node = self._head
        for level in reversed(range(self._height)):
            nxt = node.levels[level]
            while nxt is not None and self._compare(score, key, nxt) > 0:
                node = nxt
                nxt = node.levels[level]
            path[level] = node
        return path

    def _seek_ge(self, key: bytes) -> _Element | None:
        return self._path_to(key)[0].levels[0]

    def _entry(self, elem: _Element, key: bytes | None = None) -> Entry:
        vs = self._arena.get_value(elem.value_offset, elem.value_size)
        return Entry(
            key=self._key(elem) if key is None else key,
            value=vs.value,
            meta=vs.meta,
            expires_at=vs.expires_at,
        )

    def _rand_level(self) -> int:
        level = 1
        while level < self._max_level and rand_n(1000) % 2 != 0:
            level += 1
        return level

    def add(self, entry: Entry) -> None:
        """Insert ``entry``, replacing the value of an existing equal key."""
        key = bytes(entry.key)
        value = ValueStruct(meta=entry.meta, value=bytes(entry.value), expires_at=entry.expires_at)
        with self._lock:
            path = self._path_to(key)
            candidate = path[0].levels[0]
            if candidate is not None and self._compare(_calc_score(key), key, candidate) == 0:
                candidate.value_offset = self._arena.put_value(value)
                candidate.value_size = value.encoded_size()
                return
            height = self._rand_level()
            elem = self._new_element(key, value, height)
            for level, prev in enumerate(path[:height]):
                elem.levels[level] = prev.levels[level]
                prev.levels[level] = elem
            self._height = max(self._height, height)

    def search(self, key: bytes) -> Entry | None:
        """Return the entry stored under ``key``, or None."""
        key = bytes(key)
        with self._lock:
            elem = self._seek_ge(key)
            if elem is None or self._compare(_calc_score(key), key, elem) != 0:
                return None
            return self._entry(elem, key)

    def size(self) -> int:
        """Bytes used in the arena."""
        return self._arena.size()

    @property
    def closed(self) -> bool:
        """Whether :meth:`close` has been called."""
        return self._closed

    def close(self) -> None:
        """Mark the list as closed; its contents stay readable."""
        with self._lock:
            self._closed = True

    def iterator(self) -> SkipListIterator:
        return SkipListIterator(self)

    def __iter__(self) -> Iterator[Entry]:
        it = self.iterator()
        it.rewind()
        while it.valid():
            yield it.item()
            it.next()


class SkipListIterator:
    """Cursor over a skip list in key order; invalid until rewound or seeked."""

    def __init__(self, skiplist: SkipList) -> None:
        self._list = skiplist
        self._elem: _Element | None = None

    def _require_valid(self) -> _Element:
        if self._elem is None:
            raise RuntimeError("iterator is not positioned on an element")
        return self._elem

    def next(self) -> None:
        self._elem = self._require_valid().levels[0]

    def valid(self) -> bool:
        return self._elem is not None

    def rewind(self) -> None:
        self._elem = self._list._head.levels[0]

    def item(self) -> Entry:
        return self._list._entry(self._require_valid())

    def seek(self, key: bytes) -> None:
        """Move to the first element whose key is not smaller than ``key``."""
        with self._list._lock:
            self._elem = self._list._seek_ge(bytes(key))

    def close(self) -> None:
        self._elem = None