"""A mutable Bloom filter used as the cache's admission doorkeeper."""

from __future__ import annotations

import math

from ..bloom import bloom_hash

__all__ = ["BloomFilter", "new_bloom_filter", "bloom_bits_per_key", "murmur_hash"]

_MASK32 = 0xFFFFFFFF
_MAX_PROBES = 30
_MIN_BITS = 64
_LN2 = 0.69314718056


def murmur_hash(data: bytes) -> int:
    """A Murmur-like 32-bit hash."""
    return bloom_hash(bytes(data))


def bloom_bits_per_key(num_entries: int, fp: float) -> int:
    """Bits per key needed for ``num_entries`` keys at false positive rate ``fp``."""
    size = -1 * float(num_entries) * math.log(fp) / math.pow(_LN2, 2)
    return int(math.ceil(size / float(num_entries)))


class BloomFilter:
    """A Bloom filter that keys can be added to after creation."""

    def __init__(self, num_entries: int, bits_per_key: int) -> None:
        bits_per_key = max(bits_per_key, 0)
        # 0.69 is approximately ln(2).
        k = min(max(int(bits_per_key * 0.69), 1), _MAX_PROBES)
        n_bits = max(num_entries * bits_per_key, _MIN_BITS)
        n_bytes = (n_bits + 7) // 8
        self._bitmap = bytearray(n_bytes + 1)
        self._bitmap[n_bytes] = k
        self._k = k

    @property
    def k(self) -> int:
        """Number of probes per key."""
        return self._k

    def __len__(self) -> int:
        return len(self._bitmap)

    def _probes(self, h: int):
        n_bits = 8 * (len(self._bitmap) - 1)
        h &= _MASK32
        delta = ((h >> 17) | (h << 15)) & _MASK32
        for _ in range(self._k):
            yield h % n_bits
            h = (h + delta) & _MASK32

    def may_contain_key(self, key: bytes) -> bool:
        return self.may_contain(murmur_hash(key))

    def may_contain(self, h: int) -> bool:
        """Whether hash ``h`` may have been inserted; false positives happen."""
        if len(self._bitmap) < 2:
            return False
        if self._k > _MAX_PROBES:
            return True
        return all(self._bitmap[pos // 8] & (1 << (pos % 8)) for pos in self._probes(h))

    def insert_key(self, key: bytes) -> bool:
        return self.insert(murmur_hash(key))

    def insert(self, h: int) -> bool:
        """Record hash ``h`` in the filter."""
        if self._k > _MAX_PROBES:
            return True
        for pos in self._probes(h):
            self._bitmap[pos // 8] |= 1 << (pos % 8)
        return True

    def allow_key(self, key: bytes) -> bool:
        return self.allow(murmur_hash(key))

    def allow(self, h: int) -> bool:
        """Return whether ``h`` was seen before, recording it if it was not."""
        already = self.may_contain(h)
        if not already:
            self.insert(h)
        return already

    def reset(self) -> None:
        """Forget every recorded key."""
        self._bitmap[:] = bytes(len(self._bitmap))


def new_bloom_filter(num_entries: int, false_positive: float) -> BloomFilter:
    """A filter sized for ``num_entries`` keys at the given false positive rate."""
    return BloomFilter(num_entries, bloom_bits_per_key(num_entries, false_positive))