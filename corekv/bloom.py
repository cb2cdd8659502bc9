"""Bloom filters built from precomputed key hashes."""

from __future__ import annotations

import math
import struct
from collections.abc import Iterable

_MASK32 = 0xFFFFFFFF
_SEED = 0xBC9F1D34
_M = 0xC6A4A793
_MAX_PROBES = 30
_MIN_BITS = 64


class Filter(bytes):
    """An encoded set of keys: a bit array followed by one byte holding k."""

    def may_contain_key(self, key: bytes) -> bool:
        return self.may_contain(bloom_hash(key))

    def may_contain(self, h: int) -> bool:
        """Whether a key with hash ``h`` may be in the set; false positives happen."""
        if len(self) < 2:
            return False
        k = self[-1]
        if k > _MAX_PROBES:
            # Reserved for other encodings; treat as a match.
            return True
        n_bits = 8 * (len(self) - 1)
        delta = ((h >> 17) | (h << 15)) & _MASK32
        for _ in range(k):
            bit_pos = h % n_bits
            if not self[bit_pos // 8] & (1 << (bit_pos % 8)):
                return False
            h = (h + delta) & _MASK32
        return True


def bloom_hash(data: bytes) -> int:
    """A Murmur-like 32-bit hash."""
    h = (_SEED ^ (len(data) * _M)) & _MASK32
    full = len(data) - len(data) % 4
    for (word,) in struct.iter_unpack("<I", data[:full]):
        h = ((h + word) * _M) & _MASK32
        h ^= h >> 16
    rest = data[full:]
    if len(rest) == 3:
        h += rest[2] << 16
    if len(rest) >= 2:
        h += rest[1] << 8
    if rest:
        h += rest[0]
        h = (h * _M) & _MASK32
        h ^= h >> 24
    return h & _MASK32


def new_filter(keys: Iterable[int], bits_per_key: int) -> Filter:
    """Build a filter over key hashes with about ``bits_per_key`` bits each."""
    hashes = list(keys)
    bits_per_key = max(bits_per_key, 0)
    # 0.69 is approximately ln(2).
    k = min(max(int(bits_per_key * 0.69), 1), _MAX_PROBES)
    n_bits = max(len(hashes) * bits_per_key, _MIN_BITS)
    n_bytes = (n_bits + 7) // 8
    n_bits = n_bytes * 8
    bits = bytearray(n_bytes + 1)
    for h in hashes:
        delta = ((h >> 17) | (h << 15)) & _MASK32
        for _ in range(k):
            bit_pos = h % n_bits
            bits[bit_pos // 8] |= 1 << (bit_pos % 8)
            h = (h + delta) & _MASK32
    bits[n_bytes] = k
    return Filter(bytes(bits))


def bloom_bits_per_key(num_entries: int, fp: float) -> int:
    """Bits per key needed for false positive rate ``fp``."""
    size = -1 * num_entries * math.log(fp) / math.pow(0.69314718056, 2)
    return int(math.ceil(size / num_entries))