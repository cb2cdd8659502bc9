"""Count-min sketch with 4-bit counters for estimating access frequency."""

from __future__ import annotations

import random
import time

CM_DEPTH = 4
_MASK64 = (1 << 64) - 1
_MAX_COUNT = 15


def next_power_of_two(x: int) -> int:
    """Smallest power of two not less than ``x``."""
    if x < 1:
        raise ValueError(f"x must be positive, got {x}")
    return 1 << (x - 1).bit_length()


class CountMinSketch:
    """Approximate frequency counts, saturating at 15 per counter."""

    def __init__(self, num_counters: int, seed: int | None = None) -> None:
        if num_counters <= 0:
            raise ValueError("cmSketch: invalid numCounters")
        num_counters = max(next_power_of_two(num_counters), 2)
        self._mask = num_counters - 1
        rng = random.Random(time.time_ns() if seed is None else seed)
        self._seeds = [rng.getrandbits(64) for _ in range(CM_DEPTH)]
        # Two 4-bit counters per byte.
        self._rows = [bytearray(num_counters // 2) for _ in range(CM_DEPTH)]

    def _slots(self, hashed: int):
        hashed &= _MASK64
        for row, seed in zip(self._rows, self._seeds):
            n = (hashed ^ seed) & self._mask
            yield row, n >> 1, (n & 1) * 4

    def increment(self, hashed: int) -> None:
        for row, index, shift in self._slots(hashed):
            if (row[index] >> shift) & 0x0F < _MAX_COUNT:
                row[index] += 1 << shift

    def estimate(self, hashed: int) -> int:
        return min((row[index] >> shift) & 0x0F for row, index, shift in self._slots(hashed))

    def reset(self) -> None:
        """Halve every counter."""
        for row in self._rows:
            row[:] = bytes((b >> 1) & 0x77 for b in row)

    def clear(self) -> None:
        """Zero every counter."""
        for row in self._rows:
            row[:] = bytes(len(row))