"""Process-wide random helpers and random test entries."""

from __future__ import annotations

import random
import threading
import time

from .entry import Entry

_rng = random.Random(time.time_ns())
_lock = threading.Lock()

# Includes multi-byte characters; bytes are drawn individually from the encoding.
_ALPHABET = (
    "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "~=+%^*/()[]{}/!@#$?|©®😁😭🐂㎡中文"
).encode("utf-8")

_TWELVE_HOURS_MS = 12 * 3600 * 1000


def _check_positive(n: int) -> None:
    if n <= 0:
        raise ValueError(f"invalid argument: n must be positive, got {n}")


def int63n(n: int) -> int:
    """Random integer in [0, n)."""
    _check_positive(n)
    with _lock:
        return _rng.randrange(n)


def rand_n(n: int) -> int:
    """Random integer in [0, n)."""
    _check_positive(n)
    with _lock:
        return _rng.randrange(n)


def random_float() -> float:
    """Random float in [0.0, 1.0)."""
    with _lock:
        return _rng.random()


def _rand_bytes(length: int) -> bytes:
    with _lock:
        return bytes(_rng.choices(_ALPHABET, k=length))


def build_entry() -> Entry:
    """A random entry with a 24-byte key, a 128-byte value and a 12-hour expiry."""
    key = _rand_bytes(16) + b"12345678"
    value = _rand_bytes(128)
    expires_at = time.time_ns() // 1_000_000 + _TWELVE_HOURS_MS
    return Entry(key=key, value=value, expires_at=expires_at)