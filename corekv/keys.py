"""Versioned keys, file naming, directory syncing and checksums."""

from __future__ import annotations

import os
import re
from typing import BinaryIO

from .codec import bytes_to_u64, crc32c
from .const import DATASYNC_FILE_FLAG
from .errors import ChecksumMismatchError, cond_panic, log_error

_MAX_U64 = (1 << 64) - 1
_TS_SIZE = 8
_SST_SUFFIX = ".sst"
_NUMBER = re.compile(r"[+-]?[0-9]+")


def parse_key(key: bytes) -> bytes:
    """Strip the 8-byte timestamp suffix from ``key``."""
    if len(key) < _TS_SIZE:
        return key
    return key[:-_TS_SIZE]


def parse_ts(key: bytes) -> int:
    """Return the timestamp stored in the last 8 bytes of ``key``."""
    if len(key) <= _TS_SIZE:
        return 0
    return _MAX_U64 - bytes_to_u64(key[-_TS_SIZE:])


def same_key(src: bytes, dst: bytes) -> bool:
    """Whether two versioned keys name the same user key."""
    if len(src) != len(dst):
        return False
    return parse_key(src) == parse_key(dst)


def key_with_ts(key: bytes, ts: int) -> bytes:
    """Append ``ts`` to ``key`` so that newer versions sort first."""
    return bytes(key) + (_MAX_U64 - ts).to_bytes(_TS_SIZE, "big")


def mem_hash(data: bytes | str) -> int:
    """Fast in-memory 64-bit hash; its seed changes with every process."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hash(bytes(data)) & _MAX_U64


def file_id(name: str) -> int:
    """Return the id of an SSTable file name, or 0 if it is not one."""
    name = os.path.basename(name)
    if not name.endswith(_SST_SUFFIX):
        return 0
    stem = name[: -len(_SST_SUFFIX)]
    if not _NUMBER.fullmatch(stem):
        log_error(ValueError(f"invalid sstable file name: {name!r}"))
        return 0
    return int(stem) & _MAX_U64


def vlog_file_path(dir_path: str, fid: int) -> str:
    """Path of the value log file with id ``fid``."""
    return f"{dir_path}{os.sep}{fid:05d}.vlog"


def sstable_file_name(dir_path: str, fid: int) -> str:
    """Path of the SSTable file with id ``fid``."""
    return os.path.join(dir_path, f"{fid:05d}{_SST_SUFFIX}")


def create_synced_file(filename: str, sync: bool) -> BinaryIO:
    """Create a new file for reading and writing; fail if it already exists."""
    flags = os.O_RDWR | os.O_CREAT | os.O_EXCL
    if sync:
        flags |= DATASYNC_FILE_FLAG
    fd = os.open(filename, flags, 0o600)
    return os.fdopen(fd, "r+b")


def sync_dir(path: str) -> None:
    """Flush a directory so that files created or removed in it are durable."""
    fd = os.open(path, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def load_id_map(dir_path: str) -> set[int]:
    """Ids of all SSTable files directly inside ``dir_path``."""
    try:
        with os.scandir(dir_path) as entries:
            return {fid for entry in entries if not entry.is_dir() and (fid := file_id(entry.name))}
    except OSError as exc:
        log_error(exc)
        return set()


def compare_keys(key1: bytes, key2: bytes) -> int:
    """Compare versioned keys: user key first, then the timestamp suffix."""
    cond_panic(
        len(key1) <= _TS_SIZE or len(key2) <= _TS_SIZE,
        ValueError(f"{key1!r},{key2!r} < 8"),
    )
    user1, user2 = key1[:-_TS_SIZE], key2[:-_TS_SIZE]
    if user1 != user2:
        return -1 if user1 < user2 else 1
    ts1, ts2 = key1[-_TS_SIZE:], key2[-_TS_SIZE:]
    return (ts1 > ts2) - (ts1 < ts2)


def verify_checksum(data: bytes, expected: bytes) -> None:
    """Raise ChecksumMismatchError unless ``expected`` is the checksum of ``data``."""
    actual = crc32c(data)
    expected_value = bytes_to_u64(expected)
    if actual != expected_value:
        raise ChecksumMismatchError(
            f"checksum mismatch: actual: {actual}, expected: {expected_value}"
        )


def calculate_checksum(data: bytes) -> int:
    """CRC-32C of ``data``, widened to an unsigned 64-bit value."""
    return crc32c(data)