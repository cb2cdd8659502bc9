"""Low-level binary helpers: CRC-32C, fixed-width integers and varints."""

from __future__ import annotations

import struct

_CASTAGNOLI = 0x82F63B78
_MASK32 = 0xFFFFFFFF
_MAX_VARINT_LEN = 10


def _make_table() -> tuple[int, ...]:
    table = []
    for i in range(256):
        c = i
        for _ in range(8):
            c = (c >> 1) ^ _CASTAGNOLI if c & 1 else c >> 1
        table.append(c)
    return tuple(table)


_TABLE = _make_table()


def crc32c(data: bytes, crc: int = 0) -> int:
    """Return the CRC-32C (Castagnoli) of ``data``, continuing from ``crc``."""
    crc ^= _MASK32
    for byte in data:
        crc = _TABLE[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return crc ^ _MASK32


def bytes_to_u32(b: bytes) -> int:
    """Read a big-endian uint32 from the first four bytes."""
    return struct.unpack_from(">I", b)[0]


def bytes_to_u64(b: bytes) -> int:
    """Read a big-endian uint64 from the first eight bytes."""
    return struct.unpack_from(">Q", b)[0]


def u32_to_bytes(v: int) -> bytes:
    """Encode ``v`` as a big-endian uint32."""
    return struct.pack(">I", v)


def u64_to_bytes(v: int) -> bytes:
    """Encode ``v`` as a big-endian uint64."""
    return struct.pack(">Q", v)


def u32_slice_to_bytes(values: list[int]) -> bytes:
    """Pack a list of uint32 values, little-endian, four bytes each."""
    return struct.pack(f"<{len(values)}I", *values)


def bytes_to_u32_slice(b: bytes) -> list[int]:
    """Unpack little-endian uint32 values; trailing bytes are ignored."""
    count = len(b) // 4
    return list(struct.unpack_from(f"<{count}I", b))


def encode_uvarint(value: int) -> bytes:
    """Encode an unsigned 64-bit integer as a varint."""
    if value < 0 or value >> 64:
        raise ValueError(f"uvarint out of range: {value}")
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def decode_uvarint(buf: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a varint at ``offset``; return the value and the bytes consumed."""
    result = 0
    shift = 0
    for count, byte in enumerate(buf[offset:offset + _MAX_VARINT_LEN], start=1):
        if byte < 0x80:
            if count == _MAX_VARINT_LEN and byte > 1:
                raise ValueError("uvarint overflows 64 bits")
            return result | (byte << shift), count
        result |= (byte & 0x7F) << shift
        shift += 7
    if len(buf) - offset >= _MAX_VARINT_LEN:
        raise ValueError("uvarint overflows 64 bits")
    raise ValueError("uvarint is truncated")


def size_varint(value: int) -> int:
    """Number of bytes the varint encoding of ``value`` takes."""
    n = 1
    value >>= 7
    while value:
        n += 1
        value >>= 7
    return n