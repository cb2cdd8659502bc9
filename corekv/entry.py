"""Entries, value structs, value pointers and their on-disk encodings."""

from __future__ import annotations

import struct
import time
from dataclasses import dataclass
from typing import BinaryIO

from .codec import crc32c, decode_uvarint, encode_uvarint, size_varint, u32_to_bytes
from .const import BIT_DELETE, BIT_VALUE_POINTER, CRC_SIZE, MAX_HEADER_SIZE
from .errors import TruncateError

_MAX_VARINT_LEN = 10
_VALUE_PTR = struct.Struct("<III")


@dataclass
class ValueStruct:
    """A value with its meta byte and expiry, as stored in a memtable."""

    meta: int = 0
    value: bytes = b""
    expires_at: int = 0

    def encoded_size(self) -> int:
        return len(self.value) + 1 + size_varint(self.expires_at)

    def encode(self) -> bytes:
        return bytes([self.meta]) + encode_uvarint(self.expires_at) + bytes(self.value)

    @classmethod
    def decode(cls, buf: bytes) -> ValueStruct:
        if not buf:
            raise ValueError("cannot decode a value from an empty buffer")
        expires_at, n = decode_uvarint(buf, 1)
        return cls(meta=buf[0], value=bytes(buf[1 + n:]), expires_at=expires_at)


@dataclass
class Entry:
    """A key/value record as written by clients and replayed from logs."""

    key: bytes = b""
    value: bytes = b""
    expires_at: int = 0
    meta: int = 0
    version: int = 0
    offset: int = 0
    hlen: int = 0
    val_threshold: int = 0

    def with_ttl(self, seconds: float) -> Entry:
        """Set the expiry to ``seconds`` from now, in Unix seconds."""
        self.expires_at = int(time.time() + seconds)
        return self

    def encoded_size(self) -> int:
        return len(self.value) + size_varint(self.meta) + size_varint(self.expires_at)

    def estimate_size(self, threshold: int) -> int:
        if len(self.value) < threshold:
            return len(self.key) + len(self.value) + 1
        # 12 bytes for the value pointer, 1 for meta.
        return len(self.key) + 12 + 1

    def is_zero(self) -> bool:
        return len(self.key) == 0


class HashReader:
    """Wraps a binary stream, counting and checksumming every byte read."""

    def __init__(self, reader: BinaryIO) -> None:
        self._reader = reader
        self._crc = 0
        self.bytes_read = 0

    def read(self, n: int) -> bytes:
        """Read up to ``n`` bytes; an empty result means end of stream."""
        data = self._reader.read(n)
        self.bytes_read += len(data)
        self._crc = crc32c(data, self._crc)
        return data

    def read_byte(self) -> int:
        data = self.read(1)
        if not data:
            raise EOFError("end of stream")
        return data[0]

    def sum32(self) -> int:
        return self._crc


def _read_uvarint(reader: HashReader) -> int:
    """Read a varint; EOFError at a clean end, TruncateError mid-varint."""
    result = 0
    shift = 0
    for index in range(_MAX_VARINT_LEN):
        try:
            byte = reader.read_byte()
        except EOFError:
            if index == 0:
                raise
            raise TruncateError("unexpected end of stream inside varint") from None
        if byte < 0x80:
            if index == _MAX_VARINT_LEN - 1 and byte > 1:
                raise ValueError("uvarint overflows 64 bits")
            return result | (byte << shift)
        result |= (byte & 0x7F) << shift
        shift += 7
    raise ValueError("uvarint overflows 64 bits")


@dataclass
class Header:
    """Header written before each record in the value log."""

    klen: int = 0
    vlen: int = 0
    expires_at: int = 0
    meta: int = 0

    def encode(self) -> bytes:
        return (
            bytes([self.meta])
            + encode_uvarint(self.klen)
            + encode_uvarint(self.vlen)
            + encode_uvarint(self.expires_at)
        )

    @classmethod
    def decode(cls, buf: bytes) -> tuple[Header, int]:
        """Decode a header from ``buf``; return it and the bytes it took."""
        if not buf:
            raise ValueError("cannot decode a header from an empty buffer")
        index = 1
        klen, n = decode_uvarint(buf, index)
        index += n
        vlen, n = decode_uvarint(buf, index)
        index += n
        expires_at, n = decode_uvarint(buf, index)
        return cls(klen=klen, vlen=vlen, expires_at=expires_at, meta=buf[0]), index + n

    @classmethod
    def decode_from(cls, reader: HashReader) -> tuple[Header, int]:
        """Read a header from ``reader``; return it and the reader's byte count."""
        meta = reader.read_byte()
        klen = _read_uvarint(reader)
        vlen = _read_uvarint(reader)
        expires_at = _read_uvarint(reader)
        return cls(klen=klen, vlen=vlen, expires_at=expires_at, meta=meta), reader.bytes_read


@dataclass
class ValuePtr:
    """Location of a value inside a value log file."""

    length: int = 0
    offset: int = 0
    fid: int = 0

    def less(self, other: ValuePtr | None) -> bool:
        if other is None:
            return False
        return (self.fid, self.offset, self.length) < (other.fid, other.offset, other.length)

    def is_zero(self) -> bool:
        return self.fid == 0 and self.offset == 0 and self.length == 0

    def encode(self) -> bytes:
        return _VALUE_PTR.pack(self.length, self.offset, self.fid)

    @classmethod
    def decode(cls, buf: bytes) -> ValuePtr:
        if len(buf) < _VALUE_PTR.size:
            raise ValueError(f"value pointer needs {_VALUE_PTR.size} bytes, got {len(buf)}")
        length, offset, fid = _VALUE_PTR.unpack_from(buf)
        return cls(length=length, offset=offset, fid=fid)


@dataclass
class WalHeader:
    """Header written before each record in the write-ahead log."""

    key_len: int = 0
    value_len: int = 0
    meta: int = 0
    expires_at: int = 0

    def encode(self) -> bytes:
        return (
            encode_uvarint(self.key_len)
            + encode_uvarint(self.value_len)
            + encode_uvarint(self.meta)
            + encode_uvarint(self.expires_at)
        )

    @classmethod
    def decode(cls, reader: HashReader) -> tuple[WalHeader, int]:
        key_len = _read_uvarint(reader)
        value_len = _read_uvarint(reader)
        meta = _read_uvarint(reader) & 0xFF
        expires_at = _read_uvarint(reader)
        header = cls(key_len=key_len, value_len=value_len, meta=meta, expires_at=expires_at)
        return header, reader.bytes_read


def is_value_ptr(entry: Entry) -> bool:
    return entry.meta & BIT_VALUE_POINTER > 0


def is_deleted_or_expired(meta: int, expires_at: int) -> bool:
    if meta & BIT_DELETE:
        return True
    if expires_at == 0:
        return False
    return expires_at <= int(time.time())


def discard_entry(entry: Entry, vs: Entry) -> bool:
    """Whether the log record ``entry`` is obsolete given the current value ``vs``."""
    if is_deleted_or_expired(vs.meta, vs.expires_at):
        return True
    # The value lives in the LSM tree itself, so the log copy is garbage.
    return vs.meta & BIT_VALUE_POINTER == 0


def wal_codec(entry: Entry) -> bytes:
    """Encode ``entry`` as a WAL record: header | key | value | crc32."""
    header = WalHeader(
        key_len=len(entry.key),
        value_len=len(entry.value),
        expires_at=entry.expires_at,
    )
    body = header.encode() + bytes(entry.key) + bytes(entry.value)
    return body + u32_to_bytes(crc32c(body))


def estimate_wal_codec_size(entry: Entry) -> int:
    """Upper estimate of the WAL record size for ``entry``."""
    return len(entry.key) + len(entry.value) + 8 + CRC_SIZE + MAX_HEADER_SIZE