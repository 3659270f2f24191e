"""Length-prefix encoding shared by the archive writer, reader and renderer."""

from __future__ import annotations

import struct
from typing import BinaryIO

from logarchive.core.exceptions import CorruptArchiveError, PrematureEndOfRecordError

# Big-endian, two's complement.
INT = struct.Struct(">i")  # key, type-name and diagnostic lengths
LONG = struct.Struct(">q")  # value and content lengths


def write_int(out: BinaryIO, value: int) -> None:
    out.write(INT.pack(value))


def write_long(out: BinaryIO, value: int) -> None:
    out.write(LONG.pack(value))


def write_prefixed(out: BinaryIO, data: bytes) -> None:
    write_int(out, len(data))
    out.write(data)


def read_exact(stream: BinaryIO, n: int) -> bytes:
    """Read exactly ``n`` bytes or raise PrematureEndOfRecordError."""
    chunks: list[bytes] = []
    remaining = n
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            raise PrematureEndOfRecordError(
                f"Expected {n} bytes but the stream ended after {n - remaining}"
            )
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_int(stream: BinaryIO) -> int:
    return INT.unpack(read_exact(stream, INT.size))[0]


def read_long(stream: BinaryIO) -> int:
    return LONG.unpack(read_exact(stream, LONG.size))[0]


def read_length(stream: BinaryIO, what: str) -> int:
    """Read a 4-byte length and reject negatives."""
    n = read_int(stream)
    if n < 0:
        raise CorruptArchiveError(f"Negative {what} length: {n}")
    return n
