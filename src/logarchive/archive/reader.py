"""
Archive reader — forward-only, single-pass access to archive records.

Usage::

    with ArchiveReader.open(path) as reader:
        key = ContainerLogKey()
        while (value := reader.next(key)) is not None:
            render(value, sys.stdout)

or, equivalently, ``for key, value in reader: ...``.

Each value stream is only valid until the next call to next(); unread bytes
of an abandoned value are skipped. Restarting requires reopening.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from logarchive.archive import _wire
from logarchive.archive.key import ContainerLogKey
from logarchive.core.constants import (
    APPLICATION_OWNER_KEY,
    COPY_CHUNK_BYTES,
    RESERVED_KEYS,
    TEXT_ENCODING,
    VERSION_KEY,
)
from logarchive.core.exceptions import CorruptArchiveError, PrematureEndOfRecordError

logger = logging.getLogger(__name__)


class ValueStream(io.RawIOBase):
    """A read-only view of one record's ``length`` value bytes."""

    def __init__(self, source: BinaryIO, length: int) -> None:
        super().__init__()
        self._source = source
        self.length = length
        self._remaining = length

    @property
    def remaining(self) -> int:
        return self._remaining

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:  # type: ignore[override]
        if self._remaining <= 0:
            return 0
        view = memoryview(b)[: min(len(b), self._remaining)]
        n = self._source.readinto(view)  # type: ignore[attr-defined]
        if not n:
            raise PrematureEndOfRecordError(
                f"Archive ended with {self._remaining} of {self.length} value bytes unread"
            )
        self._remaining -= n
        return n

    def drain(self) -> None:
        """Consume whatever the caller left unread."""
        buf = bytearray(COPY_CHUNK_BYTES)
        while self._remaining > 0:
            self.readinto(buf)


class ArchiveReader:
    """Forward-only reader over an archive written by ArchiveWriter."""

    def __init__(self, path: Path, fh: BinaryIO) -> None:
        self.path = path
        self._fh: BinaryIO | None = fh
        self._current: ValueStream | None = None
        self.version: int | None = None
        self.application_owner: str | None = None

    @classmethod
    def open(cls, source: str | Path) -> ArchiveReader:
        path = Path(source)
        reader = cls(path, open(path, "rb"))
        try:
            reader._read_metadata()
        except BaseException:
            reader.close()
            raise
        logger.debug(
            "Opened archive %s (format %s, owner %s)",
            path,
            reader.version,
            reader.application_owner,
        )
        return reader

    def _read_metadata(self) -> None:
        """Consume the leading reserved records, leaving the first container record unread."""
        fh = self._require_open()
        while True:
            start = fh.tell()
            header = self._read_header()
            if header is None:
                return
            key, length = header
            if key not in RESERVED_KEYS:
                fh.seek(start)
                return
            value = _wire.read_exact(fh, length)
            if key == VERSION_KEY:
                if len(value) != _wire.INT.size:
                    raise CorruptArchiveError(f"Malformed {VERSION_KEY} record in {self.path}")
                self.version = _wire.INT.unpack(value)[0]
            elif key == APPLICATION_OWNER_KEY:
                self.application_owner = value.decode(TEXT_ENCODING, errors="replace")

    def _require_open(self) -> BinaryIO:
        if self._fh is None:
            raise ValueError(f"Archive reader for {self.path} is closed")
        return self._fh

    def _read_header(self) -> tuple[str, int] | None:
        """Read ``(key, valueLength)``; None at a clean end of file."""
        fh = self._require_open()
        first = fh.read(_wire.INT.size)
        if not first:
            return None
        if len(first) < _wire.INT.size:
            first += _wire.read_exact(fh, _wire.INT.size - len(first))
        key_length = _wire.INT.unpack(first)[0]
        if key_length < 0:
            raise CorruptArchiveError(f"Negative key length {key_length} in {self.path}")
        try:
            key = _wire.read_exact(fh, key_length).decode(TEXT_ENCODING)
        except UnicodeDecodeError as exc:
            raise CorruptArchiveError(f"Undecodable record key in {self.path}: {exc}") from exc
        value_length = _wire.read_long(fh)
        if value_length < 0:
            raise CorruptArchiveError(f"Negative value length {value_length} in {self.path}")
        return key, value_length

    def next(self, out_key: ContainerLogKey) -> ValueStream | None:
        """
        Advance to the next container record.

        Loads the record's key into ``out_key`` and returns a stream over its
        value bytes, or None once the archive is exhausted.
        """
        if self._current is not None:
            self._current.drain()
            self._current = None

        while True:
            header = self._read_header()
            if header is None:
                return None
            key, length = header
            if key in RESERVED_KEYS:
                # Preamble records are consumed at open; a later one is skipped
                ValueStream(self._require_open(), length).drain()
                continue
            out_key.load(key.encode(TEXT_ENCODING))
            self._current = ValueStream(self._require_open(), length)
            return self._current

    def __iter__(self) -> Iterator[tuple[ContainerLogKey, ValueStream]]:
        while True:
            key = ContainerLogKey()
            value = self.next(key)
            if value is None:
                return
            yield key, value

    def close(self) -> None:
        fh, self._fh = self._fh, None
        self._current = None
        if fh is not None:
            fh.close()

    def __enter__(self) -> ArchiveReader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
