"""
Archive writer — creates an archive and appends container records.

Record layout::

    keyLength:>i  keyBytes  valueLength:>q  valueBytes

The file is created with mode 0640 and chmodded on the open descriptor
before the first byte is written, so the creating process's umask never
widens or narrows it. Every archive starts with VERSION and
APPLICATION_OWNER records.
"""

from __future__ import annotations

import io
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO

from logarchive.archive import _wire
from logarchive.archive.collector import CollectionResult, ContainerLogCollector
from logarchive.archive.key import ContainerLogKey
from logarchive.core.constants import (
    APPLICATION_OWNER_KEY,
    ARCHIVE_DIR_MODE,
    ARCHIVE_FILE_MODE,
    ARCHIVE_FORMAT_VERSION,
    COPY_CHUNK_BYTES,
    SPOOL_MAX_BYTES,
    TEXT_ENCODING,
    VERSION_KEY,
)
from logarchive.core.exceptions import (
    ArchiveCreationError,
    ArchiveWriteError,
    WriterMisuseError,
)

logger = logging.getLogger(__name__)


class ArchiveWriter:
    """
    Single-writer, append-only archive output.

    Lifecycle::

        with ArchiveWriter.open(path, "alice") as writer:
            writer.append(ContainerLogKey(cid), collector)

    Not safe to share between threads; concurrent aggregation runs must
    write to distinct archives.
    """

    def __init__(self, path: Path, fh: BinaryIO, identity: str) -> None:
        self.path = path
        self.identity = identity
        self._fh: BinaryIO | None = fh

    @classmethod
    def open(cls, destination: str | Path, identity: str) -> ArchiveWriter:
        """Create (or truncate) ``destination`` and write the archive preamble."""
        path = Path(destination)
        try:
            path.parent.mkdir(mode=ARCHIVE_DIR_MODE, parents=True, exist_ok=True)
            fd = os.open(path, os.O_WRONLY | os.O_CREAT, ARCHIVE_FILE_MODE)
        except OSError as exc:
            raise ArchiveCreationError(f"Cannot create archive {path}: {exc}") from exc

        try:
            os.fchmod(fd, ARCHIVE_FILE_MODE)
        except OSError as exc:
            os.close(fd)
            raise ArchiveCreationError(
                f"Cannot set mode {ARCHIVE_FILE_MODE:o} on archive {path}: {exc}"
            ) from exc

        # Existing content is discarded only once the mode is in place
        try:
            os.ftruncate(fd, 0)
        except OSError as exc:
            os.close(fd)
            raise ArchiveCreationError(f"Cannot truncate archive {path}: {exc}") from exc

        writer = cls(path, os.fdopen(fd, "wb"), identity)
        try:
            writer._write_metadata()
        except ArchiveWriteError as exc:
            raise ArchiveCreationError(f"Cannot write archive header to {path}: {exc}") from exc
        logger.info("Created log archive %s for %s", path, identity)
        return writer

    @property
    def closed(self) -> bool:
        return self._fh is None

    def _write_metadata(self) -> None:
        self._write_record(
            VERSION_KEY.encode(TEXT_ENCODING), _wire.INT.pack(ARCHIVE_FORMAT_VERSION)
        )
        self._write_record(
            APPLICATION_OWNER_KEY.encode(TEXT_ENCODING), self.identity.encode(TEXT_ENCODING)
        )

    def _write_record(self, key: bytes, value: bytes) -> None:
        self._write_framed(key, io.BytesIO(value), len(value))

    def _write_framed(self, key: bytes, value: BinaryIO, value_length: int) -> None:
        """Write one record; a failure part-way closes the writer."""
        fh = self._require_open()
        try:
            _wire.write_prefixed(fh, key)
            _wire.write_long(fh, value_length)
            shutil.copyfileobj(value, fh, COPY_CHUNK_BYTES)
        except OSError as exc:
            self._abandon()
            raise ArchiveWriteError(
                f"Writing a record to {self.path} failed; the archive ends in a partial "
                f"record and the writer is closed: {exc}"
            ) from exc

    def _abandon(self) -> None:
        fh, self._fh = self._fh, None
        if fh is None:
            return
        try:
            fh.close()
        except OSError as exc:
            logger.warning("Error closing abandoned archive %s: %s", self.path, exc)

    def _require_open(self) -> BinaryIO:
        if self._fh is None:
            raise WriterMisuseError(f"Archive writer for {self.path} is closed")
        return self._fh

    def append(self, key: ContainerLogKey, collector: ContainerLogCollector) -> CollectionResult:
        """Collect ``collector``'s files and append them as one record."""
        self._require_open()
        key_bytes = key.to_bytes()
        with tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_BYTES) as spool:
            result = collector.produce(spool)
            value_length = spool.tell()
            spool.seek(0)
            self._write_framed(key_bytes, spool, value_length)
        logger.info(
            "Appended %s to %s (%d bytes, %d files)",
            key,
            self.path,
            value_length,
            len(result.included),
        )
        return result

    def close(self) -> None:
        """Flush and release the file. Safe to call more than once."""
        fh, self._fh = self._fh, None
        if fh is not None:
            fh.close()

    def __enter__(self) -> ArchiveWriter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
