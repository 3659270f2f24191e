"""Rendering of archive records as readable text."""

from __future__ import annotations

import codecs
import logging
from typing import BinaryIO, TextIO

from logarchive.archive import _wire
from logarchive.archive.key import ContainerLogKey
from logarchive.archive.reader import ArchiveReader
from logarchive.core.constants import COPY_CHUNK_BYTES, DIAGNOSTIC_MARKER, TEXT_ENCODING
from logarchive.core.exceptions import CorruptArchiveError

logger = logging.getLogger(__name__)


def render(value_stream: BinaryIO, out: TextIO) -> None:
    """
    Write every SubEntry of one record's value to ``out``.

    Each entry renders as::

        \\n\\nLogType:<type>\\nLogLength:<n>\\nLog Contents:\\n<n bytes>

    and each ownership diagnostic as ``\\n<message>\\n``. Returns when the
    value is exhausted at an entry boundary.
    """
    while True:
        first = value_stream.read(_wire.INT.size)
        if not first:
            return
        if len(first) < _wire.INT.size:
            first += _wire.read_exact(value_stream, _wire.INT.size - len(first))
        name_length = _wire.INT.unpack(first)[0]

        if name_length == DIAGNOSTIC_MARKER:
            message = _wire.read_exact(value_stream, _wire.read_length(value_stream, "message"))
            out.write("\n" + message.decode(TEXT_ENCODING, errors="replace") + "\n")
            continue
        if name_length < 0:
            raise CorruptArchiveError(f"Negative log type length: {name_length}")

        log_type = _wire.read_exact(value_stream, name_length).decode(
            TEXT_ENCODING, errors="replace"
        )
        length = _wire.read_long(value_stream)
        if length < 0:
            raise CorruptArchiveError(f"Negative log length {length} for {log_type}")
        out.write(f"\n\nLogType:{log_type}")
        out.write(f"\nLogLength:{length}")
        out.write("\nLog Contents:\n")
        _copy_text(value_stream, out, length)


def _copy_text(src: BinaryIO, out: TextIO, length: int) -> None:
    decoder = codecs.getincrementaldecoder(TEXT_ENCODING)(errors="replace")
    remaining = length
    while remaining > 0:
        chunk = _wire.read_exact(src, min(COPY_CHUNK_BYTES, remaining))
        remaining -= len(chunk)
        out.write(decoder.decode(chunk))
    out.write(decoder.decode(b"", final=True))


def render_archive(reader: ArchiveReader, out: TextIO, container: str | None = None) -> int:
    """
    Render every container record of ``reader`` (or only ``container``'s).

    Returns the number of records rendered.
    """
    count = 0
    key = ContainerLogKey()
    while (value := reader.next(key)) is not None:
        if container is not None and key.container_id != container:
            continue
        header = f"Container: {key}"
        out.write(header + "\n" + "=" * len(header) + "\n")
        render(value, out)
        out.write("\n")
        count += 1
    logger.debug("Rendered %d record(s) from %s", count, reader.path)
    return count
