"""
Container log collection.

A ContainerLogCollector turns one container's log directory (spread over
several log roots) into the value bytes of one archive record::

    collector = ContainerLogCollector(roots, "container_1_0001_01_000001", "alice")
    with ArchiveWriter.open(dest, "alice") as writer:
        writer.append(ContainerLogKey(collector.container_id), collector)

Problems with individual files never fail the record: an ownership mismatch
becomes an in-band diagnostic, a vanished or unreadable file is skipped.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from logarchive.archive import _wire
from logarchive.archive.ownership import OwnershipMismatch, verify_and_open
from logarchive.core.constants import (
    COPY_CHUNK_BYTES,
    DIAGNOSTIC_MARKER,
    SPOOL_MAX_BYTES,
    TEXT_ENCODING,
)
from logarchive.core.ids import ContainerId

logger = logging.getLogger(__name__)


@dataclass
class CollectionResult:
    """What one produce() call did, file by file."""

    included: list[str] = field(default_factory=list)
    mismatches: list[OwnershipMismatch] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    missing_roots: list[str] = field(default_factory=list)


def write_sub_entry(out: BinaryIO, type_name: str, content: BinaryIO, length: int) -> None:
    """Write one SubEntry; ``content`` must hold exactly ``length`` bytes."""
    _wire.write_prefixed(out, type_name.encode(TEXT_ENCODING))
    _wire.write_long(out, length)
    shutil.copyfileobj(content, out, COPY_CHUNK_BYTES)


def write_diagnostic(out: BinaryIO, message: str) -> None:
    _wire.write_int(out, DIAGNOSTIC_MARKER)
    _wire.write_prefixed(out, message.encode(TEXT_ENCODING))


class ContainerLogCollector:
    """
    Collects the log files of one container.

    ``expected_owner`` is either a user name or a zero-argument callable
    returning one. The callable is invoked once per file, in enumeration
    order, so files in one directory may be checked against different
    owners.
    """

    def __init__(
        self,
        root_dirs: Sequence[str | Path],
        container_id: str | ContainerId,
        expected_owner: str | Callable[[], str],
    ) -> None:
        if isinstance(container_id, str):
            container_id = ContainerId.parse(container_id)
        self.root_dirs = [Path(r) for r in root_dirs]
        self.container_id = container_id
        if isinstance(expected_owner, str):
            owner = expected_owner
            self._expected_owner: Callable[[], str] = lambda: owner
        else:
            self._expected_owner = expected_owner

    def container_dirs(self) -> list[Path]:
        app = str(self.container_id.application_id)
        return [root / app / str(self.container_id) for root in self.root_dirs]

    def produce(self, sink: BinaryIO) -> CollectionResult:
        """Write this container's value bytes to ``sink``."""
        result = CollectionResult()
        for root, container_dir in zip(self.root_dirs, self.container_dirs()):
            if not root.is_dir():
                logger.warning("Log root %s does not exist; skipping", root)
                result.missing_roots.append(str(root))
                continue
            try:
                names = self._list_files(container_dir)
            except (FileNotFoundError, NotADirectoryError):
                logger.debug("No logs for %s under %s", self.container_id, root)
                continue
            except OSError as exc:
                logger.warning("Cannot list log directory %s: %s", container_dir, exc)
                result.skipped.append(str(container_dir))
                continue
            for name in names:
                self._collect_file(container_dir / name, sink, result)

        logger.debug(
            "Collected %s: %d included, %d ownership mismatches, %d skipped",
            self.container_id,
            len(result.included),
            len(result.mismatches),
            len(result.skipped),
        )
        return result

    @staticmethod
    def _list_files(container_dir: Path) -> list[str]:
        with os.scandir(container_dir) as it:
            return sorted(entry.name for entry in it if entry.is_file())

    def _collect_file(self, path: Path, sink: BinaryIO, result: CollectionResult) -> None:
        expected = self._expected_owner()
        try:
            opened = verify_and_open(path, expected)
        except OSError as exc:
            logger.warning("Cannot open log file %s: %s", path, exc)
            result.skipped.append(str(path))
            return

        if isinstance(opened, OwnershipMismatch):
            write_diagnostic(sink, opened.message)
            result.mismatches.append(opened)
            return

        with opened, tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_BYTES) as spool:
            try:
                length = _copy_snapshot(opened, spool)
            except OSError as exc:
                logger.warning("Error reading log file %s: %s", path, exc)
                result.skipped.append(str(path))
                return
            spool.seek(0)
            write_sub_entry(sink, path.name, spool, length)
        result.included.append(str(path))


def _copy_snapshot(src: BinaryIO, dst: BinaryIO) -> int:
    """
    Copy at most the size ``src`` had when it was opened; return the count.

    Bytes appended after that point belong to the next aggregation pass.
    """
    limit = os.fstat(src.fileno()).st_size
    copied = 0
    while copied < limit:
        chunk = src.read(min(COPY_CHUNK_BYTES, limit - copied))
        if not chunk:
            break
        dst.write(chunk)
        copied += len(chunk)
    return copied
