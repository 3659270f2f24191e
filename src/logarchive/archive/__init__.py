"""
Aggregated container log archives.

Write side: ContainerLogCollector (per container) → ArchiveWriter.append().
Read side:  ArchiveReader.next() → render().
"""

from logarchive.archive.collector import CollectionResult, ContainerLogCollector
from logarchive.archive.key import ContainerLogKey
from logarchive.archive.ownership import OwnershipMismatch, verify_and_open
from logarchive.archive.reader import ArchiveReader, ValueStream
from logarchive.archive.renderer import render, render_archive
from logarchive.archive.writer import ArchiveWriter

__all__ = [
    "ArchiveReader",
    "ArchiveWriter",
    "CollectionResult",
    "ContainerLogCollector",
    "ContainerLogKey",
    "OwnershipMismatch",
    "ValueStream",
    "render",
    "render_archive",
    "verify_and_open",
]
