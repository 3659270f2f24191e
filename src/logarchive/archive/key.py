"""Record keys."""

from __future__ import annotations

from dataclasses import dataclass

from logarchive.core.constants import RESERVED_KEYS, TEXT_ENCODING
from logarchive.core.ids import ContainerId


@dataclass
class ContainerLogKey:
    """
    Identifies the container whose logs a record holds.

    ``ContainerLogKey()`` is the empty form, used as a decode target that
    ArchiveReader.next() fills in.
    """

    container_id: str | ContainerId | None = None

    def __post_init__(self) -> None:
        if isinstance(self.container_id, ContainerId):
            self.container_id = str(self.container_id)

    def to_bytes(self) -> bytes:
        if self.container_id is None:
            raise ValueError("Cannot serialize an empty ContainerLogKey")
        if self.container_id in RESERVED_KEYS:
            raise ValueError(f"{self.container_id!r} is reserved for archive metadata")
        return self.container_id.encode(TEXT_ENCODING)

    def load(self, data: bytes) -> None:
        """Replace this key's contents with decoded ``data``."""
        self.container_id = data.decode(TEXT_ENCODING)

    def __str__(self) -> str:
        return self.container_id or ""
