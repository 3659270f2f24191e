"""
Application and container identifiers.

String forms::

    application_<cluster_ts>_<app:04d>
    container_[e<epoch>_]<cluster_ts>_<app:04d>_<attempt:02d>_<container:06d>

The numeric fields may be wider than their padding; parsing accepts any
width and formatting only pads.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from logarchive.core.exceptions import InvalidIdentifierError

_APPLICATION_RE = re.compile(r"application_(\d+)_(\d+)")
_CONTAINER_RE = re.compile(r"container_(?:e(\d+)_)?(\d+)_(\d+)_(\d+)_(\d+)")


@dataclass(frozen=True)
class ApplicationId:
    cluster_timestamp: int
    id: int

    @classmethod
    def parse(cls, value: str) -> ApplicationId:
        m = _APPLICATION_RE.fullmatch(value.strip())
        if m is None:
            raise InvalidIdentifierError(f"Invalid application id: {value!r}")
        return cls(cluster_timestamp=int(m.group(1)), id=int(m.group(2)))

    def __str__(self) -> str:
        return f"application_{self.cluster_timestamp}_{self.id:04d}"


@dataclass(frozen=True)
class ContainerId:
    application_id: ApplicationId
    attempt: int
    id: int
    epoch: int | None = None

    @classmethod
    def parse(cls, value: str) -> ContainerId:
        m = _CONTAINER_RE.fullmatch(value.strip())
        if m is None:
            raise InvalidIdentifierError(f"Invalid container id: {value!r}")
        epoch, ts, app, attempt, cid = m.groups()
        return cls(
            application_id=ApplicationId(cluster_timestamp=int(ts), id=int(app)),
            attempt=int(attempt),
            id=int(cid),
            epoch=int(epoch) if epoch is not None else None,
        )

    def __str__(self) -> str:
        app = self.application_id
        epoch = f"e{self.epoch:02d}_" if self.epoch is not None else ""
        return (
            f"container_{epoch}{app.cluster_timestamp}_{app.id:04d}"
            f"_{self.attempt:02d}_{self.id:06d}"
        )
