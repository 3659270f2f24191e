"""Shared fixtures: container ids, source log trees, and the current user."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from logarchive.archive.ownership import owner_name
from logarchive.core.ids import ContainerId


@pytest.fixture
def me() -> str:
    """Name of the user that owns files this test creates."""
    return owner_name(os.geteuid())


@pytest.fixture
def container_id() -> ContainerId:
    return ContainerId.parse("container_1_0001_01_000001")


@pytest.fixture
def src_root(tmp_path: Path) -> Path:
    root = tmp_path / "srcFiles"
    root.mkdir()
    return root


@pytest.fixture
def write_src_file(src_root: Path) -> Callable[..., Path]:
    """Write ``data`` as ``name`` in the container's log directory under ``root``."""

    def _write(cid: ContainerId, name: str, data: str, root: Path | None = None) -> Path:
        container_dir = (root or src_root) / str(cid.application_id) / str(cid)
        container_dir.mkdir(parents=True, exist_ok=True)
        path = container_dir / name
        path.write_text(data, encoding="utf-8")
        return path

    return _write
