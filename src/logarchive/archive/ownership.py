"""
Race-free file ownership verification.

The aggregator runs with enough privilege to read every user's container
logs, so a user could point a log file at someone else's data (a symlink, a
rename between listing and reading). verify_and_open() closes that gap by
opening the file first and checking the owner of the *open descriptor*; the
bytes the caller reads are guaranteed to come from the object that passed
the check.
"""

from __future__ import annotations

import errno
import logging
import os
import pwd
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnershipMismatch:
    """The file at ``path`` is owned by ``actual_owner``, not ``expected_owner``."""

    path: str
    actual_owner: str
    expected_owner: str

    @property
    def message(self) -> str:
        return (
            f"Owner '{self.actual_owner}' for path '{self.path}' "
            f"did not match expected owner '{self.expected_owner}'"
        )


def owner_name(uid: int) -> str:
    """Return the user name for ``uid``, or the uid itself if it has no entry."""
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def verify_and_open(path: str | Path, expected_owner: str) -> BinaryIO | OwnershipMismatch:
    """
    Open ``path`` for reading if its owner is ``expected_owner``.

    Returns an open binary file on success, which the caller must close, or
    an OwnershipMismatch. Missing or unreadable files, and anything that is
    not a regular file (a FIFO swapped in after listing), raise OSError.
    """
    # Non-blocking so that opening a FIFO cannot stall the aggregator
    fd = os.open(path, os.O_RDONLY | os.O_NONBLOCK | os.O_NOCTTY)
    try:
        st = os.fstat(fd)
        if not stat.S_ISREG(st.st_mode):
            raise OSError(errno.EINVAL, "Not a regular file", str(path))
        actual = owner_name(st.st_uid)
        if actual == expected_owner:
            os.set_blocking(fd, True)
            return os.fdopen(fd, "rb")
    except BaseException:
        os.close(fd)
        raise

    os.close(fd)
    logger.warning(
        "Owner %r for path %s did not match expected owner %r", actual, path, expected_owner
    )
    return OwnershipMismatch(path=str(path), actual_owner=actual, expected_owner=expected_owner)
