"""logarchive constants: filesystem layout, archive format, and exit codes."""

from __future__ import annotations

from enum import IntEnum

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    PERMISSION_ERROR = 5


# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------

LOGARCHIVE_DIR_NAME = ".logarchive"
CONFIG_FILENAME = "config.toml"

ARCHIVE_FILE_MODE = 0o640  # owner rw, group r, others nothing
ARCHIVE_DIR_MODE = 0o750
CONFIG_FILE_MODE = 0o600

# ---------------------------------------------------------------------------
# Archive format
# ---------------------------------------------------------------------------

ARCHIVE_FORMAT_VERSION = 1
VERSION_KEY = "VERSION"
APPLICATION_OWNER_KEY = "APPLICATION_OWNER"
RESERVED_KEYS = frozenset({VERSION_KEY, APPLICATION_OWNER_KEY})

# Stands in for a type-name length to mark an in-band diagnostic item
DIAGNOSTIC_MARKER = -1

TEXT_ENCODING = "utf-8"
COPY_CHUNK_BYTES = 64 * 1024
SPOOL_MAX_BYTES = 4 * 1024 * 1024  # value bytes kept in memory before spilling to disk

# ---------------------------------------------------------------------------
# Service addressing
# ---------------------------------------------------------------------------

DEFAULT_CLIENT_PORT = 8032
DEFAULT_ADMIN_PORT = 8033
DEFAULT_SCHEDULER_PORT = 8030
