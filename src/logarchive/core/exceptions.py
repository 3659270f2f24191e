"""logarchive exception hierarchy."""

from __future__ import annotations


class LogArchiveError(Exception):
    """Base exception for all logarchive errors."""


class ConfigError(LogArchiveError):
    """Raised when the configuration is invalid or cannot be read."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file does not exist."""


class ArchiveCreationError(LogArchiveError):
    """Raised when an archive cannot be created or its mode cannot be set."""


class WriterMisuseError(LogArchiveError):
    """Raised when a closed ArchiveWriter is asked to append."""


class CorruptArchiveError(LogArchiveError):
    """Raised when archive bytes do not follow the record layout."""


class PrematureEndOfRecordError(CorruptArchiveError):
    """Raised when an archive ends before a declared length was satisfied."""


class InvalidIdentifierError(LogArchiveError, ValueError):
    """Raised when a container or application id cannot be parsed."""


class UnsupportedProtocolError(LogArchiveError):
    """Raised when no service address is known for a protocol."""


class ArchiveWriteError(LogArchiveError):
    """Raised when writing a record fails part-way; the writer is closed."""
