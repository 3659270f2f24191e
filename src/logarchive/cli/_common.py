"""Helpers shared by CLI commands."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console

from logarchive.core.config import LogArchiveConfig, default_config, load_config
from logarchive.core.constants import ExitCode
from logarchive.core.exceptions import (
    ArchiveCreationError,
    ConfigError,
    ConfigNotFoundError,
    LogArchiveError,
)

err_console = Console(stderr=True)


def load_config_or_default() -> LogArchiveConfig:
    """Load the config file, falling back to defaults when there is none."""
    try:
        return load_config()
    except ConfigNotFoundError:
        return default_config()


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Print a LogArchiveError in red and exit with a matching code."""
    try:
        yield
    except ConfigError as exc:
        err_console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(ExitCode.CONFIG_ERROR)
    except ArchiveCreationError as exc:
        err_console.print(f"[red]Cannot create archive:[/red] {exc}")
        sys.exit(ExitCode.PERMISSION_ERROR)
    except LogArchiveError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(ExitCode.ERROR)
