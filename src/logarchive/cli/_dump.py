"""logarchive dump — render an archive as readable text."""

from __future__ import annotations

import sys

import click

from logarchive.archive import ArchiveReader, render_archive
from logarchive.cli._common import err_console, exit_on_error
from logarchive.core.constants import ExitCode


def cmd_dump(archive: str, container: str | None) -> None:
    out = click.get_text_stream("stdout")
    with exit_on_error():
        try:
            reader = ArchiveReader.open(archive)
        except OSError as exc:
            err_console.print(f"[red]Cannot open archive:[/red] {exc}")
            sys.exit(ExitCode.ERROR)
        with reader:
            count = render_archive(reader, out, container=container)

    if container is not None and count == 0:
        err_console.print(f"[yellow]No logs for {container} in {archive}[/yellow]")
        sys.exit(ExitCode.ERROR)
