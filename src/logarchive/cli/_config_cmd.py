"""CLI commands: logarchive config show | init."""

from __future__ import annotations

import json
import sys

import click
from rich.console import Console

from logarchive.cli._common import exit_on_error
from logarchive.core.constants import ExitCode


def cmd_config_show(as_json: bool, console: Console) -> None:
    from logarchive.cli._common import load_config_or_default
    from logarchive.core.config import _config_file_path

    cfg_path = _config_file_path()
    with exit_on_error():
        cfg = load_config_or_default()

    data = cfg.model_dump()
    if as_json:
        data["_config_path"] = str(cfg_path)
        click.echo(json.dumps(data, indent=2))
        return

    source = str(cfg_path) if cfg_path.exists() else "defaults"
    console.print(f"[bold]logarchive configuration[/bold]  ({source})\n")
    for section, values in data.items():
        console.print(f"  [cyan]\\[{section}][/cyan]")
        for k, v in values.items():
            console.print(f"    {k} = {v!r}")
    console.print()


def cmd_config_init(
    roots: list[str], archive_dir: str, node_id: str, force: bool, console: Console
) -> None:
    from logarchive.core.config import LogArchiveConfig, _config_file_path, save_config

    cfg_path = _config_file_path()
    if cfg_path.exists() and not force:
        console.print(f"[red]Config already exists:[/red] {cfg_path}")
        console.print("Pass --force to overwrite it.")
        sys.exit(ExitCode.CONFIG_ERROR)

    try:
        cfg = LogArchiveConfig.model_validate(
            {"aggregation": {"log_roots": roots, "archive_dir": archive_dir, "node_id": node_id}}
        )
    except ValueError as exc:
        console.print(f"[red]Invalid settings:[/red] {exc}")
        sys.exit(ExitCode.CONFIG_ERROR)

    with exit_on_error():
        written = save_config(cfg.model_dump(), cfg_path)
    console.print(f"[green]Config written:[/green] {written}")
