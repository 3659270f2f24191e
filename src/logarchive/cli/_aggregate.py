"""logarchive aggregate — collect container logs into an archive."""

from __future__ import annotations

import json
import os
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from logarchive.archive import ArchiveWriter, ContainerLogCollector, ContainerLogKey
from logarchive.archive.ownership import owner_name
from logarchive.cli._common import exit_on_error, load_config_or_default
from logarchive.core.ids import ContainerId


def cmd_aggregate(
    containers: list[str],
    roots: list[str],
    dest: str,
    owner: str,
    node_id: str,
    as_json: bool,
    console: Console,
) -> None:
    with exit_on_error():
        cfg = load_config_or_default()
        container_ids = [ContainerId.parse(c) for c in containers]
        owner = owner or owner_name(os.geteuid())
        roots = roots or cfg.aggregation.log_roots
        if not roots:
            raise click.UsageError("No log roots: pass --root or set aggregation.log_roots")

        if dest:
            archive_path = Path(dest)
        else:
            apps = {str(cid.application_id) for cid in container_ids}
            if len(apps) > 1:
                raise click.UsageError(
                    "Containers belong to different applications; pass --dest explicitly"
                )
            archive_path = cfg.aggregation.archive_path(owner, apps.pop(), node_id)

        rows = []
        with ArchiveWriter.open(archive_path, owner) as writer:
            for cid in container_ids:
                collector = ContainerLogCollector(roots, cid, owner)
                result = writer.append(ContainerLogKey(cid), collector)
                rows.append(
                    {
                        "container": str(cid),
                        "included": len(result.included),
                        "ownership_mismatches": len(result.mismatches),
                        "skipped": len(result.skipped),
                    }
                )

    if as_json:
        click.echo(json.dumps({"archive": str(archive_path), "containers": rows}, indent=2))
        return

    table = Table(title=f"Archive {archive_path}")
    table.add_column("Container")
    table.add_column("Files", justify="right")
    table.add_column("Owner mismatches", justify="right")
    table.add_column("Skipped", justify="right")
    for row in rows:
        table.add_row(
            row["container"],
            str(row["included"]),
            str(row["ownership_mismatches"]),
            str(row["skipped"]),
        )
    console.print(table)

    if any(row["ownership_mismatches"] for row in rows):
        console.print("[yellow]Some files were skipped after failing ownership checks.[/yellow]")
