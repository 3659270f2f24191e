"""
logarchive CLI entry point.

Commands:
  logarchive aggregate <container>...  — collect container logs into an archive
  logarchive dump <archive>            — render an archive as text
  logarchive resolve <protocol>        — show the managing service address
  logarchive config show               — display the effective configuration
  logarchive config init               — write a starter config file
"""

from __future__ import annotations

import click
from rich.console import Console

from logarchive import __version__
from logarchive.core.addressing import ServiceProtocol

console = Console()


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "--version", "-V", message="logarchive %(version)s")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log at DEBUG level")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """logarchive — secure aggregated container log archives."""
    from logarchive.cli._common import exit_on_error, load_config_or_default
    from logarchive.core.config import default_config
    from logarchive.core.log_setup import configure_logging

    with exit_on_error():
        # "config init --force" must still run when the config file is broken
        if ctx.invoked_subcommand == "config":
            logging_cfg = default_config().logging
        else:
            logging_cfg = load_config_or_default().logging
    if verbose:
        logging_cfg = logging_cfg.model_copy(update={"level": "DEBUG"})
    configure_logging(logging_cfg)


# ---------------------------------------------------------------------------
# aggregate / dump
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("containers", nargs=-1, required=True)
@click.option("--root", "roots", multiple=True, help="Log root directory (repeatable)")
@click.option("--dest", default="", help="Archive path (default: derived from config)")
@click.option("--owner", default="", help="Expected owner of the log files (default: you)")
@click.option("--node", "node_id", default="", help="Node id used in the derived archive path")
@click.option("--json", "as_json", is_flag=True, default=False)
def aggregate(
    containers: tuple[str, ...],
    roots: tuple[str, ...],
    dest: str,
    owner: str,
    node_id: str,
    as_json: bool,
) -> None:
    """Collect the logs of CONTAINERS into one archive."""
    from logarchive.cli._aggregate import cmd_aggregate

    cmd_aggregate(
        containers=list(containers),
        roots=list(roots),
        dest=dest,
        owner=owner,
        node_id=node_id,
        as_json=as_json,
        console=console,
    )


@cli.command()
@click.argument("archive", type=click.Path(dir_okay=False))
@click.option("--container", default=None, help="Only render this container's record")
def dump(archive: str, container: str | None) -> None:
    """Render ARCHIVE as readable text."""
    from logarchive.cli._dump import cmd_dump

    cmd_dump(archive=archive, container=container)


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("protocol", type=click.Choice([p.value for p in ServiceProtocol]))
def resolve(protocol: str) -> None:
    """Show the configured address of the managing service for PROTOCOL."""
    from logarchive.cli._common import exit_on_error, load_config_or_default
    from logarchive.core.addressing import resolve_service_address

    with exit_on_error():
        addr = resolve_service_address(load_config_or_default().cluster, protocol)
    click.echo(str(addr))


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


@cli.group("config")
def config_group() -> None:
    """View and create logarchive configuration."""


@config_group.command("show")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
def config_show(as_json: bool) -> None:
    """Display the current configuration."""
    from logarchive.cli._config_cmd import cmd_config_show

    cmd_config_show(as_json=as_json, console=console)


@config_group.command("init")
@click.option("--root", "roots", multiple=True, help="Log root directory (repeatable)")
@click.option("--archive-dir", default="", help="Root of the remote archive tree")
@click.option("--node", "node_id", default="", help="This node's id")
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing config")
def config_init(roots: tuple[str, ...], archive_dir: str, node_id: str, force: bool) -> None:
    """Write a starter config file."""
    from logarchive.cli._config_cmd import cmd_config_init

    cmd_config_init(
        roots=list(roots), archive_dir=archive_dir, node_id=node_id, force=force, console=console
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
