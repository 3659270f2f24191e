"""
logarchive — secure aggregated container log archives.

Many short-lived worker processes on a shared node leave stdout, stderr and
auxiliary log files behind. logarchive gathers a container's files into one
append-only archive file, checking that every file is really owned by the
job's user before reading it, and renders the archive back to text for the
job owner.

Package layout (src/logarchive/):
  core/       — config, constants, exceptions, identifiers, service addressing
  archive/    — ownership verification, collector, writer, reader, renderer
  cli/        — Click CLI entry point
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
