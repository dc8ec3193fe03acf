"""Shared command helpers and utilities."""

import sys
from typing import Callable, Optional

from rich import print as rprint

from blobstream_toolkit.shared.exceptions import BlobstreamException
from blobstream_toolkit.shared.results import ProcessingError


def handle_command_error(
    error: Exception, show_usage_fn: Optional[Callable[[], None]] = None
) -> None:
    """
    Standard error handling for commands.

    Args:
        error: The exception that occurred
        show_usage_fn: Optional function to display usage instructions
    """
    if isinstance(error, BlobstreamException):
        rprint(f"[red]{error.kind}:[/red] {error.message}")
    elif isinstance(error, ValueError):
        rprint(f"[red]Error:[/red] {str(error)}")
    else:
        rprint(f"[red]Unexpected error:[/red] {str(error)}")

    if show_usage_fn:
        show_usage_fn()

    sys.exit(1)


def report_stage_failure(error: Optional[ProcessingError]) -> None:
    """Print the failing stage and error kind of a pipeline run."""
    if error is None:
        rprint("[red]Verification failed[/red]")
        return
    rprint(
        f"[red]Verification failed at stage[/red] [bold]{error.source}[/bold] "
        f"[red]({error.kind})[/red]: {error.message}"
    )
    for key, value in error.to_dict()["context"].items():
        rprint(f"  [dim]{key}:[/dim] {value}")
