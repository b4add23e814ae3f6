"""Shared command helpers and utilities."""

import sys

from rich import print as rprint

from l2proof_toolkit.shared.exceptions import (
    NonRetryableException,
    RetryableException,
)


def handle_command_error(error: Exception) -> None:
    """
    Standard error handling for commands.

    Args:
        error: The exception that occurred
    """
    if isinstance(error, ValueError):
        rprint(f"[red]Error:[/red] {str(error)}")
    elif isinstance(error, NonRetryableException):
        rprint(f"[red]{type(error).__name__}:[/red] {str(error)}")
    elif isinstance(error, RetryableException):
        rprint(
            f"[yellow]{type(error).__name__}:[/yellow] {str(error)} "
            "(transient, try again later)"
        )
    else:
        rprint(f"[red]Unexpected error:[/red] {str(error)}")

    sys.exit(1)
