"""
Unified CLI Error Handling
==========================

Provides consistent error reporting and exit codes for the CLI tools.
Every failure, whether a compile error or a bad invocation, exits with
status 1.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Exit codes for CLI tools."""
    SUCCESS = 0
    FAILURE = 1      # Lex, parse or codegen error, or invalid invocation


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Unified exception handler for the CLI tools.

    Prints a single diagnostic line to stderr and exits with
    ExitCode.FAILURE. In verbose mode, compile errors also show the
    offending source line and hint, and internal errors print a
    traceback.

    Args:
        error: The exception that was raised
        verbose: If True, print source context or traceback

    Raises:
        SystemExit: Always
    """
    from subc.errors import CompileError, SubCError

    if isinstance(error, CompileError):
        # Compile errors already carry the "<stage> error:" prefix
        click.echo(str(error), err=True)
        if verbose:
            context = error.context()
            if context:
                click.echo(context, err=True)

    elif isinstance(error, SubCError):
        click.echo(f"Error: {error}", err=True)

    elif isinstance(error, OSError):
        # Unreadable input or unwritable output
        click.echo(f"Error: {error}", err=True)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()

    sys.exit(ExitCode.FAILURE)
