"""
CLI Error Reporting
===================

Exit codes shared by c8run and c8disasm, and the handler that turns an
exception into a message on stderr plus the matching exit code.

Execution errors are reported with the status that stopped the program,
so scripts can tell a stack underflow from an invalid opcode without
parsing the rest of the line:

    Execution error [STACK_UNDERFLOW]: stack underflow 0x00EE at 0x0200

Copyright (c) 2025 chip8_vm Contributors
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from chip8_vm.errors import Chip8Error, ExecutionError


class ExitCode(IntEnum):
    """Process exit codes for the command-line tools."""
    SUCCESS = 0
    EXECUTION_ERROR = 1  # Image rejected, or the program halted on an error status
    INVALID_ARGS = 2     # Bad option value, missing or unreadable file
    INTERNAL_ERROR = 3   # Anything else is a bug


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report an exception and exit with the code for its category.

    Args:
        error: The exception that was raised
        verbose: Print the traceback for internal errors
        error_type: Label for chip8_vm errors (e.g. "Image"), default "Error"

    Raises:
        SystemExit: Always
    """
    if isinstance(error, ExecutionError):
        click.echo(f"Execution error [{error.status.name}]: {error}", err=True)
        sys.exit(ExitCode.EXECUTION_ERROR)

    if isinstance(error, Chip8Error):
        label = f"{error_type} error" if error_type else "Error"
        click.echo(f"{label}: {error}", err=True)
        sys.exit(ExitCode.EXECUTION_ERROR)

    if isinstance(error, (click.BadParameter, OSError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    click.echo(f"Internal error: {error}", err=True)
    if verbose:
        traceback.print_exc()
    sys.exit(ExitCode.INTERNAL_ERROR)
