"""
c8run - Headless CHIP-8 Runner Command-Line Interface
=====================================================

This module implements the command-line interface for running CHIP-8
program images without a window. The program runs until it hits a
breakpoint, fails, waits for a key that never comes, or exhausts its
instruction budget. The screen can then be printed or saved as PNG.

Usage Examples
--------------
Run for at most 10000 instructions and print the screen:
    $ c8run maze.ch8 --max-instructions 10000 --screen

Reproducible random numbers:
    $ c8run maze.ch8 --seed 42 --png maze.png

Hold keys 5 and A for the whole run:
    $ c8run pong.ch8 --press 5 --press A

Stop at an address:
    $ c8run pong.ch8 --break 0x2F4

Copyright (c) 2025 chip8_vm Contributors
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from chip8_vm import __version__
from chip8_vm.cli.errors import ExitCode, handle_cli_exception
from chip8_vm.cli.params import ADDRESS, KEY
from chip8_vm.emulator import BreakReason, Emulator, EmulatorConfig
from chip8_vm.errors import ExecutionError


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "image",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-n", "--max-instructions",
    type=click.IntRange(min=1),
    default=100_000,
    show_default=True,
    help="Maximum number of instructions to execute",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed for the RND instruction (default: random)",
)
@click.option(
    "--key-timeout",
    type=click.FloatRange(min=0.0),
    default=0.0,
    show_default=True,
    help="Seconds a key wait (FX0A) may block before the run stops",
)
@click.option(
    "-p", "--press",
    "keys",
    type=KEY,
    multiple=True,
    help="Hold a keypad key (hex digit 0-F) for the whole run. Repeatable.",
)
@click.option(
    "-b", "--break",
    "breakpoints",
    type=ADDRESS,
    multiple=True,
    help="Stop when PC reaches ADDRESS (hex with 0x prefix or decimal). Repeatable.",
)
@click.option(
    "-s", "--screen",
    is_flag=True,
    help="Print the screen as text when the run stops",
)
@click.option(
    "--png",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Save the screen as a PNG image",
)
@click.option(
    "--scale",
    type=click.IntRange(min=1),
    default=8,
    show_default=True,
    help="Pixel scale factor for --png",
)
@click.option(
    "--trace",
    is_flag=True,
    help="Log every executed instruction (use with -v)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="c8run")
def main(
    image: Path,
    max_instructions: int,
    seed: Optional[int],
    key_timeout: float,
    keys: Tuple[int, ...],
    breakpoints: Tuple[int, ...],
    screen: bool,
    png: Optional[Path],
    scale: int,
    trace: bool,
    verbose: bool,
) -> None:
    """
    Run a CHIP-8 program image headless.

    IMAGE is the raw program file, loaded at 0x200.

    Exits with status 1 if the program halts on an execution error.

    Examples:

        # Run and show the screen
        c8run maze.ch8 --screen

        # Save a screenshot after 5000 instructions
        c8run maze.ch8 -n 5000 --png maze.png
    """
    setup_logging(verbose)

    try:
        config = EmulatorConfig(seed=seed, key_wait_timeout=key_timeout, trace=trace)
        emu = Emulator(config)
        emu.load_file(image)

        for key in keys:
            emu.press_key(key)
        for address in breakpoints:
            emu.breakpoints.add_breakpoint(address)

        event = emu.run(max_instructions)
    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Image")

    if verbose:
        click.echo(f"Instructions executed: {emu.total_instructions}", err=True)

    if screen:
        click.echo(emu.display_text)

    if png:
        try:
            png.write_bytes(emu.render_display(scale=scale))
        except OSError as e:
            click.echo(f"Error writing {png}: {e}", err=True)
            sys.exit(ExitCode.INVALID_ARGS)
        if verbose:
            click.echo(f"Screen written to: {png}", err=True)

    if event.reason is BreakReason.ERROR:
        handle_cli_exception(ExecutionError(event.status, event.address, event.word))

    click.echo(f"Stopped: {event}")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
