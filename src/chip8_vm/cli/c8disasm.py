"""
c8disasm - CHIP-8 Disassembler Command-Line Interface
=====================================================

This module implements the command-line interface for the CHIP-8
disassembler. Every two bytes of the image are decoded as one instruction
word; words that are not instructions are listed as DW data.

Usage Examples
--------------
Disassemble an image loaded at the usual 0x200:
    $ c8disasm maze.ch8

With base address:
    $ c8disasm overlay.bin --address 0x300

Limit number of instructions:
    $ c8disasm maze.ch8 --count 20

Output to file:
    $ c8disasm maze.ch8 -o maze.lst

Copyright (c) 2025 chip8_vm Contributors
"""

import itertools
import sys
from pathlib import Path
from typing import Optional

import click

from chip8_vm import __version__
from chip8_vm.cli.errors import ExitCode
from chip8_vm.cli.params import ADDRESS
from chip8_vm.emulator.decoder import disassemble
from chip8_vm.emulator.machine import PROGRAM_START


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "-a", "--address",
    type=ADDRESS,
    default=PROGRAM_START,
    help="Base address for disassembly (hex with 0x prefix or decimal). Default: 0x200",
)
@click.option(
    "-c", "--count",
    type=click.IntRange(min=0),
    default=None,
    help="Maximum number of instructions to disassemble (default: all)",
)
@click.option(
    "--no-bytes",
    is_flag=True,
    help="Omit instruction words from output (show only mnemonic and operands)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="c8disasm")
def main(
    input_file: Path,
    output: Optional[Path],
    address: int,
    count: Optional[int],
    no_bytes: bool,
    verbose: bool,
) -> None:
    """
    Disassemble a CHIP-8 program image.

    INPUT_FILE is the raw program file.

    Examples:

        # Disassemble the first 20 instructions
        c8disasm maze.ch8 --count 20

        # Write a listing for an image loaded at 0x300
        c8disasm overlay.bin --address 0x300 -o overlay.lst
    """
    try:
        data = input_file.read_bytes()
    except OSError as e:
        click.echo(f"Error reading {input_file}: {e}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    if len(data) == 0:
        click.echo(f"Error: {input_file} is empty", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    if verbose:
        click.echo(f"Input file: {input_file} ({len(data)} bytes)", err=True)
        click.echo(f"Base address: 0x{address:03X}", err=True)

    output_lines = [
        f"; Disassembly of {input_file.name}",
        f"; Size: {len(data)} bytes",
        f"; Base address: 0x{address:03X}",
        "",
    ]

    listing = disassemble(data, base_address=address)
    if count is not None:
        listing = itertools.islice(listing, count)

    instr_count = 0
    for addr, word, instruction in listing:
        if no_bytes:
            output_lines.append(f"0x{addr:03X}: {instruction}")
        else:
            output_lines.append(f"0x{addr:03X}: {word:04X}  {instruction}")
        instr_count += 1

    result = "\n".join(output_lines) + "\n"

    if output:
        try:
            output.write_text(result, encoding='utf-8')
            if verbose:
                click.echo(f"Output written to: {output}", err=True)
        except OSError as e:
            click.echo(f"Error writing {output}: {e}", err=True)
            sys.exit(ExitCode.INVALID_ARGS)
    else:
        click.echo(result, nl=False)

    if verbose:
        click.echo(f"Instructions disassembled: {instr_count}", err=True)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
