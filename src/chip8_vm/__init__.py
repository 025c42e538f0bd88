"""
chip8_vm - CHIP-8 Virtual Machine
=================================

This package provides an interpreter for CHIP-8, the 1970s 8-bit virtual
machine with 4 KB of memory, sixteen 8-bit registers, a 16-key hex keypad
and a 64x32 monochrome display.

Main Components
---------------
- **emulator**: Machine state, decoder, CPU, display, keypad and the
    Emulator host driver
- **errors**: Exception hierarchy for image loading and execution
- **cli**: Command-line tools (c8run, c8disasm)

Quick Start
-----------
Run a program headless:
    >>> from chip8_vm import Emulator
    >>> emu = Emulator()
    >>> emu.load_file("maze.ch8")
    >>> event = emu.run(10_000)
    >>> print(emu.display_text)

Disassemble an image:
    >>> from chip8_vm import disassemble
    >>> for address, word, instruction in disassemble(data):
    ...     print(f"0x{address:03X}: {instruction}")

Or use the command-line tools:
    $ c8run maze.ch8 --max-instructions 10000 --screen
    $ c8disasm maze.ch8

Version History
---------------
1.0.0 - Initial release with interpreter core, headless runner and disassembler
"""

__version__ = "1.0.0"
__author__ = "chip8_vm Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from chip8_vm.errors import (
    Chip8Error,
    ImageError,
    ImageTooLargeError,
    ExecutionError,
)

from chip8_vm.emulator import (
    Emulator,
    EmulatorConfig,
    MachineState,
    Chip8CPU,
    ExecStatus,
    Op,
    Instruction,
    decode,
    disassemble,
    Display,
    Keypad,
    BreakpointManager,
    BreakEvent,
    BreakReason,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Exception hierarchy
    "Chip8Error",
    "ImageError",
    "ImageTooLargeError",
    "ExecutionError",
    # Emulator
    "Emulator",
    "EmulatorConfig",
    "MachineState",
    "Chip8CPU",
    "ExecStatus",
    "Op",
    "Instruction",
    "decode",
    "disassemble",
    "Display",
    "Keypad",
    "BreakpointManager",
    "BreakEvent",
    "BreakReason",
]
