"""
CHIP-8 Emulator
===============

A CHIP-8 interpreter core with a host driver for headless runs and tests.

This package provides:

- **Machine state**: 4 KB memory with the hex font, registers, call stack,
  timers, keypad bitmask and a 64x32 monochrome framebuffer
- **Decoder**: 16-bit instruction words to operations and operand fields
- **CPU**: Executor and tick driver reporting an ExecStatus per instruction
- **Display**: Framebuffer view with text, raw and PNG export
- **Keypad**: 16-key input with a blocking, cancellable key wait
- **Debugging**: Breakpoints and register conditions

Quick Start
-----------

Basic usage::

    >>> from chip8_vm.emulator import Emulator, EmulatorConfig
    >>> emu = Emulator(EmulatorConfig(seed=7))
    >>> emu.load_file("maze.ch8")
    >>> event = emu.run(5_000)
    >>> print(emu.display_text)

Core only (no host loop)::

    >>> state = MachineState.from_image(image)
    >>> cpu = Chip8CPU(state)
    >>> status = cpu.tick()

Module Structure
----------------

- `emulator.py`: Main Emulator class (high-level API)
- `machine.py`: Machine state, memory map and font
- `decoder.py`: Instruction decoder and disassembler
- `cpu.py`: Executor and tick driver
- `sprite.py`: DXYN sprite compositor
- `display.py`: Framebuffer renderer view
- `keypad.py`: Keypad and host key mapping
- `breakpoints.py`: Debugging support

Copyright (c) 2025 chip8_vm Contributors
"""

# Main entry point
from .emulator import Emulator, EmulatorConfig

# Interpreter core
from .machine import (
    MachineState,
    FONT_SET,
    FONT_OFFSET,
    MEMORY_SIZE,
    MAX_IMAGE_SIZE,
    PROGRAM_START,
    SCREEN_WIDTH,
    SCREEN_HEIGHT,
    STACK_DEPTH,
)
from .decoder import Op, Instruction, decode, disassemble
from .cpu import Chip8CPU, ExecStatus
from .sprite import draw_sprite

# I/O
from .display import Display
from .keypad import Keypad, HOST_KEY_MAP, resolve_key, resolve_host_key

# Debugging support
from .breakpoints import (
    BreakpointManager,
    BreakEvent,
    BreakReason,
    RegisterCondition,
)

__all__ = [
    # Main API
    "Emulator",
    "EmulatorConfig",

    # Machine
    "MachineState",
    "FONT_SET",
    "FONT_OFFSET",
    "MEMORY_SIZE",
    "MAX_IMAGE_SIZE",
    "PROGRAM_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "STACK_DEPTH",

    # Decoder
    "Op",
    "Instruction",
    "decode",
    "disassemble",

    # CPU
    "Chip8CPU",
    "ExecStatus",
    "draw_sprite",

    # I/O
    "Display",
    "Keypad",
    "HOST_KEY_MAP",
    "resolve_key",
    "resolve_host_key",

    # Debugging
    "BreakpointManager",
    "BreakEvent",
    "BreakReason",
    "RegisterCondition",
]
