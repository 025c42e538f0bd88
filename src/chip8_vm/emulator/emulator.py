"""
CHIP-8 Emulator - Main Orchestrator
===================================

This module provides the main `Emulator` class that ties the interpreter
core to the host: it owns the machine state, keypad, CPU, display view and
breakpoint manager, and drives the tick loop.

The Emulator class:
- Initializes all components from an EmulatorConfig
- Provides program loading from files or raw bytes
- Supports execution control (run, step, run_until_pc, run_or_raise)
- Integrates breakpoints and register conditions for debugging
- Offers display output inspection
- Supports keypad input simulation

Example usage:
    >>> from chip8_vm.emulator import Emulator, EmulatorConfig
    >>> emu = Emulator(EmulatorConfig(seed=1234))
    >>> emu.load_file("maze.ch8")
    >>> event = emu.run(10_000)
    >>> print(emu.display_text)

Copyright (c) 2025 chip8_vm Contributors
"""

import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from chip8_vm.errors import ExecutionError
from .breakpoints import BreakEvent, BreakpointManager, BreakReason
from .cpu import Chip8CPU, ExecStatus
from .decoder import disassemble
from .display import Display
from .keypad import Keypad, KeySpec
from .machine import MEMORY_SIZE, MachineState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmulatorConfig:
    """
    Configuration for emulator initialization.

    Attributes:
        seed: Seed for the RND random source. None seeds from the OS.
        key_wait_timeout: Seconds the blocking key wait (FX0A) may sleep
                          before the run loop stops with KEY_WAIT.
                          None waits until Keypad.cancel_wait() is called.
        trace: Log every executed instruction at DEBUG level.

    Example:
        >>> config = EmulatorConfig(seed=42)                 # reproducible RND
        >>> config = EmulatorConfig(key_wait_timeout=0.5)   # headless runs
    """
    seed: Optional[int] = None
    key_wait_timeout: Optional[float] = None
    trace: bool = False


class Emulator:
    """
    CHIP-8 emulator with instrumentation support.

    Attributes:
        config: The EmulatorConfig used to initialize this instance
        state: The MachineState every component operates on
        keypad: The keypad controller (only writer of input_state)
        cpu: The Chip8CPU instance (accessible for low-level control)
        display: The framebuffer renderer view
        breakpoints: The breakpoint / register condition manager

    Example:
        >>> emu = Emulator()
        >>> emu.load_bytes(bytes([0x00, 0xE0, 0x12, 0x02]))
        >>> emu.run_until_pc(0x202)
        True
    """

    def __init__(self, config: Optional[EmulatorConfig] = None):
        """
        Initialize the emulator with given configuration.

        Args:
            config: EmulatorConfig. If None, defaults are used.
        """
        self.config = config or EmulatorConfig()
        self._build()

    def _build(self) -> None:
        self.state = MachineState()
        if hasattr(self, "keypad"):
            self.keypad.rebind(self.state)
        else:
            self.keypad = Keypad(self.state)
        self.cpu = Chip8CPU(
            self.state,
            keypad=self.keypad,
            rng=random.Random(self.config.seed),
            key_wait_timeout=self.config.key_wait_timeout,
            trace=self.config.trace,
        )
        self.display = Display(self.state)
        if not hasattr(self, "breakpoints"):
            self.breakpoints = BreakpointManager()

        self._is_running = False
        self._total_instructions = 0

    # =========================================================================
    # Program Loading
    # =========================================================================

    def load_bytes(self, data: bytes) -> None:
        """
        Load a program image at PROGRAM_START.

        Raises:
            ImageTooLargeError: If the image does not fit. State is unchanged.
        """
        self.state.load_image(bytes(data))

    def load_file(self, path: Union[str, Path]) -> None:
        """
        Load a program image from a file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ImageTooLargeError: If the image does not fit
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Image file not found: {path}")
        data = path.read_bytes()
        self.load_bytes(data)
        logger.info(f"Loaded {path.name} ({len(data)} bytes)")

    def reset(self) -> None:
        """
        Reset to the power-on state.

        Memory is cleared (font re-seeded), so the program must be loaded
        again. Breakpoints and conditions are kept, and so is the keypad
        object, now driving the fresh state with every key released.
        """
        self._build()
        self.breakpoints.clear_break_request()

    # =========================================================================
    # Execution Control
    # =========================================================================

    def _event_for(self, status: ExecStatus) -> BreakEvent:
        """Build the BreakEvent for a non-success tick."""
        address = self.cpu.last_address
        instruction = self.cpu.last_instruction
        word = instruction.word if instruction is not None else None

        if status is ExecStatus.KEY_WAIT_TIMEOUT:
            return self.breakpoints.record(BreakEvent(
                BreakReason.KEY_WAIT,
                address=address,
                word=word,
                status=status,
                message=f"Waiting for key at 0x{address:03X}",
            ))

        error = ExecutionError(status, address, word)
        logger.error(f"Execution halted: {error}")
        return self.breakpoints.record(BreakEvent(
            BreakReason.ERROR,
            address=address,
            word=word,
            status=status,
            message=str(error),
        ))

    def step(self) -> BreakEvent:
        """
        Execute a single instruction.

        Returns immediately after executing one instruction, regardless
        of breakpoints.

        Returns:
            BreakEvent with reason=STEP, or the ERROR / KEY_WAIT event
            when the instruction did not succeed
        """
        status = self.cpu.tick()
        if status is not ExecStatus.SUCCESS:
            return self._event_for(status)
        self._total_instructions += 1
        return BreakEvent(
            BreakReason.STEP,
            address=self.state.program_counter,
            message=f"Step to 0x{self.state.program_counter:03X}",
        )

    def run(self, max_instructions: int = 1_000_000) -> BreakEvent:
        """
        Run until a break condition or the instruction budget is reached.

        Execution continues until:
        - A PC breakpoint or register condition is hit
        - request_break() is called on the breakpoint manager
        - An instruction returns a non-success status
        - max_instructions instructions have executed

        Breakpoints are checked before each instruction, except the first
        one so a run can resume from a breakpoint it stopped on.

        Args:
            max_instructions: Maximum instructions to execute

        Returns:
            BreakEvent describing why execution stopped

        Example:
            >>> emu.breakpoints.add_breakpoint(0x20A)
            >>> event = emu.run(10_000)
            >>> if event.reason == BreakReason.PC_BREAKPOINT:
            ...     print(f"Hit breakpoint at 0x{event.address:03X}")
        """
        self._is_running = True
        try:
            for executed in range(max_instructions):
                if executed:
                    event = self.breakpoints.check_instruction(self.cpu)
                    if event is not None:
                        return event

                status = self.cpu.tick()
                if status is not ExecStatus.SUCCESS:
                    return self._event_for(status)
                self._total_instructions += 1
        finally:
            self._is_running = False

        return self.breakpoints.record(BreakEvent(
            BreakReason.MAX_INSTRUCTIONS,
            address=self.state.program_counter,
            message=f"Reached max instructions ({max_instructions})",
        ))

    def run_or_raise(self, max_instructions: int = 1_000_000) -> BreakEvent:
        """
        Like run(), but a failing instruction raises instead of returning.

        Raises:
            ExecutionError: If an instruction returned an error status
        """
        event = self.run(max_instructions)
        if event.reason is BreakReason.ERROR:
            raise ExecutionError(event.status, event.address, event.word)
        return event

    def run_until_pc(self, address: int, max_instructions: int = 1_000_000) -> bool:
        """
        Run until PC reaches a specific address.

        Creates a temporary breakpoint at the address and runs until hit.

        Returns:
            True if address was reached, False otherwise
        """
        was_set = self.breakpoints.has_breakpoint(address)
        if not was_set:
            self.breakpoints.add_breakpoint(address)

        try:
            event = self.run(max_instructions)
            return (event.reason == BreakReason.PC_BREAKPOINT and
                    event.address == address)
        finally:
            if not was_set:
                self.breakpoints.remove_breakpoint(address)

    # =========================================================================
    # Keypad Input
    # =========================================================================

    def press_key(self, key: KeySpec) -> None:
        """Press a keypad key (index 0-15 or hex digit)."""
        self.keypad.key_down(key)

    def release_key(self, key: KeySpec) -> None:
        """Release a keypad key."""
        self.keypad.key_up(key)

    # =========================================================================
    # Display Access
    # =========================================================================

    @property
    def display_text(self) -> str:
        """Framebuffer as text, '#' for lit pixels."""
        return self.display.get_text()

    def render_display(self, scale: int = 8) -> bytes:
        """Render display to PNG bytes."""
        return self.display.render_image(scale=scale)

    # =========================================================================
    # Memory Access
    # =========================================================================

    def _check_range(self, address: int, count: int) -> None:
        if address < 0 or address + count > MEMORY_SIZE:
            raise IndexError(
                f"Range 0x{address:04X}+{count} outside {MEMORY_SIZE} byte memory"
            )

    def read_byte(self, address: int) -> int:
        """Read a single byte from memory."""
        self._check_range(address, 1)
        return self.state.memory[address]

    def read_word(self, address: int) -> int:
        """Read a 16-bit word from memory (big-endian)."""
        self._check_range(address, 2)
        return (self.state.memory[address] << 8) | self.state.memory[address + 1]

    def read_bytes(self, address: int, count: int) -> bytes:
        """Read multiple bytes from memory."""
        self._check_range(address, count)
        return bytes(self.state.memory[address:address + count])

    def write_byte(self, address: int, value: int) -> None:
        """Write a single byte to memory."""
        self._check_range(address, 1)
        self.state.memory[address] = value & 0xFF

    def write_bytes(self, address: int, data: bytes) -> None:
        """Write multiple bytes to memory."""
        self._check_range(address, len(data))
        self.state.memory[address:address + len(data)] = data

    # =========================================================================
    # State Inspection
    # =========================================================================

    @property
    def registers(self) -> dict:
        """
        Get current register values as a dictionary.

        Returns:
            Dictionary with keys: v0-vf, i, pc, sp, dt, st
        """
        values = {f"v{n:x}": value for n, value in enumerate(self.state.registers)}
        values.update({
            'i': self.state.index_register,
            'pc': self.state.program_counter,
            'sp': self.state.stack_pointer,
            'dt': self.state.delay_timer,
            'st': self.state.sound_timer,
        })
        return values

    @property
    def total_instructions(self) -> int:
        """Instructions successfully executed since the last reset."""
        return self._total_instructions

    @property
    def is_running(self) -> bool:
        """True while inside run()."""
        return self._is_running

    def disassemble_at(self, address: Optional[int] = None, count: int = 10) -> List[str]:
        """
        Disassemble instructions from memory.

        Args:
            address: Starting address (defaults to PC)
            count: Number of instructions

        Returns:
            Lines formatted as "0x200: 00E0  CLS"
        """
        if address is None:
            address = self.state.program_counter
        end = min(address + count * 2, MEMORY_SIZE)
        data = bytes(self.state.memory[address:end])
        return [
            f"0x{addr:03X}: {word:04X}  {instruction}"
            for addr, word, instruction in disassemble(data, base_address=address)
        ]

    def __repr__(self) -> str:
        """Return string representation of emulator state."""
        return (
            f"Emulator(pc=0x{self.state.program_counter:03X}, "
            f"instructions={self._total_instructions})"
        )
