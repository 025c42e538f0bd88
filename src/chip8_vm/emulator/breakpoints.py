"""
Breakpoint System for CHIP-8 Emulator
=====================================

Provides debugging stops for the host run loop:
- PC breakpoints (break when PC reaches an address)
- Register conditions (break when a register matches)
- External break requests (another thread asks the run loop to stop)

The Emulator consults the BreakpointManager before each instruction and
records why a run stopped as a BreakEvent.

Example usage:

    >>> from chip8_vm.emulator import Emulator, BreakReason
    >>> emu = Emulator()
    >>> emu.load_file("pong.ch8")
    >>> emu.breakpoints.add_breakpoint(0x2F4)
    >>> event = emu.run(100_000)
    >>> if event.reason == BreakReason.PC_BREAKPOINT:
    ...     print(f"Hit breakpoint at 0x{event.address:03X}")

Copyright (c) 2025 chip8_vm Contributors
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Set, TYPE_CHECKING

if TYPE_CHECKING:
    from .cpu import Chip8CPU, ExecStatus


class BreakReason(Enum):
    """
    Enumeration of reasons why execution stopped.

    Used in BreakEvent to indicate what triggered the break.
    """
    PC_BREAKPOINT = auto()       # PC reached a breakpoint address
    REGISTER_CONDITION = auto()  # Register condition met
    STEP = auto()                # Single-step
    USER_INTERRUPT = auto()      # Break requested from outside the run loop
    MAX_INSTRUCTIONS = auto()    # Instruction budget exhausted
    KEY_WAIT = auto()            # Blocking key wait timed out or was cancelled
    ERROR = auto()               # Instruction failed; program cannot continue


@dataclass
class BreakEvent:
    """
    Information about why execution stopped.

    Attributes:
        reason: Why execution stopped
        address: PC or failing instruction address (if applicable)
        word: Failing instruction word (ERROR only)
        status: ExecStatus of the last instruction (ERROR and KEY_WAIT)
        message: Human-readable description
    """
    reason: BreakReason
    address: Optional[int] = None
    word: Optional[int] = None
    status: Optional["ExecStatus"] = None
    message: str = ""

    def __str__(self) -> str:
        """Return human-readable description."""
        if self.message:
            return self.message
        match self.reason:
            case BreakReason.PC_BREAKPOINT:
                return f"Breakpoint at 0x{self.address:03X}"
            case BreakReason.REGISTER_CONDITION:
                return "Register condition met"
            case BreakReason.STEP:
                return "Single step"
            case BreakReason.USER_INTERRUPT:
                return "User interrupt"
            case BreakReason.MAX_INSTRUCTIONS:
                return "Maximum instructions reached"
            case BreakReason.KEY_WAIT:
                return "Waiting for key"
            case _:
                return "Runtime error"


class RegisterCondition:
    """
    Condition on CPU registers.

    When the condition evaluates to True, execution stops before the next
    instruction.

    Supported registers: v0-vf, i, pc, sp, dt (delay timer), st (sound timer)

    Supported operators: ==, !=, <, <=, >, >=, & (bitwise test)

    Examples:
        >>> cond = RegisterCondition('v3', '==', 0x42)
        >>> cond = RegisterCondition('i', '>', 0x300)
        >>> cond = RegisterCondition('vf', '&', 1)
    """

    _SPECIAL = {
        'i': lambda cpu: cpu.state.index_register,
        'pc': lambda cpu: cpu.state.program_counter,
        'sp': lambda cpu: cpu.state.stack_pointer,
        'dt': lambda cpu: cpu.state.delay_timer,
        'st': lambda cpu: cpu.state.sound_timer,
    }

    _OPERATORS = {'==', '!=', '<', '<=', '>', '>=', '&'}

    def __init__(self, register: str, operator: str, value: int, description: str = ""):
        """
        Create a register condition.

        Args:
            register: Register name (v0-vf, i, pc, sp, dt, st)
            operator: Comparison operator
            value: Value to compare against
            description: Optional description for debugging
        """
        self.register = register.lower()
        self.operator = operator
        self.value = value
        self.description = description or f"{register} {operator} {value}"

        if self.register not in self._SPECIAL and self._register_index() is None:
            raise ValueError(
                f"Unknown register '{register}'. Valid registers: v0-vf, i, pc, sp, dt, st"
            )
        if self.operator not in self._OPERATORS:
            raise ValueError(
                f"Unknown operator '{operator}'. Valid operators: {', '.join(sorted(self._OPERATORS))}"
            )

    def _register_index(self) -> Optional[int]:
        if len(self.register) == 2 and self.register[0] == 'v':
            try:
                return int(self.register[1], 16)
            except ValueError:
                return None
        return None

    def read(self, cpu: "Chip8CPU") -> int:
        """Read the register this condition watches."""
        if self.register in self._SPECIAL:
            return self._SPECIAL[self.register](cpu)
        return cpu.state.registers[self._register_index()]

    def check(self, cpu: "Chip8CPU") -> bool:
        """
        Check if condition is met against CPU state.

        Returns:
            True if condition is met, False otherwise
        """
        actual = self.read(cpu)
        match self.operator:
            case '==':
                return actual == self.value
            case '!=':
                return actual != self.value
            case '<':
                return actual < self.value
            case '<=':
                return actual <= self.value
            case '>':
                return actual > self.value
            case '>=':
                return actual >= self.value
            case '&':
                return (actual & self.value) != 0
            case _:
                return False

    def __repr__(self) -> str:
        return f"RegisterCondition({self.register!r}, {self.operator!r}, {self.value!r})"


class BreakpointManager:
    """
    Manages breakpoints, register conditions and break requests.

    Example:
        >>> mgr = BreakpointManager()
        >>> mgr.add_breakpoint(0x2F4)
        >>> mgr.add_condition('v0', '==', 0)
        >>> event = mgr.check_instruction(cpu)  # None means keep running
    """

    def __init__(self):
        """Initialize empty breakpoint manager."""
        self._pc_breakpoints: Set[int] = set()

        # Register conditions (list with possible None holes)
        self._register_conditions: List[Optional[RegisterCondition]] = []

        self._last_event: Optional[BreakEvent] = None
        self._break_requested: bool = False

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def last_event(self) -> Optional[BreakEvent]:
        """Get the last break event that occurred."""
        return self._last_event

    @property
    def breakpoint_count(self) -> int:
        """Number of active PC breakpoints."""
        return len(self._pc_breakpoints)

    # =========================================================================
    # PC Breakpoints
    # =========================================================================

    def add_breakpoint(self, address: int) -> None:
        """Add PC breakpoint at a 12-bit address."""
        self._pc_breakpoints.add(address & 0xFFF)

    def remove_breakpoint(self, address: int) -> None:
        """Remove PC breakpoint at address."""
        self._pc_breakpoints.discard(address & 0xFFF)

    def has_breakpoint(self, address: int) -> bool:
        """Check if breakpoint exists at address."""
        return (address & 0xFFF) in self._pc_breakpoints

    def clear_breakpoints(self) -> None:
        """Remove all PC breakpoints."""
        self._pc_breakpoints.clear()

    def list_breakpoints(self) -> List[int]:
        """Sorted list of breakpoint addresses."""
        return sorted(self._pc_breakpoints)

    # =========================================================================
    # Register Conditions
    # =========================================================================

    def add_register_condition(self, condition: RegisterCondition) -> int:
        """
        Add register condition.

        Returns:
            Condition ID for later removal
        """
        for i, c in enumerate(self._register_conditions):
            if c is None:
                self._register_conditions[i] = condition
                return i
        self._register_conditions.append(condition)
        return len(self._register_conditions) - 1

    def add_condition(self, register: str, operator: str, value: int, description: str = "") -> int:
        """Create and add a RegisterCondition. Returns its ID."""
        return self.add_register_condition(
            RegisterCondition(register, operator, value, description)
        )

    def remove_register_condition(self, condition_id: int) -> None:
        """Remove register condition by ID."""
        if 0 <= condition_id < len(self._register_conditions):
            self._register_conditions[condition_id] = None

    def clear_register_conditions(self) -> None:
        """Remove all register conditions."""
        self._register_conditions.clear()

    # =========================================================================
    # Break Control
    # =========================================================================

    def request_break(self) -> None:
        """
        Request execution to break at next opportunity.

        Can be called from another thread to interrupt execution.
        """
        self._break_requested = True

    def clear_break_request(self) -> None:
        """Clear any pending break request."""
        self._break_requested = False

    def clear_all(self) -> None:
        """Remove all breakpoints and conditions."""
        self.clear_breakpoints()
        self.clear_register_conditions()
        self._break_requested = False
        self._last_event = None

    def record(self, event: BreakEvent) -> BreakEvent:
        """Remember `event` as the last break event and return it."""
        self._last_event = event
        return event

    # =========================================================================
    # Check Functions (called by the run loop)
    # =========================================================================

    def check_instruction(self, cpu: "Chip8CPU") -> Optional[BreakEvent]:
        """
        Check if we should break before executing the next instruction.

        Returns:
            BreakEvent to stop, or None to continue
        """
        pc = cpu.state.program_counter

        if self._break_requested:
            self._break_requested = False
            return self.record(BreakEvent(
                BreakReason.USER_INTERRUPT,
                address=pc,
                message="User interrupt",
            ))

        if pc in self._pc_breakpoints:
            return self.record(BreakEvent(
                BreakReason.PC_BREAKPOINT,
                address=pc,
                message=f"Breakpoint at 0x{pc:03X}",
            ))

        for cond in self._register_conditions:
            if cond is not None and cond.check(cpu):
                return self.record(BreakEvent(
                    BreakReason.REGISTER_CONDITION,
                    address=pc,
                    message=f"Condition: {cond.description}",
                ))

        return None
