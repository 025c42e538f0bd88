"""
CHIP-8 CPU
==========

Executor and tick driver for the CHIP-8 instruction set.

The CPU owns no machine state of its own: it operates on a MachineState
passed in at construction, a Keypad bound to the same state (for the
blocking key wait) and a random source (for RND).

Execution model:
- tick() fetches the big-endian word at PC, advances PC by 2, decodes and
  executes it, then decrements both timers if the instruction succeeded.
- execute() runs a single instruction without fetching or timer updates.
- Every instruction reports an ExecStatus. When the status is an error the
  machine state is exactly as it was before execute() was called; handlers
  check stack capacity, memory bounds and key availability before their
  first write.

Flag register (VF) conventions:
- ADD VX, VY: VF = carry (sum > 255)
- SUB VX, VY: VF = no borrow (VX >= VY)
- SUBN VX, VY: VF = no borrow (VY >= VX)
- SHR / SHL: VF = bit shifted out
- DRW: VF = pixel collision
- ADD I, VX: VF = I + VX left the 12-bit address range
Flags are computed from operand values before any register is written.
VF is written first and VX second, so when VF itself is the destination
the result wins.

Copyright (c) 2025 chip8_vm Contributors
"""

import logging
import random
from enum import Enum
from typing import Optional, Union, assert_never

from .decoder import Instruction, Op, decode
from .keypad import Keypad
from .machine import (
    FLAG_REGISTER,
    FONT_BYTES_PER_GLYPH,
    FONT_OFFSET,
    INSTRUCTION_WIDTH,
    MEMORY_SIZE,
    STACK_DEPTH,
    MachineState,
)
from .sprite import draw_sprite

logger = logging.getLogger(__name__)


class ExecStatus(Enum):
    """
    Completion status of one instruction.

    Everything other than SUCCESS is an error: the instruction had no
    effect on the machine state.
    """
    SUCCESS = "success"
    UNSUPPORTED_OPCODE = "unsupported opcode"   # 0NNN machine code calls
    INVALID_OPCODE = "invalid opcode"           # no such operation
    STACK_OVERFLOW = "stack overflow"           # CALL with a full stack
    STACK_UNDERFLOW = "stack underflow"         # RET with an empty stack
    MEMORY_OUT_OF_RANGE = "memory out of range"  # access past end of memory
    KEY_WAIT_TIMEOUT = "key wait timeout"       # FX0A timed out or cancelled

    @property
    def is_error(self) -> bool:
        """True for every status except SUCCESS."""
        return self is not ExecStatus.SUCCESS


class Chip8CPU:
    """
    CHIP-8 interpreter core.

    Example:
        >>> state = MachineState.from_image(bytes([0x60, 0x2A]))  # LD V0, 0x2A
        >>> cpu = Chip8CPU(state)
        >>> cpu.tick()
        <ExecStatus.SUCCESS: 'success'>
        >>> state.registers[0]
        42
    """

    def __init__(
        self,
        state: MachineState,
        keypad: Optional[Keypad] = None,
        rng: Optional[random.Random] = None,
        key_wait_timeout: Optional[float] = None,
        trace: bool = False,
    ):
        """
        Initialize CPU.

        Args:
            state: Machine state to execute against
            keypad: Keypad bound to `state`. One is created if omitted.
            rng: Random source for RND. A fresh unseeded one if omitted.
            key_wait_timeout: Seconds FX0A blocks before giving up,
                None to block until the keypad wait is cancelled
            trace: Log every executed instruction at DEBUG level
        """
        if keypad is not None and keypad.state is not state:
            raise ValueError("keypad is bound to a different machine state")

        self.state = state
        self.keypad = keypad or Keypad(state)
        self.rng = rng or random.Random()
        self.key_wait_timeout = key_wait_timeout
        self.trace = trace

        # Address and decoded form of the most recently fetched instruction
        self.last_address: Optional[int] = None
        self.last_instruction: Optional[Instruction] = None

    # ========================================
    # Register Properties
    # ========================================

    @property
    def pc(self) -> int:
        """Program counter (16-bit)."""
        return self.state.program_counter

    @pc.setter
    def pc(self, value: int) -> None:
        self.state.program_counter = value & 0xFFFF

    @property
    def i(self) -> int:
        """Index register (16-bit)."""
        return self.state.index_register

    @i.setter
    def i(self, value: int) -> None:
        self.state.index_register = value & 0xFFFF

    @property
    def sp(self) -> int:
        """Number of return addresses on the call stack."""
        return self.state.stack_pointer

    @property
    def v(self) -> bytearray:
        """General registers V0-VF."""
        return self.state.registers

    # ========================================
    # Tick Driver
    # ========================================

    def tick(self) -> ExecStatus:
        """
        Fetch, decode and execute one instruction.

        Timers are decremented (never below zero) only when the instruction
        succeeds. A key wait that times out rewinds PC onto the FX0A
        instruction so the next tick resumes waiting.

        Returns:
            The instruction's ExecStatus
        """
        state = self.state
        address = state.program_counter

        if address + 1 >= MEMORY_SIZE:
            self.last_address = address
            self.last_instruction = None
            logger.warning(f"PC 0x{address:04X} is outside memory")
            return ExecStatus.MEMORY_OUT_OF_RANGE

        word = (state.memory[address] << 8) | state.memory[address + 1]
        instruction = decode(word)
        self.last_address = address
        self.last_instruction = instruction

        if self.trace:
            logger.debug(f"0x{address:03X}: {word:04X}  {instruction}")

        state.program_counter = (address + INSTRUCTION_WIDTH) & 0xFFFF
        status = self.execute(instruction)

        if status is ExecStatus.SUCCESS:
            if state.delay_timer:
                state.delay_timer -= 1
            if state.sound_timer:
                state.sound_timer -= 1
        elif status is ExecStatus.KEY_WAIT_TIMEOUT:
            state.program_counter = address
        else:
            logger.warning(f"{status.value} 0x{word:04X} at 0x{address:03X}")

        return status

    def step(self) -> ExecStatus:
        """Execute exactly one instruction (alias for tick)."""
        return self.tick()

    # ========================================
    # Helpers
    # ========================================

    def _skip_if(self, condition: bool) -> None:
        if condition:
            self.pc = self.state.program_counter + INSTRUCTION_WIDTH

    def _set_with_flag(self, x: int, result: int, flag: int) -> None:
        """Write VF, then VX. VX wins when x is the flag register."""
        self.state.registers[FLAG_REGISTER] = flag
        self.state.registers[x] = result & 0xFF

    @staticmethod
    def _in_memory(address: int, length: int) -> bool:
        return address + length <= MEMORY_SIZE

    # ========================================
    # Executor
    # ========================================

    def execute(self, instruction: Union[Instruction, int]) -> ExecStatus:
        """
        Execute a single instruction against the machine state.

        PC is expected to already point past the instruction; jumps and
        skips are relative to that.

        Args:
            instruction: Decoded Instruction or raw 16-bit word

        Returns:
            ExecStatus describing the outcome
        """
        if isinstance(instruction, int):
            instruction = decode(instruction)

        state = self.state
        v = state.registers
        x, y = instruction.x, instruction.y
        nnn, nn, n = instruction.nnn, instruction.nn, instruction.n

        match instruction.op:
            # ============================================
            # System and Flow Control
            # ============================================
            case Op.CLS:
                for row in state.framebuffer:
                    row[:] = bytes(len(row))
                state.display_dirty = True
            case Op.RET:
                if state.stack_pointer == 0:
                    return ExecStatus.STACK_UNDERFLOW
                state.stack_pointer -= 1
                self.pc = state.stack[state.stack_pointer]
            case Op.SYS:
                return ExecStatus.UNSUPPORTED_OPCODE
            case Op.JP:
                self.pc = nnn
            case Op.CALL:
                if state.stack_pointer >= STACK_DEPTH:
                    return ExecStatus.STACK_OVERFLOW
                state.stack[state.stack_pointer] = state.program_counter
                state.stack_pointer += 1
                self.pc = nnn
            case Op.JP_V0:
                self.pc = nnn + v[0]

            # ============================================
            # Conditional Skips
            # ============================================
            case Op.SE_VX_NN:
                self._skip_if(v[x] == nn)
            case Op.SNE_VX_NN:
                self._skip_if(v[x] != nn)
            case Op.SE_VX_VY:
                self._skip_if(v[x] == v[y])
            case Op.SNE_VX_VY:
                self._skip_if(v[x] != v[y])
            case Op.SKP:
                self._skip_if(bool((state.input_state >> v[x]) & 1))
            case Op.SKNP:
                self._skip_if(not (state.input_state >> v[x]) & 1)

            # ============================================
            # Immediate Loads and Arithmetic
            # ============================================
            case Op.LD_VX_NN:
                v[x] = nn
            case Op.ADD_VX_NN:
                v[x] = (v[x] + nn) & 0xFF
            case Op.RND:
                v[x] = self.rng.randint(0, nn)

            # ============================================
            # Register ALU (8XY_)
            # ============================================
            case Op.LD_VX_VY:
                v[x] = v[y]
            case Op.OR:
                v[x] |= v[y]
            case Op.AND:
                v[x] &= v[y]
            case Op.XOR:
                v[x] ^= v[y]
            case Op.ADD_VX_VY:
                total = v[x] + v[y]
                self._set_with_flag(x, total, 1 if total > 0xFF else 0)
            case Op.SUB:
                self._set_with_flag(x, v[x] - v[y], 1 if v[x] >= v[y] else 0)
            case Op.SUBN:
                self._set_with_flag(x, v[y] - v[x], 1 if v[y] >= v[x] else 0)
            case Op.SHR:
                self._set_with_flag(x, v[x] >> 1, v[x] & 0x01)
            case Op.SHL:
                self._set_with_flag(x, v[x] << 1, (v[x] >> 7) & 0x01)

            # ============================================
            # Index Register and Memory
            # ============================================
            case Op.LD_I:
                self.i = nnn
            case Op.ADD_I_VX:
                total = state.index_register + v[x]
                self.i = total
                v[FLAG_REGISTER] = 1 if total > 0xFFF else 0
            case Op.LD_F_VX:
                self.i = FONT_OFFSET + v[x] * FONT_BYTES_PER_GLYPH
            case Op.LD_B_VX:
                address = state.index_register
                if not self._in_memory(address, 3):
                    return ExecStatus.MEMORY_OUT_OF_RANGE
                value = v[x]
                state.memory[address] = value // 100
                state.memory[address + 1] = (value // 10) % 10
                state.memory[address + 2] = value % 10
            case Op.LD_I_VX:
                address = state.index_register
                if not self._in_memory(address, x + 1):
                    return ExecStatus.MEMORY_OUT_OF_RANGE
                state.memory[address:address + x + 1] = v[:x + 1]
            case Op.LD_VX_I:
                address = state.index_register
                if not self._in_memory(address, x + 1):
                    return ExecStatus.MEMORY_OUT_OF_RANGE
                v[:x + 1] = state.memory[address:address + x + 1]

            # ============================================
            # Display
            # ============================================
            case Op.DRW:
                if not self._in_memory(state.index_register, n):
                    return ExecStatus.MEMORY_OUT_OF_RANGE
                draw_sprite(state, v[x], v[y], n, state.index_register)

            # ============================================
            # Timers and Input
            # ============================================
            case Op.LD_VX_DT:
                v[x] = state.delay_timer & 0xFF
            case Op.LD_DT_VX:
                state.delay_timer = v[x]
            case Op.LD_ST_VX:
                state.sound_timer = v[x]
            case Op.LD_VX_K:
                key = self.keypad.wait_for_press(self.key_wait_timeout)
                if key is None:
                    return ExecStatus.KEY_WAIT_TIMEOUT
                v[x] = key

            case Op.INVALID:
                return ExecStatus.INVALID_OPCODE
            case _:
                assert_never(instruction.op)

        return ExecStatus.SUCCESS

    def __repr__(self) -> str:
        return (
            f"Chip8CPU(pc=0x{self.pc:03X}, i=0x{self.i:03X}, "
            f"sp={self.sp}, v={self.v.hex()})"
        )
