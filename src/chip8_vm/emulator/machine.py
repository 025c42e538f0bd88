"""
CHIP-8 Machine State
====================

The register file, memory, call stack, timers, input bitmask and
framebuffer of one CHIP-8 machine, held in a single mutable dataclass.

The state has no behaviour beyond initialisation and image loading. The
CPU, sprite compositor, keypad and display all receive the state
explicitly; nothing in the package keeps a module-level machine.

Memory Map:
    $000-$04F  Font glyphs (16 glyphs x 5 bytes, hex digits 0-F)
    $050-$1FF  Interpreter reserved (unused, zero)
    $200-$FFF  Program image and program data

Copyright (c) 2025 chip8_vm Contributors
"""

import logging
from dataclasses import dataclass, field
from typing import List

from chip8_vm.errors import ImageTooLargeError

logger = logging.getLogger(__name__)


# =============================================================================
# MACHINE CONSTANTS
# =============================================================================

MEMORY_SIZE = 0x1000
FONT_OFFSET = 0x000
FONT_BYTES_PER_GLYPH = 5
PROGRAM_START = 0x200
MAX_IMAGE_SIZE = MEMORY_SIZE - PROGRAM_START

STACK_DEPTH = 16
NUM_REGISTERS = 16
FLAG_REGISTER = 0xF
NUM_KEYS = 16

INSTRUCTION_WIDTH = 2

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
SPRITE_WIDTH = 8


# =============================================================================
# FONT GLYPHS
# =============================================================================
# 4x5 pixel glyphs for hex digits 0-F. Each byte is one row, the high
# nibble holds the pixels (MSB = leftmost).

FONT_SET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


def _blank_framebuffer() -> List[bytearray]:
    return [bytearray(SCREEN_WIDTH) for _ in range(SCREEN_HEIGHT)]


def _seeded_memory() -> bytearray:
    memory = bytearray(MEMORY_SIZE)
    memory[FONT_OFFSET:FONT_OFFSET + len(FONT_SET)] = FONT_SET
    return memory


@dataclass
class MachineState:
    """
    Complete CHIP-8 machine state.

    All values stored as Python ints or mutable byte buffers but represent:
    - registers: 16 x 8-bit (V0-VF), VF doubles as the carry/borrow flag
    - index_register, program_counter: 16-bit
    - stack: STACK_DEPTH return addresses, stack_pointer entries in use
    - delay_timer, sound_timer: 8-bit countdown values
    - input_state: 16-bit mask, bit k set while key k is held
    - memory: MEMORY_SIZE bytes, font pre-loaded at FONT_OFFSET
    - framebuffer: SCREEN_HEIGHT rows of SCREEN_WIDTH cells (0 or 1)
    - display_dirty: framebuffer changed since the renderer last consumed it

    Example:
        >>> state = MachineState.from_image(Path("pong.ch8").read_bytes())
        >>> state.program_counter == PROGRAM_START
        True
    """
    registers: bytearray = field(default_factory=lambda: bytearray(NUM_REGISTERS))
    index_register: int = 0
    program_counter: int = PROGRAM_START
    stack: List[int] = field(default_factory=lambda: [0] * STACK_DEPTH)
    stack_pointer: int = 0
    delay_timer: int = 0
    sound_timer: int = 0
    input_state: int = 0
    memory: bytearray = field(default_factory=_seeded_memory)
    framebuffer: List[bytearray] = field(default_factory=_blank_framebuffer)
    display_dirty: bool = False

    @classmethod
    def from_image(cls, image: bytes) -> "MachineState":
        """Create a fresh state with `image` loaded at PROGRAM_START."""
        state = cls()
        state.load_image(image)
        return state

    def load_image(self, image: bytes) -> None:
        """
        Copy a program image verbatim to PROGRAM_START.

        Args:
            image: Program bytes

        Raises:
            ImageTooLargeError: If the image exceeds MAX_IMAGE_SIZE. Nothing
                is written in that case.
        """
        if len(image) > MAX_IMAGE_SIZE:
            raise ImageTooLargeError(len(image), MAX_IMAGE_SIZE)
        self.memory[PROGRAM_START:PROGRAM_START + len(image)] = image
        logger.debug(f"Loaded {len(image)} byte image at 0x{PROGRAM_START:03X}")

    def snapshot(self) -> tuple:
        """
        Return an immutable copy of every field.

        Two snapshots compare equal exactly when the states are
        byte-for-byte identical.
        """
        return (
            bytes(self.registers),
            self.index_register,
            self.program_counter,
            tuple(self.stack),
            self.stack_pointer,
            self.delay_timer,
            self.sound_timer,
            self.input_state,
            bytes(self.memory),
            tuple(bytes(row) for row in self.framebuffer),
            self.display_dirty,
        )
