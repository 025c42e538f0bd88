"""
CHIP-8 Instruction Decoder
==========================

Maps a 16-bit instruction word to an explicit Instruction value: an Op tag
plus the operand fields every CHIP-8 instruction carries at fixed bit
positions.

Instruction word layout:
    15..12  11..8  7..4  3..0
    family    X     Y     N
              |--- NN ----|
          |------ NNN ----|

The high nibble selects a family. Families 0x0, 0x8, 0xE and 0xF need a
second look at the low byte or low nibble to find the actual operation.
Words that match no operation decode to Op.INVALID; the decoder itself
never fails.

Copyright (c) 2025 chip8_vm Contributors
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Tuple

from .machine import INSTRUCTION_WIDTH, PROGRAM_START


class Op(Enum):
    """
    Every CHIP-8 operation, named after the conventional mnemonic.

    The value is the mnemonic template rendered by Instruction.mnemonic().
    """
    CLS = "CLS"
    RET = "RET"
    SYS = "SYS {nnn}"
    JP = "JP {nnn}"
    CALL = "CALL {nnn}"
    SE_VX_NN = "SE V{x}, {nn}"
    SNE_VX_NN = "SNE V{x}, {nn}"
    SE_VX_VY = "SE V{x}, V{y}"
    LD_VX_NN = "LD V{x}, {nn}"
    ADD_VX_NN = "ADD V{x}, {nn}"
    LD_VX_VY = "LD V{x}, V{y}"
    OR = "OR V{x}, V{y}"
    AND = "AND V{x}, V{y}"
    XOR = "XOR V{x}, V{y}"
    ADD_VX_VY = "ADD V{x}, V{y}"
    SUB = "SUB V{x}, V{y}"
    SHR = "SHR V{x}"
    SUBN = "SUBN V{x}, V{y}"
    SHL = "SHL V{x}"
    SNE_VX_VY = "SNE V{x}, V{y}"
    LD_I = "LD I, {nnn}"
    JP_V0 = "JP V0, {nnn}"
    RND = "RND V{x}, {nn}"
    DRW = "DRW V{x}, V{y}, {n}"
    SKP = "SKP V{x}"
    SKNP = "SKNP V{x}"
    LD_VX_DT = "LD V{x}, DT"
    LD_VX_K = "LD V{x}, K"
    LD_DT_VX = "LD DT, V{x}"
    LD_ST_VX = "LD ST, V{x}"
    ADD_I_VX = "ADD I, V{x}"
    LD_F_VX = "LD F, V{x}"
    LD_B_VX = "LD B, V{x}"
    LD_I_VX = "LD [I], V{x}"
    LD_VX_I = "LD V{x}, [I]"
    INVALID = "DW {word}"


# Second-level tables, keyed on the low nibble (0x8) or low byte (0xE, 0xF)
_ALU_OPS = {
    0x0: Op.LD_VX_VY,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD_VX_VY,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL,
}

_KEY_OPS = {
    0x9E: Op.SKP,
    0xA1: Op.SKNP,
}

_MISC_OPS = {
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_VX_K,
    0x15: Op.LD_DT_VX,
    0x18: Op.LD_ST_VX,
    0x1E: Op.ADD_I_VX,
    0x29: Op.LD_F_VX,
    0x33: Op.LD_B_VX,
    0x55: Op.LD_I_VX,
    0x65: Op.LD_VX_I,
}

# Families whose operation is fully determined by the high nibble
_SIMPLE_FAMILIES = {
    0x1: Op.JP,
    0x2: Op.CALL,
    0x3: Op.SE_VX_NN,
    0x4: Op.SNE_VX_NN,
    0x6: Op.LD_VX_NN,
    0x7: Op.ADD_VX_NN,
    0xA: Op.LD_I,
    0xB: Op.JP_V0,
    0xC: Op.RND,
    0xD: Op.DRW,
}


@dataclass(frozen=True)
class Instruction:
    """
    A decoded instruction word.

    Operand fields are always extracted, whether or not the operation
    uses them.

    Attributes:
        op: The operation
        word: The raw 16-bit instruction word
        x: Register index from bits 8-11
        y: Register index from bits 4-7
        nnn: 12-bit address from bits 0-11
        nn: 8-bit immediate from bits 0-7
        n: 4-bit immediate from bits 0-3
    """
    op: Op
    word: int
    x: int
    y: int
    nnn: int
    nn: int
    n: int

    def mnemonic(self) -> str:
        """Render the instruction as assembly text, e.g. 'LD V1, 0x2A'."""
        return self.op.value.format(
            x=f"{self.x:X}",
            y=f"{self.y:X}",
            nnn=f"0x{self.nnn:03X}",
            nn=f"0x{self.nn:02X}",
            n=self.n,
            word=f"0x{self.word:04X}",
        )

    def __str__(self) -> str:
        return self.mnemonic()


def _select_op(word: int) -> Op:
    family = word >> 12
    low_byte = word & 0x00FF
    low_nibble = word & 0x000F

    match family:
        case 0x0:
            if word == 0x00E0:
                return Op.CLS
            if word == 0x00EE:
                return Op.RET
            return Op.SYS
        case 0x5:
            return Op.SE_VX_VY if low_nibble == 0 else Op.INVALID
        case 0x9:
            return Op.SNE_VX_VY if low_nibble == 0 else Op.INVALID
        case 0x8:
            return _ALU_OPS.get(low_nibble, Op.INVALID)
        case 0xE:
            return _KEY_OPS.get(low_byte, Op.INVALID)
        case 0xF:
            return _MISC_OPS.get(low_byte, Op.INVALID)
        case _:
            return _SIMPLE_FAMILIES[family]


def decode(word: int) -> Instruction:
    """
    Decode a 16-bit instruction word.

    Args:
        word: Instruction word (only the low 16 bits are used)

    Returns:
        Instruction with op set to Op.INVALID when nothing matches

    Example:
        >>> decode(0x8AB4).op
        <Op.ADD_VX_VY: 'ADD V{x}, V{y}'>
        >>> str(decode(0xD015))
        'DRW V0, V1, 5'
    """
    word &= 0xFFFF
    return Instruction(
        op=_select_op(word),
        word=word,
        x=(word >> 8) & 0xF,
        y=(word >> 4) & 0xF,
        nnn=word & 0x0FFF,
        nn=word & 0x00FF,
        n=word & 0x000F,
    )


def disassemble(
    data: bytes,
    base_address: int = PROGRAM_START,
) -> Iterator[Tuple[int, int, Instruction]]:
    """
    Walk a byte sequence two bytes at a time.

    A trailing odd byte is padded with zero and reported as a data word.

    Yields:
        (address, word, instruction) triples
    """
    for offset in range(0, len(data), INSTRUCTION_WIDTH):
        chunk = data[offset:offset + INSTRUCTION_WIDTH]
        if len(chunk) < INSTRUCTION_WIDTH:
            word = chunk[0] << 8
            instruction = Instruction(Op.INVALID, word, 0, 0, 0, 0, 0)
        else:
            word = (chunk[0] << 8) | chunk[1]
            instruction = decode(word)
        yield base_address + offset, word, instruction
