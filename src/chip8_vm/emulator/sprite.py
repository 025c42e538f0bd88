"""
Sprite Compositor
=================

The drawing primitive behind DXYN. Sprites are 8 pixels wide and up to
15 rows tall; each row is one byte of memory with the most significant bit
as the leftmost pixel. Pixels are XORed onto the framebuffer and VF reports
whether any lit pixel was erased.

Edge policy: coordinates wrap. A pixel that would land at column 64 lands
at column 0, and likewise for rows.

Copyright (c) 2025 chip8_vm Contributors
"""

from .machine import (
    FLAG_REGISTER,
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
    SPRITE_WIDTH,
    MachineState,
)


def draw_sprite(state: MachineState, x: int, y: int, height: int, address: int) -> bool:
    """
    XOR a sprite from memory onto the framebuffer.

    VF is cleared first and set to 1 if any toggled cell was lit before
    the toggle. The display is marked dirty even when nothing is drawn.

    Args:
        state: Machine state to draw into
        x: Column of the sprite's left edge
        y: Row of the sprite's top edge
        height: Number of rows to draw
        address: Memory address of the first sprite row

    Returns:
        True if a collision occurred
    """
    framebuffer = state.framebuffer
    rows = state.memory[address:address + height]
    collision = False

    state.registers[FLAG_REGISTER] = 0

    for row, bits in enumerate(rows):
        line = framebuffer[(y + row) % SCREEN_HEIGHT]
        for col in range(SPRITE_WIDTH):
            if bits & (0x80 >> col):
                px = (x + col) % SCREEN_WIDTH
                if line[px]:
                    collision = True
                line[px] ^= 1

    if collision:
        state.registers[FLAG_REGISTER] = 1
    state.display_dirty = True
    return collision
