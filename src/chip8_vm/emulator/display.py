"""
Display Renderer for CHIP-8 Emulator
====================================

Read-side view of the 64x32 monochrome framebuffer held in MachineState.

The framebuffer itself is written only by the sprite compositor and the
CLS instruction. This module is the renderer's side of that contract:
it reads pixels, exports frames as text, raw bytes or PNG images, and
clears the display_dirty flag once a frame has been consumed.

Pixel layout:
- Origin (0, 0) is the top-left corner
- framebuffer[y][x] is 1 when the pixel is lit

Copyright (c) 2025 chip8_vm Contributors
"""

import io
from typing import List, Tuple

from PIL import Image

from .machine import SCREEN_HEIGHT, SCREEN_WIDTH, MachineState


class Display:
    """
    Renderer view over a machine state's framebuffer.

    Example:
        >>> display = Display(state)
        >>> if display.needs_refresh:
        ...     rows = display.consume_frame()
        >>> print(display.get_text())
    """

    def __init__(self, state: MachineState):
        """
        Initialize display view.

        Args:
            state: Machine state whose framebuffer is rendered
        """
        self._state = state

    @property
    def width(self) -> int:
        """Framebuffer width in pixels."""
        return SCREEN_WIDTH

    @property
    def height(self) -> int:
        """Framebuffer height in pixels."""
        return SCREEN_HEIGHT

    @property
    def needs_refresh(self) -> bool:
        """True if the framebuffer changed since the last consume_frame()."""
        return self._state.display_dirty

    def pixel(self, x: int, y: int) -> bool:
        """Return whether the pixel at (x, y) is lit."""
        if not (0 <= x < SCREEN_WIDTH and 0 <= y < SCREEN_HEIGHT):
            raise IndexError(f"Pixel ({x}, {y}) outside {SCREEN_WIDTH}x{SCREEN_HEIGHT} display")
        return bool(self._state.framebuffer[y][x])

    def lit_pixels(self) -> int:
        """Count lit pixels."""
        return sum(sum(row) for row in self._state.framebuffer)

    def consume_frame(self) -> Tuple[bytes, ...]:
        """
        Take the current frame and clear the display_dirty flag.

        Returns:
            One bytes object per row, each cell 0 or 1
        """
        frame = tuple(bytes(row) for row in self._state.framebuffer)
        self._state.display_dirty = False
        return frame

    # =========================================================================
    # Export
    # =========================================================================

    def get_pixel_buffer(self) -> bytes:
        """
        Get display as a pixel buffer.

        Returns:
            Row-major bytes, one byte per pixel, 255 for lit and 0 for dark.
            Size: SCREEN_WIDTH * SCREEN_HEIGHT
        """
        return bytes(255 if cell else 0 for row in self._state.framebuffer for cell in row)

    def get_text_grid(self, on: str = "#", off: str = ".") -> List[str]:
        """Render each framebuffer row as a string."""
        return [
            "".join(on if cell else off for cell in row)
            for row in self._state.framebuffer
        ]

    def get_text(self, on: str = "#", off: str = ".") -> str:
        """Render the framebuffer as newline-separated text."""
        return "\n".join(self.get_text_grid(on, off))

    def render_image(
        self,
        scale: int = 8,
        ink_color: Tuple[int, int, int] = (255, 255, 255),
        paper_color: Tuple[int, int, int] = (0, 0, 0),
    ) -> bytes:
        """
        Render display as PNG image.

        Args:
            scale: Pixel scale factor (default 8, giving 512x256)
            ink_color: RGB tuple for lit pixels
            paper_color: RGB tuple for dark pixels

        Returns:
            PNG image bytes
        """
        if scale < 1:
            raise ValueError(f"scale must be at least 1, got {scale}")

        mask = Image.frombytes("L", (SCREEN_WIDTH, SCREEN_HEIGHT), self.get_pixel_buffer())

        # Colourise, then scale without smoothing so pixels stay square
        rgb = Image.new("RGB", mask.size, color=paper_color)
        rgb.paste(Image.new("RGB", mask.size, color=ink_color), mask=mask)
        if scale != 1:
            rgb = rgb.resize((SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale), Image.NEAREST)

        buffer = io.BytesIO()
        rgb.save(buffer, format="PNG")
        return buffer.getvalue()
