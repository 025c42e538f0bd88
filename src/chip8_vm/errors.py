"""
chip8_vm Error Hierarchy
========================

This module defines the exception hierarchy for the host-facing side of
chip8_vm. All exceptions inherit from Chip8Error, allowing callers to catch
every package error with a single except clause.

Exception Hierarchy
-------------------
Chip8Error (base)
├── ImageError (program image handling)
│   └── ImageTooLargeError - image does not fit in program memory
└── ExecutionError - a tick returned a non-success status

Design Philosophy
-----------------
The interpreter core never raises for program faults. Every instruction
returns an ExecStatus, and the machine state is left untouched when that
status is an error. These exceptions exist for the layers above the core
(image loading, the host run loop and the command-line tools) where a
failing program is fatal and should carry the failing address and
instruction word in its message.

Error messages follow this format:
    unsupported opcode 0x0123 at 0x0200
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chip8_vm.emulator.cpu import ExecStatus


# =============================================================================
# Base Exception Class
# =============================================================================

class Chip8Error(Exception):
    """
    Base exception for all chip8_vm errors.

        try:
            emu.load_file("pong.ch8")
            emu.run_or_raise()
        except Chip8Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Image Exceptions
# =============================================================================

class ImageError(Chip8Error):
    """Base exception for program image loading errors."""
    pass


class ImageTooLargeError(ImageError):
    """
    Program image is larger than the program memory region.

    Raised before any byte of the image is copied, so the machine state
    is never partially loaded.

    Attributes:
        size: Size of the rejected image in bytes
        limit: Maximum image size accepted
    """

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"image is {size} bytes, program memory holds at most {limit} bytes"
        )


# =============================================================================
# Execution Exceptions
# =============================================================================

class ExecutionError(Chip8Error):
    """
    A program stopped on a non-success execution status.

    Attributes:
        status: The ExecStatus returned by the tick driver
        address: Address the failing instruction was fetched from
        word: The 16-bit instruction word (None if the fetch itself failed)
    """

    def __init__(self, status: "ExecStatus", address: int, word: int | None = None):
        self.status = status
        self.address = address
        self.word = word
        description = status.name.lower().replace("_", " ")
        if word is None:
            message = f"{description} at 0x{address:04X}"
        else:
            message = f"{description} 0x{word:04X} at 0x{address:04X}"
        super().__init__(message)
