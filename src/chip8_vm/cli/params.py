"""
Shared Click Parameter Types
============================

Parameter types used by more than one CLI tool.
"""

from typing import Optional

import click

from chip8_vm.emulator.keypad import resolve_key
from chip8_vm.emulator.machine import MEMORY_SIZE


class AddressType(click.ParamType):
    """
    Click parameter type for memory addresses.

    Accepts: 0x200 (hex), $200 (hex), 512 (decimal)
    """
    name = "address"

    def convert(self, value, param: Optional[click.Parameter],
                ctx: Optional[click.Context]) -> int:
        """Convert string to an address within memory."""
        if isinstance(value, int):
            address = value
        else:
            text = value.strip()
            try:
                if text.lower().startswith("0x"):
                    address = int(text, 16)
                elif text.startswith("$"):
                    address = int(text[1:], 16)
                else:
                    address = int(text)
            except ValueError:
                self.fail(f"Invalid address '{value}'", param, ctx)

        if not 0 <= address < MEMORY_SIZE:
            self.fail(
                f"Address must be 0-{MEMORY_SIZE - 1} (0x000-0x{MEMORY_SIZE - 1:03X})",
                param, ctx
            )
        return address


class KeyType(click.ParamType):
    """
    Click parameter type for keypad keys.

    Accepts a single hex digit 0-F (case-insensitive).
    """
    name = "key"

    def convert(self, value, param: Optional[click.Parameter],
                ctx: Optional[click.Context]) -> int:
        """Convert hex digit to key index."""
        try:
            return resolve_key(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


ADDRESS = AddressType()
KEY = KeyType()
