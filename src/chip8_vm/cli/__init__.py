"""
chip8_vm Command-Line Interface
===============================

This package provides command-line tools for chip8_vm:

- **c8run**: Headless program runner
- **c8disasm**: Image disassembler

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["c8run", "c8disasm"]
