"""
Command-Line Tool Tests
=======================

Smoke tests for c8run and c8disasm using click's CliRunner.

Copyright (c) 2025 chip8_vm Contributors
"""

import pytest
from click.testing import CliRunner

from chip8_vm.cli import c8disasm, c8run
from chip8_vm.cli.errors import ExitCode, handle_cli_exception
from chip8_vm.emulator import MAX_IMAGE_SIZE, ExecStatus
from chip8_vm.errors import ExecutionError, ImageTooLargeError


def words(*values: int) -> bytes:
    return b"".join(v.to_bytes(2, "big") for v in values)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def program(tmp_path):
    """Image that draws the glyph for 0 and spins."""
    path = tmp_path / "zero.ch8"
    path.write_bytes(words(
        0x6000,  # LD V0, 0x00
        0xF029,  # LD F, V0
        0xD005,  # DRW V0, V0, 5
        0x1206,  # JP 0x206
    ))
    return path


@pytest.fixture
def broken(tmp_path):
    """Image whose second instruction is not an instruction."""
    path = tmp_path / "broken.ch8"
    path.write_bytes(words(0x6000, 0xFFFF))
    return path


# =============================================================================
# c8run Tests
# =============================================================================

class TestC8Run:
    """Tests for the c8run CLI tool."""

    def test_help(self, runner):
        result = runner.invoke(c8run.main, ["--help"])
        assert result.exit_code == 0
        assert "Run a CHIP-8 program image headless" in result.output

    def test_version(self, runner):
        result = runner.invoke(c8run.main, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_run_with_screen(self, runner, program):
        result = runner.invoke(c8run.main, [str(program), "-n", "20", "--screen"])
        assert result.exit_code == ExitCode.SUCCESS
        assert "####" + "." * 60 in result.output
        assert "Stopped: Reached max instructions (20)" in result.output

    def test_breakpoint(self, runner, program):
        result = runner.invoke(c8run.main, [str(program), "--break", "0x204"])
        assert result.exit_code == 0
        assert "Breakpoint at 0x204" in result.output

    def test_png(self, runner, program, tmp_path):
        png = tmp_path / "screen.png"
        result = runner.invoke(c8run.main, [str(program), "-n", "10", "--png", str(png), "--scale", "2"])
        assert result.exit_code == 0
        assert png.read_bytes().startswith(b"\x89PNG")

    def test_execution_error(self, runner, broken):
        result = runner.invoke(c8run.main, [str(broken)])
        assert result.exit_code == ExitCode.EXECUTION_ERROR
        assert "Execution error [INVALID_OPCODE]: invalid opcode 0xFFFF at 0x0202" in result.output

    def test_stack_underflow_named_in_error(self, runner, tmp_path):
        path = tmp_path / "ret.ch8"
        path.write_bytes(words(0x00EE))
        result = runner.invoke(c8run.main, [str(path)])
        assert result.exit_code == ExitCode.EXECUTION_ERROR
        assert "[STACK_UNDERFLOW]: stack underflow 0x00EE at 0x0200" in result.output

    def test_key_wait_stops_run(self, runner, tmp_path):
        path = tmp_path / "wait.ch8"
        path.write_bytes(words(0xF00A))
        result = runner.invoke(c8run.main, [str(path)])
        assert result.exit_code == 0
        assert "Waiting for key at 0x200" in result.output

    def test_press_key(self, runner, tmp_path):
        path = tmp_path / "skp.ch8"
        # LD V0, 0xB; SKP V0; 0xFFFF (skipped); JP 0x206
        path.write_bytes(words(0x600B, 0xE09E, 0xFFFF, 0x1206))
        result = runner.invoke(c8run.main, [str(path), "--press", "b", "-n", "10"])
        assert result.exit_code == 0

    def test_bad_key(self, runner, program):
        result = runner.invoke(c8run.main, [str(program), "--press", "G"])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_bad_address(self, runner, program):
        result = runner.invoke(c8run.main, [str(program), "--break", "0x1000"])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_image_too_large(self, runner, tmp_path):
        path = tmp_path / "huge.ch8"
        path.write_bytes(bytes(MAX_IMAGE_SIZE + 1))
        result = runner.invoke(c8run.main, [str(path)])
        assert result.exit_code == ExitCode.EXECUTION_ERROR
        assert "Image error: image is" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(c8run.main, [str(tmp_path / "nope.ch8")])
        assert result.exit_code == ExitCode.INVALID_ARGS


# =============================================================================
# c8disasm Tests
# =============================================================================

class TestC8Disasm:
    """Tests for the c8disasm CLI tool."""

    def test_help(self, runner):
        result = runner.invoke(c8disasm.main, ["--help"])
        assert result.exit_code == 0
        assert "Disassemble a CHIP-8 program image" in result.output

    def test_basic_disassembly(self, runner, program):
        result = runner.invoke(c8disasm.main, [str(program)])
        assert result.exit_code == 0
        assert "0x200: 6000  LD V0, 0x00" in result.output
        assert "0x204: D005  DRW V0, V0, 5" in result.output
        assert "; Size: 8 bytes" in result.output

    def test_address_and_count(self, runner, program):
        result = runner.invoke(c8disasm.main, [str(program), "--address", "0x300", "--count", "1"])
        assert result.exit_code == 0
        assert "0x300: 6000  LD V0, 0x00" in result.output
        assert "0x302" not in result.output

    def test_no_bytes(self, runner, program):
        result = runner.invoke(c8disasm.main, [str(program), "--no-bytes"])
        assert "0x206: JP 0x206" in result.output

    def test_output_file(self, runner, program, tmp_path):
        out = tmp_path / "zero.lst"
        result = runner.invoke(c8disasm.main, [str(program), "-o", str(out)])
        assert result.exit_code == 0
        assert "DRW V0, V0, 5" in out.read_text()

    def test_data_words(self, runner, broken):
        result = runner.invoke(c8disasm.main, [str(broken)])
        assert "DW 0xFFFF" in result.output

    def test_empty_file(self, runner, tmp_path):
        path = tmp_path / "empty.ch8"
        path.write_bytes(b"")
        result = runner.invoke(c8disasm.main, [str(path)])
        assert result.exit_code == ExitCode.INVALID_ARGS


# =============================================================================
# Error Handler Tests
# =============================================================================

class TestErrorHandler:
    """Tests for handle_cli_exception exit codes and messages."""

    def test_execution_error_names_status(self, capsys):
        error = ExecutionError(ExecStatus.STACK_OVERFLOW, 0x21E, 0x221E)
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(error)
        assert exc_info.value.code == ExitCode.EXECUTION_ERROR
        assert "Execution error [STACK_OVERFLOW]: stack overflow 0x221E at 0x021E" in capsys.readouterr().err

    def test_image_error_uses_label(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(ImageTooLargeError(4000, MAX_IMAGE_SIZE), error_type="Image")
        assert exc_info.value.code == ExitCode.EXECUTION_ERROR
        assert capsys.readouterr().err.startswith("Image error: ")

    def test_os_error_is_invalid_args(self):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(PermissionError("denied"))
        assert exc_info.value.code == ExitCode.INVALID_ARGS

    def test_other_errors_are_internal(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(RuntimeError("boom"))
        assert exc_info.value.code == ExitCode.INTERNAL_ERROR
        assert "Internal error: boom" in capsys.readouterr().err
