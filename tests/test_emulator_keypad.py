"""
Keypad Unit Tests
=================

Tests for the 16-key keypad:
- Key state and the input bitmask
- Key name resolution and host key mapping
- The blocking, cancellable key wait

Copyright (c) 2025 chip8_vm Contributors
"""

import threading

import pytest

from chip8_vm.emulator import (
    HOST_KEY_MAP,
    Keypad,
    MachineState,
    resolve_host_key,
    resolve_key,
)


@pytest.fixture
def keypad():
    """Keypad over a fresh machine state."""
    return Keypad(MachineState())


# =============================================================================
# Key Resolution Tests
# =============================================================================

class TestResolveKey:
    """Test key name parsing."""

    @pytest.mark.parametrize("key, index", [
        (0, 0), (15, 15), ("0", 0), ("9", 9), ("a", 10), ("F", 15),
    ])
    def test_valid(self, key, index):
        assert resolve_key(key) == index

    @pytest.mark.parametrize("key", [16, -1, "G", "10", ""])
    def test_invalid(self, key):
        with pytest.raises(ValueError):
            resolve_key(key)

    def test_host_map_covers_all_keys(self):
        assert sorted(HOST_KEY_MAP.values()) == list(range(16))

    def test_host_key_rows(self):
        assert resolve_host_key("1") == 0x0
        assert resolve_host_key("q") == 0x4
        assert resolve_host_key("F") == 0xB
        assert resolve_host_key("v") == 0xF

    def test_unmapped_host_key(self):
        with pytest.raises(ValueError):
            resolve_host_key("P")


# =============================================================================
# Key State Tests
# =============================================================================

class TestKeyState:
    """Test pressing and releasing keys."""

    def test_initially_released(self, keypad):
        assert keypad.pressed_keys == []
        assert keypad.state.input_state == 0

    def test_key_down_sets_bit(self, keypad):
        keypad.key_down("A")
        assert keypad.is_pressed(0xA)
        assert keypad.state.input_state == 1 << 0xA

    def test_key_up_clears_bit(self, keypad):
        keypad.key_down(3)
        keypad.key_up(3)
        assert not keypad.is_pressed(3)

    def test_release_when_up_is_harmless(self, keypad):
        keypad.key_up(7)
        assert keypad.pressed_keys == []

    def test_multiple_keys(self, keypad):
        keypad.key_down(1)
        keypad.key_down(0xF)
        assert keypad.pressed_keys == [1, 0xF]

    def test_set_key(self, keypad):
        keypad.set_key(2, True)
        assert keypad.is_pressed(2)
        keypad.set_key(2, False)
        assert not keypad.is_pressed(2)

    def test_host_keys(self, keypad):
        keypad.host_key_down("W")
        assert keypad.pressed_keys == [5]
        keypad.host_key_up("w")
        assert keypad.pressed_keys == []

    def test_clear(self, keypad):
        for key in range(16):
            keypad.key_down(key)
        keypad.clear()
        assert keypad.state.input_state == 0

    def test_rebind_moves_to_new_state(self, keypad):
        old = keypad.state
        keypad.key_down(2)
        new = MachineState()
        new.input_state = 0xFFFF
        keypad.rebind(new)

        assert keypad.state is new
        assert new.input_state == 0
        keypad.key_down(7)
        assert new.input_state == 1 << 7
        assert old.input_state == 1 << 2

    def test_rebind_drops_pending_cancel(self, keypad):
        keypad.cancel_wait()
        keypad.rebind(MachineState())
        timer = threading.Timer(0.05, keypad.key_down, args=(3,))
        timer.start()
        try:
            assert keypad.wait_for_press(timeout=5.0) == 3
        finally:
            timer.cancel()


# =============================================================================
# Key Wait Tests
# =============================================================================

class TestWaitForPress:
    """Test the blocking key wait."""

    def test_press_from_other_thread(self, keypad):
        timer = threading.Timer(0.05, keypad.key_down, args=(9,))
        timer.start()
        try:
            assert keypad.wait_for_press(timeout=5.0) == 9
        finally:
            timer.cancel()

    def test_timeout(self, keypad):
        assert keypad.wait_for_press(timeout=0.01) is None

    def test_held_key_is_not_a_new_press(self, keypad):
        keypad.key_down(4)
        assert keypad.wait_for_press(timeout=0.01) is None

    def test_cancel_from_other_thread(self, keypad):
        timer = threading.Timer(0.05, keypad.cancel_wait)
        timer.start()
        try:
            assert keypad.wait_for_press() is None
        finally:
            timer.cancel()

    def test_cancel_before_wait_applies_once(self, keypad):
        keypad.cancel_wait()
        assert keypad.wait_for_press(timeout=5.0) is None
        # Cancellation was consumed; the next wait times out normally
        assert keypad.wait_for_press(timeout=0.01) is None
