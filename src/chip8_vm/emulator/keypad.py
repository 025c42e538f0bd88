"""
Hex Keypad for CHIP-8 Emulator
==============================

The CHIP-8 keypad has 16 keys labelled 0-F. The keypad is the only writer
of MachineState.input_state: bit k is set while key k is held.

Layout (key labels):
    1 2 3 C
    4 5 6 D
    7 8 9 E
    A 0 B F

Host keyboards usually map the left-hand 4x4 block onto the keypad. The
mapping below assigns the host keys row by row to key indices 0-F:

    1 2 3 4      0 1 2 3
    Q W E R  ->  4 5 6 7
    A S D F      8 9 A B
    Z X C V      C D E F

Key events normally arrive from a different thread (a UI event loop) than
the one running the CPU. All updates go through a condition variable so the
blocking key wait (FX0A) can sleep until a key goes down, and so a host can
cancel that wait or bound it with a timeout.

Copyright (c) 2025 chip8_vm Contributors
"""

import logging
import threading
from typing import Dict, List, Optional, Union

from .machine import NUM_KEYS, MachineState

logger = logging.getLogger(__name__)


# =============================================================================
# HOST KEY MAPPING
# =============================================================================

HOST_KEY_MAP: Dict[str, int] = {
    "1": 0x0, "2": 0x1, "3": 0x2, "4": 0x3,
    "Q": 0x4, "W": 0x5, "E": 0x6, "R": 0x7,
    "A": 0x8, "S": 0x9, "D": 0xA, "F": 0xB,
    "Z": 0xC, "X": 0xD, "C": 0xE, "V": 0xF,
}

KeySpec = Union[int, str]


def resolve_key(key: KeySpec) -> int:
    """
    Convert a key index or hex digit label to a key index.

    Args:
        key: Integer 0-15, or a single hex digit string ("0"-"F", any case)

    Returns:
        Key index 0-15

    Raises:
        ValueError: If the key does not name a keypad key
    """
    if isinstance(key, str):
        if len(key) != 1 or key.upper() not in "0123456789ABCDEF":
            raise ValueError(f"Unknown key {key!r}, expected a hex digit 0-F")
        return int(key, 16)
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key index must be 0-{NUM_KEYS - 1}, got {key}")
    return key


def resolve_host_key(name: str) -> int:
    """
    Convert a host key name from HOST_KEY_MAP to a key index.

    Raises:
        ValueError: If the host key is not mapped
    """
    try:
        return HOST_KEY_MAP[name.upper()]
    except KeyError:
        raise ValueError(f"Host key {name!r} is not mapped to the keypad") from None


class Keypad:
    """
    Keypad controller bound to one machine state.

    Example:
        >>> keypad = Keypad(state)
        >>> keypad.key_down("A")
        >>> keypad.is_pressed(0xA)
        True
        >>> keypad.key_up(0xA)
        >>> keypad.pressed_keys
        []

    Blocking wait from the CPU thread, released from a UI thread:
        >>> key = keypad.wait_for_press(timeout=5.0)  # CPU thread
        >>> keypad.key_down("5")                       # UI thread
    """

    def __init__(self, state: MachineState):
        """
        Initialize keypad.

        Args:
            state: Machine state whose input_state this keypad drives
        """
        self._state = state
        self._cond = threading.Condition()

        # Keys that went from released to held since the current wait began
        self._press_events = 0
        self._cancelled = False

    @property
    def state(self) -> MachineState:
        """Machine state driven by this keypad."""
        return self._state

    def rebind(self, state: MachineState) -> None:
        """
        Drive a different machine state from now on.

        Used when the emulator resets, so hosts holding this keypad keep
        working. Pending press events and any sticky cancel are dropped;
        the new state starts with all keys released.
        """
        with self._cond:
            self._state = state
            self._state.input_state = 0
            self._press_events = 0
            self._cancelled = False

    # =========================================================================
    # Key Input API
    # =========================================================================

    def key_down(self, key: KeySpec) -> None:
        """Press a key. Pressing a held key has no effect."""
        index = resolve_key(key)
        mask = 1 << index
        with self._cond:
            if self._state.input_state & mask:
                return
            self._state.input_state |= mask
            self._press_events |= mask
            self._cond.notify_all()
        logger.debug(f"Key {index:X} down")

    def key_up(self, key: KeySpec) -> None:
        """Release a key. Releasing a key that is up has no effect."""
        index = resolve_key(key)
        with self._cond:
            self._state.input_state &= ~(1 << index)
        logger.debug(f"Key {index:X} up")

    def set_key(self, key: KeySpec, pressed: bool) -> None:
        """Set a key's state from a boolean."""
        if pressed:
            self.key_down(key)
        else:
            self.key_up(key)

    def host_key_down(self, name: str) -> None:
        """Press the keypad key mapped to a host key name."""
        self.key_down(resolve_host_key(name))

    def host_key_up(self, name: str) -> None:
        """Release the keypad key mapped to a host key name."""
        self.key_up(resolve_host_key(name))

    def clear(self) -> None:
        """Release all keys."""
        with self._cond:
            self._state.input_state = 0

    def is_pressed(self, key: KeySpec) -> bool:
        """Check whether a key is currently held."""
        return bool(self._state.input_state & (1 << resolve_key(key)))

    @property
    def pressed_keys(self) -> List[int]:
        """Indices of all held keys, ascending."""
        mask = self._state.input_state
        return [k for k in range(NUM_KEYS) if mask & (1 << k)]

    # =========================================================================
    # Blocking Wait (FX0A)
    # =========================================================================

    def wait_for_press(self, timeout: Optional[float] = None) -> Optional[int]:
        """
        Block until a key goes from released to held.

        Keys already held when the wait starts do not count until they are
        released and pressed again. If several keys go down before the
        waiting thread wakes, the lowest index wins.

        Args:
            timeout: Seconds to wait, or None to wait until cancelled

        Returns:
            The key index, or None on timeout or cancellation
        """
        with self._cond:
            self._press_events = 0
            self._cond.wait_for(
                lambda: self._press_events or self._cancelled,
                timeout=timeout,
            )
            if self._cancelled:
                self._cancelled = False
                logger.debug("Key wait cancelled")
                return None
            events = self._press_events
            self._press_events = 0

        if not events:
            logger.debug(f"Key wait timed out after {timeout}s")
            return None
        return (events & -events).bit_length() - 1

    def cancel_wait(self) -> None:
        """
        Abort the current key wait, or the next one if none is in progress.

        Safe to call from any thread.
        """
        with self._cond:
            self._cancelled = True
            self._cond.notify_all()
