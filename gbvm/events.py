"""Joypad state, input-triggered script slots and script timers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntFlag

NUM_INPUTS = 8
INPUT_DPAD = 0x0F
MAX_CONCURRENT_TIMERS = 4


class Buttons(IntFlag):
    """Joypad button bits."""

    RIGHT = 0x01
    LEFT = 0x02
    UP = 0x04
    DOWN = 0x08
    A = 0x10
    B = 0x20
    SELECT = 0x40
    START = 0x80


SOFT_RESTART = Buttons.A | Buttons.B | Buttons.START | Buttons.SELECT


@dataclass
class InputState:
    """Buttons held this frame and last frame, plus the latest direction."""

    joy: int = 0
    last_joy: int = 0
    recent_joy: int = 0

    def update(self, joy: int) -> None:
        """Record a new frame's button state."""
        joy &= 0xFF
        self.last_joy = self.joy
        self.joy = joy
        new_dpad = joy & ~self.last_joy & INPUT_DPAD
        if new_dpad:
            self.recent_joy = new_dpad
        elif self.recent_joy & ~joy:
            self.recent_joy = 0

    def held(self, mask: int) -> bool:
        """True if any button in mask is down."""
        return bool(self.joy & mask)

    def pressed(self, mask: int) -> bool:
        """True on the first frame a button in mask goes down."""
        return bool(self.joy & mask) and not self.last_joy & mask

    def recent(self, mask: int) -> bool:
        """True if mask names the most recently pressed held direction."""
        return bool(self.recent_joy & mask) or (
            not self.recent_joy and bool(self.joy & mask)
        )

    def any_pressed(self) -> bool:
        """True on the first frame any button goes down."""
        return bool(self.joy) and not self.last_joy

    def changed_with(self, mask: int) -> bool:
        """True if input changed this frame and a button in mask is held."""
        return self.joy != self.last_joy and bool(self.joy & mask)

    def soft_restart(self) -> bool:
        """True while A, B, Start and Select are held together and nothing else."""
        return self.joy == SOFT_RESTART

    def reset(self) -> None:
        """Treat the current buttons as already seen."""
        self.last_joy = self.joy


@dataclass
class ScriptEvent:
    """A script to start on an event, and the handle of its thread."""

    handle: int = 0
    bank: int = 0
    addr: int = 0


@dataclass
class EventSlots:
    """Eight script slots, and which slot each button starts."""

    events: list[ScriptEvent] = field(
        default_factory=lambda: [ScriptEvent() for _ in range(NUM_INPUTS)]
    )
    slots: list[int] = field(default_factory=lambda: [0] * NUM_INPUTS)

    def prepare(self, slot: int, bank: int, pc: int) -> None:
        """Set the script of a slot numbered from 1."""
        event = self.events[(slot - 1) & 7]
        event.bank = bank
        event.addr = pc

    def _assign(self, mask: int, slot: int) -> None:
        for bit in range(NUM_INPUTS):
            if (mask >> bit) & 1:
                self.slots[bit] = slot

    def attach(self, mask: int, slot: int) -> None:
        """Bind every button in mask to a slot."""
        self._assign(mask, slot)

    def detach(self, mask: int) -> None:
        """Unbind every button in mask."""
        self._assign(mask, 0)


@dataclass
class TimerValue:
    """Timer period and frames left until it fires."""

    value: int = 0
    remains: int = 0


@dataclass
class Timers:
    """Four timers, each starting a script when it expires."""

    events: list[ScriptEvent] = field(
        default_factory=lambda: [ScriptEvent() for _ in range(MAX_CONCURRENT_TIMERS)]
    )
    values: list[TimerValue] = field(
        default_factory=lambda: [TimerValue() for _ in range(MAX_CONCURRENT_TIMERS)]
    )

    def prepare(self, timer: int, bank: int, pc: int) -> None:
        """Set the script of a timer numbered from 1."""
        event = self.events[(timer - 1) & 3]
        event.bank = bank
        event.addr = pc

    def set(self, timer: int, value: int) -> None:
        """Start a timer with the given period."""
        entry = self.values[(timer - 1) & 3]
        entry.value = value & 0xFF
        entry.remains = value & 0xFF

    def stop(self, timer: int) -> None:
        """Stop a timer."""
        self.values[(timer - 1) & 3].value = 0

    def reset(self, timer: int) -> None:
        """Restart a timer's countdown from its period."""
        entry = self.values[(timer - 1) & 3]
        entry.remains = entry.value