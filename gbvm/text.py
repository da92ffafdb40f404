"""Text formatting for dialogue boxes and the overlay window's position."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from .events import Buttons, InputState
from .mathutil import to_int8, to_int16

TEXT_MAX_LENGTH = 255

MENU_CANCEL_LAST = 1
MENU_CANCEL_B = 2

MENU_OPEN_Y = 112
WIN_LEFT_X = 7
MAXWNDPOSY = 143
MENU_CLOSED_Y = MAXWNDPOSY + 1
MENU_LAYOUT_INITIAL_X = 88

UI_PRINT_LEFTTORIGHT = 0
UI_PRINT_RIGHTTOLEFT = 1

UI_WAIT_WINDOW = 1
UI_WAIT_TEXT = 2
UI_WAIT_BTN_A = 4
UI_WAIT_BTN_B = 8
UI_WAIT_BTN_ANY = 16

UI_DRAW_FRAME = 1
UI_AUTOSCROLL = 2

UI_IN_SPEED = -1
UI_OUT_SPEED = -2
UI_SPEED_INSTANT = -3

TEXT_CMD_SPEED = 0x01
TEXT_CMD_FONT = 0x02


def itoa_format(value: int, width: int) -> bytes:
    """Decimal digits of a signed word, zero padded to width digits."""
    value = to_int16(value)
    digits = str(abs(value)).zfill(max(width, 0))
    text = ("-" if value < 0 else "") + digits
    return text.encode("ascii")


def format_text(
    template: Union[bytes, str], values: Sequence[int], rtl: bool = False
) -> bytes:
    """Expand the % codes of a text template with variable values.

    Codes: %d number, %Dn number padded to n digits, %c character,
    %t text speed command, %f font command, %% a literal percent sign.
    Each code other than %% takes the next value in order. The template
    ends at its end or at a zero byte. With rtl, numbers are reversed.
    """
    if isinstance(template, str):
        template = template.encode("latin-1")
    template = bytes(template)
    end = template.find(0)
    if end >= 0:
        template = template[:end]

    out = bytearray()
    remaining = iter(values)

    def next_value(code: str) -> int:
        try:
            return next(remaining)
        except StopIteration:
            raise IndexError(f"no value left for %{code}") from None

    def number(value: int, width: int) -> bytes:
        digits = itoa_format(value, width)
        return digits[::-1] if rtl else digits

    pos = 0
    size = len(template)
    while pos < size:
        char = template[pos]
        if char != ord("%") or pos + 1 >= size:
            out.append(char)
            pos += 1
            continue
        code = chr(template[pos + 1])
        if code == "D":
            if pos + 2 >= size:
                raise ValueError("%D needs a width digit")
            width = template[pos + 2] - ord("0")
            out += number(next_value(code), width)
            pos += 3
        elif code == "d":
            out += number(next_value(code), 0)
            pos += 2
        elif code == "c":
            out.append(next_value(code) & 0xFF)
            pos += 2
        elif code == "t":
            out += bytes([TEXT_CMD_SPEED, (next_value(code) + 0x02) & 0xFF])
            pos += 2
        elif code == "f":
            out += bytes([TEXT_CMD_FONT, (next_value(code) + 0x01) & 0xFF])
            pos += 2
        elif code == "%":
            out.append(ord("%"))
            pos += 2
        else:
            out.append(ord("%"))
            pos += 1

    if len(out) >= TEXT_MAX_LENGTH:
        raise ValueError(
            f"formatted text of {len(out)} bytes exceeds {TEXT_MAX_LENGTH - 1}"
        )
    return bytes(out)


@dataclass
class Overlay:
    """The overlay window: current and target position in pixels, and speeds."""

    pos_x: int = 0
    pos_y: int = MENU_CLOSED_Y
    dest_x: int = 0
    dest_y: int = MENU_CLOSED_Y
    speed: int = 0
    text_in_speed: int = 0
    text_out_speed: int = 0

    def _place(self, x: int, y: int) -> None:
        self.pos_x = self.dest_x = x & 0xFF
        self.pos_y = self.dest_y = y & 0xFF

    def set_pos(self, x: int, y: int) -> None:
        """Place the window at once at tile position (x, y)."""
        self._place(x << 3, y << 3)

    def move_to(self, x: int, y: int, speed: int) -> None:
        """Slide the window to tile position (x, y).

        A speed of UI_IN_SPEED or UI_OUT_SPEED uses the configured text
        speeds; UI_SPEED_INSTANT moves the window at once.
        """
        speed = to_int8(speed)
        if speed == UI_IN_SPEED:
            speed = self.text_in_speed
        elif speed == UI_OUT_SPEED:
            speed = self.text_out_speed
        self.dest_x = (x << 3) & 0xFF
        self.dest_y = (y << 3) & 0xFF
        if speed == UI_SPEED_INSTANT:
            self.pos_x = self.dest_x
            self.pos_y = self.dest_y
        else:
            self.speed = speed

    def hide(self) -> None:
        """Move the window below the screen."""
        self._place(0, MENU_CLOSED_Y)

    @property
    def at_destination(self) -> bool:
        """True once the window has reached its target position."""
        return self.pos_x == self.dest_x and self.pos_y == self.dest_y

    def wait_satisfied(
        self, wait_flags: int, text_drawn: bool, inputs: Optional[InputState]
    ) -> bool:
        """True when every condition named in wait_flags holds."""
        inputs = inputs if inputs is not None else InputState()
        if wait_flags & UI_WAIT_WINDOW and not self.at_destination:
            return False
        if wait_flags & UI_WAIT_TEXT and not text_drawn:
            return False
        if wait_flags & UI_WAIT_BTN_A and not inputs.pressed(Buttons.A):
            return False
        if wait_flags & UI_WAIT_BTN_B and not inputs.pressed(Buttons.B):
            return False
        if wait_flags & UI_WAIT_BTN_ANY and not inputs.any_pressed():
            return False
        return True