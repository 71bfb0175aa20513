"""Bounded integer types for MIDI's mixed bit-width encoding.

Every value is range-checked when it is created, so code holding a U7 never
has to re-check that it fits in a data byte.
"""
from __future__ import annotations
import re


_DECIMAL = re.compile(r"[+-]?[0-9]+")


class RangeError(ValueError):
    """Raised when an integer does not fit the bit width of a bounded type."""


class ParseError(ValueError):
    """Raised when text cannot be parsed as a decimal integer."""


class _BoundedInt:
    BITS = 0
    MIN = 0
    MAX = 0

    __slots__ = ("_value",)

    def __init__(self, value) -> None:
        if isinstance(value, _BoundedInt):
            value = value._value
        if isinstance(value, bool) or not isinstance(value, int):
            raise RangeError(
                f"{type(self).__name__} requires an integer, got {value!r}"
            )
        if not (self.MIN <= value <= self.MAX):
            raise RangeError(
                f"{type(self).__name__} must be {self.MIN}-{self.MAX}, got {value}"
            )
        object.__setattr__(self, "_value", value)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def get(self) -> int:
        return self._value

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash((type(self), self._value))

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value == other._value

    def __lt__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value < other._value

    def __le__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value <= other._value

    def __gt__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value > other._value

    def __ge__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value >= other._value

    def __reduce__(self):
        return (type(self), (self._value,))

    @classmethod
    def parse(cls, text: str):
        """Parse a decimal string, e.g. ``U7.parse("100")``.

        Only an optional sign followed by ASCII digits is accepted;
        underscores and other forms ``int()`` allows are rejected.
        """
        if not isinstance(text, str) or not _DECIMAL.fullmatch(text.strip()):
            raise ParseError(f"Not a decimal integer: {text!r}")
        return cls(int(text.strip()))

    # -- serialization --

    def to_json(self) -> int:
        return self._value

    @classmethod
    def from_json(cls, obj):
        """Load from untrusted data; range is checked exactly like construction."""
        return cls(obj)


class U4(_BoundedInt):
    """A 4-bit integer (0 - 15)."""
    BITS = 4
    MAX = 15
    __slots__ = ()


class U7(_BoundedInt):
    """A 7-bit integer (0 - 127), the payload of one MIDI data byte."""
    BITS = 7
    MAX = 127
    __slots__ = ()


class U14(_BoundedInt):
    """A 14-bit integer (0 - 16383), sent as two data bytes."""
    BITS = 14
    MAX = 16383
    __slots__ = ()


class Channel(_BoundedInt):
    """A MIDI channel (0 - 15). Displayed to users as 1 - 16."""
    BITS = 4
    MAX = 15
    __slots__ = ()


class KeyNumber(_BoundedInt):
    """A key number (0 - 127) of a note or polyphonic key pressure message."""
    BITS = 7
    MAX = 127
    __slots__ = ()


class ProgramNumber(_BoundedInt):
    BITS = 7
    MAX = 127
    __slots__ = ()


_PARAMETER_NUMBER_MESSAGE_CONTROLLERS = frozenset({6, 38, 96, 97, 98, 99, 100, 101})


class ControllerNumber(_BoundedInt):
    """A controller number (0 - 127) of a Control Change message.

    Named constants live in ``midi.controller_numbers``.
    """
    BITS = 7
    MAX = 127
    __slots__ = ()

    def can_be_part_of_14_bit_control_change_message(self) -> bool:
        return self._value < 64

    def corresponding_14_bit_lsb_controller_number(self) -> ControllerNumber | None:
        """For an MSB controller (0 - 31), the controller carrying its LSB."""
        if self._value >= 32:
            return None
        return ControllerNumber(self._value + 32)

    def is_parameter_number_message_controller_number(self) -> bool:
        """True for the eight controllers taking part in an (N)RPN exchange."""
        return self._value in _PARAMETER_NUMBER_MESSAGE_CONTROLLERS

    def is_channel_mode_message_controller_number(self) -> bool:
        return self._value >= 121


# ---------------------------------------------------------------------------
# 14-bit helpers
# ---------------------------------------------------------------------------

def build_14_bit_value(msb: U7, lsb: U7) -> U14:
    return U14((int(msb) << 7) | int(lsb))


def extract_high_7_bit_value(value: U14) -> U7:
    return U7((int(value) >> 7) & 0x7F)


def extract_low_7_bit_value(value: U14) -> U7:
    return U7(int(value) & 0x7F)
