"""14-bit Control Change messages: controller n (0-31) carries the MSB,
controller n + 32 carries the LSB."""
from __future__ import annotations
from dataclasses import dataclass

from midi.short_message import ControlChange
from midi.values import (
    U14, Channel, ControllerNumber, RangeError, build_14_bit_value,
    extract_high_7_bit_value, extract_low_7_bit_value,
)


@dataclass(frozen=True)
class ControlChange14BitMessage:
    channel: Channel
    msb_controller_number: ControllerNumber
    value: U14

    def __post_init__(self) -> None:
        object.__setattr__(self, "channel", Channel(self.channel))
        object.__setattr__(self, "msb_controller_number",
                           ControllerNumber(self.msb_controller_number))
        object.__setattr__(self, "value", U14(self.value))
        if self.msb_controller_number.corresponding_14_bit_lsb_controller_number() is None:
            raise RangeError(
                f"14-bit MSB controller must be 0-31, got {int(self.msb_controller_number)}"
            )

    @property
    def lsb_controller_number(self) -> ControllerNumber:
        return self.msb_controller_number.corresponding_14_bit_lsb_controller_number()

    def to_short_messages(self) -> list[ControlChange]:
        return [
            ControlChange(self.channel, self.msb_controller_number,
                          extract_high_7_bit_value(self.value)),
            ControlChange(self.channel, self.lsb_controller_number,
                          extract_low_7_bit_value(self.value)),
        ]


class ControlChange14BitMessageScanner:
    """Detects MSB/LSB Control Change pairs in a stream of short messages."""

    def __init__(self) -> None:
        # channel -> (msb controller number, msb value)
        self._last_msb: dict[int, tuple] = {}

    def feed(self, message) -> ControlChange14BitMessage | None:
        if not isinstance(message, ControlChange):
            return None
        number = int(message.controller_number)
        channel = int(message.channel)
        if number < 32:
            self._last_msb[channel] = (message.controller_number, message.control_value)
            return None
        if number >= 64 or channel not in self._last_msb:
            return None
        msb_number, msb_value = self._last_msb[channel]
        if message.controller_number != msb_number.corresponding_14_bit_lsb_controller_number():
            return None
        return ControlChange14BitMessage(
            message.channel, msb_number, build_14_bit_value(msb_value, message.control_value),
        )

    def reset(self) -> None:
        self._last_msb.clear()
