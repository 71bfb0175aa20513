"""Registered / Non-Registered Parameter Number messages ((N)RPN).

One logical (N)RPN message travels as 3 or 4 Control Change messages:
number MSB, number LSB, then either Data Entry (MSB and optional LSB) or a
single Data Increment / Data Decrement.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from midi import controller_numbers as cn
from midi.short_message import ControlChange
from midi.values import (
    U7, U14, Channel, RangeError, extract_high_7_bit_value, extract_low_7_bit_value,
)

# (127, 127) deselects the current parameter number.
NULL_PARAMETER_NUMBER = U14(16383)


class DataEntryByteOrder(Enum):
    MSB_FIRST = "msb_first"
    LSB_FIRST = "lsb_first"


class DataType(Enum):
    DATA_ENTRY = "data_entry"
    DATA_INCREMENT = "data_increment"
    DATA_DECREMENT = "data_decrement"


@dataclass(frozen=True)
class AbsoluteValue:
    """A Data Entry value.

    If ``lsb_transmitted`` is False only the Data Entry MSB is sent, so the
    value is a 7-bit value (0-127) carried in that MSB.
    """
    value: U14
    lsb_transmitted: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", U14(self.value))
        object.__setattr__(self, "lsb_transmitted", bool(self.lsb_transmitted))
        if not self.lsb_transmitted and int(self.value) > U7.MAX:
            raise RangeError(
                f"A value sent without LSB must be 0-{U7.MAX}, got {int(self.value)}"
            )


@dataclass(frozen=True)
class Increment:
    step: U7 = field(default_factory=lambda: U7(0))

    def __post_init__(self) -> None:
        object.__setattr__(self, "step", U7(self.step))


@dataclass(frozen=True)
class Decrement:
    step: U7 = field(default_factory=lambda: U7(0))

    def __post_init__(self) -> None:
        object.__setattr__(self, "step", U7(self.step))


ValueKind = Union[AbsoluteValue, Increment, Decrement]


@dataclass(frozen=True)
class ParameterNumberMessage:
    channel: Channel
    number: U14
    value: ValueKind
    is_registered: bool

    def __post_init__(self) -> None:
        object.__setattr__(self, "channel", Channel(self.channel))
        object.__setattr__(self, "number", U14(self.number))
        object.__setattr__(self, "is_registered", bool(self.is_registered))
        if not isinstance(self.value, (AbsoluteValue, Increment, Decrement)):
            raise TypeError(f"Unsupported parameter value: {self.value!r}")

    # -- convenience constructors --

    @classmethod
    def registered_7_bit(cls, channel, number, value) -> ParameterNumberMessage:
        return cls(channel, number, AbsoluteValue(U7(value), lsb_transmitted=False), True)

    @classmethod
    def registered_14_bit(cls, channel, number, value) -> ParameterNumberMessage:
        return cls(channel, number, AbsoluteValue(value), True)

    @classmethod
    def registered_increment(cls, channel, number, step=0) -> ParameterNumberMessage:
        return cls(channel, number, Increment(step), True)

    @classmethod
    def registered_decrement(cls, channel, number, step=0) -> ParameterNumberMessage:
        return cls(channel, number, Decrement(step), True)

    @classmethod
    def non_registered_7_bit(cls, channel, number, value) -> ParameterNumberMessage:
        return cls(channel, number, AbsoluteValue(U7(value), lsb_transmitted=False), False)

    @classmethod
    def non_registered_14_bit(cls, channel, number, value) -> ParameterNumberMessage:
        return cls(channel, number, AbsoluteValue(value), False)

    @classmethod
    def non_registered_increment(cls, channel, number, step=0) -> ParameterNumberMessage:
        return cls(channel, number, Increment(step), False)

    @classmethod
    def non_registered_decrement(cls, channel, number, step=0) -> ParameterNumberMessage:
        return cls(channel, number, Decrement(step), False)

    # -- inspection --

    @property
    def is_14_bit(self) -> bool:
        return isinstance(self.value, AbsoluteValue) and self.value.lsb_transmitted

    @property
    def data_type(self) -> DataType:
        if isinstance(self.value, Increment):
            return DataType.DATA_INCREMENT
        if isinstance(self.value, Decrement):
            return DataType.DATA_DECREMENT
        return DataType.DATA_ENTRY

    @property
    def raw_value(self) -> U14:
        """The value as a plain 14-bit number (step count for inc/dec)."""
        if isinstance(self.value, AbsoluteValue):
            return self.value.value
        return U14(int(self.value.step))

    # -- encoding --

    def to_short_messages(
        self, byte_order: DataEntryByteOrder = DataEntryByteOrder.MSB_FIRST,
    ) -> list[ControlChange]:
        """Control Change messages to send, in order.

        The number is always selected MSB first; ``byte_order`` only decides
        which of the two Data Entry messages goes first.
        """
        if self.is_registered:
            msb_cn, lsb_cn = cn.REGISTERED_PARAMETER_NUMBER_MSB, cn.REGISTERED_PARAMETER_NUMBER_LSB
        else:
            msb_cn, lsb_cn = (cn.NON_REGISTERED_PARAMETER_NUMBER_MSB,
                              cn.NON_REGISTERED_PARAMETER_NUMBER_LSB)
        messages = [
            ControlChange(self.channel, msb_cn, extract_high_7_bit_value(self.number)),
            ControlChange(self.channel, lsb_cn, extract_low_7_bit_value(self.number)),
        ]
        if isinstance(self.value, Increment):
            messages.append(ControlChange(self.channel, cn.DATA_INCREMENT, self.value.step))
        elif isinstance(self.value, Decrement):
            messages.append(ControlChange(self.channel, cn.DATA_DECREMENT, self.value.step))
        elif not self.value.lsb_transmitted:
            messages.append(ControlChange(self.channel, cn.DATA_ENTRY_MSB, int(self.value.value)))
        else:
            msb = ControlChange(self.channel, cn.DATA_ENTRY_MSB,
                                extract_high_7_bit_value(self.value.value))
            lsb = ControlChange(self.channel, cn.DATA_ENTRY_LSB,
                                extract_low_7_bit_value(self.value.value))
            if byte_order == DataEntryByteOrder.LSB_FIRST:
                messages += [lsb, msb]
            else:
                messages += [msb, lsb]
        return messages

    # -- serialization --

    def to_dict(self) -> dict:
        d = {
            "channel": self.channel.to_json(),
            "number": self.number.to_json(),
            "registered": self.is_registered,
            "type": self.data_type.value,
        }
        if isinstance(self.value, AbsoluteValue):
            d["value"] = self.value.value.to_json()
            d["lsb_transmitted"] = self.value.lsb_transmitted
        else:
            d["value"] = self.value.step.to_json()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> ParameterNumberMessage:
        """Rebuild from ``to_dict`` output. All ranges are checked again."""
        try:
            data_type = DataType(d.get("type", DataType.DATA_ENTRY.value))
            raw = d["value"]
            if data_type == DataType.DATA_INCREMENT:
                value = Increment(U7.from_json(raw))
            elif data_type == DataType.DATA_DECREMENT:
                value = Decrement(U7.from_json(raw))
            else:
                value = AbsoluteValue(U14.from_json(raw), bool(d.get("lsb_transmitted", True)))
            return cls(
                channel=Channel.from_json(d["channel"]),
                number=U14.from_json(d["number"]),
                value=value,
                is_registered=bool(d["registered"]),
            )
        except KeyError as exc:
            raise ValueError(f"Parameter number message missing field {exc}") from exc
