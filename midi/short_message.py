"""MIDI 1.0 short messages (1-3 bytes) and their byte-exact wire form.

Each message kind is a frozen dataclass. Fields are coerced to their bounded
types on construction, so ``ControlChange(0, 7, 100)`` and
``ControlChange(Channel(0), ControllerNumber(7), U7(100))`` are the same
message, while ``ControlChange(0, 7, 128)`` raises ``RangeError``.
"""
from __future__ import annotations
import operator
from dataclasses import dataclass, fields
from enum import Enum, IntEnum
from typing import Iterable, Union

from midi.values import (
    U4, U7, U14, Channel, ControllerNumber, KeyNumber, ProgramNumber, RangeError,
    build_14_bit_value, extract_high_7_bit_value, extract_low_7_bit_value,
)


class InvalidMessage(ValueError):
    """Raised when bytes violate MIDI status/data byte framing."""


class ShortMessageType(IntEnum):
    # Channel messages: status byte with channel 0
    NOTE_OFF = 0x80
    NOTE_ON = 0x90
    POLYPHONIC_KEY_PRESSURE = 0xA0
    CONTROL_CHANGE = 0xB0
    PROGRAM_CHANGE = 0xC0
    CHANNEL_PRESSURE = 0xD0
    PITCH_BEND_CHANGE = 0xE0
    # System exclusive
    SYSTEM_EXCLUSIVE_START = 0xF0
    # System common
    TIME_CODE_QUARTER_FRAME = 0xF1
    SONG_POSITION_POINTER = 0xF2
    SONG_SELECT = 0xF3
    SYSTEM_COMMON_UNDEFINED_1 = 0xF4
    SYSTEM_COMMON_UNDEFINED_2 = 0xF5
    TUNE_REQUEST = 0xF6
    SYSTEM_EXCLUSIVE_END = 0xF7
    # System real time
    TIMING_CLOCK = 0xF8
    SYSTEM_REAL_TIME_UNDEFINED_1 = 0xF9
    START = 0xFA
    CONTINUE = 0xFB
    STOP = 0xFC
    SYSTEM_REAL_TIME_UNDEFINED_2 = 0xFD
    ACTIVE_SENSING = 0xFE
    SYSTEM_RESET = 0xFF

    @classmethod
    def from_status_byte(cls, status_byte: int) -> ShortMessageType:
        if not (0x80 <= status_byte <= 0xFF):
            raise InvalidMessage(f"Invalid status byte: {status_byte:#04x}")
        if status_byte >= 0xF0:
            return cls(status_byte)
        return cls(status_byte & 0xF0)

    @property
    def is_channel_type(self) -> bool:
        return self.value < 0xF0

    @property
    def super_type(self) -> FuzzyMessageSuperType:
        """Super type as far as it can be told from the type alone.

        Control Change may be channel voice or channel mode depending on the
        controller number, so all channel types map to ``CHANNEL``.
        """
        if self.is_channel_type:
            return FuzzyMessageSuperType.CHANNEL
        if self == ShortMessageType.SYSTEM_EXCLUSIVE_START:
            return FuzzyMessageSuperType.SYSTEM_EXCLUSIVE
        if self.value in _SYSTEM_COMMON:
            return FuzzyMessageSuperType.SYSTEM_COMMON
        return FuzzyMessageSuperType.SYSTEM_REAL_TIME


class MessageMainCategory(Enum):
    CHANNEL = "channel"
    SYSTEM = "system"


class FuzzyMessageSuperType(Enum):
    CHANNEL = "channel"
    SYSTEM_COMMON = "system_common"
    SYSTEM_REAL_TIME = "system_real_time"
    SYSTEM_EXCLUSIVE = "system_exclusive"

    @property
    def main_category(self) -> MessageMainCategory:
        if self == FuzzyMessageSuperType.CHANNEL:
            return MessageMainCategory.CHANNEL
        return MessageMainCategory.SYSTEM


class MessageSuperType(Enum):
    CHANNEL_VOICE = "channel_voice"
    CHANNEL_MODE = "channel_mode"
    SYSTEM_COMMON = "system_common"
    SYSTEM_REAL_TIME = "system_real_time"
    SYSTEM_EXCLUSIVE = "system_exclusive"

    @property
    def main_category(self) -> MessageMainCategory:
        if self in (MessageSuperType.CHANNEL_VOICE, MessageSuperType.CHANNEL_MODE):
            return MessageMainCategory.CHANNEL
        return MessageMainCategory.SYSTEM


_SYSTEM_COMMON = frozenset({0xF1, 0xF2, 0xF3, 0xF4, 0xF5, 0xF6, 0xF7})


def message_length(status_byte: int) -> int:
    """Total length in bytes of the message starting with this status byte."""
    msg_type = ShortMessageType.from_status_byte(status_byte)
    if msg_type in (ShortMessageType.PROGRAM_CHANGE, ShortMessageType.CHANNEL_PRESSURE,
                    ShortMessageType.TIME_CODE_QUARTER_FRAME, ShortMessageType.SONG_SELECT):
        return 2
    if msg_type.is_channel_type or msg_type == ShortMessageType.SONG_POSITION_POINTER:
        return 3
    return 1


# ---------------------------------------------------------------------------
# Base classes
# ---------------------------------------------------------------------------

# Data fields only some message kinds carry. Reading one on a message that
# does not carry it gives None instead of AttributeError.
_OPTIONAL_FIELDS = frozenset({
    "key_number", "velocity", "controller_number", "control_value",
    "program_number", "pressure_amount", "pitch_bend_value",
})


class _ShortMessageBase:
    TYPE: ShortMessageType

    def __getattr__(self, name):
        if name in _OPTIONAL_FIELDS:
            return None
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def _coerce(self, **types) -> None:
        for name, kind in types.items():
            object.__setattr__(self, name, kind(getattr(self, name)))

    @property
    def type(self) -> ShortMessageType:
        return self.TYPE

    @property
    def status_byte(self) -> int:
        return int(self.TYPE)

    def data_bytes(self) -> tuple[int, ...]:
        return ()

    def to_bytes(self) -> bytes:
        return bytes((self.status_byte, *self.data_bytes()))

    @property
    def super_type(self) -> MessageSuperType:
        raise NotImplementedError

    @property
    def main_category(self) -> MessageMainCategory:
        return self.super_type.main_category

    @property
    def is_note_on(self) -> bool:
        """Note On with a velocity above zero."""
        return False

    @property
    def is_note_off(self) -> bool:
        """Note Off, or Note On with velocity zero."""
        return False

    @property
    def is_note(self) -> bool:
        """Note On or Note Off, whatever the velocity."""
        return self.TYPE in (ShortMessageType.NOTE_ON, ShortMessageType.NOTE_OFF)

    @classmethod
    def _decode(cls, status_byte: int, data: list[int]):
        return cls()


class _ChannelMessage(_ShortMessageBase):
    @property
    def status_byte(self) -> int:
        return int(self.TYPE) | int(self.channel)

    @property
    def super_type(self) -> MessageSuperType:
        return MessageSuperType.CHANNEL_VOICE


class _SystemMessage(_ShortMessageBase):
    @property
    def channel(self) -> None:
        return None

    @property
    def super_type(self) -> MessageSuperType:
        if self.TYPE == ShortMessageType.SYSTEM_EXCLUSIVE_START:
            return MessageSuperType.SYSTEM_EXCLUSIVE
        if int(self.TYPE) in _SYSTEM_COMMON:
            return MessageSuperType.SYSTEM_COMMON
        return MessageSuperType.SYSTEM_REAL_TIME


# ---------------------------------------------------------------------------
# Channel messages
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NoteOff(_ChannelMessage):
    channel: Channel
    key_number: KeyNumber
    velocity: U7

    TYPE = ShortMessageType.NOTE_OFF

    def __post_init__(self) -> None:
        self._coerce(channel=Channel, key_number=KeyNumber, velocity=U7)

    def data_bytes(self) -> tuple[int, ...]:
        return (int(self.key_number), int(self.velocity))

    @property
    def is_note_off(self) -> bool:
        return True

    @classmethod
    def _decode(cls, status_byte, data):
        return cls(status_byte & 0x0F, data[0], data[1])


@dataclass(frozen=True)
class NoteOn(_ChannelMessage):
    channel: Channel
    key_number: KeyNumber
    velocity: U7

    TYPE = ShortMessageType.NOTE_ON

    def __post_init__(self) -> None:
        self._coerce(channel=Channel, key_number=KeyNumber, velocity=U7)

    def data_bytes(self) -> tuple[int, ...]:
        return (int(self.key_number), int(self.velocity))

    @property
    def is_note_on(self) -> bool:
        return int(self.velocity) > 0

    @property
    def is_note_off(self) -> bool:
        return int(self.velocity) == 0

    @classmethod
    def _decode(cls, status_byte, data):
        return cls(status_byte & 0x0F, data[0], data[1])


@dataclass(frozen=True)
class PolyphonicKeyPressure(_ChannelMessage):
    channel: Channel
    key_number: KeyNumber
    pressure_amount: U7

    TYPE = ShortMessageType.POLYPHONIC_KEY_PRESSURE

    def __post_init__(self) -> None:
        self._coerce(channel=Channel, key_number=KeyNumber, pressure_amount=U7)

    def data_bytes(self) -> tuple[int, ...]:
        return (int(self.key_number), int(self.pressure_amount))

    @classmethod
    def _decode(cls, status_byte, data):
        return cls(status_byte & 0x0F, data[0], data[1])


@dataclass(frozen=True)
class ControlChange(_ChannelMessage):
    """Control Change. Controllers 121-127 make it a Channel Mode message."""
    channel: Channel
    controller_number: ControllerNumber
    control_value: U7

    TYPE = ShortMessageType.CONTROL_CHANGE

    def __post_init__(self) -> None:
        self._coerce(channel=Channel, controller_number=ControllerNumber, control_value=U7)

    def data_bytes(self) -> tuple[int, ...]:
        return (int(self.controller_number), int(self.control_value))

    @property
    def super_type(self) -> MessageSuperType:
        if self.controller_number.is_channel_mode_message_controller_number():
            return MessageSuperType.CHANNEL_MODE
        return MessageSuperType.CHANNEL_VOICE

    @classmethod
    def _decode(cls, status_byte, data):
        return cls(status_byte & 0x0F, data[0], data[1])


@dataclass(frozen=True)
class ProgramChange(_ChannelMessage):
    channel: Channel
    program_number: ProgramNumber

    TYPE = ShortMessageType.PROGRAM_CHANGE

    def __post_init__(self) -> None:
        self._coerce(channel=Channel, program_number=ProgramNumber)

    def data_bytes(self) -> tuple[int, ...]:
        return (int(self.program_number),)

    @classmethod
    def _decode(cls, status_byte, data):
        return cls(status_byte & 0x0F, data[0])


@dataclass(frozen=True)
class ChannelPressure(_ChannelMessage):
    channel: Channel
    pressure_amount: U7

    TYPE = ShortMessageType.CHANNEL_PRESSURE

    def __post_init__(self) -> None:
        self._coerce(channel=Channel, pressure_amount=U7)

    def data_bytes(self) -> tuple[int, ...]:
        return (int(self.pressure_amount),)

    @classmethod
    def _decode(cls, status_byte, data):
        return cls(status_byte & 0x0F, data[0])


@dataclass(frozen=True)
class PitchBendChange(_ChannelMessage):
    """Pitch bend; 8192 is center. The LSB travels first on the wire."""
    channel: Channel
    pitch_bend_value: U14

    TYPE = ShortMessageType.PITCH_BEND_CHANGE

    def __post_init__(self) -> None:
        self._coerce(channel=Channel, pitch_bend_value=U14)

    def data_bytes(self) -> tuple[int, ...]:
        return (int(extract_low_7_bit_value(self.pitch_bend_value)),
                int(extract_high_7_bit_value(self.pitch_bend_value)))

    @classmethod
    def _decode(cls, status_byte, data):
        return cls(status_byte & 0x0F, build_14_bit_value(U7(data[1]), U7(data[0])))


# ---------------------------------------------------------------------------
# System messages
# ---------------------------------------------------------------------------

class TimeCodeType(IntEnum):
    FPS_24 = 0
    FPS_25 = 1
    FPS_30_DROP_FRAME = 2
    FPS_30_NON_DROP = 3


class QuarterFrameKind(IntEnum):
    FRAME_COUNT_LS_NIBBLE = 0
    FRAME_COUNT_MS_NIBBLE = 1
    SECONDS_COUNT_LS_NIBBLE = 2
    SECONDS_COUNT_MS_NIBBLE = 3
    MINUTES_COUNT_LS_NIBBLE = 4
    MINUTES_COUNT_MS_NIBBLE = 5
    HOURS_COUNT_LS_NIBBLE = 6
    LAST = 7


@dataclass(frozen=True)
class SystemExclusiveStart(_SystemMessage):
    """The bare 0xF0 status byte. Sysex payloads are not parsed."""
    TYPE = ShortMessageType.SYSTEM_EXCLUSIVE_START


@dataclass(frozen=True)
class TimeCodeQuarterFrame(_SystemMessage):
    """One MIDI Time Code quarter frame: a 3-bit kind and a 4-bit payload.

    For the ``LAST`` kind the payload holds the most significant hours bit
    (bit 0) and the time code type (bits 1-2).
    """
    kind: QuarterFrameKind
    value: U4

    TYPE = ShortMessageType.TIME_CODE_QUARTER_FRAME

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "kind", QuarterFrameKind(operator.index(self.kind)))
        except (TypeError, ValueError) as exc:
            raise RangeError(f"Quarter frame kind must be 0-7, got {self.kind!r}") from exc
        self._coerce(value=U4)

    @classmethod
    def last(cls, hours_count_ms_bit: bool, time_code_type: TimeCodeType) -> TimeCodeQuarterFrame:
        return cls(QuarterFrameKind.LAST,
                   U4((int(TimeCodeType(time_code_type)) << 1) | int(bool(hours_count_ms_bit))))

    @property
    def hours_count_ms_bit(self) -> bool | None:
        if self.kind != QuarterFrameKind.LAST:
            return None
        return bool(int(self.value) & 0b001)

    @property
    def time_code_type(self) -> TimeCodeType | None:
        if self.kind != QuarterFrameKind.LAST:
            return None
        return TimeCodeType((int(self.value) & 0b110) >> 1)

    def data_bytes(self) -> tuple[int, ...]:
        return ((int(self.kind) << 4) | int(self.value),)

    @classmethod
    def _decode(cls, status_byte, data):
        return cls(QuarterFrameKind(data[0] >> 4), data[0] & 0x0F)


@dataclass(frozen=True)
class SongPositionPointer(_SystemMessage):
    position: U14

    TYPE = ShortMessageType.SONG_POSITION_POINTER

    def __post_init__(self) -> None:
        self._coerce(position=U14)

    def data_bytes(self) -> tuple[int, ...]:
        return (int(extract_low_7_bit_value(self.position)),
                int(extract_high_7_bit_value(self.position)))

    @classmethod
    def _decode(cls, status_byte, data):
        return cls(build_14_bit_value(U7(data[1]), U7(data[0])))


@dataclass(frozen=True)
class SongSelect(_SystemMessage):
    song_number: U7

    TYPE = ShortMessageType.SONG_SELECT

    def __post_init__(self) -> None:
        self._coerce(song_number=U7)

    def data_bytes(self) -> tuple[int, ...]:
        return (int(self.song_number),)

    @classmethod
    def _decode(cls, status_byte, data):
        return cls(data[0])


@dataclass(frozen=True)
class SystemCommonUndefined1(_SystemMessage):
    TYPE = ShortMessageType.SYSTEM_COMMON_UNDEFINED_1


@dataclass(frozen=True)
class SystemCommonUndefined2(_SystemMessage):
    TYPE = ShortMessageType.SYSTEM_COMMON_UNDEFINED_2


@dataclass(frozen=True)
class TuneRequest(_SystemMessage):
    TYPE = ShortMessageType.TUNE_REQUEST


@dataclass(frozen=True)
class SystemExclusiveEnd(_SystemMessage):
    TYPE = ShortMessageType.SYSTEM_EXCLUSIVE_END


@dataclass(frozen=True)
class TimingClock(_SystemMessage):
    TYPE = ShortMessageType.TIMING_CLOCK


@dataclass(frozen=True)
class SystemRealTimeUndefined1(_SystemMessage):
    TYPE = ShortMessageType.SYSTEM_REAL_TIME_UNDEFINED_1


@dataclass(frozen=True)
class Start(_SystemMessage):
    TYPE = ShortMessageType.START


@dataclass(frozen=True)
class Continue(_SystemMessage):
    TYPE = ShortMessageType.CONTINUE


@dataclass(frozen=True)
class Stop(_SystemMessage):
    TYPE = ShortMessageType.STOP


@dataclass(frozen=True)
class SystemRealTimeUndefined2(_SystemMessage):
    TYPE = ShortMessageType.SYSTEM_REAL_TIME_UNDEFINED_2


@dataclass(frozen=True)
class ActiveSensing(_SystemMessage):
    TYPE = ShortMessageType.ACTIVE_SENSING


@dataclass(frozen=True)
class SystemReset(_SystemMessage):
    TYPE = ShortMessageType.SYSTEM_RESET


ShortMessage = Union[
    NoteOff, NoteOn, PolyphonicKeyPressure, ControlChange, ProgramChange,
    ChannelPressure, PitchBendChange, SystemExclusiveStart, TimeCodeQuarterFrame,
    SongPositionPointer, SongSelect, SystemCommonUndefined1, SystemCommonUndefined2,
    TuneRequest, SystemExclusiveEnd, TimingClock, SystemRealTimeUndefined1, Start,
    Continue, Stop, SystemRealTimeUndefined2, ActiveSensing, SystemReset,
]

_VARIANTS: dict[ShortMessageType, type] = {
    cls.TYPE: cls for cls in ShortMessage.__args__
}


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _as_bytes(data) -> bytes:
    if isinstance(data, bytes):
        return data
    try:
        return bytes(data)
    except (TypeError, ValueError) as exc:
        raise InvalidMessage(f"Not a byte sequence: {data!r}") from exc


def decode(data: bytes | bytearray | Iterable[int]) -> ShortMessage:
    """Decode one short message from the start of ``data``.

    Only the bytes implied by the status byte are read; anything after them
    is ignored.
    """
    data = _as_bytes(data)
    if not data:
        raise InvalidMessage("Empty message")
    status_byte = data[0]
    if status_byte < 0x80:
        raise InvalidMessage(f"First byte {status_byte:#04x} is not a status byte")
    length = message_length(status_byte)
    if len(data) < length:
        raise InvalidMessage(
            f"Status byte {status_byte:#04x} needs {length} bytes, got {len(data)}"
        )
    payload = list(data[1:length])
    for b in payload:
        if b & 0x80:
            raise InvalidMessage(f"Data byte {b:#04x} has the status bit set")
    msg_type = ShortMessageType.from_status_byte(status_byte)
    return _VARIANTS[msg_type]._decode(status_byte, payload)


def decode_all(data: bytes | bytearray | Iterable[int]) -> list[ShortMessage]:
    """Decode back-to-back complete messages. Running status is not supported."""
    data = _as_bytes(data)
    messages = []
    offset = 0
    while offset < len(data):
        if data[offset] < 0x80:
            raise InvalidMessage(
                f"Expected status byte at offset {offset}, got {data[offset]:#04x}"
            )
        length = message_length(data[offset])
        messages.append(decode(data[offset:offset + length]))
        offset += length
    return messages


def message_fields(msg: ShortMessage) -> dict[str, int]:
    """Field name to plain integer, e.g. for logging or JSON."""
    return {f.name: int(getattr(msg, f.name)) for f in fields(msg)}
