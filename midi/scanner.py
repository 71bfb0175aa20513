"""Reassembles (N)RPN messages from a stream of short messages.

Supported sequences per channel (``x``/``y`` select the number):

- ``[x, y, MSB, LSB]`` and ``[x, y, MSB, LSB, LSB, ...]``: 14-bit values. A
  repeated LSB is a fine adjustment of the last MSB.
- ``[x, y, MSB, x', y']``: 7-bit value, reported at the first byte of the next
  selection (or on ``poll``).
- ``[x, y, MSB, MSB]``: two 7-bit values.
- ``[x, y, INC]`` / ``[x, y, DEC]``: reported immediately.

The scanner never looks at a clock. A Data Entry MSB that is never followed
by anything stays pending until ``poll`` is called for its channel.
"""
from __future__ import annotations
from dataclasses import dataclass

from core.logger import AppLogger
from midi import controller_numbers as cn
from midi.parameter_number import (
    NULL_PARAMETER_NUMBER, AbsoluteValue, DataType, Decrement, Increment,
    ParameterNumberMessage, ValueKind,
)
from midi.short_message import ControlChange
from midi.values import U7, U14, Channel, build_14_bit_value

# controller number -> (is_registered, is_msb)
_SELECTION_CONTROLLERS = {
    cn.REGISTERED_PARAMETER_NUMBER_MSB: (True, True),
    cn.REGISTERED_PARAMETER_NUMBER_LSB: (True, False),
    cn.NON_REGISTERED_PARAMETER_NUMBER_MSB: (False, True),
    cn.NON_REGISTERED_PARAMETER_NUMBER_LSB: (False, False),
}

_NULL_HALF = U7(127)


def _trace(logger: AppLogger | None, msg: ParameterNumberMessage) -> None:
    if logger is None:
        return
    kind = "RPN" if msg.is_registered else "NRPN"
    suffix = " (7-bit)" if msg.data_type == DataType.DATA_ENTRY and not msg.is_14_bit else ""
    logger.scan(
        f"ch {int(msg.channel) + 1} {kind} {int(msg.number)} "
        f"{msg.data_type.value}={int(msg.raw_value)}{suffix}"
    )


@dataclass
class _ChannelState:
    channel: Channel
    number_msb: U7 | None = None
    number_lsb: U7 | None = None
    is_registered: bool = False
    value_msb: U7 | None = None
    msb_pending: bool = False
    # Flush held back because the selection byte was 127 and might start a
    # null deselection.
    deferred: ParameterNumberMessage | None = None

    @property
    def number(self) -> U14 | None:
        if self.number_msb is None or self.number_lsb is None:
            return None
        return build_14_bit_value(self.number_msb, self.number_lsb)

    def _usable_number(self) -> U14 | None:
        number = self.number
        if number is None or number == NULL_PARAMETER_NUMBER:
            return None
        return number

    def _message(self, number: U14, value: ValueKind) -> ParameterNumberMessage:
        return ParameterNumberMessage(self.channel, number, value, self.is_registered)

    def _pending_seven_bit(self) -> ParameterNumberMessage | None:
        number = self._usable_number()
        if not self.msb_pending or number is None:
            return None
        return self._message(number, AbsoluteValue(U14(self.value_msb), lsb_transmitted=False))

    def take_deferred(self) -> list[ParameterNumberMessage]:
        if self.deferred is None:
            return []
        msg, self.deferred = self.deferred, None
        return [msg]

    def select(self, byte: U7, is_registered: bool, is_msb: bool) -> list[ParameterNumberMessage]:
        # Any selection byte ends a pending value, even one repeating the
        # current number.
        pending = self._pending_seven_bit() or self.deferred
        self.deferred = None
        self.msb_pending = False
        self.value_msb = None
        if is_msb:
            self.number_msb = byte
        else:
            self.number_lsb = byte
        self.is_registered = is_registered
        if pending is None or self.number == NULL_PARAMETER_NUMBER:
            return []
        if byte == _NULL_HALF:
            self.deferred = pending
            return []
        return [pending]

    def data_entry_msb(self, byte: U7) -> list[ParameterNumberMessage]:
        if self._usable_number() is None:
            return []
        # A second MSB without LSB in between: the first one was a 7-bit value.
        flushed = self._pending_seven_bit()
        self.value_msb = byte
        self.msb_pending = True
        return [flushed] if flushed is not None else []

    def data_entry_lsb(self, byte: U7) -> list[ParameterNumberMessage]:
        number = self._usable_number()
        if number is None:
            return []
        msb = self.value_msb if self.value_msb is not None else U7(0)
        self.msb_pending = False
        return [self._message(number, AbsoluteValue(build_14_bit_value(msb, byte)))]

    def step(self, value: ValueKind) -> list[ParameterNumberMessage]:
        number = self._usable_number()
        if number is None:
            return []
        return [self._message(number, value)]

    def poll(self) -> ParameterNumberMessage | None:
        if self.deferred is not None:
            return self.take_deferred()[0]
        msg = self._pending_seven_bit()
        self.msb_pending = False
        return msg


class PollingParameterNumberMessageScanner:
    """Feeds short messages in, gets completed (N)RPN messages out.

    State is kept per channel and created on first use. Messages that have
    nothing to do with (N)RPN are ignored, so the whole input stream can be
    fed without filtering. Not thread-safe: use one scanner per stream.
    """

    def __init__(self, logger: AppLogger | None = None) -> None:
        self._states: dict[int, _ChannelState] = {}
        self._logger = logger

    def feed(self, message) -> list[ParameterNumberMessage]:
        """Process one short message. Returns 0, 1 or 2 completed messages."""
        if not isinstance(message, ControlChange):
            return []
        controller = message.controller_number
        if not controller.is_parameter_number_message_controller_number():
            return []
        state = self._state(message.channel)
        byte = message.control_value
        if controller in _SELECTION_CONTROLLERS:
            is_registered, is_msb = _SELECTION_CONTROLLERS[controller]
            results = state.select(byte, is_registered, is_msb)
        else:
            results = state.take_deferred()
            if controller == cn.DATA_ENTRY_MSB:
                results += state.data_entry_msb(byte)
            elif controller == cn.DATA_ENTRY_LSB:
                results += state.data_entry_lsb(byte)
            elif controller == cn.DATA_INCREMENT:
                results += state.step(Increment(byte))
            elif controller == cn.DATA_DECREMENT:
                results += state.step(Decrement(byte))
        for msg in results:
            _trace(self._logger, msg)
        return results

    def poll(self, channel: Channel | int) -> ParameterNumberMessage | None:
        """Report a Data Entry MSB still waiting for its LSB as a 7-bit value."""
        state = self._states.get(int(Channel(channel)))
        if state is None:
            return None
        msg = state.poll()
        if msg is not None:
            _trace(self._logger, msg)
        return msg

    def reset(self) -> None:
        """Discard all scanning progress on all channels."""
        self._states.clear()

    def _state(self, channel: Channel) -> _ChannelState:
        key = int(channel)
        state = self._states.get(key)
        if state is None:
            state = _ChannelState(channel)
            self._states[key] = state
        return state


# ---------------------------------------------------------------------------
# Non-polling scanner
# ---------------------------------------------------------------------------

@dataclass
class _LatchState:
    number_msb: U7 | None = None
    number_lsb: U7 | None = None
    is_registered: bool = False
    value_lsb: U7 | None = None


class ParameterNumberMessageScanner:
    """Scanner for senders that put the Data Entry LSB before the MSB.

    Every Data Entry MSB completes a message right away, so nothing is ever
    left pending and there is no ``poll``:

    - ``[x, y, MSB]``: 7-bit value.
    - ``[x, y, LSB, MSB]``: 14-bit value.
    - ``[x, y, MSB, MSB, ...]``: 7-bit values.
    - ``[x, y, LSB, MSB, LSB, MSB, ...]``: 14-bit values.

    The last LSB is kept until the next selection byte. Data Increment and
    Decrement are not reported; use ``PollingParameterNumberMessageScanner``
    for those.
    """

    def __init__(self, logger: AppLogger | None = None) -> None:
        self._states: dict[int, _LatchState] = {}
        self._logger = logger

    def feed(self, message) -> ParameterNumberMessage | None:
        if not isinstance(message, ControlChange):
            return None
        controller = message.controller_number
        if not controller.is_parameter_number_message_controller_number():
            return None
        state = self._states.setdefault(int(message.channel), _LatchState())
        byte = message.control_value
        if controller in _SELECTION_CONTROLLERS:
            is_registered, is_msb = _SELECTION_CONTROLLERS[controller]
            if is_msb:
                state.number_msb = byte
            else:
                state.number_lsb = byte
            state.is_registered = is_registered
            state.value_lsb = None
            return None
        if controller == cn.DATA_ENTRY_LSB:
            state.value_lsb = byte
            return None
        if controller != cn.DATA_ENTRY_MSB:
            return None
        if state.number_msb is None or state.number_lsb is None:
            return None
        number = build_14_bit_value(state.number_msb, state.number_lsb)
        if number == NULL_PARAMETER_NUMBER:
            return None
        if state.value_lsb is None:
            value = AbsoluteValue(U14(byte), lsb_transmitted=False)
        else:
            value = AbsoluteValue(build_14_bit_value(byte, state.value_lsb))
        msg = ParameterNumberMessage(message.channel, number, value, state.is_registered)
        _trace(self._logger, msg)
        return msg

    def reset(self) -> None:
        """Discard all scanning progress on all channels."""
        self._states.clear()
