from __future__ import annotations
import threading
from typing import Callable

import rtmidi

from core.logger import AppLogger
from midi.parameter_number import DataEntryByteOrder, ParameterNumberMessage
from midi.scanner import PollingParameterNumberMessageScanner
from midi.short_message import InvalidMessage, ShortMessage, decode


def list_midi_ports() -> list[str]:
    midi_out = rtmidi.MidiOut()
    ports = midi_out.get_ports()
    midi_out.delete()
    return ports


def list_midi_input_ports() -> list[str]:
    midi_in = rtmidi.MidiIn()
    ports = midi_in.get_ports()
    midi_in.delete()
    return ports


def find_port(ports: list[str], name_fragment: str | None) -> int | None:
    """Index of the first port whose name contains the fragment (case-insensitive)."""
    if not name_fragment:
        return None
    needle = name_fragment.lower()
    for i, name in enumerate(ports):
        if needle in name.lower():
            return i
    return None


class MidiDevice:
    """A MIDI output/input port pair speaking short and (N)RPN messages.

    Incoming bytes are decoded and fed to a scanner; completed (N)RPN
    messages go to the parameter callback. Either port may be left out.
    """

    def __init__(
        self,
        logger: AppLogger | None = None,
        byte_order: DataEntryByteOrder = DataEntryByteOrder.MSB_FIRST,
        trace: bool = False,
    ) -> None:
        self._midi_out = rtmidi.MidiOut()
        self._midi_in = rtmidi.MidiIn()
        self._output_open = False
        self._input_open = False
        self._port_name: str | None = None
        self._logger = logger or AppLogger()
        self._byte_order = byte_order
        self._scanner = PollingParameterNumberMessageScanner(
            self._logger if trace else None
        )
        # rtmidi calls _dispatch_midi_input on its own thread
        self._scan_lock = threading.Lock()
        self._message_callback: Callable[[ShortMessage], None] | None = None
        self._parameter_callback: Callable[[ParameterNumberMessage], None] | None = None

    @property
    def connected(self) -> bool:
        return self._output_open or self._input_open

    @property
    def port_name(self) -> str | None:
        return self._port_name

    @property
    def scanner(self) -> PollingParameterNumberMessageScanner:
        return self._scanner

    def connect(self, output_port: str | None, input_port: str | None = None) -> None:
        """Open ports by name fragment. Raises RuntimeError if a port is missing or busy."""
        if self.connected:
            self.disconnect()
        if output_port:
            self._open(self._midi_out, output_port, "output")
            self._output_open = True
        try:
            if input_port:
                self._open(self._midi_in, input_port, "input")
                self._midi_in.ignore_types(sysex=True, timing=True, active_sense=True)
                self._midi_in.set_callback(self._dispatch_midi_input)
                self._input_open = True
        except Exception:
            if self._output_open:
                self._midi_out.close_port()
                self._output_open = False
            raise
        self._port_name = output_port or input_port

    def _open(self, port, name_fragment: str, direction: str) -> None:
        ports = port.get_ports()
        self._logger.device(f"available {direction} ports: {ports}")
        index = find_port(ports, name_fragment)
        if index is None:
            raise RuntimeError(f"No MIDI {direction} port found matching '{name_fragment}'")
        try:
            port.open_port(index)
        except rtmidi.SystemError as exc:
            raise RuntimeError(
                f"Could not open MIDI {direction} port '{ports[index]}'. "
                "It may be in use by another application."
            ) from exc
        self._logger.device(f"{direction}: {ports[index]} (index {index})")

    def disconnect(self) -> list[ParameterNumberMessage]:
        """Close the ports, reporting values still pending once input has stopped."""
        if self._input_open:
            self._midi_in.cancel_callback()
        flushed = self.poll()
        if self._output_open:
            self._midi_out.close_port()
        if self._input_open:
            self._midi_in.close_port()
        self._output_open = False
        self._input_open = False
        self._port_name = None
        with self._scan_lock:
            self._scanner.reset()
        return flushed

    def send(self, message: ShortMessage) -> None:
        if not self._output_open:
            raise RuntimeError("Not connected to a MIDI output")
        self._midi_out.send_message(list(message.to_bytes()))

    def send_parameter_number(
        self, message: ParameterNumberMessage, byte_order: DataEntryByteOrder | None = None,
    ) -> None:
        if not self._output_open:
            raise RuntimeError("Not connected to a MIDI output")
        for cc in message.to_short_messages(byte_order or self._byte_order):
            self._midi_out.send_message(list(cc.to_bytes()))

    def set_message_callback(self, callback: Callable[[ShortMessage], None] | None) -> None:
        """Register a callback for every decoded incoming short message."""
        self._message_callback = callback

    def set_parameter_callback(
        self, callback: Callable[[ParameterNumberMessage], None] | None,
    ) -> None:
        """Register a callback for (N)RPN messages completed by incoming traffic."""
        self._parameter_callback = callback

    def _dispatch_midi_input(self, event, _data=None) -> None:
        """rtmidi input callback: event is (bytes, delta_seconds)."""
        raw = event[0]
        if not raw:
            return
        try:
            message = decode(raw)
        except InvalidMessage as exc:
            self._logger.midi(f"RX dropped {[hex(b) for b in raw]}: {exc}")
            return
        if self._message_callback is not None:
            self._message_callback(message)
        with self._scan_lock:
            completed = self._scanner.feed(message)
        for pnm in completed:
            if self._parameter_callback is not None:
                self._parameter_callback(pnm)

    def poll(self) -> list[ParameterNumberMessage]:
        """Flush Data Entry MSBs still waiting for an LSB on all channels."""
        with self._scan_lock:
            flushed = [pnm for pnm in map(self._scanner.poll, range(16)) if pnm is not None]
        if self._parameter_callback is not None:
            for pnm in flushed:
                self._parameter_callback(pnm)
        return flushed
