"""Bridge to mido: message conversion and (N)RPN extraction from MIDI files."""
from __future__ import annotations

import mido

from core.logger import AppLogger
from midi.parameter_number import ParameterNumberMessage
from midi.scanner import PollingParameterNumberMessageScanner
from midi.short_message import InvalidMessage, ShortMessage, decode
from midi.values import Channel

_DEFAULT_TEMPO = 500000  # 120 BPM


def to_mido(msg: ShortMessage) -> mido.Message:
    try:
        return mido.Message.from_bytes(list(msg.to_bytes()))
    except ValueError as exc:
        raise InvalidMessage(f"mido cannot represent {msg!r}") from exc


def from_mido(msg: mido.Message) -> ShortMessage:
    """Convert a mido message. Sysex and meta messages are rejected."""
    if getattr(msg, "is_meta", False) or msg.type == "sysex":
        raise InvalidMessage(f"Not a short message: {msg.type}")
    return decode(msg.bytes())


def scan_midi_file(
    path: str, logger: AppLogger | None = None,
) -> list[tuple[float, ParameterNumberMessage]]:
    """Return ``(seconds, message)`` for every (N)RPN message in a MIDI file.

    Tracks are merged first, so (N)RPN exchanges split across tracks on the
    same channel are still recognised. A Data Entry MSB left pending at the
    end of the file is reported as a 7-bit value.
    """
    mid = mido.MidiFile(path)
    merged = mido.merge_tracks(mid.tracks)
    scanner = PollingParameterNumberMessageScanner(logger)

    results: list[tuple[float, ParameterNumberMessage]] = []
    abs_time = 0.0
    tempo = _DEFAULT_TEMPO

    for msg in merged:
        abs_time += mido.tick2second(msg.time, mid.ticks_per_beat, tempo)
        if msg.is_meta:
            if msg.type == "set_tempo":
                tempo = msg.tempo
            continue
        if msg.type != "control_change":
            continue
        for pnm in scanner.feed(from_mido(msg)):
            results.append((abs_time, pnm))

    for channel in range(Channel.MAX + 1):
        pending = scanner.poll(channel)
        if pending is not None:
            results.append((abs_time, pending))
    return results
