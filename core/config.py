from __future__ import annotations
import json
from pathlib import Path

from midi.parameter_number import DataEntryByteOrder

_DEFAULTS = {
    "midi_input_port": None,
    "midi_output_port": None,
    "data_entry_byte_order": DataEntryByteOrder.MSB_FIRST.value,
    "trace_scanner": False,
}


class AppConfig:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "nrpnkit" / "config.json"
        self.midi_input_port: str | None = _DEFAULTS["midi_input_port"]
        self.midi_output_port: str | None = _DEFAULTS["midi_output_port"]
        self.data_entry_byte_order: str = _DEFAULTS["data_entry_byte_order"]
        self.trace_scanner: bool = _DEFAULTS["trace_scanner"]
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text())
            for key in _DEFAULTS:
                if key in data:
                    setattr(self, key, data[key])
        except (json.JSONDecodeError, OSError):
            pass

    @property
    def byte_order(self) -> DataEntryByteOrder:
        """Configured Data Entry byte order; unknown values mean MSB first."""
        try:
            return DataEntryByteOrder(self.data_entry_byte_order)
        except ValueError:
            return DataEntryByteOrder.MSB_FIRST

    def save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = {key: getattr(self, key) for key in _DEFAULTS}
        self._path.write_text(json.dumps(data, indent=2))
