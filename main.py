import signal
import sys
from PyQt6.QtCore import QCoreApplication, QTimer

from core.config import AppConfig
from core.logger import AppLogger
from midi.device import MidiDevice, list_midi_input_ports
from midi.interop import scan_midi_file
from midi.parameter_number import DataType, ParameterNumberMessage


def describe(msg: ParameterNumberMessage) -> str:
    kind = "RPN" if msg.is_registered else "NRPN"
    bits = "14-bit" if msg.is_14_bit else "7-bit"
    return (f"ch {int(msg.channel) + 1:>2} {kind:<4} #{int(msg.number):<5} "
            f"{msg.data_type.value} {int(msg.raw_value)}"
            + (f" ({bits})" if msg.data_type == DataType.DATA_ENTRY else ""))


def scan_file(path: str) -> int:
    for seconds, msg in scan_midi_file(path):
        print(f"{seconds:9.3f}s  {describe(msg)}")
    return 0


def monitor(config: AppConfig) -> int:
    app = QCoreApplication(sys.argv)
    logger = AppLogger()
    if not config.midi_input_port:
        logger.general(f"No midi_input_port configured. Available: {list_midi_input_ports()}")
        return 1
    device = MidiDevice(logger, config.byte_order, trace=config.trace_scanner)
    device.set_parameter_callback(lambda msg: logger.midi(describe(msg)))
    try:
        device.connect(config.midi_output_port, config.midi_input_port)
    except RuntimeError as exc:
        logger.general(str(exc))
        return 1

    # Let Ctrl+C shut down cleanly. Qt's event loop blocks Python's signal
    # handling, so a timer ticks periodically to give Python a chance to run.
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    timer = QTimer()
    timer.start(200)
    timer.timeout.connect(lambda: None)

    try:
        return app.exec()
    finally:
        device.disconnect()


def main():
    if len(sys.argv) > 1:
        sys.exit(scan_file(sys.argv[1]))
    sys.exit(monitor(AppConfig()))


if __name__ == "__main__":
    main()
