import pytest
from unittest.mock import patch, MagicMock
from midi.device import find_port, list_midi_input_ports, list_midi_ports
from midi.parameter_number import DataEntryByteOrder, ParameterNumberMessage
from midi.short_message import ControlChange, NoteOn


@pytest.fixture
def mock_rtmidi():
    with patch("midi.device.rtmidi") as mock_mod:
        mock_mod.MidiOut.return_value = MagicMock()
        mock_mod.MidiIn.return_value = MagicMock()
        mock_mod.SystemError = type("SystemError", (Exception,), {})
        yield mock_mod


@pytest.fixture
def logger():
    return MagicMock()


def _connected_device(logger, **kwargs):
    from midi.device import MidiDevice
    dev = MidiDevice(logger, **kwargs)
    dev._output_open = True
    sent = []
    dev._midi_out = type("FakeOut", (), {"send_message": lambda self, m: sent.append(m)})()
    return dev, sent


def test_list_midi_ports_returns_list():
    with patch("rtmidi.MidiOut") as mock_cls:
        mock_out = MagicMock()
        mock_out.get_ports.return_value = ["Port A", "Synth B"]
        mock_cls.return_value = mock_out
        ports = list_midi_ports()
    assert ports == ["Port A", "Synth B"]

def test_list_midi_input_ports_returns_list():
    with patch("rtmidi.MidiIn") as mock_cls:
        mock_in = MagicMock()
        mock_in.get_ports.return_value = ["Keyboard"]
        mock_cls.return_value = mock_in
        ports = list_midi_input_ports()
    assert ports == ["Keyboard"]

def test_find_port_case_insensitive():
    assert find_port(["Port A", "KORG Minilogue", "Port C"], "minilogue") == 1

def test_find_port_returns_none():
    assert find_port(["Port A", "Port C"], "Synth") is None
    assert find_port(["Port A"], None) is None


def test_send(mock_rtmidi, logger):
    dev, sent = _connected_device(logger)
    dev.send(NoteOn(0, 60, 100))
    assert sent == [[0x90, 60, 100]]

def test_send_parameter_number_msb_first(mock_rtmidi, logger):
    dev, sent = _connected_device(logger)
    dev.send_parameter_number(ParameterNumberMessage.registered_14_bit(0, 420, 15000))
    assert sent == [[0xB0, 101, 3], [0xB0, 100, 36], [0xB0, 6, 117], [0xB0, 38, 24]]

def test_send_parameter_number_configured_order(mock_rtmidi, logger):
    dev, sent = _connected_device(logger, byte_order=DataEntryByteOrder.LSB_FIRST)
    dev.send_parameter_number(ParameterNumberMessage.non_registered_14_bit(2, 421, 15000))
    assert sent == [[0xB2, 99, 3], [0xB2, 98, 37], [0xB2, 38, 24], [0xB2, 6, 117]]

def test_send_parameter_number_explicit_order(mock_rtmidi, logger):
    dev, sent = _connected_device(logger, byte_order=DataEntryByteOrder.LSB_FIRST)
    msg = ParameterNumberMessage.non_registered_14_bit(2, 421, 15000)
    dev.send_parameter_number(msg, DataEntryByteOrder.MSB_FIRST)
    assert sent[2:] == [[0xB2, 6, 117], [0xB2, 38, 24]]

def test_send_not_connected(mock_rtmidi, logger):
    from midi.device import MidiDevice
    dev = MidiDevice(logger)
    with pytest.raises(RuntimeError, match="Not connected"):
        dev.send(NoteOn(0, 60, 100))
    with pytest.raises(RuntimeError, match="Not connected"):
        dev.send_parameter_number(ParameterNumberMessage.registered_increment(0, 0))


def test_connect_opens_matching_ports(mock_rtmidi, logger):
    from midi.device import MidiDevice
    mock_rtmidi.MidiOut.return_value.get_ports.return_value = ["Port A", "Synth Out"]
    mock_rtmidi.MidiIn.return_value.get_ports.return_value = ["Synth In"]
    dev = MidiDevice(logger)
    dev.connect("synth", "synth in")
    mock_rtmidi.MidiOut.return_value.open_port.assert_called_once_with(1)
    mock_rtmidi.MidiIn.return_value.open_port.assert_called_once_with(0)
    mock_rtmidi.MidiIn.return_value.set_callback.assert_called_once()
    assert dev.connected
    assert dev.port_name == "synth"

def test_connect_missing_port(mock_rtmidi, logger):
    from midi.device import MidiDevice
    mock_rtmidi.MidiOut.return_value.get_ports.return_value = ["Port A"]
    dev = MidiDevice(logger)
    with pytest.raises(RuntimeError, match="No MIDI output port"):
        dev.connect("synth")
    assert not dev.connected

def test_connect_busy_port(mock_rtmidi, logger):
    from midi.device import MidiDevice
    out = mock_rtmidi.MidiOut.return_value
    out.get_ports.return_value = ["Synth"]
    out.open_port.side_effect = mock_rtmidi.SystemError("busy")
    dev = MidiDevice(logger)
    with pytest.raises(RuntimeError, match="in use"):
        dev.connect("synth")

def test_connect_closes_output_when_input_fails(mock_rtmidi, logger):
    from midi.device import MidiDevice
    mock_rtmidi.MidiOut.return_value.get_ports.return_value = ["Synth"]
    mock_rtmidi.MidiIn.return_value.get_ports.return_value = []
    dev = MidiDevice(logger)
    with pytest.raises(RuntimeError, match="No MIDI input port"):
        dev.connect("synth", "synth")
    mock_rtmidi.MidiOut.return_value.close_port.assert_called_once()
    assert not dev.connected

def test_disconnect(mock_rtmidi, logger):
    from midi.device import MidiDevice
    mock_rtmidi.MidiOut.return_value.get_ports.return_value = ["Synth"]
    mock_rtmidi.MidiIn.return_value.get_ports.return_value = ["Synth"]
    dev = MidiDevice(logger)
    dev.connect("synth", "synth")
    dev.disconnect()
    mock_rtmidi.MidiIn.return_value.cancel_callback.assert_called_once()
    assert not dev.connected
    assert dev.port_name is None

def test_disconnect_flushes_after_input_stops(mock_rtmidi, logger):
    from midi.device import MidiDevice
    midi_in = mock_rtmidi.MidiIn.return_value
    mock_rtmidi.MidiOut.return_value.get_ports.return_value = ["Synth"]
    midi_in.get_ports.return_value = ["Synth"]
    dev = MidiDevice(logger)
    dev.connect("synth", "synth")
    for raw in ([0xB3, 99, 0], [0xB3, 98, 5], [0xB3, 6, 64]):
        dev._dispatch_midi_input((raw, 0.0))
    seen = []
    dev.set_parameter_callback(lambda pnm: seen.append((pnm, midi_in.cancel_callback.called)))
    expected = ParameterNumberMessage.non_registered_7_bit(3, 5, 64)
    assert dev.disconnect() == [expected]
    assert seen == [(expected, True)]
    midi_in.close_port.assert_called_once()
    assert dev.poll() == []


def test_incoming_parameter_number(mock_rtmidi, logger):
    from midi.device import MidiDevice
    dev = MidiDevice(logger)
    messages, parameters = [], []
    dev.set_message_callback(messages.append)
    dev.set_parameter_callback(parameters.append)
    for raw in ([0xB0, 101, 3], [0xB0, 100, 36], [0x90, 60, 100], [0xB0, 6, 117], [0xB0, 38, 24]):
        dev._dispatch_midi_input((raw, 0.0))
    assert len(messages) == 5
    assert messages[2] == NoteOn(0, 60, 100)
    assert parameters == [ParameterNumberMessage.registered_14_bit(0, 420, 15000)]

def test_incoming_invalid_bytes_dropped(mock_rtmidi, logger):
    from midi.device import MidiDevice
    dev = MidiDevice(logger)
    messages = []
    dev.set_message_callback(messages.append)
    dev._dispatch_midi_input(([0x40, 0x10], 0.0))
    dev._dispatch_midi_input(([], 0.0))
    assert messages == []
    logger.midi.assert_called_once()
    assert "dropped" in logger.midi.call_args[0][0]

def test_poll_flushes_pending_msb(mock_rtmidi, logger):
    from midi.device import MidiDevice
    dev = MidiDevice(logger)
    parameters = []
    dev.set_parameter_callback(parameters.append)
    for raw in ([0xB3, 99, 0], [0xB3, 98, 5], [0xB3, 6, 64]):
        dev._dispatch_midi_input((raw, 0.0))
    assert parameters == []
    expected = ParameterNumberMessage.non_registered_7_bit(3, 5, 64)
    assert dev.poll() == [expected]
    assert parameters == [expected]
    assert dev.poll() == []

def test_scanner_trace_uses_logger(mock_rtmidi, logger):
    from midi.device import MidiDevice
    dev = MidiDevice(logger, trace=True)
    for raw in ([0xB0, 101, 0], [0xB0, 100, 0], [0xB0, 96, 1]):
        dev._dispatch_midi_input((raw, 0.0))
    logger.scan.assert_called_once()

def test_received_control_change_reaches_message_callback(mock_rtmidi, logger):
    from midi.device import MidiDevice
    dev = MidiDevice(logger)
    messages = []
    dev.set_message_callback(messages.append)
    dev._dispatch_midi_input(([0xB1, 7, 100], 0.0))
    assert messages == [ControlChange(1, 7, 100)]
