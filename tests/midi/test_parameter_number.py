import pytest
from midi.parameter_number import (
    NULL_PARAMETER_NUMBER, AbsoluteValue, DataEntryByteOrder, DataType, Decrement,
    Increment, ParameterNumberMessage,
)
from midi.short_message import ControlChange
from midi.values import U7, U14, Channel, RangeError


def cc(channel, number, value):
    return ControlChange(channel, number, value)


def test_null_parameter_number():
    assert NULL_PARAMETER_NUMBER == U14(16383)

def test_registered_14_bit_attributes():
    msg = ParameterNumberMessage.registered_14_bit(Channel(0), U14(420), U14(15000))
    assert msg.channel == Channel(0)
    assert msg.number == U14(420)
    assert msg.value == AbsoluteValue(U14(15000))
    assert msg.raw_value == U14(15000)
    assert msg.is_registered
    assert msg.is_14_bit
    assert msg.data_type == DataType.DATA_ENTRY

def test_registered_14_bit_msb_first():
    msg = ParameterNumberMessage.registered_14_bit(0, 420, 15000)
    assert msg.to_short_messages(DataEntryByteOrder.MSB_FIRST) == [
        cc(0, 101, 3), cc(0, 100, 36), cc(0, 6, 117), cc(0, 38, 24),
    ]

def test_msb_first_is_default():
    msg = ParameterNumberMessage.registered_14_bit(0, 420, 15000)
    assert msg.to_short_messages() == msg.to_short_messages(DataEntryByteOrder.MSB_FIRST)

def test_byte_order_only_moves_data_entry():
    msg = ParameterNumberMessage.registered_14_bit(0, 420, 15000)
    msb_first = msg.to_short_messages(DataEntryByteOrder.MSB_FIRST)
    lsb_first = msg.to_short_messages(DataEntryByteOrder.LSB_FIRST)
    assert lsb_first == [cc(0, 101, 3), cc(0, 100, 36), cc(0, 38, 24), cc(0, 6, 117)]
    assert msb_first[:2] == lsb_first[:2]
    assert msb_first[2:] == list(reversed(lsb_first[2:]))

def test_non_registered_7_bit():
    msg = ParameterNumberMessage.non_registered_7_bit(2, 421, 126)
    assert msg.value == AbsoluteValue(U14(126), lsb_transmitted=False)
    assert not msg.is_14_bit
    assert not msg.is_registered
    expected = [cc(2, 99, 3), cc(2, 98, 37), cc(2, 6, 126)]
    assert msg.to_short_messages(DataEntryByteOrder.MSB_FIRST) == expected
    assert msg.to_short_messages(DataEntryByteOrder.LSB_FIRST) == expected

def test_increment():
    msg = ParameterNumberMessage.non_registered_increment(2, 421, 126)
    assert msg.data_type == DataType.DATA_INCREMENT
    assert msg.value == Increment(U7(126))
    assert msg.raw_value == U14(126)
    assert msg.to_short_messages() == [cc(2, 99, 3), cc(2, 98, 37), cc(2, 96, 126)]

def test_decrement():
    msg = ParameterNumberMessage.registered_decrement(0, 420, 1)
    assert msg.data_type == DataType.DATA_DECREMENT
    assert msg.to_short_messages(DataEntryByteOrder.LSB_FIRST) == [
        cc(0, 101, 3), cc(0, 100, 36), cc(0, 97, 1),
    ]

def test_step_defaults_to_zero():
    assert Increment().step == U7(0)
    assert Decrement().step == U7(0)
    msg = ParameterNumberMessage.registered_increment(0, 0)
    assert msg.to_short_messages()[-1] == cc(0, 96, 0)

def test_all_messages_on_message_channel():
    msg = ParameterNumberMessage.non_registered_14_bit(15, 16000, 1)
    assert {m.channel for m in msg.to_short_messages()} == {Channel(15)}

def test_7_bit_value_must_fit_7_bits():
    with pytest.raises(RangeError):
        AbsoluteValue(U14(128), lsb_transmitted=False)
    with pytest.raises(RangeError):
        ParameterNumberMessage.registered_7_bit(0, 1, 128)

def test_out_of_range_fields():
    with pytest.raises(RangeError):
        ParameterNumberMessage.registered_14_bit(16, 1, 1)
    with pytest.raises(RangeError):
        ParameterNumberMessage.registered_14_bit(0, 16384, 1)
    with pytest.raises(RangeError):
        ParameterNumberMessage.registered_increment(0, 1, 200)

def test_rejects_unknown_value_kind():
    with pytest.raises(TypeError):
        ParameterNumberMessage(0, 1, 5, True)

def test_messages_are_hashable_values():
    a = ParameterNumberMessage.registered_14_bit(0, 420, 15000)
    b = ParameterNumberMessage.registered_14_bit(Channel(0), U14(420), U14(15000))
    assert a == b
    assert hash(a) == hash(b)

def test_dict_round_trip():
    for msg in [
        ParameterNumberMessage.registered_14_bit(0, 420, 15000),
        ParameterNumberMessage.non_registered_7_bit(2, 421, 126),
        ParameterNumberMessage.non_registered_decrement(9, 5, 3),
    ]:
        assert ParameterNumberMessage.from_dict(msg.to_dict()) == msg

def test_to_dict_shape():
    msg = ParameterNumberMessage.non_registered_7_bit(2, 421, 126)
    assert msg.to_dict() == {
        "channel": 2, "number": 421, "registered": False, "type": "data_entry",
        "value": 126, "lsb_transmitted": False,
    }

def test_from_dict_revalidates():
    d = ParameterNumberMessage.registered_14_bit(0, 420, 15000).to_dict()
    d["value"] = 20000
    with pytest.raises(RangeError):
        ParameterNumberMessage.from_dict(d)
    d = ParameterNumberMessage.registered_increment(0, 1, 1).to_dict()
    d["value"] = 128
    with pytest.raises(RangeError):
        ParameterNumberMessage.from_dict(d)

def test_from_dict_missing_field():
    with pytest.raises(ValueError, match="missing"):
        ParameterNumberMessage.from_dict({"channel": 0, "value": 1})
