"""Predefined controller numbers, named as in the MIDI 1.0 standard."""
from __future__ import annotations
from midi.values import ControllerNumber

BANK_SELECT = ControllerNumber(0x00)
MODULATION_WHEEL = ControllerNumber(0x01)
BREATH_CONTROLLER = ControllerNumber(0x02)
FOOT_CONTROLLER = ControllerNumber(0x04)
PORTAMENTO_TIME = ControllerNumber(0x05)
DATA_ENTRY_MSB = ControllerNumber(0x06)
CHANNEL_VOLUME = ControllerNumber(0x07)
BALANCE = ControllerNumber(0x08)
PAN = ControllerNumber(0x0A)
EXPRESSION_CONTROLLER = ControllerNumber(0x0B)
EFFECT_CONTROL_1 = ControllerNumber(0x0C)
EFFECT_CONTROL_2 = ControllerNumber(0x0D)
GENERAL_PURPOSE_CONTROLLER_1 = ControllerNumber(0x10)
GENERAL_PURPOSE_CONTROLLER_2 = ControllerNumber(0x11)
GENERAL_PURPOSE_CONTROLLER_3 = ControllerNumber(0x12)
GENERAL_PURPOSE_CONTROLLER_4 = ControllerNumber(0x13)
BANK_SELECT_LSB = ControllerNumber(0x20)
MODULATION_WHEEL_LSB = ControllerNumber(0x21)
BREATH_CONTROLLER_LSB = ControllerNumber(0x22)
FOOT_CONTROLLER_LSB = ControllerNumber(0x24)
PORTAMENTO_TIME_LSB = ControllerNumber(0x25)
DATA_ENTRY_LSB = ControllerNumber(0x26)
CHANNEL_VOLUME_LSB = ControllerNumber(0x27)
BALANCE_LSB = ControllerNumber(0x28)
PAN_LSB = ControllerNumber(0x2A)
EXPRESSION_CONTROLLER_LSB = ControllerNumber(0x2B)
EFFECT_CONTROL_1_LSB = ControllerNumber(0x2C)
EFFECT_CONTROL_2_LSB = ControllerNumber(0x2D)
DAMPER_PEDAL_ON_OFF = ControllerNumber(0x40)
PORTAMENTO_ON_OFF = ControllerNumber(0x41)
SOSTENUTO_ON_OFF = ControllerNumber(0x42)
SOFT_PEDAL_ON_OFF = ControllerNumber(0x43)
LEGATO_FOOTSWITCH = ControllerNumber(0x44)
HOLD_2 = ControllerNumber(0x45)
PORTAMENTO_CONTROL = ControllerNumber(0x54)
EFFECTS_1_DEPTH = ControllerNumber(0x5B)
EFFECTS_2_DEPTH = ControllerNumber(0x5C)
EFFECTS_3_DEPTH = ControllerNumber(0x5D)
EFFECTS_4_DEPTH = ControllerNumber(0x5E)
EFFECTS_5_DEPTH = ControllerNumber(0x5F)

# (N)RPN exchange
DATA_INCREMENT = ControllerNumber(0x60)
DATA_DECREMENT = ControllerNumber(0x61)
NON_REGISTERED_PARAMETER_NUMBER_LSB = ControllerNumber(0x62)
NON_REGISTERED_PARAMETER_NUMBER_MSB = ControllerNumber(0x63)
REGISTERED_PARAMETER_NUMBER_LSB = ControllerNumber(0x64)
REGISTERED_PARAMETER_NUMBER_MSB = ControllerNumber(0x65)

# Channel mode
ALL_SOUND_OFF = ControllerNumber(0x78)
RESET_ALL_CONTROLLERS = ControllerNumber(0x79)
LOCAL_CONTROL_ON_OFF = ControllerNumber(0x7A)
ALL_NOTES_OFF = ControllerNumber(0x7B)
OMNI_MODE_OFF = ControllerNumber(0x7C)
OMNI_MODE_ON = ControllerNumber(0x7D)
MONO_MODE_ON = ControllerNumber(0x7E)
POLY_MODE_ON = ControllerNumber(0x7F)
