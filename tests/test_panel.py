import struct

import pytest

from quadctl.enums import UserCommand
from quadctl.panel import (
    CmdPanel,
    IOInterface,
    KeySwitch,
    ROCKER_DATA_SIZE,
    RockerButtonData,
    UserValue,
)


class _Loopback(IOInterface):
    def send_recv(self, cmd, state):
        state.append(cmd)


def test_user_value_set_zero():
    value = UserValue(0.5, -0.25, 1.0, -1.0, 0.75)
    value.set_zero()
    assert value == UserValue()


def test_cmd_panel_set_passive_and_zero():
    panel = CmdPanel(UserCommand.START, UserValue(lx=0.3, ry=0.2))
    panel.set_passive()
    panel.set_zero()
    assert panel.user_cmd is UserCommand.L2_B
    assert panel.user_value == UserValue()


def test_io_interface_is_abstract():
    with pytest.raises(TypeError):
        IOInterface()


def test_io_interface_forwards_to_panel():
    io = _Loopback(CmdPanel(UserCommand.START, UserValue(lx=0.4)))
    io.zero_cmd_panel()
    io.set_passive()
    received = []
    io.send_recv("cmd", received)
    assert io.cmd_panel.user_value.lx == 0.0
    assert io.cmd_panel.user_cmd is UserCommand.L2_B
    assert received == ["cmd"]


@pytest.mark.parametrize(
    "bit, name",
    [(0, "r1"), (1, "l1"), (2, "start"), (5, "l2"), (8, "a"), (9, "b"), (10, "x"), (11, "y"), (15, "left")],
)
def test_key_switch_bit_positions(bit, name):
    keys = KeySwitch.from_value(1 << bit)
    assert getattr(keys, name) is True
    assert keys.value() == 1 << bit


@pytest.mark.parametrize("word", [0, 0xFFFF, 0x1234, 0x8001])
def test_key_switch_round_trip(word):
    assert KeySwitch.from_value(word).value() == word


def test_key_switch_rejects_wide_word():
    with pytest.raises(ValueError):
        KeySwitch.from_value(0x10000)


def test_rocker_data_size_is_forty():
    assert ROCKER_DATA_SIZE == 40
    assert len(RockerButtonData().to_bytes()) == 40


def test_rocker_round_trip():
    packet = RockerButtonData(
        head=b"\xfe\xef",
        btn=KeySwitch(a=True, l2=True),
        lx=0.5,
        rx=-0.25,
        ry=1.0,
        l2=0.75,
        ly=-1.0,
        idle=bytes(range(16)),
    )
    assert RockerButtonData.from_bytes(packet.to_bytes()) == packet


def test_rocker_field_offsets():
    data = RockerButtonData(btn=KeySwitch(a=True), lx=0.5, ly=-0.5).to_bytes()
    assert struct.unpack_from("<H", data, 2)[0] == 1 << 8
    assert struct.unpack_from("<f", data, 4)[0] == 0.5
    assert struct.unpack_from("<f", data, 20)[0] == -0.5


def test_rocker_rejects_wrong_length():
    with pytest.raises(ValueError):
        RockerButtonData.from_bytes(bytes(39))