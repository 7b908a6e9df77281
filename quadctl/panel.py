"""User command panel, joystick packet layout and the robot I/O interface."""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields

from quadctl.enums import UserCommand

_KEY_NAMES = (
    "r1",
    "l1",
    "start",
    "select",
    "r2",
    "l2",
    "f1",
    "f2",
    "a",
    "b",
    "x",
    "y",
    "up",
    "right",
    "down",
    "left",
)

_ROCKER_FORMAT = struct.Struct("<2sH5f16s")
ROCKER_DATA_SIZE = _ROCKER_FORMAT.size


@dataclass
class UserValue:
    """Analog stick values of the command panel."""

    lx: float = 0.0
    ly: float = 0.0
    rx: float = 0.0
    ry: float = 0.0
    l2: float = 0.0

    def set_zero(self):
        """Reset every stick value to zero."""
        self.lx = self.ly = self.rx = self.ry = self.l2 = 0.0


@dataclass
class CmdPanel:
    """Source of user commands and stick values."""

    user_cmd: UserCommand = UserCommand.NONE
    user_value: UserValue = field(default_factory=UserValue)

    def set_passive(self):
        """Force the passive command."""
        self.user_cmd = UserCommand.L2_B

    def set_zero(self):
        """Zero the stick values."""
        self.user_value.set_zero()


class IOInterface(ABC):
    """Exchange of commands and states with a robot or a simulator."""

    def __init__(self, cmd_panel=None):
        self.cmd_panel = cmd_panel if cmd_panel is not None else CmdPanel()

    @abstractmethod
    def send_recv(self, cmd, state):
        """Send ``cmd`` and fill ``state`` with the latest feedback."""

    def zero_cmd_panel(self):
        """Zero the stick values of the command panel."""
        self.cmd_panel.set_zero()

    def set_passive(self):
        """Switch the command panel to the passive command."""
        self.cmd_panel.set_passive()


@dataclass
class KeySwitch:
    """The sixteen buttons of the wireless handle, bit 0 (R1) to bit 15 (left)."""

    r1: bool = False
    l1: bool = False
    start: bool = False
    select: bool = False
    r2: bool = False
    l2: bool = False
    f1: bool = False
    f2: bool = False
    a: bool = False
    b: bool = False
    x: bool = False
    y: bool = False
    up: bool = False
    right: bool = False
    down: bool = False
    left: bool = False

    @classmethod
    def from_value(cls, value):
        """Decode a 16-bit button word."""
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f"button word {value} does not fit in 16 bits")
        return cls(**{name: bool(value >> bit & 1) for bit, name in enumerate(_KEY_NAMES)})

    def value(self):
        """Encode the buttons as a 16-bit word."""
        return sum(1 << bit for bit, name in enumerate(_KEY_NAMES) if getattr(self, name))


@dataclass
class RockerButtonData:
    """The 40-byte wireless handle packet."""

    head: bytes = b"\x00\x00"
    btn: KeySwitch = field(default_factory=KeySwitch)
    lx: float = 0.0
    rx: float = 0.0
    ry: float = 0.0
    l2: float = 0.0
    ly: float = 0.0
    idle: bytes = bytes(16)

    @classmethod
    def from_bytes(cls, data):
        """Decode a 40-byte packet."""
        data = bytes(data)
        if len(data) != ROCKER_DATA_SIZE:
            raise ValueError(f"expected {ROCKER_DATA_SIZE} bytes, got {len(data)}")
        head, btn, lx, rx, ry, l2, ly, idle = _ROCKER_FORMAT.unpack(data)
        return cls(head, KeySwitch.from_value(btn), lx, rx, ry, l2, ly, idle)

    def to_bytes(self):
        """Encode as a 40-byte packet."""
        if len(self.head) != 2 or len(self.idle) != 16:
            raise ValueError("head must hold 2 bytes and idle 16 bytes")
        return _ROCKER_FORMAT.pack(
            bytes(self.head),
            self.btn.value(),
            self.lx,
            self.rx,
            self.ry,
            self.l2,
            self.ly,
            bytes(self.idle),
        )


__all__ = [f.name for f in fields(KeySwitch)] and [
    "UserValue",
    "CmdPanel",
    "IOInterface",
    "KeySwitch",
    "RockerButtonData",
    "ROCKER_DATA_SIZE",
]