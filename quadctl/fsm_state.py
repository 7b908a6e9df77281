"""Base class of the controller states."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import replace

from quadctl.enums import FSMStateName
from quadctl.panel import UserValue


class FSMState(ABC):
    """One state of the controller state machine.

    A state works on the shared control components. ``state_name`` identifies
    it to the state machine; ``state_name_string`` is the name shown to users.
    """

    def __init__(self, ctrl_comp, state_name, state_name_string):
        self.ctrl_comp = ctrl_comp
        self.state_name = state_name
        self.state_name_string = state_name_string
        self.next_state_name = state_name
        self.user_value = UserValue()

    @property
    def low_cmd(self):
        """The joint command shared through the control components."""
        return self.ctrl_comp.low_cmd

    @property
    def low_state(self):
        """The robot feedback shared through the control components."""
        return self.ctrl_comp.low_state

    def _read_user_value(self):
        self.user_value = replace(self.low_state.user_value)
        return self.user_value

    @abstractmethod
    def enter(self):
        """Prepare the state when the machine switches into it."""

    @abstractmethod
    def run(self):
        """Compute one control step."""

    @abstractmethod
    def exit(self):
        """Clean up when the machine leaves the state."""

    def check_change(self):
        """Name of the state to switch to; the state's own name means stay."""
        return FSMStateName.INVALID