"""The shared objects every controller state works with."""

from __future__ import annotations

import numpy as np

from quadctl.enums import CtrlPlatform, WaveStatus
from quadctl.messages import LowlevelCmd, LowlevelState


class CtrlComponents:
    """Bundle of command, feedback, models and gait wave shared by the controller.

    ``phase`` and ``contact`` are updated in place, so anyone holding them sees
    the latest wave.
    """

    def __init__(
        self,
        io_inter,
        *,
        dt=0.002,
        ctrl_platform=CtrlPlatform.GAZEBO,
        robot_model=None,
        wave_gen=None,
        estimator=None,
        bal_ctrl=None,
        plot=None,
    ):
        self.io_inter = io_inter
        self.low_cmd = LowlevelCmd()
        self.low_state = LowlevelState()
        self.contact = np.zeros(4, dtype=int)
        self.phase = np.full(4, 0.5)
        self.dt = dt
        self.ctrl_platform = ctrl_platform
        self.running = True
        self.robot_model = robot_model
        self.wave_gen = wave_gen
        self.estimator = estimator
        self.bal_ctrl = bal_ctrl
        self.plot = plot
        self._wave_status = WaveStatus.SWING_ALL

    @property
    def wave_status(self):
        """Wave mode requested by the current state."""
        return self._wave_status

    def send_recv(self):
        """Send the command and read the state through the I/O interface."""
        self.io_inter.send_recv(self.low_cmd, self.low_state)

    def run_wave_gen(self):
        """Advance the gait wave and update ``phase`` and ``contact`` in place."""
        if self.wave_gen is None:
            raise RuntimeError("no wave generator is set")
        phase, contact = self.wave_gen.calc_contact_phase(self._wave_status)
        self.phase[:] = phase
        self.contact[:] = contact

    def set_all_stance(self):
        """Request all four legs in stance."""
        self._wave_status = WaveStatus.STANCE_ALL

    def set_all_swing(self):
        """Request all four legs in swing."""
        self._wave_status = WaveStatus.SWING_ALL

    def set_start_wave(self):
        """Request the periodic gait wave."""
        self._wave_status = WaveStatus.WAVE_ALL