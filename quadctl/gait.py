"""Foothold planning and cycloid swing trajectories.

The estimator handed in through the control components must provide
``position()``, ``velocity()``, ``feet_pos()`` and ``foot_pos(i)``; the robot
model must provide ``feet_pos_ideal()`` returning a 3x4 matrix.
"""

from __future__ import annotations

import math

import numpy as np


def cycloid_xy_position(start, end, phase):
    """Horizontal cycloid position from ``start`` to ``end`` at ``phase`` in ``[0, 1]``."""
    phase_pi = 2 * math.pi * phase
    return (end - start) * (phase_pi - math.sin(phase_pi)) / (2 * math.pi) + start


def cycloid_xy_velocity(start, end, phase, t_swing):
    """Time derivative of :func:`cycloid_xy_position` for a swing of ``t_swing`` seconds."""
    phase_pi = 2 * math.pi * phase
    return (end - start) * (1 - math.cos(phase_pi)) / t_swing


def cycloid_z_position(start, height, phase):
    """Vertical cycloid rising ``height`` above ``start`` at mid swing."""
    phase_pi = 2 * math.pi * phase
    return height * (1 - math.cos(phase_pi)) / 2 + start


def cycloid_z_velocity(height, phase, t_swing):
    """Time derivative of :func:`cycloid_z_position` for a swing of ``t_swing`` seconds."""
    phase_pi = 2 * math.pi * phase
    return height * math.pi * math.sin(phase_pi) / t_swing


class FeetEndCal:
    """Landing point of a swinging foot from body velocity and yaw rate."""

    def __init__(self, ctrl_comp):
        self._est = ctrl_comp.estimator
        self._low_state = ctrl_comp.low_state
        self._t_stance = ctrl_comp.wave_gen.t_stance()
        self._t_swing = ctrl_comp.wave_gen.t_swing()
        self._kx = 0.005
        self._ky = 0.005
        self._kyaw = 0.005
        feet = np.asarray(ctrl_comp.robot_model.feet_pos_ideal(), dtype=float)
        self._feet_radius = np.hypot(feet[0], feet[1])
        self._feet_init_angle = np.arctan2(feet[1], feet[0])

    def cal_foot_pos(self, leg_id, vxy_goal_global, d_yaw_goal, phase):
        """World-frame landing point of leg ``leg_id``; its height is always zero."""
        vel = np.asarray(self._est.velocity(), dtype=float)
        vxy_goal = np.asarray(vxy_goal_global, dtype=float)
        lead = (1 - phase) * self._t_swing + self._t_stance / 2

        next_step = np.zeros(3)
        next_step[0] = vel[0] * lead + self._kx * (vel[0] - vxy_goal[0])
        next_step[1] = vel[1] * lead + self._ky * (vel[1] - vxy_goal[1])

        yaw = self._low_state.yaw()
        d_yaw = self._low_state.d_yaw()
        next_yaw = d_yaw * lead + self._kyaw * (d_yaw_goal - d_yaw)

        angle = yaw + self._feet_init_angle[leg_id] + next_yaw
        next_step[0] += self._feet_radius[leg_id] * math.cos(angle)
        next_step[1] += self._feet_radius[leg_id] * math.sin(angle)

        foot = np.asarray(self._est.position(), dtype=float) + next_step
        foot[2] = 0.0
        return foot


class GaitGenerator:
    """Cycloid foot trajectories following the contact wave of the components."""

    def __init__(self, ctrl_comp):
        self._ctrl = ctrl_comp
        self._wave = ctrl_comp.wave_gen
        self._est = ctrl_comp.estimator
        self._feet_cal = FeetEndCal(ctrl_comp)
        self._gait_height = 0.0
        self._vxy_goal = np.zeros(2)
        self._d_yaw_goal = 0.0
        self._start_p = np.zeros((3, 4))
        self._end_p = np.zeros((3, 4))
        self._past_p = np.zeros((3, 4))
        self._phase_past = np.zeros(4)
        self._first_run = True

    def set_gait(self, vxy_goal_global, d_yaw_goal, gait_height):
        """Set the target planar velocity, yaw rate and swing height."""
        self._vxy_goal = np.asarray(vxy_goal_global, dtype=float).reshape(2).copy()
        self._d_yaw_goal = float(d_yaw_goal)
        self._gait_height = float(gait_height)

    def restart(self):
        """Forget the start points and the velocity target."""
        self._first_run = True
        self._vxy_goal = np.zeros(2)

    def run(self):
        """Return ``(feet_pos, feet_vel)``, two 3x4 world-frame matrices."""
        if self._first_run:
            self._start_p = np.asarray(self._est.feet_pos(), dtype=float).copy()
            self._first_run = False

        phase = self._ctrl.phase
        contact = self._ctrl.contact
        feet_pos = np.zeros((3, 4))
        feet_vel = np.zeros((3, 4))
        for i, (leg_contact, leg_phase) in enumerate(zip(contact, phase)):
            if leg_contact == 1:
                if leg_phase < 0.5:
                    self._start_p[:, i] = np.asarray(self._est.foot_pos(i), dtype=float)
                feet_pos[:, i] = self._start_p[:, i]
            else:
                self._end_p[:, i] = self._feet_cal.cal_foot_pos(
                    i, self._vxy_goal, self._d_yaw_goal, leg_phase
                )
                feet_pos[:, i] = self.foot_pos(i)
                feet_vel[:, i] = self.foot_vel(i)

        self._past_p = feet_pos.copy()
        self._phase_past = np.array(phase, dtype=float)
        return feet_pos, feet_vel

    def foot_pos(self, i):
        """Swing position of leg ``i`` at its current phase."""
        phase = float(self._ctrl.phase[i])
        start, end = self._start_p[:, i], self._end_p[:, i]
        return np.array(
            [
                cycloid_xy_position(start[0], end[0], phase),
                cycloid_xy_position(start[1], end[1], phase),
                cycloid_z_position(start[2], self._gait_height, phase),
            ]
        )

    def foot_vel(self, i):
        """Swing velocity of leg ``i`` at its current phase."""
        phase = float(self._ctrl.phase[i])
        t_swing = self._wave.t_swing()
        start, end = self._start_p[:, i], self._end_p[:, i]
        return np.array(
            [
                cycloid_xy_velocity(start[0], end[0], phase, t_swing),
                cycloid_xy_velocity(start[1], end[1], phase, t_swing),
                cycloid_z_velocity(self._gait_height, phase, t_swing),
            ]
        )