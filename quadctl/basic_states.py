"""Passive, fixed-stand, free-stand and swing-test controller states.

The robot model held by the control components must provide
``x(state)`` (3-vector), ``vec_xp(state)`` (3x4), ``q(feet_position, frame)``
(12-vector), ``feet2b_positions(state, frame)`` (3x4),
``foot_position(state, leg_id, frame)``, ``foot_velocity(state, leg_id)`` and
``jaco(state, leg_id)`` (3x3).
"""

from __future__ import annotations

import math

import numpy as np

from quadctl.enums import CtrlPlatform, FrameType, FSMStateName, UserCommand
from quadctl.fsm_state import FSMState
from quadctl.mathtools import (
    homo_matrix,
    homo_matrix_inverse,
    homo_vec,
    inv_normalize,
    no_homo_vec,
    rpy_to_rot_mat,
)

FIXED_STAND_TARGET = (0.0, 0.67, -1.3) * 4


def _set_stance_gains(state):
    """Stance gains for the platform, zero speeds and torques on every leg."""
    platform = state.ctrl_comp.ctrl_platform
    for leg in range(4):
        if platform is CtrlPlatform.GAZEBO:
            state.low_cmd.set_sim_stance_gain(leg)
        elif platform is CtrlPlatform.REALROBOT:
            state.low_cmd.set_real_stance_gain(leg)
        state.low_cmd.set_zero_dq(leg)
        state.low_cmd.set_zero_tau(leg)


def _hold_current_q(state):
    for cmd, motor in zip(state.low_cmd.motor_cmd, state.low_state.motor_state):
        cmd.q = motor.q


class PassiveState(FSMState):
    """All joints limp with some damping."""

    def __init__(self, ctrl_comp):
        super().__init__(ctrl_comp, FSMStateName.PASSIVE, "passive")

    def enter(self):
        platform = self.ctrl_comp.ctrl_platform
        kd = {CtrlPlatform.GAZEBO: 8.0, CtrlPlatform.REALROBOT: 3.0}.get(platform)
        if kd is not None:
            for motor in self.low_cmd.motor_cmd:
                motor.mode = 10
                motor.q = 0.0
                motor.dq = 0.0
                motor.kp = 0.0
                motor.kd = kd
                motor.tau = 0.0
        self.ctrl_comp.set_all_swing()

    def run(self):
        pass

    def exit(self):
        pass

    def check_change(self):
        if self.low_state.user_cmd is UserCommand.L2_A:
            return FSMStateName.FIXEDSTAND
        return FSMStateName.PASSIVE


class FixedStandState(FSMState):
    """Move the joints linearly from where they are to a standing posture."""

    def __init__(self, ctrl_comp, duration=1000):
        super().__init__(ctrl_comp, FSMStateName.FIXEDSTAND, "fixed stand")
        self.target_pos = np.array(FIXED_STAND_TARGET, dtype=float)
        self.start_pos = np.zeros(12)
        self.duration = float(duration)
        self.percent = 0.0

    def enter(self):
        _set_stance_gains(self)
        _hold_current_q(self)
        self.start_pos = np.array([m.q for m in self.low_state.motor_state], dtype=float)
        self.ctrl_comp.set_all_stance()

    def run(self):
        self.percent = min(1.0, self.percent + 1.0 / self.duration)
        q = (1 - self.percent) * self.start_pos + self.percent * self.target_pos
        for motor, value in zip(self.low_cmd.motor_cmd, q):
            motor.q = float(value)

    def exit(self):
        self.percent = 0.0

    def check_change(self):
        return {
            UserCommand.L2_B: FSMStateName.PASSIVE,
            UserCommand.L2_X: FSMStateName.FREESTAND,
            UserCommand.START: FSMStateName.TROTTING,
            UserCommand.L1_X: FSMStateName.BALANCETEST,
            UserCommand.L1_A: FSMStateName.SWINGTEST,
            UserCommand.L1_Y: FSMStateName.STEPTEST,
        }.get(self.low_state.user_cmd, FSMStateName.FIXEDSTAND)


class FreeStandState(FSMState):
    """Stand with the feet fixed while the sticks tilt, turn and raise the body."""

    def __init__(self, ctrl_comp):
        super().__init__(ctrl_comp, FSMStateName.FREESTAND, "free stand")
        self.roll_max = 20 * math.pi / 180
        self.roll_min = -self.roll_max
        self.pitch_max = 15 * math.pi / 180
        self.pitch_min = -self.pitch_max
        self.yaw_max = 20 * math.pi / 180
        self.yaw_min = -self.yaw_max
        self.height_max = 0.04
        self.height_min = -self.height_max
        self._init_vec_ox = np.zeros(3)
        self._init_vec_xp = np.zeros((3, 4))

    def enter(self):
        _set_stance_gains(self)
        _hold_current_q(self)
        model = self.ctrl_comp.robot_model
        self._init_vec_ox = np.asarray(model.x(self.low_state), dtype=float).reshape(3)
        self._init_vec_xp = np.asarray(model.vec_xp(self.low_state), dtype=float).reshape(3, 4)
        self.ctrl_comp.set_all_stance()
        self.ctrl_comp.io_inter.zero_cmd_panel()

    def run(self):
        uv = self._read_user_value()
        vec_op = self._calc_op(
            inv_normalize(uv.lx, self.roll_min, self.roll_max),
            inv_normalize(uv.ly, self.pitch_min, self.pitch_max),
            -inv_normalize(uv.rx, self.yaw_min, self.yaw_max),
            inv_normalize(uv.ry, self.height_min, self.height_max),
        )
        q = self.ctrl_comp.robot_model.q(vec_op, FrameType.BODY)
        self.low_cmd.set_q(q)

    def exit(self):
        self.ctrl_comp.io_inter.zero_cmd_panel()

    def check_change(self):
        return {
            UserCommand.L2_A: FSMStateName.FIXEDSTAND,
            UserCommand.L2_B: FSMStateName.PASSIVE,
            UserCommand.START: FSMStateName.TROTTING,
        }.get(self.low_state.user_cmd, FSMStateName.FREESTAND)

    def _calc_op(self, roll, pitch, yaw, height):
        vec_xo = -self._init_vec_ox
        vec_xo[2] += height
        tsb = homo_matrix(vec_xo, rpy_to_rot_mat(roll, pitch, yaw))
        tbs = homo_matrix_inverse(tsb)
        return np.column_stack([no_homo_vec(tbs @ homo_vec(col)) for col in self._init_vec_xp.T])


class SwingTestState(FSMState):
    """Move the front-right foot around in its hip frame with the sticks."""

    def __init__(self, ctrl_comp):
        super().__init__(ctrl_comp, FSMStateName.SWINGTEST, "swingTest")
        self.x_min, self.x_max = -0.15, 0.10
        self.y_min, self.y_max = -0.15, 0.15
        self.z_min, self.z_max = -0.05, 0.20
        self.kp = np.diag([20.0, 20.0, 50.0])
        self.kd = np.diag([5.0, 5.0, 20.0])
        self._init_feet_pos = np.zeros((3, 4))
        self._feet_pos = np.zeros((3, 4))
        self._init_pos = np.zeros(3)
        self.pos_goal = np.zeros(3)
        self.target_pos = np.zeros(12)

    def enter(self):
        _set_stance_gains(self)
        self.low_cmd.set_swing_gain(0)
        _hold_current_q(self)
        model = self.ctrl_comp.robot_model
        self._init_feet_pos = np.asarray(
            model.feet2b_positions(self.low_state, FrameType.HIP), dtype=float
        ).reshape(3, 4)
        self._feet_pos = self._init_feet_pos.copy()
        self._init_pos = self._init_feet_pos[:, 0].copy()
        self.ctrl_comp.set_all_swing()

    def _axis_goal(self, value, init, low, high):
        if value > 0:
            return inv_normalize(value, init, init + high, 0, 1)
        return inv_normalize(value, init + low, init, -1, 0)

    def run(self):
        uv = self._read_user_value()
        init = self._init_pos
        self.pos_goal = np.array(
            [
                self._axis_goal(uv.ly, init[0], self.x_min, self.x_max),
                self._axis_goal(uv.lx, init[1], self.y_min, self.y_max),
                self._axis_goal(uv.ry, init[2], self.z_min, self.z_max),
            ]
        )
        self._position_ctrl()
        self._torque_ctrl()

    def exit(self):
        self.ctrl_comp.io_inter.zero_cmd_panel()

    def check_change(self):
        return {
            UserCommand.L2_B: FSMStateName.PASSIVE,
            UserCommand.L2_A: FSMStateName.FIXEDSTAND,
        }.get(self.low_state.user_cmd, FSMStateName.SWINGTEST)

    def _position_ctrl(self):
        self._feet_pos[:, 0] = self.pos_goal
        self.target_pos = np.asarray(
            self.ctrl_comp.robot_model.q(self._feet_pos, FrameType.HIP), dtype=float
        )
        self.low_cmd.set_q(self.target_pos)

    def _torque_ctrl(self):
        model = self.ctrl_comp.robot_model
        pos0 = np.asarray(model.foot_position(self.low_state, 0, FrameType.HIP), dtype=float)
        vel0 = np.asarray(model.foot_velocity(self.low_state, 0), dtype=float)
        force0 = self.kp @ (self.pos_goal - pos0) + self.kd @ (-vel0)
        jaco0 = np.asarray(model.jaco(self.low_state, 0), dtype=float)
        torque = np.zeros(12)
        torque[:3] = jaco0.T @ force0
        self.low_cmd.set_tau(torque)