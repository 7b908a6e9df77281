"""Balance-test and step-test controller states.

Both states need, through the control components, an estimator providing
``position()``, ``velocity()``, ``feet_pos()``, ``feet_vel()`` and
``pos_feet2b_global()``; a balance controller providing
``cal_f(dd_pcd, d_wbd, rot_m, feet_pos2b, contact)`` (3x4 forces); and a robot
model providing ``tau(q, feet_force)`` (12-vector).
"""

from __future__ import annotations

import math

import numpy as np

from quadctl.enums import FSMStateName, UserCommand
from quadctl.fsm_state import FSMState
from quadctl.mathtools import inv_normalize, rot_mat_to_exp, rpy_to_rot_mat, vec34_to_vec12


def _foot_contact_forces(state, dd_pcd, d_wbd, b2g):
    """Forces the feet apply on the ground (world frame) from the balance controller."""
    comp = state.ctrl_comp
    pos_feet2b = np.asarray(comp.estimator.pos_feet2b_global(), dtype=float)
    forces = comp.bal_ctrl.cal_f(dd_pcd, d_wbd, b2g, pos_feet2b, comp.contact.copy())
    return -np.asarray(forces, dtype=float).reshape(3, 4)


def _joint_torques(state, force_body):
    q = vec34_to_vec12(state.low_state.q())
    tau = np.asarray(state.ctrl_comp.robot_model.tau(q, force_body), dtype=float).reshape(12)
    return q, tau


def _exit_map(state_name, user_cmd):
    return {
        UserCommand.L2_B: FSMStateName.PASSIVE,
        UserCommand.L2_A: FSMStateName.FIXEDSTAND,
    }.get(user_cmd, state_name)


class BalanceTestState(FSMState):
    """Stand on all feet and move and turn the body with the sticks."""

    def __init__(self, ctrl_comp):
        super().__init__(ctrl_comp, FSMStateName.BALANCETEST, "balanceTest")
        self.x_max = 0.05
        self.x_min = -self.x_max
        self.y_max = 0.05
        self.y_min = -self.y_max
        self.z_max = 0.04
        self.z_min = -self.z_max
        self.yaw_max = 20 * math.pi / 180
        self.yaw_min = -self.yaw_max

        self.kpp = np.diag([150.0, 150.0, 150.0])
        self.kdp = np.diag([25.0, 25.0, 25.0])
        self.kpw = 200.0
        self.kdw = np.diag([30.0, 30.0, 30.0])

        self.pcd_init = np.zeros(3)
        self.pcd = np.zeros(3)
        self.rd_init = np.eye(3)
        self.rd = np.eye(3)
        self.pos_body = np.zeros(3)
        self.vel_body = np.zeros(3)
        self.b2g_rot_mat = np.eye(3)
        self.g2b_rot_mat = np.eye(3)
        self.dd_pcd = np.zeros(3)
        self.d_wbd = np.zeros(3)
        self.force_feet_global = np.zeros((3, 4))
        self.force_feet_body = np.zeros((3, 4))
        self.q = np.zeros(12)
        self.tau = np.zeros(12)

    def enter(self):
        self.pcd_init = np.asarray(self.ctrl_comp.estimator.position(), dtype=float).copy()
        self.pcd = self.pcd_init.copy()
        self.rd_init = self.low_state.rot_mat()
        self.ctrl_comp.set_all_stance()
        self.ctrl_comp.io_inter.zero_cmd_panel()

    def run(self):
        uv = self._read_user_value()
        self.pcd = np.array(
            [
                self.pcd_init[0] + inv_normalize(uv.ly, self.x_min, self.x_max),
                self.pcd_init[1] - inv_normalize(uv.lx, self.y_min, self.y_max),
                self.pcd_init[2] + inv_normalize(uv.ry, self.z_min, self.z_max),
            ]
        )
        yaw = inv_normalize(uv.rx, self.yaw_min, self.yaw_max)
        self.rd = rpy_to_rot_mat(0.0, 0.0, yaw) @ self.rd_init

        est = self.ctrl_comp.estimator
        self.pos_body = np.asarray(est.position(), dtype=float)
        self.vel_body = np.asarray(est.velocity(), dtype=float)
        self.b2g_rot_mat = self.low_state.rot_mat()
        self.g2b_rot_mat = self.b2g_rot_mat.T

        self._calc_tau()

        self.low_cmd.set_stable_gain()
        self.low_cmd.set_tau(self.tau)
        self.low_cmd.set_q(self.q)

    def exit(self):
        self.ctrl_comp.io_inter.zero_cmd_panel()

    def check_change(self):
        return _exit_map(FSMStateName.BALANCETEST, self.low_state.user_cmd)

    def _calc_tau(self):
        self.dd_pcd = self.kpp @ (self.pcd - self.pos_body) + self.kdp @ (-self.vel_body)
        self.d_wbd = self.kpw * rot_mat_to_exp(self.rd @ self.g2b_rot_mat) + self.kdw @ (
            -self.low_state.gyro_global()
        )
        self.force_feet_global = _foot_contact_forces(
            self, self.dd_pcd, self.d_wbd, self.b2g_rot_mat
        )
        self.force_feet_body = self.g2b_rot_mat @ self.force_feet_global
        self.q, self.tau = _joint_torques(self, self.force_feet_body)


class StepTestState(FSMState):
    """Step in place following the gait wave while balancing the body."""

    def __init__(self, ctrl_comp):
        super().__init__(ctrl_comp, FSMStateName.STEPTEST, "stepTest")
        self.gait_height = 0.05

        self.kp_swing = np.diag([600.0, 600.0, 200.0])
        self.kd_swing = np.diag([20.0, 20.0, 5.0])
        self.kpp = np.diag([50.0, 50.0, 300.0])
        self.kpw = np.diag([600.0, 600.0, 600.0])
        self.kdp = np.diag([5.0, 5.0, 20.0])
        self.kdw = np.diag([10.0, 10.0, 10.0])

        self.pcd = np.zeros(3)
        self.rd = np.eye(3)
        self.pos_body = np.zeros(3)
        self.vel_body = np.zeros(3)
        self.b2g_rot_mat = np.eye(3)
        self.g2b_rot_mat = np.eye(3)
        self.pos_feet_global_init = np.zeros((3, 4))
        self.pos_feet_global_goal = np.zeros((3, 4))
        self.vel_feet_global_goal = np.zeros((3, 4))
        self.pos_feet_global = np.zeros((3, 4))
        self.vel_feet_global = np.zeros((3, 4))
        self.dd_pcd = np.zeros(3)
        self.d_wbd = np.zeros(3)
        self.force_feet_global = np.zeros((3, 4))
        self.force_feet_body = np.zeros((3, 4))
        self.q = np.zeros(12)
        self.tau = np.zeros(12)

    def enter(self):
        est = self.ctrl_comp.estimator
        self.pcd = np.asarray(est.position(), dtype=float).copy()
        self.rd = self.low_state.rot_mat()
        self.pos_feet_global_init = np.asarray(est.feet_pos(), dtype=float).reshape(3, 4).copy()
        self.pos_feet_global_goal = self.pos_feet_global_init.copy()
        self.ctrl_comp.set_start_wave()
        self.ctrl_comp.io_inter.zero_cmd_panel()

    def run(self):
        est = self.ctrl_comp.estimator
        self.pos_body = np.asarray(est.position(), dtype=float)
        self.vel_body = np.asarray(est.velocity(), dtype=float)
        self.b2g_rot_mat = self.low_state.rot_mat()
        self.g2b_rot_mat = self.b2g_rot_mat.T

        for i, (contact, phase) in enumerate(zip(self.ctrl_comp.contact, self.ctrl_comp.phase)):
            if contact == 0:
                angle = phase * 2 * math.pi
                self.pos_feet_global_goal[2, i] = (
                    self.pos_feet_global_init[2, i] + (1 - math.cos(angle)) * self.gait_height
                )
                self.vel_feet_global_goal[2, i] = math.sin(angle) * 2 * math.pi * self.gait_height

        self._calc_tau()

        self.low_cmd.set_zero_gain()
        self.low_cmd.set_tau(self.tau)

    def exit(self):
        self.ctrl_comp.io_inter.zero_cmd_panel()
        self.ctrl_comp.set_all_swing()

    def check_change(self):
        return _exit_map(FSMStateName.STEPTEST, self.low_state.user_cmd)

    def _calc_tau(self):
        est = self.ctrl_comp.estimator
        self.dd_pcd = self.kpp @ (self.pcd - self.pos_body) + self.kdp @ (-self.vel_body)
        self.d_wbd = self.kpw @ rot_mat_to_exp(self.rd @ self.g2b_rot_mat) + self.kdw @ (
            -self.low_state.gyro_global()
        )
        self.force_feet_global = _foot_contact_forces(
            self, self.dd_pcd, self.d_wbd, self.b2g_rot_mat
        )

        self.pos_feet_global = np.asarray(est.feet_pos(), dtype=float).reshape(3, 4)
        self.vel_feet_global = np.asarray(est.feet_vel(), dtype=float).reshape(3, 4)
        for i, contact in enumerate(self.ctrl_comp.contact):
            if contact == 0:
                self.force_feet_global[:, i] = self.kp_swing @ (
                    self.pos_feet_global_goal[:, i] - self.pos_feet_global[:, i]
                ) + self.kd_swing @ (self.vel_feet_global_goal[:, i] - self.vel_feet_global[:, i])

        self.force_feet_body = self.g2b_rot_mat @ self.force_feet_global
        self.q, self.tau = _joint_torques(self, self.force_feet_body)