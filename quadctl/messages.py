"""Joint-level commands sent to the motors and states read back from them."""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass, field

import numpy as np

from quadctl.enums import UserCommand
from quadctl.mathtools import quat_to_rot_mat, rot_mat_to_rpy, saturation
from quadctl.panel import UserValue

_SIM_STANCE_GAINS = ((180.0, 8.0), (180.0, 8.0), (300.0, 15.0))
_REAL_STANCE_GAINS = ((60.0, 5.0), (40.0, 4.0), (80.0, 7.0))
_ZERO_GAINS = ((0.0, 0.0),) * 3
_STABLE_GAINS = ((0.8, 0.8),) * 3
_SWING_GAINS = ((3.0, 2.0),) * 3


def _check_leg(leg_id):
    if not 0 <= leg_id < 4:
        raise ValueError(f"leg_id must be 0..3, got {leg_id}")


def _twelve(values):
    arr = np.asarray(values, dtype=float).reshape(-1)
    if arr.size != 12:
        raise ValueError(f"expected 12 values, got {arr.size}")
    return arr


def _three(values):
    arr = np.asarray(values, dtype=float).reshape(-1)
    if arr.size != 3:
        raise ValueError(f"expected 3 values, got {arr.size}")
    return arr


@dataclass
class MotorCmd:
    """Command of a single joint motor."""

    mode: int = 0
    q: float = 0.0
    dq: float = 0.0
    tau: float = 0.0
    kp: float = 0.0
    kd: float = 0.0


@dataclass
class LowlevelCmd:
    """Commands of the twelve joint motors, three per leg."""

    motor_cmd: list = field(default_factory=lambda: [MotorCmd() for _ in range(12)])

    def _leg(self, leg_id):
        _check_leg(leg_id)
        return self.motor_cmd[3 * leg_id : 3 * leg_id + 3]

    def _legs(self, leg_id):
        return range(4) if leg_id is None else (leg_id,)

    def _set_gains(self, leg_id, gains):
        for motor, (kp, kd) in zip(self._leg(leg_id), gains):
            motor.mode = 10
            motor.kp = kp
            motor.kd = kd

    def set_q(self, q):
        """Set the target angle of all twelve joints."""
        for motor, value in zip(self.motor_cmd, _twelve(q)):
            motor.q = float(value)

    def set_leg_q(self, leg_id, qi):
        """Set the target angles of one leg."""
        for motor, value in zip(self._leg(leg_id), _three(qi)):
            motor.q = float(value)

    def set_qd(self, qd):
        """Set the target speed of all twelve joints."""
        for motor, value in zip(self.motor_cmd, _twelve(qd)):
            motor.dq = float(value)

    def set_leg_qd(self, leg_id, qdi):
        """Set the target speeds of one leg."""
        for motor, value in zip(self._leg(leg_id), _three(qdi)):
            motor.dq = float(value)

    def set_tau(self, tau, torque_limit=(-50.0, 50.0)):
        """Set the feed-forward torques, clamped to ``torque_limit``."""
        for motor, value in zip(self.motor_cmd, _twelve(tau)):
            if math.isnan(value):
                warnings.warn("set_tau meets NaN", RuntimeWarning, stacklevel=2)
            motor.tau = float(saturation(float(value), torque_limit))

    def set_zero_dq(self, leg_id=None):
        """Zero the target speeds of one leg, or of all legs."""
        for leg in self._legs(leg_id):
            for motor in self._leg(leg):
                motor.dq = 0.0

    def set_zero_tau(self, leg_id):
        """Zero the torques of one leg."""
        for motor in self._leg(leg_id):
            motor.tau = 0.0

    def set_sim_stance_gain(self, leg_id):
        """Stance gains tuned for simulation."""
        self._set_gains(leg_id, _SIM_STANCE_GAINS)

    def set_real_stance_gain(self, leg_id):
        """Stance gains tuned for the real robot."""
        self._set_gains(leg_id, _REAL_STANCE_GAINS)

    def set_zero_gain(self, leg_id=None):
        """Zero position and velocity gains of one leg, or of all legs."""
        for leg in self._legs(leg_id):
            self._set_gains(leg, _ZERO_GAINS)

    def set_stable_gain(self, leg_id=None):
        """Small damping gains of one leg, or of all legs."""
        for leg in self._legs(leg_id):
            self._set_gains(leg, _STABLE_GAINS)

    def set_swing_gain(self, leg_id):
        """Gains for a swinging leg."""
        self._set_gains(leg_id, _SWING_GAINS)


@dataclass
class MotorState:
    """Feedback of a single joint motor."""

    mode: int = 0
    q: float = 0.0
    dq: float = 0.0
    ddq: float = 0.0
    tau_est: float = 0.0


@dataclass
class Imu:
    """Inertial measurement: quaternion ``(w, x, y, z)``, gyroscope, accelerometer."""

    quaternion: list = field(default_factory=lambda: [0.0] * 4)
    gyroscope: list = field(default_factory=lambda: [0.0] * 3)
    accelerometer: list = field(default_factory=lambda: [0.0] * 3)

    def rot_mat(self):
        """Body-to-world rotation matrix."""
        return quat_to_rot_mat(self.quaternion)

    def acc(self):
        """Acceleration in the body frame."""
        return np.array(self.accelerometer, dtype=float)

    def gyro(self):
        """Angular velocity in the body frame."""
        return np.array(self.gyroscope, dtype=float)

    def quat(self):
        """Orientation quaternion."""
        return np.array(self.quaternion, dtype=float)


@dataclass
class LowlevelState:
    """Robot feedback: IMU, twelve motors and the user command."""

    imu: Imu = field(default_factory=Imu)
    motor_state: list = field(default_factory=lambda: [MotorState() for _ in range(12)])
    user_cmd: UserCommand = UserCommand.NONE
    user_value: UserValue = field(default_factory=UserValue)

    def q(self):
        """Joint angles as a 3x4 matrix, one column per leg."""
        return np.array([m.q for m in self.motor_state], dtype=float).reshape(4, 3).T.copy()

    def qd(self):
        """Joint speeds as a 3x4 matrix, one column per leg."""
        return np.array([m.dq for m in self.motor_state], dtype=float).reshape(4, 3).T.copy()

    def rot_mat(self):
        """Body-to-world rotation matrix."""
        return self.imu.rot_mat()

    def acc(self):
        """Acceleration in the body frame."""
        return self.imu.acc()

    def gyro(self):
        """Angular velocity in the body frame."""
        return self.imu.gyro()

    def acc_global(self):
        """Acceleration in the world frame."""
        return self.rot_mat() @ self.acc()

    def gyro_global(self):
        """Angular velocity in the world frame."""
        return self.rot_mat() @ self.gyro()

    def yaw(self):
        """Yaw angle of the body."""
        return float(rot_mat_to_rpy(self.rot_mat())[2])

    def d_yaw(self):
        """Yaw rate in the world frame."""
        return float(self.gyro_global()[2])

    def set_q(self, q):
        """Overwrite the twelve joint angles."""
        for motor, value in zip(self.motor_state, _twelve(q)):
            motor.q = float(value)