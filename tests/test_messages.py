import math

import numpy as np
import pytest

from quadctl.enums import UserCommand
from quadctl.messages import Imu, LowlevelCmd, LowlevelState, MotorCmd, MotorState
from quadctl.panel import UserValue


def test_set_q_and_qd_round_trip():
    cmd = LowlevelCmd()
    q = np.arange(12) * 0.1
    cmd.set_q(q)
    cmd.set_qd(-q)
    assert [m.q for m in cmd.motor_cmd] == pytest.approx(list(q))
    assert [m.dq for m in cmd.motor_cmd] == pytest.approx(list(-q))


def test_set_q_rejects_wrong_size():
    with pytest.raises(ValueError):
        LowlevelCmd().set_q([0.0] * 11)


def test_set_leg_q_touches_only_that_leg():
    cmd = LowlevelCmd()
    cmd.set_leg_q(2, [0.1, 0.67, -1.3])
    cmd.set_leg_qd(1, [1.0, 2.0, 3.0])
    assert [m.q for m in cmd.motor_cmd[6:9]] == [0.1, 0.67, -1.3]
    assert [m.dq for m in cmd.motor_cmd[3:6]] == [1.0, 2.0, 3.0]
    others = cmd.motor_cmd[:6] + cmd.motor_cmd[9:]
    assert all(m.q == 0.0 for m in others)


def test_bad_leg_id():
    with pytest.raises(ValueError):
        LowlevelCmd().set_swing_gain(4)


def test_set_tau_saturates_at_default_limit():
    cmd = LowlevelCmd()
    tau = [100.0, -100.0, 10.0] + [0.0] * 9
    cmd.set_tau(tau)
    assert [m.tau for m in cmd.motor_cmd[:3]] == [50.0, -50.0, 10.0]


def test_set_tau_custom_limit_either_order():
    cmd = LowlevelCmd()
    cmd.set_tau([30.0] * 12, (20.0, -20.0))
    assert all(m.tau == 20.0 for m in cmd.motor_cmd)


def test_set_tau_warns_on_nan():
    cmd = LowlevelCmd()
    with pytest.warns(RuntimeWarning):
        cmd.set_tau([math.nan] + [0.0] * 11)
    assert math.isnan(cmd.motor_cmd[0].tau)


def test_sim_stance_gain():
    cmd = LowlevelCmd()
    cmd.set_sim_stance_gain(0)
    hip, thigh, calf = cmd.motor_cmd[:3]
    assert (hip.mode, hip.kp, hip.kd) == (10, 180, 8)
    assert (thigh.kp, thigh.kd) == (180, 8)
    assert (calf.kp, calf.kd) == (300, 15)
    assert cmd.motor_cmd[3] == MotorCmd()


def test_real_stance_gain():
    cmd = LowlevelCmd()
    cmd.set_real_stance_gain(3)
    assert [(m.kp, m.kd) for m in cmd.motor_cmd[9:]] == [(60, 5), (40, 4), (80, 7)]


def test_stable_and_zero_gain_all_legs():
    cmd = LowlevelCmd()
    cmd.set_stable_gain()
    assert all((m.mode, m.kp, m.kd) == (10, 0.8, 0.8) for m in cmd.motor_cmd)
    cmd.set_zero_gain()
    assert all((m.kp, m.kd) == (0, 0) for m in cmd.motor_cmd)


def test_swing_gain():
    cmd = LowlevelCmd()
    cmd.set_swing_gain(1)
    assert all((m.kp, m.kd) == (3, 2) for m in cmd.motor_cmd[3:6])


def test_zero_dq_and_tau():
    cmd = LowlevelCmd()
    cmd.set_qd([1.0] * 12)
    cmd.set_tau([1.0] * 12)
    cmd.set_zero_dq(0)
    cmd.set_zero_tau(1)
    assert [m.dq for m in cmd.motor_cmd[:4]] == [0.0, 0.0, 0.0, 1.0]
    assert [m.tau for m in cmd.motor_cmd[2:7]] == [1.0, 0.0, 0.0, 0.0, 1.0]
    cmd.set_zero_dq()
    assert all(m.dq == 0.0 for m in cmd.motor_cmd)


def test_state_defaults():
    state = LowlevelState()
    assert state.user_cmd is UserCommand.NONE
    assert state.user_value == UserValue()
    assert state.motor_state[5] == MotorState()


def test_state_q_columns_are_legs():
    state = LowlevelState()
    values = np.arange(12, dtype=float)
    state.set_q(values)
    q = state.q()
    assert q.shape == (3, 4)
    np.testing.assert_allclose(q[:, 1], values[3:6])
    np.testing.assert_allclose(q.T.reshape(12), values)


def test_state_qd():
    state = LowlevelState()
    for i, motor in enumerate(state.motor_state):
        motor.dq = float(i)
    np.testing.assert_allclose(state.qd()[:, 3], [9.0, 10.0, 11.0])


def test_identity_orientation():
    state = LowlevelState(imu=Imu(quaternion=[1.0, 0.0, 0.0, 0.0], accelerometer=[0.0, 0.0, 9.8]))
    np.testing.assert_allclose(state.rot_mat(), np.eye(3))
    np.testing.assert_allclose(state.acc_global(), [0.0, 0.0, 9.8])


def test_yaw_and_rotated_gyro():
    theta = 0.6
    imu = Imu(
        quaternion=[math.cos(theta / 2), 0.0, 0.0, math.sin(theta / 2)],
        gyroscope=[1.0, 0.0, 0.4],
    )
    state = LowlevelState(imu=imu)
    assert state.yaw() == pytest.approx(theta)
    assert state.d_yaw() == pytest.approx(0.4)
    gyro_global = state.gyro_global()
    assert np.linalg.norm(gyro_global) == pytest.approx(np.linalg.norm(state.gyro()))
    assert gyro_global[0] == pytest.approx(math.cos(theta))
    np.testing.assert_allclose(imu.quat(), imu.quaternion)