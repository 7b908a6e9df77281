import math

import numpy as np
import pytest

from quadctl.balance_states import BalanceTestState, StepTestState
from quadctl.components import CtrlComponents
from quadctl.enums import FSMStateName, UserCommand, WaveStatus
from quadctl.mathtools import vec34_to_vec12
from quadctl.panel import IOInterface

FEET = np.array(
    [
        [0.2, 0.2, -0.2, -0.2],
        [-0.1, 0.1, -0.1, 0.1],
        [0.0, 0.0, 0.0, 0.0],
    ]
)
FORCE = np.arange(12, dtype=float).reshape(3, 4)


class FakeIO(IOInterface):
    def send_recv(self, cmd, state):
        pass


class FakeEstimator:
    def __init__(self):
        self.pos = np.array([0.0, 0.0, 0.3])
        self.vel = np.zeros(3)
        self.feet = FEET.copy()
        self.feet_v = np.zeros((3, 4))

    def position(self):
        return self.pos.copy()

    def velocity(self):
        return self.vel.copy()

    def feet_pos(self):
        return self.feet.copy()

    def feet_vel(self):
        return self.feet_v.copy()

    def foot_pos(self, i):
        return self.feet[:, i].copy()

    def pos_feet2b_global(self):
        return self.feet - self.pos[:, None]


class FakeBalance:
    def __init__(self):
        self.calls = []

    def cal_f(self, dd_pcd, d_wbd, rot_m, feet_pos2b, contact):
        self.calls.append((np.array(dd_pcd), np.array(d_wbd)))
        return FORCE.copy()


class FakeModel:
    def tau(self, q, force):
        return vec34_to_vec12(force)


@pytest.fixture
def comp():
    c = CtrlComponents(
        FakeIO(),
        estimator=FakeEstimator(),
        bal_ctrl=FakeBalance(),
        robot_model=FakeModel(),
    )
    c.low_state.imu.quaternion = [1.0, 0.0, 0.0, 0.0]
    return c


@pytest.mark.parametrize(
    "cmd, expected",
    [
        (UserCommand.L2_B, FSMStateName.PASSIVE),
        (UserCommand.L2_A, FSMStateName.FIXEDSTAND),
        (UserCommand.NONE, FSMStateName.BALANCETEST),
        (UserCommand.START, FSMStateName.BALANCETEST),
    ],
)
def test_balance_check_change(comp, cmd, expected):
    state = BalanceTestState(comp)
    comp.low_state.user_cmd = cmd
    assert state.check_change() is expected


@pytest.mark.parametrize(
    "cmd, expected",
    [
        (UserCommand.L2_B, FSMStateName.PASSIVE),
        (UserCommand.L2_A, FSMStateName.FIXEDSTAND),
        (UserCommand.L1_X, FSMStateName.STEPTEST),
    ],
)
def test_step_check_change(comp, cmd, expected):
    state = StepTestState(comp)
    comp.low_state.user_cmd = cmd
    assert state.check_change() is expected


def test_balance_enter_sets_stance(comp):
    state = BalanceTestState(comp)
    state.enter()
    assert comp.wave_status is WaveStatus.STANCE_ALL
    np.testing.assert_allclose(state.pcd, comp.estimator.pos)


def test_balance_at_rest_commands_no_correction(comp):
    state = BalanceTestState(comp)
    state.enter()
    state.run()
    np.testing.assert_allclose(state.dd_pcd, np.zeros(3), atol=1e-12)
    np.testing.assert_allclose(state.d_wbd, np.zeros(3), atol=1e-12)
    taus = [m.tau for m in comp.low_cmd.motor_cmd]
    np.testing.assert_allclose(taus, vec34_to_vec12(-FORCE))
    assert all(m.kp == 0.8 and m.kd == 0.8 and m.mode == 10 for m in comp.low_cmd.motor_cmd)


def test_balance_stick_moves_body_target(comp):
    state = BalanceTestState(comp)
    state.enter()
    comp.low_state.user_value.ly = 1.0
    state.run()
    assert state.pcd[0] == pytest.approx(comp.estimator.pos[0] + state.x_max)
    assert state.dd_pcd[0] == pytest.approx(state.kpp[0, 0] * state.x_max)
    dd_sent, _ = comp.bal_ctrl.calls[-1]
    np.testing.assert_allclose(dd_sent, state.dd_pcd)


def test_balance_stick_turns_body(comp):
    state = BalanceTestState(comp)
    state.enter()
    comp.low_state.user_value.rx = 1.0
    state.run()
    assert state.d_wbd[2] == pytest.approx(state.kpw * state.yaw_max)
    assert state.d_wbd[0] == pytest.approx(0.0, abs=1e-9)


def test_balance_q_follows_joint_state(comp):
    comp.low_state.set_q(np.linspace(-1.0, 1.0, 12))
    state = BalanceTestState(comp)
    state.enter()
    state.run()
    np.testing.assert_allclose([m.q for m in comp.low_cmd.motor_cmd], np.linspace(-1.0, 1.0, 12))


def test_step_enter_and_exit_wave_status(comp):
    state = StepTestState(comp)
    state.enter()
    assert comp.wave_status is WaveStatus.WAVE_ALL
    state.exit()
    assert comp.wave_status is WaveStatus.SWING_ALL


def test_step_swing_leg_lifts_and_pulls_up(comp):
    state = StepTestState(comp)
    state.enter()
    comp.contact[:] = [0, 1, 1, 1]
    comp.phase[:] = 0.5
    state.run()
    assert state.pos_feet_global_goal[2, 0] == pytest.approx(FEET[2, 0] + 2 * state.gait_height)
    assert state.vel_feet_global_goal[2, 0] == pytest.approx(0.0, abs=1e-12)
    assert state.force_feet_global[2, 0] == pytest.approx(
        state.kp_swing[2, 2] * 2 * state.gait_height
    )
    np.testing.assert_allclose(state.force_feet_global[:, 1:], -FORCE[:, 1:])


def test_step_stance_legs_keep_goal_height(comp):
    state = StepTestState(comp)
    state.enter()
    comp.contact[:] = 1
    comp.phase[:] = 0.3
    state.run()
    np.testing.assert_allclose(state.pos_feet_global_goal, FEET)
    np.testing.assert_allclose(state.tau, vec34_to_vec12(-FORCE))


def test_step_uses_zero_gains(comp):
    state = StepTestState(comp)
    state.enter()
    comp.contact[:] = 1
    state.run()
    assert all(m.kp == 0.0 and m.kd == 0.0 for m in comp.low_cmd.motor_cmd)


def test_step_swing_phase_quarter_matches_rising_velocity(comp):
    state = StepTestState(comp)
    state.enter()
    comp.contact[:] = [1, 0, 1, 1]
    comp.phase[:] = 0.25
    state.run()
    assert state.vel_feet_global_goal[2, 1] == pytest.approx(2 * math.pi * state.gait_height)
    assert state.pos_feet_global_goal[2, 1] == pytest.approx(FEET[2, 1] + state.gait_height)