# quadctl

Building blocks for controlling a four-legged walking robot: controller
states (passive, fixed stand, free stand, swing test, balance test, step
test), a periodic contact/phase wave with cycloid swing trajectories for the
feet, rotation and homogeneous-transform helpers, and the joint-level command
and state messages exchanged with the motors.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `quadctl.enums`: `CtrlPlatform`, `RobotType`, `UserCommand`, `FrameType`,
  `WaveStatus`, `FSMMode`, `FSMStateName`.
- `quadctl.mathtools`: rotation matrices (`rotx`, `roty`, `rotz`,
  `rpy_to_rot_mat`, `rot_mat_to_rpy`, `quat_to_rot_mat`, `rot_mat_to_exp`,
  `skew`), homogeneous transforms (`homo_matrix`, `homo_matrix_inverse`,
  `homo_vec`, `no_homo_vec`), leg-vector reshaping (`vec12_to_vec34`,
  `vec34_to_vec12`), clamping and scaling (`saturation`, `kill_zero_offset`,
  `inv_normalize`, `window_func`) and running statistics (`update_average`,
  `update_covariance`, `update_avg_cov`, and `AvgCov`, which prints the mean
  and covariance every `show_period` samples). All arrays are numpy arrays.
- `quadctl.timing`: `get_system_time` (microseconds), `get_time_second`, and
  `absolute_wait`, which blocks until a given number of microseconds have
  passed since a start time and issues a `RuntimeWarning` when that moment
  has already gone by.
- `quadctl.panel`: `UserValue` (stick values), `CmdPanel` (current
  `UserCommand` and stick values), the abstract `IOInterface` whose
  `send_recv(cmd, state)` a hardware or simulator back end implements, and
  the 40-byte wireless-handle packet as `RockerButtonData` with its 16-bit
  button word `KeySwitch` (`from_bytes` / `to_bytes`, `from_value` / `value`).
- `quadctl.messages`: `MotorCmd` and `LowlevelCmd` (twelve motors, with
  setters for angles, speeds, clamped torques and preset gain sets),
  `MotorState`, `Imu` and `LowlevelState` (joint angles and speeds as 3x4
  matrices, body rotation, world-frame acceleration and angular velocity,
  yaw and yaw rate).
- `quadctl.plot`: `PyPlot`, a recorder of named curves fed frame by frame
  and drawn with matplotlib (`add_plot`, `add_frame`, `show_plot`,
  `show_plot_all`, `print_xy`).
- `quadctl.wave`: `WaveGenerator`, which turns elapsed time into a phase in
  `[0, 1]` and a stance/swing contact flag per leg, and switches smoothly
  between all-stance, all-swing and the periodic wave. The clock can be
  passed in for deterministic use.
- `quadctl.gait`: `FeetEndCal` (landing point of a swinging foot),
  `GaitGenerator` (foot positions and velocities for all four legs) and the
  cycloid functions `cycloid_xy_position`, `cycloid_xy_velocity`,
  `cycloid_z_position`, `cycloid_z_velocity`.
- `quadctl.components`: `CtrlComponents`, which holds the `LowlevelCmd`,
  the `LowlevelState`, the I/O interface, the wave generator, the shared
  `phase` and `contact` arrays (updated in place) and slots for a robot
  model, estimator and balance controller.
- `quadctl.fsm_state`: `FSMState`, the abstract base of a controller state
  (`enter`, `run`, `exit`, `check_change`).
- `quadctl.basic_states`: `PassiveState`, `FixedStandState`,
  `FreeStandState`, `SwingTestState`.
- `quadctl.balance_states`: `BalanceTestState`, `StepTestState`.

## Example

```python
from quadctl.enums import WaveStatus
from quadctl.mathtools import rot_mat_to_rpy, rpy_to_rot_mat, saturation
from quadctl.wave import WaveGenerator

r = rpy_to_rot_mat(0.1, -0.2, 0.3)
print(rot_mat_to_rpy(r))          # approximately [0.1, -0.2, 0.3]
print(saturation(5.0, (-1, 1)))   # 1

now = [0]
wave = WaveGenerator(0.45, 0.5, [0, 0.5, 0.5, 0], clock=lambda: now[0])
phase, contact = wave.calc_contact_phase(WaveStatus.STANCE_ALL)
```

## What you provide

Several states and the gait generator work on objects that this package does
not contain; they are reached through `CtrlComponents` and only need the
methods listed in the module docstrings:

- a robot model, e.g. with `x`, `vec_xp`, `q`, `feet2b_positions`,
  `foot_position`, `foot_velocity`, `jaco`, `tau` and `feet_pos_ideal`;
- an estimator with `position`, `velocity`, `feet_pos`, `feet_vel`,
  `foot_pos` and `pos_feet2b_global`;
- a balance controller with `cal_f`;
- an `IOInterface` subclass that talks to a robot or a simulator.

## What the package does not do

- There is no state machine that runs the states: the caller calls `enter`,
  `run`, `check_change` and `exit` itself and switches states by the
  `FSMStateName` returned. `check_change` can name `TROTTING`, but no
  trotting state is included.
- There is no network transport and no binary layout of the robot's UDP
  messages; only the wireless-handle packet is encoded and decoded.
- There is no command-line program.