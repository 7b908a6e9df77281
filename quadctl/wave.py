"""Periodic contact/phase wave that drives the gait of the four legs."""

from __future__ import annotations

import numpy as np

from quadctl.enums import WaveStatus
from quadctl.timing import get_system_time


class WaveGenerator:
    """Linear phase wave in ``[0, 1]`` with a stance and a swing part per leg.

    ``period`` is in seconds. ``stance_phase_ratio`` is the share of the period
    spent in stance. ``bias`` holds each leg's phase offset in ``[0, 1]``.
    ``clock`` returns the current time in microseconds.
    """

    def __init__(self, period, stance_phase_ratio, bias, clock=get_system_time):
        if not 0 < stance_phase_ratio < 1:
            raise ValueError("the stance_phase_ratio of WaveGenerator should lie in (0, 1)")
        bias = np.asarray(bias, dtype=float).reshape(-1)
        if bias.size != 4:
            raise ValueError(f"expected 4 bias values, got {bias.size}")
        if np.any((bias > 1) | (bias < 0)):
            raise ValueError("the bias of WaveGenerator should lie in [0, 1]")

        self._period = float(period)
        self._st_ratio = float(stance_phase_ratio)
        self._bias = bias
        self._clock = clock
        self._start_t = clock()

        self._phase = np.zeros(4)
        self._contact = np.zeros(4, dtype=int)
        self._phase_past = np.full(4, 0.5)
        self._contact_past = np.zeros(4, dtype=int)
        self._switch_status = np.zeros(4, dtype=int)
        self._status_past = WaveStatus.SWING_ALL

    def _calc_wave(self, status):
        if status is WaveStatus.WAVE_ALL:
            pass_t = (self._clock() - self._start_t) * 1e-6
            normal_t = (
                np.fmod(pass_t + self._period - self._period * self._bias, self._period)
                / self._period
            )
            in_stance = normal_t < self._st_ratio
            contact = in_stance.astype(int)
            phase = np.where(
                in_stance,
                normal_t / self._st_ratio,
                (normal_t - self._st_ratio) / (1 - self._st_ratio),
            )
            return phase, contact
        if status is WaveStatus.SWING_ALL:
            return np.full(4, 0.5), np.zeros(4, dtype=int)
        if status is WaveStatus.STANCE_ALL:
            return np.full(4, 0.5), np.ones(4, dtype=int)
        raise ValueError(f"unknown wave status {status!r}")

    def calc_contact_phase(self, status):
        """Return ``(phase, contact)`` of the four legs for ``status``.

        When the status changes, each leg keeps its old contact and phase until
        the new wave reaches the same contact, so no leg jumps between stance
        and swing.
        """
        self._phase, self._contact = self._calc_wave(status)

        if status is not self._status_past:
            if not self._switch_status.any():
                self._switch_status[:] = 1
            self._phase_past, self._contact_past = self._calc_wave(self._status_past)
            if status is WaveStatus.STANCE_ALL and self._status_past is WaveStatus.SWING_ALL:
                self._contact_past[:] = 1
            elif status is WaveStatus.SWING_ALL and self._status_past is WaveStatus.STANCE_ALL:
                self._contact_past[:] = 0

        if self._switch_status.any():
            same = self._contact == self._contact_past
            self._switch_status[same] = 0
            self._contact[~same] = self._contact_past[~same]
            self._phase[~same] = self._phase_past[~same]
            if not self._switch_status.any():
                self._status_past = status

        return self._phase.copy(), self._contact.copy()

    def t_stance(self):
        """Stance duration in seconds."""
        return self._period * self._st_ratio

    def t_swing(self):
        """Swing duration in seconds."""
        return self._period * (1 - self._st_ratio)

    def period(self):
        """Gait period in seconds."""
        return self._period