"""Named time-series plots for debugging, shown with matplotlib."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from quadctl.timing import get_system_time


@dataclass
class Curve:
    """One series of ``(x, y)`` samples."""

    x: list = field(default_factory=list)
    y: list = field(default_factory=list)

    def print_xy(self, x_rough, point_num=1):
        """Print and return up to ``point_num`` samples from the first one with x above ``x_rough``."""
        for i, xi in enumerate(self.x):
            if x_rough < xi:
                points = list(zip(self.x[i : i + point_num], self.y[i : i + point_num]))
                for px, py in points:
                    print(f"  X: {px}, Y: {py}")
                return points
        return []


@dataclass
class Plot:
    """A named group of curves sharing one figure."""

    plot_name: str
    curve_count: int
    labels: list
    curves: list = field(default_factory=list)

    def __post_init__(self):
        if len(self.labels) < self.curve_count:
            raise ValueError(f"plot {self.plot_name} needs {self.curve_count} labels")
        self.labels = list(self.labels[: self.curve_count])
        self.curves = [Curve() for _ in range(self.curve_count)]
        self.curve_name2id = {label: i for i, label in enumerate(self.labels)}

    def get_x(self, start_t):
        """Seconds elapsed since ``start_t`` (microseconds)."""
        return (get_system_time() - start_t) * 1e-6

    def print_xy(self, curve_name, x_rough, point_num=1):
        """Print and return samples of one curve near ``x_rough``."""
        if curve_name not in self.curve_name2id:
            raise KeyError(f"plot {self.plot_name} has no curve {curve_name}")
        print(f"[DEBUG] Plot: {self.plot_name}, Curve: {curve_name}")
        return self.curves[self.curve_name2id[curve_name]].print_xy(x_rough, point_num)


class PyPlot:
    """A collection of named plots fed frame by frame."""

    def __init__(self):
        self.plots = {}
        self._start_t = None

    def _check_start(self):
        if self._start_t is None:
            self._start_t = get_system_time()

    def _plot(self, plot_name):
        try:
            return self.plots[plot_name]
        except KeyError:
            raise KeyError(f"Plot {plot_name} does not exist") from None

    def add_plot(self, plot_name, curve_count, labels=None):
        """Create a plot; labels default to ``"1"``..``"n"``."""
        if plot_name in self.plots:
            raise ValueError(f"Already has same Plot: {plot_name}")
        if labels is None:
            labels = [str(i + 1) for i in range(curve_count)]
        self.plots[plot_name] = Plot(plot_name, curve_count, list(labels))

    def add_frame(self, plot_name, values, x=None):
        """Append one sample to every curve of a plot.

        A scalar goes to the first curve; a sequence gives one value per curve.
        Without ``x`` the time in seconds since the first such frame is used.
        """
        plot = self._plot(plot_name)
        if x is None:
            self._check_start()
            x = plot.get_x(self._start_t)
        if np.ndim(values) == 0:
            plot.curves[0].x.append(x)
            plot.curves[0].y.append(float(values))
            return
        flat = np.asarray(values, dtype=float).reshape(-1)
        if flat.size < plot.curve_count:
            raise ValueError(f"plot {plot_name} needs {plot.curve_count} values")
        for curve, value in zip(plot.curves, flat):
            curve.x.append(x)
            curve.y.append(float(value))

    def _draw(self, plot):
        import matplotlib.pyplot as plt

        plt.figure()
        plt.title(plot.plot_name)
        for label, curve in zip(plot.labels, plot.curves):
            plt.plot(curve.x, curve.y, label=label)
        plt.legend()

    def show_plot(self, plot_names):
        """Draw one plot, or each of a list of plots, and show them."""
        import matplotlib.pyplot as plt

        if isinstance(plot_names, str):
            plot_names = [plot_names]
        for plot in [self._plot(name) for name in plot_names]:
            self._draw(plot)
        plt.show()

    def show_plot_all(self):
        """Draw every plot and show them."""
        import matplotlib.pyplot as plt

        for plot in self.plots.values():
            self._draw(plot)
        plt.show()

    def print_xy(self, plot_name, curve_name, x_rough, point_num=1):
        """Print and return samples of one curve of one plot."""
        return self._plot(plot_name).print_xy(curve_name, x_rough, point_num)