# explorer.py
"""
Slider-driven growth explorer.

Each slider change re-runs the simulation and draws it over the previous
run. The previous trajectory is explicit state: render() takes it as an
argument and returns the new one, and GrowthExplorer keeps it as an
attribute.
"""

from __future__ import annotations
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.widgets import Slider

from .parameters import DEBParameters, DEFAULT_V0, ParameterDomainError, get_default_parameters
from .simulation import Trajectory, get_solver_settings, simulate_growth
from .plotting import plot_growth_panels

_defaults = get_default_parameters()

# name: (min, max, initial)
SLIDER_RANGES: Dict[str, Tuple[float, float, float]] = {
    "V0": (0.001, 1.0, DEFAULT_V0),
    "p_Am": (10.0, 500.0, _defaults.p_Am),
    "E_G": (1.0, 100.0, _defaults.E_G),
    "v": (0.005, 0.1, _defaults.v),
    "p_M": (1.0, 50.0, _defaults.p_M),
    "f": (0.0, 1.0, _defaults.f),
}


def default_slider_values() -> Dict[str, float]:
    return {name: init for name, (_, _, init) in SLIDER_RANGES.items()}


def values_to_parameters(values: Dict[str, float]) -> Tuple[DEBParameters, float]:
    """Split slider values into a DEBParameters record and V0."""
    missing = set(SLIDER_RANGES) - set(values)
    if missing:
        raise ParameterDomainError(f"Missing slider values: {sorted(missing)}")
    params = DEBParameters(
        p_Am=float(values["p_Am"]),
        E_G=float(values["E_G"]),
        v=float(values["v"]),
        p_M=float(values["p_M"]),
        f=float(values["f"]),
    )
    return params, float(values["V0"])


def render(
    values: Dict[str, float],
    times: np.ndarray,
    previous: Optional[Trajectory] = None,
    axes: Optional[Sequence[plt.Axes]] = None,
    **solver_kwargs,
) -> Tuple[Tuple[plt.Axes, plt.Axes], Optional[Trajectory]]:
    """
    Simulate once from slider values and draw the result over previous.

    Returns:
        axes : (structure axes, reserve density axes)
        trajectory : the new run, to be passed back as previous next time;
            None if the slider values were rejected
    """
    if axes is None:
        fig, axes = plt.subplots(1, 2, figsize=(11, 4))
    for ax in axes:
        ax.clear()

    try:
        params, V0 = values_to_parameters(values)
        traj = simulate_growth(params, V0=V0, t_eval=times, **solver_kwargs)
    except ParameterDomainError as e:
        axes[0].set_title(f"Invalid parameters: {e}")
        return tuple(axes), None

    axes = plot_growth_panels(traj, params=params, previous=previous, axes=axes)
    return axes, traj


class GrowthExplorer:
    """Interactive figure with one slider per parameter (V0, p_Am, E_G, v, p_M, f)."""

    def __init__(
        self,
        times: Optional[np.ndarray] = None,
        values: Optional[Dict[str, float]] = None,
        **solver_kwargs,
    ):
        if times is None:
            times = np.linspace(0.0, 5000.0, 500)
        self.times = np.asarray(times, dtype=float)
        self.solver_kwargs = solver_kwargs or get_solver_settings("fast")
        self.current: Optional[Trajectory] = None
        self.previous: Optional[Trajectory] = None

        init = default_slider_values()
        if values:
            init.update(values)

        self.fig = plt.figure(figsize=(11, 7))
        self.axes = (
            self.fig.add_axes([0.07, 0.45, 0.38, 0.48]),
            self.fig.add_axes([0.57, 0.45, 0.38, 0.48]),
        )

        self.sliders: Dict[str, Slider] = {}
        for i, (name, (vmin, vmax, _)) in enumerate(SLIDER_RANGES.items()):
            ax_slider = self.fig.add_axes([0.15, 0.32 - i * 0.05, 0.7, 0.03])
            slider = Slider(ax_slider, name, vmin, vmax, valinit=init[name])
            slider.on_changed(self._on_change)
            self.sliders[name] = slider

        self.update()

    @property
    def values(self) -> Dict[str, float]:
        return {name: slider.val for name, slider in self.sliders.items()}

    def update(self) -> Optional[Trajectory]:
        _, traj = render(
            self.values,
            self.times,
            previous=self.current,
            axes=self.axes,
            **self.solver_kwargs,
        )
        # Rejected values keep the last good run as the comparison curve
        if traj is not None:
            self.previous = self.current
            self.current = traj
        self.fig.canvas.draw_idle()
        return traj

    def _on_change(self, val) -> None:
        self.update()

    def show(self) -> None:
        plt.show()
