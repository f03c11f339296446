# src/deb_model/plotting.py

from __future__ import annotations
from typing import Optional, Sequence, Tuple
import textwrap

import numpy as np
import matplotlib.pyplot as plt

from .parameters import DEBParameters
from .forcing import is_time_varying
from .simulation import Trajectory
from .analytic import analytic_structure


# Structure
def plot_structure(
    traj: Trajectory,
    ax: Optional[plt.Axes] = None,
    label: str = None,
    params: Optional[DEBParameters] = None,
    **plot_kwargs,
) -> plt.Axes:
    """Structure vs time; with constant-f params the closed form is overlaid."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 4))

    ax.plot(traj.t, traj.structure, label=label or "Structure", **plot_kwargs)
    if params is not None and not is_time_varying(params.f) and params.f > 0 and len(traj) > 0:
        V_exact = analytic_structure(traj.t, traj.structure[0], params)
        ax.plot(traj.t, V_exact, ":", color="k", label="Analytic")
    ax.set_xlabel("Time [d]")
    ax.set_ylabel("Structure V [cm^3]")
    ax.set_title("Structural volume")
    ax.grid(True)
    if label or params is not None:
        ax.legend()
    return ax


# Reserve density
def plot_reserve_density(
    traj: Trajectory,
    ax: Optional[plt.Axes] = None,
    label: str = None,
    **plot_kwargs,
) -> plt.Axes:
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 4))

    ax.plot(traj.t, traj.reserve_density, label=label or "[E]", **plot_kwargs)
    ax.set_xlabel("Time [d]")
    ax.set_ylabel("Reserve density [E] [J/cm^3]")
    ax.set_title("Reserve density")
    ax.grid(True)
    if label:
        ax.legend()
    return ax


def plot_growth_panels(
    traj: Trajectory,
    params: Optional[DEBParameters] = None,
    previous: Optional[Trajectory] = None,
    axes: Optional[Sequence[plt.Axes]] = None,
) -> Tuple[plt.Axes, plt.Axes]:
    """
    Two panels: structure and reserve density. A previous trajectory, if
    given, is drawn dashed underneath for comparison.
    """
    if axes is None:
        fig, axes = plt.subplots(1, 2, figsize=(11, 4))
    ax_V, ax_e = axes

    if previous is not None and len(previous) > 0:
        ax_V.plot(previous.t, previous.structure, "--", color="tab:gray", label="Previous")
        ax_e.plot(previous.t, previous.reserve_density, "--", color="tab:gray", label="Previous")

    plot_structure(traj, ax=ax_V, label="Current", params=params, color="tab:blue")
    plot_reserve_density(traj, ax=ax_e, label="Current", color="tab:blue")

    if not traj.success:
        reason = textwrap.shorten(traj.message, width=60, placeholder="...")
        ax_V.set_title(f"Structural volume ({traj.status}: {reason})", fontsize="small")
    return ax_V, ax_e


# Sweep helpers
def plot_sweep_structures(
    times: np.ndarray,
    trajectories: Sequence[Optional[Trajectory]],
    values: Sequence[float],
    name: str,
    ax: Optional[plt.Axes] = None,
) -> plt.Axes:
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 4))
    for traj, val in zip(trajectories, values):
        if traj is None:
            continue
        ax.plot(traj.t, traj.structure, alpha=0.8, label=f"{name}={val:g}")
    ax.set_xlim(times[0], times[-1])
    ax.set_xlabel("Time [d]")
    ax.set_ylabel("Structure V [cm^3]")
    ax.set_title(f"Growth curves over {name}")
    ax.grid(True)
    ax.legend(fontsize="small")
    return ax
