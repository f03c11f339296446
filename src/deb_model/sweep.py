# sweep.py
"""
Independent growth simulations over a grid of one DEB parameter,
with tqdm progress and per-run handling of domain and ODE failures.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple
import time

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from tqdm.auto import tqdm

from .parameters import (
    DEBParameters,
    DEFAULT_V0,
    ParameterDomainError,
    get_default_parameters,
    parameter_names,
    replace_parameters,
)
from .forcing import is_time_varying
from .simulation import Trajectory, simulate_growth
from .analytic import ultimate_structure

# Sweepable names: every DEBParameters field plus the initial structure
SWEEPABLE = tuple(parameter_names()) + ("V0",)


# --------------------------------------------------------------------
# Trajectory summaries
# --------------------------------------------------------------------
def time_to_fraction(trajectory: Trajectory, target: float) -> float:
    """
    First time at which structure reaches target, by linear interpolation
    between query points. NaN if it is never reached.
    """
    V = trajectory.structure
    t = trajectory.t
    if len(V) == 0:
        return np.nan
    if V[0] >= target:
        return float(t[0])
    above = np.nonzero(V >= target)[0]
    if above.size == 0:
        return np.nan
    i = int(above[0])
    V_lo, V_hi = V[i - 1], V[i]
    t_lo, t_hi = t[i - 1], t[i]
    return float(t_lo + (target - V_lo) * (t_hi - t_lo) / (V_hi - V_lo))


def summarize_trajectory(trajectory: Trajectory, params: DEBParameters) -> Dict:
    """
    Scalar growth metrics for one trajectory.

    V_inf-based metrics (fraction of ultimate size, t_half, t_90) are NaN
    for time-varying feeding.
    """
    if is_time_varying(params.f):
        V_inf = np.nan
    else:
        V_inf = ultimate_structure(params)

    if len(trajectory) > 0:
        V_end = float(trajectory.structure[-1])
        e_end = float(trajectory.reserve_density[-1])
    else:
        V_end = np.nan
        e_end = np.nan

    if np.isfinite(V_inf):
        frac = V_end / V_inf
        t_half = time_to_fraction(trajectory, 0.5 * V_inf)
        t_90 = time_to_fraction(trajectory, 0.9 * V_inf)
    else:
        frac = t_half = t_90 = np.nan

    return dict(
        final_time=float(trajectory.t[-1]) if len(trajectory) else np.nan,
        final_structure=V_end,
        final_reserve_density=e_end,
        ultimate_structure=V_inf,
        fraction_of_ultimate=frac,
        t_half=t_half,
        t_90=t_90,
        success=trajectory.success,
        status=trajectory.status,
        message=trajectory.message,
    )


# --------------------------------------------------------------------
# Worker
# --------------------------------------------------------------------
def _simulate_one_value(
    name: str,
    value: float,
    base: DEBParameters,
    V0: float,
    times: np.ndarray,
    solver_kwargs: dict,
) -> Tuple[Optional[Trajectory], Dict]:
    """
    Simulate ONE grid value (worker for joblib).
    Domain errors are recorded in the summary row instead of raised.
    """
    row = dict(parameter=name, value=value)
    try:
        if name == "V0":
            params_i = base
            V0_i = value
        else:
            params_i = replace_parameters(base, **{name: value})
            V0_i = V0
        traj = simulate_growth(params_i, V0=V0_i, t_eval=times, **solver_kwargs)
    except ParameterDomainError as e:
        row.update(
            final_time=np.nan,
            final_structure=np.nan,
            final_reserve_density=np.nan,
            ultimate_structure=np.nan,
            fraction_of_ultimate=np.nan,
            t_half=np.nan,
            t_90=np.nan,
            success=False,
            status="invalid_parameters",
            message=str(e),
        )
        return None, row

    row.update(summarize_trajectory(traj, params_i))
    return traj, row


# --------------------------------------------------------------------
# Sweep
# --------------------------------------------------------------------
def sweep_parameter(
    name: str,
    values: Sequence[float],
    base: Optional[DEBParameters] = None,
    V0: float = DEFAULT_V0,
    times: Optional[np.ndarray] = None,
    n_jobs: int = 1,
    backend: str = "loky",
    progress: bool = True,
    **solver_kwargs,
) -> Tuple[np.ndarray, List[Optional[Trajectory]], pd.DataFrame]:
    """
    Run one simulation per value of a single parameter.

    Args:
        name: DEBParameters field name or "V0"
        values: Grid of values for that parameter
        base: Parameters held fixed (default: get_default_parameters())
        V0: Initial structure when name is not "V0"
        times: Common query times (default: 1000 points over [0, 5000])
        n_jobs: joblib workers (1 = sequential)
        backend: joblib backend
        progress: Show a tqdm progress bar
        **solver_kwargs: Passed to simulate (method, rtol, atol, ...)

    Returns:
        times : common time grid [n_time]
        trajectories : Trajectory or None (invalid parameters) per value
        summary : DataFrame with one row per value
    """
    if name not in SWEEPABLE:
        raise ParameterDomainError(f"Cannot sweep {name!r}; choose from {list(SWEEPABLE)}")
    if len(values) == 0:
        raise ParameterDomainError("values must not be empty")
    if base is None:
        base = get_default_parameters()
    if times is None:
        times = np.linspace(0.0, 5000.0, 1000)
    times = np.asarray(times, dtype=float)

    print(f"[Sweep] {name}: {len(values)} values, n_jobs={n_jobs}, backend={backend}")
    t_start = time.time()

    results = Parallel(n_jobs=n_jobs, backend=backend)(
        delayed(_simulate_one_value)(name, float(val), base, V0, times, solver_kwargs)
        for val in tqdm(values, desc=f"Sweep {name}", disable=not progress)
    )

    trajectories = [traj for traj, _ in results]
    summary = pd.DataFrame([row for _, row in results])

    elapsed = time.time() - t_start
    n_failed = int((~summary["success"]).sum())
    print(f"[Sweep] Completed {len(values)} runs in {elapsed:.2f}s")
    if n_failed > 0:
        print(f"[Sweep] WARNING: {n_failed}/{len(values)} runs did not complete.")

    return times, trajectories, summary
