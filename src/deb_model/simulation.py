# simulation.py
"""
Single-organism DEB growth simulation.

The system is advanced with one of scipy's adaptive-step OdeSolver classes,
one step at a time, so that the run can be bounded by a step budget and
stopped as soon as the state leaves the physical domain. Dense output of each
step is used to report the state exactly at the requested query times.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple
import warnings

import numpy as np
import pandas as pd
from scipy.integrate import BDF, DOP853, LSODA, RK23, RK45, Radau

from .parameters import (
    DEBParameters,
    DEFAULT_V0,
    ParameterDomainError,
    validate_initial_state,
    validate_parameters,
)
from .state_vector import StateIx, N_STATES, get_initial_state
from .odes import derivative

SOLVERS = {
    "RK23": RK23,
    "RK45": RK45,
    "DOP853": DOP853,
    "Radau": Radau,
    "BDF": BDF,
    "LSODA": LSODA,
}

DEFAULT_SOLVER_SETTINGS = {
    "method": "RK45",
    "rtol": 1e-7,
    "atol": 1e-9,
    "max_step": np.inf,
    "max_steps": 100_000,  # hard cap on accepted steps per run
}

# Trajectory status values
COMPLETED = "completed"
NON_PHYSICAL = "non_physical"
STEP_BUDGET = "step_budget"
SOLVER_FAILED = "solver_failed"


class IntegrationError(RuntimeError):
    """Raised by Trajectory.raise_for_status() for degraded simulations."""


@dataclass(frozen=True, eq=False)
class Trajectory:
    """
    Read-only result of one simulation.

    On a degraded run (success is False) the arrays hold only the query
    points computed before integration stopped.
    """
    t: np.ndarray
    reserve: np.ndarray
    structure: np.ndarray
    status: str = COMPLETED
    message: str = ""
    n_requested: int = 0
    n_steps: int = 0
    nfev: int = 0

    @property
    def success(self) -> bool:
        return self.status == COMPLETED

    @property
    def truncated(self) -> bool:
        return len(self.t) < self.n_requested

    @property
    def reserve_density(self) -> np.ndarray:
        """[E] = E / V"""
        return self.reserve / self.structure

    @property
    def y(self) -> np.ndarray:
        """State array [N_STATES, n_time] in StateIx order."""
        y = np.empty((N_STATES, len(self.t)), dtype=float)
        y[StateIx.RESERVE] = self.reserve
        y[StateIx.STRUCTURE] = self.structure
        return y

    def __len__(self) -> int:
        return len(self.t)

    def __getitem__(self, i: int) -> Tuple[float, float, float]:
        return float(self.t[i]), float(self.reserve[i]), float(self.structure[i])

    def __iter__(self) -> Iterator[Tuple[float, float, float]]:
        for i in range(len(self.t)):
            yield self[i]

    def raise_for_status(self) -> None:
        if not self.success:
            raise IntegrationError(f"{self.status}: {self.message}")

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "t": self.t,
                "reserve": self.reserve,
                "structure": self.structure,
                "reserve_density": self.reserve_density,
            }
        )


def get_solver_settings(preset: str = "default") -> dict:
    """
    Named solver presets.

    Args:
        preset: "default", "accurate" (tight tolerances, DOP853) or
            "fast" (loose tolerances, for interactive use)

    Returns:
        Dictionary with method, rtol, atol, max_step, max_steps
    """
    settings = dict(DEFAULT_SOLVER_SETTINGS)
    if preset == "default":
        return settings
    if preset == "accurate":
        settings.update(method="DOP853", rtol=1e-10, atol=1e-12)
        return settings
    if preset == "fast":
        settings.update(rtol=1e-4, atol=1e-7, max_steps=20_000)
        return settings
    raise ValueError(f"Unknown solver preset: {preset!r}")


def _check_times(times: Sequence[float]) -> np.ndarray:
    t_eval = np.array(times, dtype=float)
    if t_eval.ndim != 1 or t_eval.size == 0:
        raise ParameterDomainError("times must be a non-empty 1-D sequence")
    if not np.all(np.isfinite(t_eval)):
        raise ParameterDomainError("times must be finite")
    if np.any(np.diff(t_eval) <= 0.0):
        raise ParameterDomainError("times must be strictly increasing")
    return t_eval


def _physical(y: np.ndarray) -> np.ndarray:
    """Column-wise mask: finite, reserve >= 0 and structure > 0."""
    y = np.atleast_2d(y.T).T
    return (
        np.all(np.isfinite(y), axis=0)
        & (y[StateIx.RESERVE] >= 0.0)
        & (y[StateIx.STRUCTURE] > 0.0)
    )


def simulate(
    times: Sequence[float],
    state0: Sequence[float],
    params: DEBParameters,
    method: str = DEFAULT_SOLVER_SETTINGS["method"],
    rtol: float = DEFAULT_SOLVER_SETTINGS["rtol"],
    atol: float = DEFAULT_SOLVER_SETTINGS["atol"],
    max_step: Optional[float] = None,
    max_steps: Optional[int] = None,
) -> Trajectory:
    """
    Integrate the DEB system and report the state at each query time.

    Args:
        times: Strictly increasing query times; times[0] is the epoch of state0
        state0: Initial state (reserve, structure), structure > 0
        params: DEBParameters instance
        method: Name of a scipy OdeSolver (see SOLVERS)
        rtol: Relative tolerance
        atol: Absolute tolerance
        max_step: Maximum step size for the solver (None = unbounded)
        max_steps: Maximum number of solver steps (None = default budget)

    Returns:
        Trajectory. The first point is state0 exactly. If integration stops
        early the trajectory is truncated and success is False.

    Raises:
        ParameterDomainError: invalid parameters, initial state or times.
    """
    validate_parameters(params)
    t_eval = _check_times(times)

    y0 = np.array(state0, dtype=float)
    if y0.shape != (N_STATES,):
        raise ParameterDomainError(f"state0 must have {N_STATES} entries, got shape {y0.shape}")
    validate_initial_state(y0[StateIx.RESERVE], y0[StateIx.STRUCTURE])

    if method not in SOLVERS:
        raise ParameterDomainError(f"Unknown solver method {method!r}; choose from {sorted(SOLVERS)}")
    if max_step is None:
        max_step = DEFAULT_SOLVER_SETTINGS["max_step"]
    if max_steps is None:
        max_steps = DEFAULT_SOLVER_SETTINGS["max_steps"]

    n_times = len(t_eval)
    ys = np.empty((N_STATES, n_times), dtype=float)
    ys[:, 0] = y0
    n_filled = 1
    n_steps = 0
    nfev = 0
    status = COMPLETED
    message = "Integration reached the final query time."

    if n_times > 1:
        solver = SOLVERS[method](
            lambda t, y: derivative(t, y, params),
            t_eval[0],
            y0.copy(),
            t_eval[-1],
            rtol=rtol,
            atol=atol,
            max_step=max_step,
        )

        # Trial stages may probe V < 0; those steps are rejected by the solver
        with np.errstate(invalid="ignore", divide="ignore", over="ignore"):
            while n_filled < n_times:
                if n_steps >= max_steps:
                    status = STEP_BUDGET
                    message = f"Step budget of {max_steps} steps exhausted at t={solver.t:.6g}"
                    break

                step_message = solver.step()
                n_steps += 1
                if solver.status == "failed":
                    status = SOLVER_FAILED
                    message = f"ODE solver failed at t={solver.t:.6g}: {step_message}"
                    break

                # Query points covered by this step
                n_new = int(np.searchsorted(t_eval, solver.t, side="right"))
                if n_new > n_filled:
                    y_new = solver.dense_output()(t_eval[n_filled:n_new])
                    y_new = np.reshape(y_new, (N_STATES, n_new - n_filled))
                    ok = _physical(y_new)
                    if not ok.all():
                        n_ok = int(np.argmin(ok))
                        ys[:, n_filled:n_filled + n_ok] = y_new[:, :n_ok]
                        n_filled += n_ok
                        status = NON_PHYSICAL
                        break
                    ys[:, n_filled:n_new] = y_new
                    n_filled = n_new

                if not _physical(solver.y).all():
                    status = NON_PHYSICAL
                    break

                if solver.status == "finished":
                    break

        nfev = solver.nfev
        if status == NON_PHYSICAL:
            message = (
                f"State left the physical domain (reserve >= 0, structure > 0, finite) "
                f"near t={solver.t:.6g}"
            )

    if status != COMPLETED:
        warnings.warn(
            f"DEB simulation stopped early ({status}): {message}. "
            f"Returning {n_filled}/{n_times} points.",
            RuntimeWarning,
            stacklevel=2,
        )

    t_out = t_eval[:n_filled].copy()
    E_out = ys[StateIx.RESERVE, :n_filled].copy()
    V_out = ys[StateIx.STRUCTURE, :n_filled].copy()
    for arr in (t_out, E_out, V_out):
        arr.setflags(write=False)

    return Trajectory(
        t=t_out,
        reserve=E_out,
        structure=V_out,
        status=status,
        message=message,
        n_requested=n_times,
        n_steps=n_steps,
        nfev=nfev,
    )


def simulate_growth(
    params: DEBParameters,
    V0: float = DEFAULT_V0,
    t_span: Tuple[float, float] = (0.0, 5000.0),
    t_eval: Optional[np.ndarray] = None,
    n_t_eval: int = 1000,
    **solver_kwargs,
) -> Trajectory:
    """
    Simulate one organism from structure V0 with reserve seeded at the
    steady-state density.

    Args:
        params: DEBParameters instance
        V0: Initial structural volume
        t_span: (t0, t_end), used when t_eval is None
        t_eval: Optional array of query times. If None, n_t_eval evenly
            spaced points over t_span are used.
        n_t_eval: Number of time points if t_eval is None
        **solver_kwargs: Passed to simulate (method, rtol, atol, ...)
    """
    if t_eval is None:
        t0, t_end = t_span
        t_eval = np.linspace(t0, t_end, n_t_eval)
    validate_parameters(params)
    if V0 <= 0.0:
        raise ParameterDomainError(f"V0 must be > 0, got {V0!r}")
    y0 = get_initial_state(params, V0=V0, t0=float(t_eval[0]))
    return simulate(t_eval, y0, params, **solver_kwargs)
