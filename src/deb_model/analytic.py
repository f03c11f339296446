# analytic.py
"""
Closed-form von Bertalanffy solution for structure under constant food.

With constant f and reserve started at the steady-state density
[E] = f p_Am / v, the reserve density stays at [E] and the structural length
L = V^(1/3) relaxes exponentially to L_inf:

    L_inf = f p_Am / p_M
    a     = 1 / (3 E_G / p_M + 3 L_inf / v)
    V(t)  = V_inf (1 - (1 - V0^(1/3) / L_inf) exp(-a (t - t0)))^3

Used only to validate the numerical integrator.
"""

from __future__ import annotations
from typing import Optional, Sequence

import numpy as np

from .parameters import DEBParameters, ParameterDomainError, validate_parameters
from .forcing import is_time_varying
from .simulation import Trajectory


def _constant_f(params: DEBParameters) -> float:
    if is_time_varying(params.f):
        raise ParameterDomainError("The closed-form solution requires a constant feeding response f")
    validate_parameters(params)
    if params.f <= 0.0:
        raise ParameterDomainError("The closed-form solution requires f > 0")
    return float(params.f)


def ultimate_length(params: DEBParameters) -> float:
    """L_inf = f * p_Am / p_M"""
    return _constant_f(params) * params.p_Am / params.p_M


def ultimate_structure(params: DEBParameters) -> float:
    """V_inf = (f * p_Am / p_M)^3; equals (p_Am / p_M)^3 at f = 1."""
    return ultimate_length(params) ** 3


def growth_rate(params: DEBParameters) -> float:
    """von Bertalanffy growth rate a (1/time)."""
    L_inf = ultimate_length(params)
    return 1.0 / (3.0 * params.E_G / params.p_M + 3.0 * L_inf / params.v)


def analytic_structure(
    times: Sequence[float],
    V0: float,
    params: DEBParameters,
    t0: Optional[float] = None,
) -> np.ndarray:
    """
    Closed-form structure at each time.

    Args:
        times: Query times
        V0: Structure at t0
        params: DEBParameters with constant f
        t0: Epoch of V0 (default: times[0])
    """
    t = np.asarray(times, dtype=float)
    if V0 <= 0.0:
        raise ParameterDomainError(f"V0 must be > 0, got {V0!r}")
    if t0 is None:
        t0 = float(t[0])

    L_inf = ultimate_length(params)
    a = growth_rate(params)
    scaled = 1.0 - (1.0 - V0 ** (1.0 / 3.0) / L_inf) * np.exp(-a * (t - t0))
    return L_inf ** 3 * scaled ** 3


def relative_error(trajectory: Trajectory, params: DEBParameters) -> float:
    """
    Maximum relative deviation of the simulated structure from the closed
    form over the trajectory's time points.
    """
    if len(trajectory) == 0:
        raise ValueError("Empty trajectory")
    V_exact = analytic_structure(trajectory.t, trajectory.structure[0], params)
    return float(np.max(np.abs(trajectory.structure - V_exact) / V_exact))
