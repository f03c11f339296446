# odes.py
"""
DEB reserve/structure ODE system.

dy/dt = f(t, y, params) with y = [E, V]:

    dE/dt = f(t) p_Am V^(2/3) - E (E_G v / V^(1/3) + p_M) / (E/V + E_G)
    dV/dt = (E v / V^(1/3) - p_M V) / (E/V + E_G)

The mobilised reserve flux is split between somatic maintenance and growth;
the shared denominator E/V + E_G is the reserve density plus the cost of
structure.
"""

from __future__ import annotations

import numpy as np

from .parameters import DEBParameters
from .state_vector import StateIx, N_STATES
from .forcing import evaluate


def derivative(t: float, y: np.ndarray, params: DEBParameters) -> np.ndarray:
    """
    Right-hand side of the DEB system.

    Args:
        t: Time. Only read when params.f is a function of time.
        y: State vector [E, V]; V must be > 0.
        params: DEBParameters instance

    Returns:
        dydt: Derivative vector [dE/dt, dV/dt]
    """
    E = y[StateIx.RESERVE]
    V = y[StateIx.STRUCTURE]

    f = evaluate(params.f, t)
    L = V ** (1.0 / 3.0)
    denom = E / V + params.E_G

    dydt = np.empty(N_STATES, dtype=float)
    dydt[StateIx.RESERVE] = (
        f * params.p_Am * V ** (2.0 / 3.0)
        - E * (params.E_G * params.v / L + params.p_M) / denom
    )
    dydt[StateIx.STRUCTURE] = (E * params.v / L - params.p_M * V) / denom
    return dydt
